"""
Settings file intended for use on a developer machine.  This file:

* overrides anything that needs environment-specific values
"""

from .base import *

DEBUG = bool(os.environ.get("DEBUG", "True").lower() == "true")

# Only ever used locally; real deployments set SECRET_KEY.
SECRET_KEY = os.environ.get("SECRET_KEY", "cinnamon-local-only-not-secret")

# The in-process relay is enough for a single runserver process.
CINNAMON_SECRET_RELAY = os.environ.get(
    "CINNAMON_SECRET_RELAY", "websignon.relay.SecretRelay"
)
