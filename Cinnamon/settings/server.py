"""
Settings file intended for use on deployed servers.  This file:

* overrides anything that needs values common to all servers
"""

# See https://docs.djangoproject.com/en/dev/howto/deployment/checklist/

import sentry_sdk
from sentry_sdk.integrations.django import DjangoIntegration
from Cinnamon.settings.helpers import sentry_before_send

from .base import *

# Never debug on servers
DEBUG = False

# SecurityMiddleware configuration as suggested by
# python manage.py check --deploy
X_FRAME_OPTIONS = "DENY"
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = True
SECURE_HSTS_SECONDS = 3600
SECURE_HSTS_INCLUDE_SUBDOMAINS = True

# GLITCHTIP CONFIGURATION
# ------------------------------------------------------------------------------
sentry_sdk.init(
    dsn=os.environ.get("SENTRY_DSN", None),
    integrations=[DjangoIntegration()],
    before_send=sentry_before_send,
    environment=CINNAMON_ENV,
)
