"""
Settings file intended for use on production servers.  This file:

* overrides anything that needs environment-specific values
"""

# See https://docs.djangoproject.com/en/dev/howto/deployment/checklist/

from .server import *

CSRF_TRUSTED_ORIGINS = ["https://" + host for host in ALLOWED_HOSTS]
