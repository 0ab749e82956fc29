"""
Settings file intended for running the test suite.  This file:

* supplies fake consumer credentials so the sso app can start
* keeps every provider URL pointed at a host tests never reach
"""

from .local import *

DEBUG = False

SECRET_KEY = "cinnamon-test-only-not-secret"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Migrations slow tests down considerably. Don't load them for tests.
MIGRATION_MODULES = {
    "contenttypes": None,
    "django_cron": None,
    "sso": None,
}

CINNAMON_OAUTH_CONSUMER_KEY = "test-consumer-key"
CINNAMON_OAUTH_CONSUMER_SECRET = "test-consumer-secret"

CINNAMON_OAUTH_CALLBACK_URL = "http://testserver/authorised"
CINNAMON_OAUTH_REQUEST_TOKEN_URL = "https://sso.example.org/oauth/requestToken"
CINNAMON_OAUTH_AUTHORIZE_URL = "https://sso.example.org/oauth/authorise"
CINNAMON_OAUTH_ACCESS_TOKEN_URL = "https://sso.example.org/oauth/accessToken"

CINNAMON_SECRET_RELAY = "Cinnamon.sso.relay.DatabaseSecretRelay"
CINNAMON_SECRET_RELAY_TTL = 600
