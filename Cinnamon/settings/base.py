# -*- coding: utf-8 -*-
"""
Base settings for the cinnamon project.

This is not intended to be used as the live settings file for a project and will
not work as one. You should instead use production.py, local.py, or another file
that you write. These files should live in the settings directory; start with
'from .base import *'; and proceed to add or override settings as appropriate to
their context. In particular, you will need to set ALLOWED_HOSTS before your app
will run.

Consumer credentials come from the CONSUMER_KEY and CONSUMER_SECRET environment
variables, or a .env file at the repository root. They are read once, here;
the sso app refuses to start without them.

For the full list of settings and their values, see
https://docs.djangoproject.com/en/dev/ref/settings/
"""

import os

from .helpers import load_env_file
from .logging import *

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

CINNAMON_HOME = os.path.dirname(BASE_DIR)

# Optional .env in the checkout, for running outside Docker.
load_env_file(os.path.join(CINNAMON_HOME, ".env"))

CINNAMON_ENV = os.environ.get("CINNAMON_ENV")

# ------------------------------------------------------------------------------
# ------------------------> core django configurations <------------------------
# ------------------------------------------------------------------------------

# APP CONFIGURATION
# ------------------------------------------------------------------------------

DJANGO_APPS = [
    "django.contrib.contenttypes",
]

THIRD_PARTY_APPS = [
    "django_cron",
]

CINNAMON_APPS = [
    "Cinnamon.sso",
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + CINNAMON_APPS

# CRON CONFIGURATION
# ------------------------------------------------------------------------------
CRON_CLASSES = [
    "Cinnamon.crons.ClearPendingSecrets",
]

# MIDDLEWARE CONFIGURATION
# ------------------------------------------------------------------------------

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# DEBUG
# ------------------------------------------------------------------------------

# By setting this an an environment variable, it is easy to switch debug on in
# servers to do a quick test.
# DEBUG SHOULD BE FALSE ON PRODUCTION for security reasons.

DEBUG = bool(os.environ.get("DEBUG", "False").lower() == "true")

# DATABASE CONFIGURATION
# ------------------------------------------------------------------------------

# The only table we own holds pending request token secrets, so SQLite is plenty.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get(
            "DJANGO_DB_NAME", os.path.join(CINNAMON_HOME, "db.sqlite3")
        ),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.AutoField"

# GENERAL CONFIGURATION
# ------------------------------------------------------------------------------

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get("SECRET_KEY")

# In production, this list should contain the URL of the server and nothing
# else, for security reasons. For local testing '*' is OK.
ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "localhost 127.0.0.1 [::1]").split(" ")

ROOT_URLCONF = "Cinnamon.urls"

WSGI_APPLICATION = "Cinnamon.wsgi.application"

# INTERNATIONALIZATION CONFIGURATION
# ------------------------------------------------------------------------------

LANGUAGE_CODE = "en"

TIME_ZONE = "UTC"

USE_I18N = True

USE_TZ = True

# ------------------------------------------------------------------------------
# ----------------------> third-party and Cinnamon configs <--------------------
# ------------------------------------------------------------------------------

# OAUTH CONFIGURATION
# ------------------------------------------------------------------------------

CINNAMON_OAUTH_CONSUMER_KEY = os.environ.get("CONSUMER_KEY", None)
CINNAMON_OAUTH_CONSUMER_SECRET = os.environ.get("CONSUMER_SECRET", None)

CINNAMON_OAUTH_CALLBACK_URL = os.environ.get(
    "CINNAMON_OAUTH_CALLBACK_URL", "http://localhost:8000/authorised"
)
CINNAMON_OAUTH_REQUEST_TOKEN_URL = os.environ.get(
    "CINNAMON_OAUTH_REQUEST_TOKEN_URL",
    "https://websignon.warwick.ac.uk/oauth/requestToken",
)
CINNAMON_OAUTH_AUTHORIZE_URL = os.environ.get(
    "CINNAMON_OAUTH_AUTHORIZE_URL", "https://websignon.warwick.ac.uk/oauth/authorise"
)
CINNAMON_OAUTH_ACCESS_TOKEN_URL = os.environ.get(
    "CINNAMON_OAUTH_ACCESS_TOKEN_URL",
    "https://websignon.warwick.ac.uk/oauth/accessToken",
)
CINNAMON_OAUTH_SCOPE = os.environ.get(
    "CINNAMON_OAUTH_SCOPE", "urn:websignon.warwick.ac.uk:sso:service"
)
CINNAMON_OAUTH_EXPIRY = os.environ.get("CINNAMON_OAUTH_EXPIRY", "forever")
CINNAMON_OAUTH_USER_AGENT = os.environ.get("CINNAMON_OAUTH_USER_AGENT", "Cinnamon")
# Seconds to wait for the provider on each call. Calls are never retried.
CINNAMON_OAUTH_TIMEOUT = float(os.environ.get("CINNAMON_OAUTH_TIMEOUT", "10"))

# SECRET RELAY CONFIGURATION
# ------------------------------------------------------------------------------

# Where request token secrets wait for the provider's callback. The database
# backend survives restarts and works across worker processes; the in-memory
# websignon.relay.SecretRelay only works for a single process.
CINNAMON_SECRET_RELAY = os.environ.get(
    "CINNAMON_SECRET_RELAY", "Cinnamon.sso.relay.DatabaseSecretRelay"
)
CINNAMON_SECRET_RELAY_TTL = int(os.environ.get("CINNAMON_SECRET_RELAY_TTL", "600"))
