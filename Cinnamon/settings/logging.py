import os

# We're going to replace Django's default logging config.
import logging.config

# LOGGING CONFIGURATION
# ------------------------------------------------------------------------------
# We're replacing the default logging config so our own loggers get the same
# debug-dependent console handlers as django's.
# Logging is in another file since Django 3.1 because of https://code.djangoproject.com/ticket/32016

LOGGING_CONFIG = None

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "require_debug_false": {"()": "django.utils.log.RequireDebugFalse"},
            "require_debug_true": {"()": "django.utils.log.RequireDebugTrue"},
        },
        "formatters": {
            "django.server": {
                "()": "django.utils.log.ServerFormatter",
                "format": "[%(server_time)s] %(message)s",
            },
            "verbose": {
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
            },
        },
        "handlers": {
            "nodebug_console": {
                "level": "WARNING",
                "filters": ["require_debug_false"],
                "class": "logging.StreamHandler",
                "formatter": "verbose",
            },
            "debug_console": {
                "level": "INFO",
                "filters": ["require_debug_true"],
                "class": "logging.StreamHandler",
                "formatter": "verbose",
            },
            "django.server": {
                "level": "INFO",
                "class": "logging.StreamHandler",
                "formatter": "django.server",
            },
        },
        "loggers": {
            "django": {
                "handlers": ["nodebug_console", "debug_console"],
                "level": os.environ.get("DJANGO_LOG_LEVEL", "INFO"),
            },
            "django.server": {
                "handlers": ["django.server"],
                "level": os.environ.get("DJANGO_LOG_LEVEL", "INFO"),
                "propagate": False,
            },
            "Cinnamon": {
                "handlers": ["nodebug_console", "debug_console"],
                "level": os.environ.get("DJANGO_LOG_LEVEL", "INFO"),
            },
            "websignon": {
                "handlers": ["nodebug_console", "debug_console"],
                "level": os.environ.get("DJANGO_LOG_LEVEL", "INFO"),
            },
        },
    }
)
