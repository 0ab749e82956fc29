"""
WSGI config for the cinnamon project.

It exposes the WSGI callable as a module-level variable named ``application``.
"""

import os

from django.core.wsgi import get_wsgi_application

# Production is default for safety
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "Cinnamon.settings.production")

application = get_wsgi_application()
