"""WSGI entry point for the threadbare project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "threadbare.settings")

application = get_wsgi_application()
