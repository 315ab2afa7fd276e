"""
WSGI config for core_backend project.

Each request is served by its own worker thread; all coordination between
requests goes through the database.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core_backend.settings")

application = get_wsgi_application()
