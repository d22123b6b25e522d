"""WSGI entrypoint for the Corebook backend."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "corebook_backend.settings")

application = get_wsgi_application()
