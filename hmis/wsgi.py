"""WSGI entry point for running the HTTP API without websockets (gunicorn, uwsgi)."""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hmis.settings')

application = get_wsgi_application()
