"""
WSGI config for the Django application.

Exposes the WSGI callable as a module-level variable named `application`
for gunicorn and other WSGI servers. The webhook endpoint reads the raw
request body, which both WSGI and ASGI deployments pass through untouched.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
