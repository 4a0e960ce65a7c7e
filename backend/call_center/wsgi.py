"""WSGI config for the Call Center service."""
import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'call_center.settings')
application = get_wsgi_application()
