"""
WSGI config for the GearOps project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gearops.config.settings')

application = get_wsgi_application()
