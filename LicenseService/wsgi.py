"""
WSGI config for LicenseService.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "LicenseService.settings.prod")

application = get_wsgi_application()
