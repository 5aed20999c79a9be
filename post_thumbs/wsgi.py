"""
WSGI config for post_thumbs project.
"""
import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'post_thumbs.settings')
application = get_wsgi_application()
