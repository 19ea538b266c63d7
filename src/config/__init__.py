"""
VoiceHU project configuration.

Modules:
- settings: Django settings
- urls: Root routes
- wsgi: WSGI application
- celery: Celery app for asynchronous notification dispatch
- container: Dependency Injection Container
"""

# Load the Celery app together with Django
from .celery import app as celery_app

__all__ = ('celery_app',)
