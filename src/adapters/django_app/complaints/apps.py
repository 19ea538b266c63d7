"""
Django App configuration for Complaints.
"""

from django.apps import AppConfig


class ComplaintsConfig(AppConfig):
    """Complaints app configuration."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.complaints'
    label = 'complaints'
    verbose_name = 'Complaint Desk'

    def ready(self):
        """
        Registers the Celery tasks with the worker.

        The dispatcher is subscribed to the publisher by the container, so
        nothing else has to be wired here.
        """
        from src.adapters.django_app.events import handlers  # noqa: F401
