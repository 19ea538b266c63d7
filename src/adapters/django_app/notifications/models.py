"""
Django Models for the Notifications domain.

One row per recipient; the dispatcher writes, the recipient reads,
marks read and deletes.
"""

from django.db import models
from django.utils import timezone


class NotificationTypeChoices(models.TextChoices):
    """Mirrors NotificationType of the core."""
    COMPLAINT_SUBMITTED = 'complaint_submitted', 'Complaint submitted'
    COMPLAINT_ASSIGNED = 'complaint_assigned', 'Complaint assigned'
    COMPLAINT_UPDATED = 'complaint_updated', 'Complaint updated'
    COMPLAINT_RESOLVED = 'complaint_resolved', 'Complaint resolved'
    COMPLAINT_REJECTED = 'complaint_rejected', 'Complaint rejected'
    NEW_RESPONSE = 'new_response', 'New response'
    SYSTEM = 'system', 'System'


class NotificationModel(models.Model):

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    recipient_id = models.CharField(max_length=36)
    title = models.CharField(max_length=200)
    message = models.TextField()
    type = models.CharField(
        max_length=32,
        choices=NotificationTypeChoices.choices,
        default=NotificationTypeChoices.SYSTEM,
    )
    related_complaint_id = models.CharField(max_length=36, null=True, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'notifications'
        verbose_name = 'Notification'
        verbose_name_plural = 'Notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient_id', 'is_read', 'created_at'], name='notifications_inbox_idx'),
        ]

    def __str__(self):
        return f"{self.title} -> {self.recipient_id}"
