"""
Django Models for the Complaints domain.

These models are ADAPTERS: they persist the entities defined in
src/core/complaints/entities.py and the catalog/directory views the core
consumes.

IMPORTANT:
- Models contain no business logic
- Business rules live in the core entities
- Conversion happens in mappers.py

Tables:
- categories: category catalog
- members: member directory (read side of the identity service)
- complaints: complaint aggregate (responses and attachments as JSON)
- ticket_sequences: atomic counters for ticket identifiers
- domain_events: event store
"""

from django.db import models
from django.utils import timezone


class RoleChoices(models.TextChoices):
    STUDENT = 'student', 'Student'
    STAFF = 'staff', 'Staff'
    ADMIN = 'admin', 'Admin'


class ComplaintStatusChoices(models.TextChoices):
    """Mirrors ComplaintStatus of the core."""
    PENDING = 'pending', 'Pending'
    IN_REVIEW = 'in-review', 'In review'
    IN_PROGRESS = 'in-progress', 'In progress'
    RESOLVED = 'resolved', 'Resolved'
    REJECTED = 'rejected', 'Rejected'
    CLOSED = 'closed', 'Closed'


class ComplaintPriorityChoices(models.TextChoices):
    """Mirrors ComplaintPriority of the core."""
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'
    URGENT = 'urgent', 'Urgent'


class CategoryModel(models.Model):
    """Complaint category."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=500, blank=True, default='')
    icon = models.CharField(max_length=16, default='📋')
    color = models.CharField(max_length=16, default='#6366f1')
    is_active = models.BooleanField(default=True, db_index=True)
    complaint_count = models.IntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'categories'
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'
        ordering = ['name']

    def __str__(self):
        return self.name


class MemberModel(models.Model):
    """
    Member known to the directory.

    Credentials stay with the identity service; only the data the
    complaint desk needs is kept here.
    """

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    name = models.CharField(max_length=100)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=16, choices=RoleChoices.choices, default=RoleChoices.STUDENT, db_index=True)
    department = models.CharField(max_length=100, blank=True, default='')
    student_id = models.CharField(max_length=50, blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'members'
        verbose_name = 'Member'
        verbose_name_plural = 'Members'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.role})"


class ComplaintModel(models.Model):
    """
    Persistence of ComplaintEntity.

    Member and category references are plain ids so the aggregate does not
    depend on the catalog and directory tables.
    """

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    ticket_id = models.CharField(max_length=32, unique=True)

    title = models.CharField(max_length=200)
    description = models.TextField()
    category_id = models.CharField(max_length=36, db_index=True)

    status = models.CharField(
        max_length=20,
        choices=ComplaintStatusChoices.choices,
        default=ComplaintStatusChoices.PENDING,
        db_index=True,
    )
    priority = models.CharField(
        max_length=10,
        choices=ComplaintPriorityChoices.choices,
        default=ComplaintPriorityChoices.MEDIUM,
        db_index=True,
    )

    submitted_by = models.CharField(max_length=36, db_index=True)
    assigned_to = models.CharField(max_length=36, null=True, blank=True, db_index=True)
    is_anonymous = models.BooleanField(default=False)

    attachments = models.JSONField(default=list, blank=True)
    responses = models.JSONField(default=list, blank=True)

    resolved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(null=True, blank=True)
    satisfaction_rating = models.PositiveSmallIntegerField(null=True, blank=True)
    satisfaction_feedback = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'complaints'
        verbose_name = 'Complaint'
        verbose_name_plural = 'Complaints'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'priority', 'category_id'], name='complaints_filter_idx'),
            models.Index(fields=['assigned_to', 'status'], name='complaints_assignee_idx'),
            models.Index(fields=['submitted_by', 'created_at'], name='complaints_submitter_idx'),
        ]

    def __str__(self):
        return f"{self.ticket_id} - {self.title}"


class TicketSequenceModel(models.Model):
    """Named counter incremented atomically per ticket allocation."""

    name = models.CharField(max_length=32, primary_key=True)
    value = models.BigIntegerField(default=0)

    class Meta:
        db_table = 'ticket_sequences'

    def __str__(self):
        return f"{self.name}={self.value}"


class DomainEventModel(models.Model):
    """
    Event store.

    Every lifecycle event is appended inside the transaction that
    produced it, giving a full audit trail per complaint.
    """

    event_id = models.CharField(max_length=36, primary_key=True)
    event_type = models.CharField(max_length=100, db_index=True)
    aggregate_type = models.CharField(max_length=100, db_index=True)
    aggregate_id = models.CharField(max_length=36, db_index=True)
    event_data = models.JSONField(default=dict)
    version = models.IntegerField(default=1)
    sequence = models.BigIntegerField(default=0)
    occurred_at = models.DateTimeField()
    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'domain_events'
        verbose_name = 'Domain Event'
        verbose_name_plural = 'Domain Events'
        ordering = ['recorded_at']
        indexes = [
            models.Index(fields=['aggregate_id', 'sequence'], name='events_aggregate_seq_idx'),
            models.Index(fields=['event_type', 'recorded_at'], name='events_type_recorded_idx'),
        ]

    def __str__(self):
        return f"{self.event_type} - {self.aggregate_id[:8]} @ {self.occurred_at}"
