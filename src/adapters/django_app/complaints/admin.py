"""
Django Admin for the complaint desk tables.
"""

from django.contrib import admin

from .models import CategoryModel, ComplaintModel, DomainEventModel, MemberModel


@admin.register(ComplaintModel)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = ['ticket_id', 'title', 'status', 'priority', 'assigned_to', 'is_anonymous', 'created_at']
    list_filter = ['status', 'priority', 'is_anonymous', 'created_at']
    search_fields = ['ticket_id', 'title', 'description']
    readonly_fields = ['id', 'ticket_id', 'responses', 'attachments', 'created_at', 'updated_at', 'resolved_at']
    ordering = ['-created_at']


@admin.register(CategoryModel)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'icon', 'is_active', 'complaint_count']
    list_filter = ['is_active']
    search_fields = ['name']
    readonly_fields = ['complaint_count']


@admin.register(MemberModel)
class MemberAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'role', 'department', 'is_active']
    list_filter = ['role', 'is_active']
    search_fields = ['name', 'email', 'student_id']


@admin.register(DomainEventModel)
class DomainEventAdmin(admin.ModelAdmin):
    """Read-only view of the event store."""

    list_display = ['event_type', 'aggregate_id', 'sequence', 'occurred_at']
    list_filter = ['event_type', 'aggregate_type']
    search_fields = ['aggregate_id', 'event_id']
    readonly_fields = [f.name for f in DomainEventModel._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
