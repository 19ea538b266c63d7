from django.contrib import admin

from .models import NotificationModel


@admin.register(NotificationModel)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'recipient_id', 'type', 'is_read', 'created_at']
    list_filter = ['type', 'is_read']
    search_fields = ['recipient_id', 'title']
