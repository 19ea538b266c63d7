"""
URL patterns for notifications (mounted under /api/notifications/).
"""

from django.urls import path

from . import api_views

app_name = 'notifications'

urlpatterns = [
    path('', api_views.NotificationListView.as_view(), name='list'),

    # Before <pk> so "read-all" is not taken for an id
    path('read-all/', api_views.NotificationReadAllView.as_view(), name='read_all'),

    path('<str:pk>/', api_views.NotificationDetailView.as_view(), name='detail'),
    path('<str:pk>/read/', api_views.NotificationReadView.as_view(), name='read'),
]
