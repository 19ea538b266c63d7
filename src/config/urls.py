"""
Root URL configuration.

- /admin/                Django admin
- /api/complaints/       Complaints API
- /api/notifications/    Notifications API
- /api/health/           Health check
"""

from django.contrib import admin
from django.urls import include, path

from src.adapters.django_app.shared.api import HealthView

urlpatterns = [
    path('admin/', admin.site.urls),

    path('api/complaints/', include('src.adapters.django_app.complaints.urls')),
    path('api/notifications/', include('src.adapters.django_app.notifications.urls')),

    path('api/health/', HealthView.as_view(), name='health'),
]
