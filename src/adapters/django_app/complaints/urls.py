"""
URL patterns for complaints (mounted under /api/complaints/).

- GET/POST   /                 list, create
- GET        /stats/           dashboard statistics
- GET/DELETE /<id>/            detail, delete
- PUT        /<id>/status/     change status
- PUT        /<id>/assign/     assign
- POST       /<id>/respond/    add response
- PUT        /<id>/rate/       rate
"""

from django.urls import path

from . import api_views

app_name = 'complaints'

urlpatterns = [
    path('', api_views.ComplaintListCreateView.as_view(), name='list'),

    # Before <pk> so "stats" is not taken for an id
    path('stats/', api_views.ComplaintStatsView.as_view(), name='stats'),

    path('<str:pk>/', api_views.ComplaintDetailView.as_view(), name='detail'),
    path('<str:pk>/status/', api_views.ComplaintStatusView.as_view(), name='status'),
    path('<str:pk>/assign/', api_views.ComplaintAssignView.as_view(), name='assign'),
    path('<str:pk>/respond/', api_views.ComplaintRespondView.as_view(), name='respond'),
    path('<str:pk>/rate/', api_views.ComplaintRateView.as_view(), name='rate'),
]
