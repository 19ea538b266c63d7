"""
Celery configuration.

Celery is used for:
- Notification fan-out of domain events when EVENT_PUBLISHER_MODE=celery
- Scheduled maintenance (event store cleanup)

Architecture:
- Broker: RabbitMQ by default (CELERY_BROKER_URL)
- Backend: Redis (CELERY_RESULT_BACKEND)
- Workers: run ``dispatch_domain_event`` with the same dispatcher the
  web process uses in sync mode

Usage:
    # Start a worker
    celery -A src.config.celery worker -l INFO -Q default,events

    # Start beat (scheduled tasks)
    celery -A src.config.celery beat -l INFO
"""

import os

from celery import Celery
from kombu import Exchange, Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

app = Celery('voicehu')

# Broker, backend and eager mode come from the CELERY_* Django settings
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    timezone='UTC',
    enable_utc=True,

    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    result_expires=3600,

    worker_send_task_events=True,
    task_send_sent_event=True,
)

app.conf.task_default_queue = 'default'
app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
)

app.conf.task_routes = {
    'src.adapters.django_app.events.handlers.*': {'queue': 'events'},
}

app.autodiscover_tasks(['src.adapters.django_app.events'], related_name='handlers')

app.conf.beat_schedule = {
    # Weekly purge of the event store
    'cleanup-old-events': {
        'task': 'src.adapters.django_app.events.handlers.cleanup_old_events',
        'schedule': 604800.0,
    },
}
