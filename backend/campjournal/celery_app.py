"""
Celery application configuration.
"""
from celery import Celery
from campjournal.core.config import settings

celery_app = Celery(
    "campjournal",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_routes={
        'campjournal.workers.campground_worker.*': {'queue': 'low'},
    },
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

celery_app.autodiscover_tasks(['campjournal.workers'])
