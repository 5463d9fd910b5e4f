"""
Celery application. Workers run the periodic stock sweep; everything else in
the POS happens inside the request.
"""
import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'main.settings')

app = Celery('pos_api')

# CELERY_* settings, including CELERY_BEAT_SCHEDULE and CELERY_TIMEZONE
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
