"""
Celery application configuration for EstateHub.
"""
import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('estatehub')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django app configs.
app.autodiscover_tasks()

# Celery Beat Schedule for periodic tasks
app.conf.beat_schedule = {
    # Remind confirmed bookings starting within the next 24 hours
    'send-booking-reminders': {
        'task': 'apps.notifications.tasks.send_booking_reminders_task',
        'schedule': crontab(minute=0),  # Run at the start of every hour
    },
}

app.conf.timezone = 'UTC'
