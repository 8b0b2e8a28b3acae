"""
Celery application configuration.

Background jobs for the ledger backend: balance verification against
the entry log and other maintenance work that must not block requests.

Usage:
    # Start worker
    celery -A ledger_backend worker -l INFO

    # Start beat scheduler (nightly balance verification)
    celery -A ledger_backend beat -l INFO
"""
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ledger_backend.settings")

app = Celery("ledger_backend")

# Load config from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
