""" Workers run with "celery -A distro_project worker -l info".
    The -A distro_project means:
    Import distro_project/__init__.py →
    which exposes celery_app → now Celery knows what to run. """
from __future__ import annotations
import os
from celery import Celery

# ensure Django settings are set for Celery
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "distro_project.settings")

celery_app = Celery("distro_project")

# read config from Django settings, using CELERY_ prefix
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# autoload tasks from installed apps (ledger_core/tasks.py)
celery_app.autodiscover_tasks()
