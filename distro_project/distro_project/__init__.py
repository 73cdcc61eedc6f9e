# Celery instance is defined in distro_project/celery.py
# It creates celery_app object and points it to Django settings
from .celery import celery_app

# 'from distro_project import *', only exports celery_app
__all__ = ("celery_app",)
