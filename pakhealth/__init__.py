# pakhealth/__init__.py
"""
PakHealth backend: аккаунты, напоминания и уведомления.

Точки входа:
    uvicorn pakhealth.main:app
    celery -A pakhealth.workers.tasks worker
    celery -A pakhealth.workers.tasks beat
"""
__version__ = "0.3.0"
