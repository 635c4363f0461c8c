# pakhealth/workers/__init__.py
"""
Пакет для фоновых задач Celery.
Ничего импортировать автоматически не нужно:
Celery сам загрузит pakhealth.workers.tasks по флагу «-A».
"""
__all__: list[str] = ["tasks"]
