from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Boarding Service Core'

    def ready(self):
        """Register celery tasks when app is ready."""
        from . import tasks  # noqa: F401
