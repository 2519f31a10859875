# chat/apps.py
from django.apps import AppConfig


class ChatConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'chat'
    verbose_name = 'Chat'

    def ready(self):
        # Import signals module to register signal handlers
        from . import signals  # noqa: F401
