# chat/signals.py
import logging

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from .feed import publish_message
from .models import Message

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Message)
def broadcast_new_message(sender, instance, created, **kwargs):
    """
    Push newly inserted messages to the room's live feed once the row is
    committed. Updates (the is_read flip) are not broadcast.
    """
    if not created:
        return

    def _publish():
        try:
            publish_message(instance)
        except Exception as e:
            logger.exception(f"[CHAT] Failed to broadcast message {instance.pk}: {e}")

    transaction.on_commit(_publish)
