from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from products.models import Product


class ChatRoom(models.Model):
    """
    A negotiation thread about one product between a buyer and its seller.
    Rooms are looked up by (product, buyer, seller) before being created;
    see ChatService.find_or_create_room.
    """
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='chat_rooms'
    )
    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='buying_rooms'
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='selling_rooms'
    )

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['product', 'buyer', 'seller'], name='chatroom_participants_idx'),
        ]

    def __str__(self):
        return f"Chat #{self.pk}: {self.buyer} ↔ {self.seller} about {self.product_id}"

    def clean(self):
        if self.buyer_id and self.buyer_id == self.seller_id:
            raise ValidationError("Buyer and seller must be different users.")

    def is_participant(self, user_id):
        return user_id is not None and user_id in (self.buyer_id, self.seller_id)

    def get_other_user(self, current_user):
        """Get the other participant in the chat"""
        if current_user.pk == self.buyer_id:
            return self.seller
        return self.buyer


class Message(models.Model):
    """
    Individual messages within a chat room. Immutable apart from `is_read`,
    which only ever goes from False to True.
    """
    chat_room = models.ForeignKey(
        ChatRoom,
        on_delete=models.CASCADE,
        related_name='messages'
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sent_messages'
    )
    content = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        # id breaks timestamp ties in insertion order
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['chat_room', 'created_at', 'id'], name='message_room_order_idx'),
            models.Index(fields=['chat_room', 'is_read'], name='message_room_unread_idx'),
        ]

    def __str__(self):
        return f"{self.sender}: {self.content[:50]}"
