# chat/tests/test_base.py
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone

from products.models import Product

from ..models import ChatRoom, Message

User = get_user_model()


class BaseChatTestCase(TestCase):
    """Seller with a listing, an interested buyer and an outsider"""

    password = 'testpass123'

    @classmethod
    def setUpTestData(cls):
        cls.seller = User.objects.create_user(
            email='seller@example.com',
            password=cls.password,
            nickname='seller',
        )
        cls.buyer = User.objects.create_user(
            email='buyer@example.com',
            password=cls.password,
            nickname='buyer',
        )
        cls.stranger = User.objects.create_user(
            email='stranger@example.com',
            password=cls.password,
            nickname='stranger',
        )
        cls.product = Product.objects.create(
            owner=cls.seller,
            title='Used bicycle',
            price=50000,
            location='Mapo-gu',
        )

    def make_room(self, product=None, buyer=None, **kwargs):
        product = product or self.product
        return ChatRoom.objects.create(
            product=product,
            buyer=buyer or self.buyer,
            seller=product.owner,
            **kwargs,
        )

    def make_message(self, room, sender, content='hi', created_at=None, is_read=False):
        return Message.objects.create(
            chat_room=room,
            sender=sender,
            content=content,
            is_read=is_read,
            created_at=created_at or timezone.now(),
        )

    def minutes_ago(self, minutes):
        return timezone.now() - timedelta(minutes=minutes)
