# conftest.py
"""
Pytest configuration and fixtures shared by the app test suites.
"""
import pytest
from django.contrib.auth import get_user_model

from products.models import Product

User = get_user_model()


@pytest.fixture
def seller(db):
    """User who owns the listing."""
    return User.objects.create_user(
        email='seller@test.com',
        password='testpass123',
        nickname='seller',
    )


@pytest.fixture
def buyer(db):
    """User interested in the listing."""
    return User.objects.create_user(
        email='buyer@test.com',
        password='testpass123',
        nickname='buyer',
    )


@pytest.fixture
def stranger(db):
    """User with no part in the conversation."""
    return User.objects.create_user(
        email='stranger@test.com',
        password='testpass123',
        nickname='stranger',
    )


@pytest.fixture
def product(seller):
    return Product.objects.create(
        owner=seller,
        title='Used bicycle',
        price=50000,
        location='Mapo-gu',
    )


@pytest.fixture
def room(product, buyer, seller):
    from chat.models import ChatRoom
    return ChatRoom.objects.create(product=product, buyer=buyer, seller=seller)
