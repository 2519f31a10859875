# products/tests/test_base.py
import io
import shutil
import tempfile

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from PIL import Image

from ..models import Product

User = get_user_model()

TEST_MEDIA_ROOT = tempfile.mkdtemp()


def make_image(name='photo.png', size=(20, 20), color='orange'):
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT, MAX_PRODUCT_IMAGES=3)
class BaseProductTestCase(TestCase):
    """Base test case with a seller, a shopper and uploads in a temp dir"""

    password = 'testpass123'

    @classmethod
    def setUpTestData(cls):
        cls.seller = User.objects.create_user(
            email='seller@example.com',
            password=cls.password,
            nickname='seller',
        )
        cls.shopper = User.objects.create_user(
            email='shopper@example.com',
            password=cls.password,
            nickname='shopper',
        )

    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(TEST_MEDIA_ROOT, ignore_errors=True)

    def make_product(self, owner=None, title='Used bicycle', price=50000, **kwargs):
        return Product.objects.create(
            owner=owner or self.seller,
            title=title,
            price=price,
            **kwargs,
        )
