# products/tests/test_services.py
from datetime import timedelta
from unittest.mock import patch

from django.contrib.auth.models import AnonymousUser
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase
from django.utils import timezone

from core.results import ErrorCode

from ..models import Favorite, Product, ProductImage
from ..services import ProductService, parse_price, product_image_path
from .test_base import BaseProductTestCase, make_image


class ParsePriceTest(SimpleTestCase):

    def test_valid(self):
        self.assertEqual(parse_price('15000'), 15000)
        self.assertEqual(parse_price(' 0 '), 0)
        self.assertEqual(parse_price(300), 300)

    def test_invalid(self):
        for raw in ['', 'abc', '12.5', '-1', -5, None, True]:
            self.assertIsNone(parse_price(raw), raw)


class ProductImagePathTest(BaseProductTestCase):

    def test_path_layout(self):
        product = self.make_product()

        path = product_image_path(product, 2, 'Holiday.JPEG')

        self.assertTrue(path.startswith(f'product-images/{product.pk}/'))
        self.assertTrue(path.endswith('_2.jpeg'))

    def test_missing_extension_defaults_to_jpg(self):
        product = self.make_product()
        self.assertTrue(product_image_path(product, 0, 'blob').endswith('_0.jpg'))


class CreateListingTest(BaseProductTestCase):

    def test_create_with_images_in_order(self):
        result = ProductService.create_listing(
            owner=self.seller,
            title='  Desk lamp ',
            price='12000',
            description='Barely used',
            location='Mapo-gu',
            images=[make_image('a.png'), make_image('b.png')],
        )

        self.assertTrue(result['success'])
        product = result['product']
        self.assertEqual(product.title, 'Desk lamp')
        self.assertEqual(product.price, 12000)
        self.assertEqual(product.status, Product.SELLING)
        self.assertEqual(product.owner, self.seller)
        images = list(product.images.all())
        self.assertEqual([img.display_order for img in images], [0, 1])
        self.assertTrue(all(f'product-images/{product.pk}/' in img.image_url for img in images))
        self.assertEqual(product.cover_image_url, images[0].image_url)

    def test_blank_optional_fields_stored_as_null(self):
        result = ProductService.create_listing(self.seller, 'Chair', 0, description='  ', location='')

        product = result['product']
        self.assertIsNone(product.description)
        self.assertIsNone(product.location)
        self.assertIsNone(product.cover_image_url)

    def test_requires_login(self):
        result = ProductService.create_listing(AnonymousUser(), 'Chair', 100)
        self.assertEqual(result['code'], ErrorCode.UNAUTHORIZED)

    def test_validation(self):
        cases = [
            ('   ', '100'),
            ('Chair', 'free'),
            ('Chair', '-3'),
        ]
        for title, price in cases:
            result = ProductService.create_listing(self.seller, title, price)
            self.assertEqual(result['code'], ErrorCode.VALIDATION, (title, price))

        self.assertFalse(Product.objects.exists())

    def test_too_many_images(self):
        images = [make_image(f'{i}.png') for i in range(4)]

        result = ProductService.create_listing(self.seller, 'Chair', 100, images=images)

        self.assertEqual(result['code'], ErrorCode.VALIDATION)
        self.assertFalse(Product.objects.exists())

    def test_failed_upload_is_skipped(self):
        real_save = default_storage.save
        calls = []

        def flaky_save(name, content):
            calls.append(name)
            if len(calls) == 1:
                raise OSError('bucket unavailable')
            return real_save(name, content)

        with patch('products.services.default_storage.save', side_effect=flaky_save):
            with self.assertLogs('products.services', level='ERROR'):
                result = ProductService.create_listing(
                    self.seller, 'Chair', 100, images=[make_image('a.png'), make_image('b.png')],
                )

        self.assertTrue(result['success'])
        self.assertEqual(len(result['images']), 1)
        self.assertEqual(result['images'][0].display_order, 1)
        self.assertEqual(result['failed_uploads'], 1)
        self.assertEqual(ProductImage.objects.count(), 1)


    def test_empty_files_are_not_counted_as_failed(self):
        empty = SimpleUploadedFile('empty.png', b'', content_type='image/png')

        result = ProductService.create_listing(
            self.seller, 'Chair', 100, images=[empty, make_image('a.png')],
        )

        self.assertEqual(len(result['images']), 1)
        self.assertEqual(result['failed_uploads'], 0)


class FeedTest(BaseProductTestCase):

    def test_only_selling_newest_first(self):
        old = self.make_product(title='Old')
        new = self.make_product(title='New')
        self.make_product(title='Gone', status=Product.SOLD)
        self.make_product(title='Held', status=Product.RESERVED)
        Product.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=1))

        feed = ProductService.feed()

        self.assertEqual([p.pk for p in feed], [new.pk, old.pk])

    def test_limit(self):
        for i in range(5):
            self.make_product(title=f'Item {i}')
        self.assertEqual(len(ProductService.feed(limit=2)), 2)


class DetailTest(BaseProductTestCase):

    def test_counts_views_from_others(self):
        product = self.make_product()

        ProductService.get_detail(product.pk, self.shopper)
        detail = ProductService.get_detail(product.pk, AnonymousUser())

        self.assertEqual(detail.view_count, 2)

    def test_owner_view_not_counted(self):
        product = self.make_product()

        detail = ProductService.get_detail(product.pk, self.seller)

        self.assertEqual(detail.view_count, 0)

    def test_missing(self):
        self.assertIsNone(ProductService.get_detail(999999))


class FavoriteTest(BaseProductTestCase):

    def test_toggle(self):
        product = self.make_product()

        first = ProductService.toggle_favorite(self.shopper, product.pk)
        self.assertTrue(first['favorited'])
        self.assertTrue(ProductService.is_favorited(self.shopper, product))

        second = ProductService.toggle_favorite(self.shopper, product.pk)
        self.assertFalse(second['favorited'])
        self.assertFalse(Favorite.objects.exists())

    def test_missing_product(self):
        result = ProductService.toggle_favorite(self.shopper, 999999)
        self.assertEqual(result['code'], ErrorCode.NOT_FOUND)

    def test_anonymous(self):
        product = self.make_product()
        self.assertEqual(ProductService.toggle_favorite(AnonymousUser(), product.pk)['code'], ErrorCode.UNAUTHORIZED)
        self.assertFalse(ProductService.is_favorited(AnonymousUser(), product))


class UpdateStatusTest(BaseProductTestCase):

    def test_owner_changes_status(self):
        product = self.make_product()

        result = ProductService.update_status(self.seller, product.pk, Product.RESERVED)

        self.assertTrue(result['success'])
        product.refresh_from_db()
        self.assertEqual(product.status, Product.RESERVED)
        self.assertEqual(product.status_label, 'Reserved')

    def test_other_user_forbidden(self):
        product = self.make_product()

        result = ProductService.update_status(self.shopper, product.pk, Product.SOLD)

        self.assertEqual(result['code'], ErrorCode.FORBIDDEN)
        product.refresh_from_db()
        self.assertEqual(product.status, Product.SELLING)

    def test_unknown_status(self):
        product = self.make_product()
        result = ProductService.update_status(self.seller, product.pk, 'given-away')
        self.assertEqual(result['code'], ErrorCode.VALIDATION)
