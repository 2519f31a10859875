# products/services.py
import logging
import os
import time

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import transaction
from django.db.models import F

from core.results import ErrorCode, failure, is_authenticated

from .models import Product, ProductImage, Favorite

logger = logging.getLogger(__name__)


def parse_price(raw):
    """Return a non-negative int, or None when the value is not one."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return value if value >= 0 else None


def product_image_path(product, index, filename):
    """Storage key for one uploaded listing image."""
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower() or "jpg"
    stamp = int(time.time() * 1000)
    return f"{settings.PRODUCT_IMAGE_PREFIX}/{product.pk}/{stamp}_{index}.{ext}"


class ProductService:
    """Listing creation, feed and detail lookups."""

    @staticmethod
    def create_listing(owner, title, price, description=None, location=None, images=None):
        """
        Create a `selling` listing and upload its images in order.

        An image that fails to upload is logged and skipped; the listing
        itself is still created.
        """
        if not is_authenticated(owner):
            return failure(ErrorCode.UNAUTHORIZED, "You need to log in first.")

        title = (title or "").strip()
        if not title:
            return failure(ErrorCode.VALIDATION, "Please enter a title.")

        parsed_price = parse_price(price)
        if parsed_price is None:
            return failure(ErrorCode.VALIDATION, "Please enter a valid price.")

        images = [img for img in (images or []) if img is not None and getattr(img, "size", 0) > 0]
        if len(images) > settings.MAX_PRODUCT_IMAGES:
            return failure(
                ErrorCode.VALIDATION,
                f"You can attach up to {settings.MAX_PRODUCT_IMAGES} images.",
            )

        with transaction.atomic():
            product = Product.objects.create(
                owner=owner,
                title=title,
                price=parsed_price,
                description=(description or "").strip() or None,
                location=(location or "").strip() or None,
            )

        logger.info(f"[PRODUCTS] {owner.pk} listed product {product.pk} '{title}' for {parsed_price}")

        uploaded = ProductService.upload_images(product, images)
        return {
            "success": True,
            "product": product,
            "images": uploaded,
            "failed_uploads": len(images) - len(uploaded),
        }

    @staticmethod
    def upload_images(product, images):
        uploaded = []
        for index, image in enumerate(images):
            path = product_image_path(product, index, getattr(image, "name", ""))
            try:
                stored_name = default_storage.save(path, image)
            except Exception as e:
                logger.error(f"[PRODUCTS] Image upload failed for product {product.pk} ({path}): {e}")
                continue

            uploaded.append(
                ProductImage.objects.create(
                    product=product,
                    image_url=default_storage.url(stored_name),
                    display_order=index,
                )
            )
        return uploaded

    @staticmethod
    def feed(limit=None):
        """Newest listings that are still for sale."""
        limit = limit or settings.FEED_PAGE_SIZE
        return list(
            Product.objects.filter(status=Product.SELLING)
            .select_related("owner")
            .prefetch_related("images")
            .order_by("-created_at", "-id")[:limit]
        )

    @staticmethod
    def get_detail(product_id, viewer=None):
        """
        Product with owner and ordered images, or None.

        Counts a view unless the viewer owns the listing.
        """
        product = (
            Product.objects.select_related("owner")
            .prefetch_related("images")
            .filter(pk=product_id)
            .first()
        )
        if product is None:
            return None

        viewer_id = viewer.pk if is_authenticated(viewer) else None
        if viewer_id != product.owner_id:
            Product.objects.filter(pk=product.pk).update(view_count=F("view_count") + 1)
            product.refresh_from_db(fields=["view_count"])
        return product

    @staticmethod
    def toggle_favorite(user, product_id):
        if not is_authenticated(user):
            return failure(ErrorCode.UNAUTHORIZED, "You need to log in first.")

        product = Product.objects.filter(pk=product_id).first()
        if product is None:
            return failure(ErrorCode.NOT_FOUND, "Product not found.")

        deleted, _ = Favorite.objects.filter(user=user, product=product).delete()
        if deleted:
            return {"success": True, "favorited": False, "product": product}

        Favorite.objects.get_or_create(user=user, product=product)
        return {"success": True, "favorited": True, "product": product}

    @staticmethod
    def is_favorited(user, product):
        if not is_authenticated(user):
            return False
        return Favorite.objects.filter(user=user, product=product).exists()

    @staticmethod
    def update_status(owner, product_id, status):
        """Owner-only status change among selling / reserved / sold."""
        if not is_authenticated(owner):
            return failure(ErrorCode.UNAUTHORIZED, "You need to log in first.")

        if status not in dict(Product.STATUS_CHOICES):
            return failure(ErrorCode.VALIDATION, "Unknown status.")

        product = Product.objects.filter(pk=product_id).first()
        if product is None:
            return failure(ErrorCode.NOT_FOUND, "Product not found.")

        if product.owner_id != owner.pk:
            logger.warning(f"[PRODUCTS] {owner.pk} tried to change status of product {product.pk}")
            return failure(ErrorCode.FORBIDDEN, "Only the seller can change the status.")

        product.status = status
        product.save(update_fields=["status", "updated_at"])
        logger.info(f"[PRODUCTS] Product {product.pk} marked {status}")
        return {"success": True, "product": product}
