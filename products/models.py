from django.conf import settings
from django.db import models


class Product(models.Model):
    """A listing owned by exactly one user."""

    SELLING = "selling"
    RESERVED = "reserved"
    SOLD = "sold"

    STATUS_CHOICES = [
        (SELLING, "Selling"),
        (RESERVED, "Reserved"),
        (SOLD, "Sold"),
    ]

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='products'
    )
    title = models.CharField(max_length=100)
    price = models.PositiveIntegerField()
    description = models.TextField(blank=True, null=True)
    location = models.CharField(max_length=100, blank=True, null=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=SELLING, db_index=True)
    view_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', '-created_at'], name='product_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.price:,})"

    def cover_image(self):
        """First image in display order, or None"""
        images = list(self.images.all())
        return images[0] if images else None

    @property
    def cover_image_url(self):
        image = self.cover_image()
        return image.image_url if image else None

    @property
    def status_label(self):
        return self.get_status_display()


class ProductImage(models.Model):
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='images'
    )
    image_url = models.CharField(max_length=500)
    display_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        # ties on display_order fall back to arrival order
        ordering = ['display_order', 'id']

    def __str__(self):
        return f"Image {self.display_order} of {self.product_id}"


class Favorite(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='favorites'
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='favorites'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('user', 'product')
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user} ♥ {self.product_id}"
