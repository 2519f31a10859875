from django.contrib import admin
from .models import Product, ProductImage, Favorite


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 0
    readonly_fields = ('created_at',)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'owner', 'price', 'status', 'view_count', 'created_at')
    list_filter = ('status', 'created_at')
    search_fields = ('title', 'owner__email', 'owner__nickname', 'location')
    readonly_fields = ('view_count', 'created_at', 'updated_at')
    inlines = [ProductImageInline]


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'product', 'created_at')
    search_fields = ('user__email', 'product__title')
    readonly_fields = ('created_at',)
