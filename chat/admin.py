from django.contrib import admin
from .models import ChatRoom, Message


@admin.register(ChatRoom)
class ChatRoomAdmin(admin.ModelAdmin):
    list_display = ('id', 'product', 'buyer', 'seller', 'created_at')
    list_filter = ('created_at',)
    search_fields = ('buyer__nickname', 'seller__nickname', 'product__title')
    readonly_fields = ('created_at',)
    raw_id_fields = ('product', 'buyer', 'seller')


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'sender', 'chat_room', 'created_at', 'is_read', 'content_preview')
    list_filter = ('created_at', 'is_read')
    search_fields = ('sender__nickname', 'content')
    # content and sender never change after insert
    readonly_fields = ('chat_room', 'sender', 'content', 'created_at')

    @admin.display(description='Content')
    def content_preview(self, obj):
        return obj.content[:50] + '...' if len(obj.content) > 50 else obj.content
