# chat/serializers.py - DRF Serializers
from rest_framework import serializers

from users.models import User

from .models import Message


class UserBasicSerializer(serializers.ModelSerializer):
    avatar_url = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'nickname', 'avatar_url']


class MessageSerializer(serializers.ModelSerializer):
    chat_id = serializers.IntegerField(source='chat_room_id', read_only=True)
    sender_id = serializers.CharField(read_only=True)

    class Meta:
        model = Message
        fields = ['id', 'chat_id', 'sender_id', 'content', 'is_read', 'created_at']
        read_only_fields = fields


class ProductSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    title = serializers.CharField()
    price = serializers.IntegerField()
    status = serializers.CharField()


class RoomSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField(source='room.pk')
    product = ProductSummarySerializer()
    product_image_url = serializers.CharField(allow_null=True)
    other_user = UserBasicSerializer()
    last_message = MessageSerializer(allow_null=True)
    unread_count = serializers.IntegerField()
    last_activity_at = serializers.DateTimeField()


class RoomDetailSerializer(serializers.Serializer):
    id = serializers.IntegerField(source='room.pk')
    product = ProductSummarySerializer()
    product_image_url = serializers.CharField(allow_null=True)
    status_label = serializers.CharField()
    other_user = UserBasicSerializer()
    created_at = serializers.DateTimeField(source='room.created_at')


class StartChatSerializer(serializers.Serializer):
    product = serializers.IntegerField()
    seller = serializers.UUIDField()


class SendMessageSerializer(serializers.Serializer):
    # blank/whitespace content is rejected by ChatService with its own message
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)
