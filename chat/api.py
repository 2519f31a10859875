# chat/api.py - REST API endpoints
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.results import http_status_for

from .serializers import (
    MessageSerializer,
    RoomDetailSerializer,
    RoomSummarySerializer,
    SendMessageSerializer,
    StartChatSerializer,
)
from .services import ChatService


def error_response(result):
    return Response(
        {'error': result['error'], 'code': result['code']},
        status=http_status_for(result),
    )


class ChatRoomViewSet(viewsets.ViewSet):
    """Chat rooms of the authenticated user"""
    lookup_value_regex = r"\d+"
    permission_classes = [IsAuthenticated]

    def list(self, request):
        summaries = ChatService.list_rooms_for_user(request.user)
        return Response(RoomSummarySerializer(summaries, many=True).data)

    def retrieve(self, request, pk=None):
        result = ChatService.get_room_detail(pk, request.user)
        if not result['success']:
            return error_response(result)
        return Response(RoomDetailSerializer(result['detail']).data)

    def create(self, request):
        """Open the room for a listing, creating it on first contact"""
        serializer = StartChatSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.find_or_create_room(
            serializer.validated_data['product'],
            serializer.validated_data['seller'],
            request.user,
        )
        if not result['success']:
            return error_response(result)

        room = result['room']
        return Response(
            {'id': room.pk, 'created': result['created']},
            status=status.HTTP_201_CREATED if result['created'] else status.HTTP_200_OK,
        )

    @action(detail=True, methods=['get'])
    def messages(self, request, pk=None):
        result = ChatService.list_messages(pk, request.user)
        if not result['success']:
            return error_response(result)
        return Response(MessageSerializer(result['messages'], many=True).data)

    @action(detail=True, methods=['post'])
    def send(self, request, pk=None):
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.send_message(pk, request.user, serializer.validated_data['content'])
        if not result['success']:
            return error_response(result)
        return Response(MessageSerializer(result['message']).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        updated = ChatService.mark_read(pk, request.user)
        return Response({'updated': updated})
