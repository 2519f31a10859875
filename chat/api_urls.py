# chat/api_urls.py
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api import ChatRoomViewSet

router = DefaultRouter()
router.register(r'rooms', ChatRoomViewSet, basename='chat-room')

urlpatterns = [
    path('', include(router.urls)),
]
