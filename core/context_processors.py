# core/context_processors.py
from chat.services import ChatService


def navigation(request):
    """Nickname and unread badge for the navigation bar"""
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return {'nav_nickname': None, 'nav_unread_count': 0}

    return {
        'nav_nickname': user.nickname,
        'nav_unread_count': ChatService.unread_total(user),
    }
