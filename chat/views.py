# chat/views.py
import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import Http404, JsonResponse
from django.shortcuts import redirect, render

from core.results import ErrorCode, parse_id

from .forms import MessageForm
from .services import ChatService
from .session import ChatRoomSession

logger = logging.getLogger(__name__)


@login_required
def chat_room_list(request):
    """
    List the user's chat rooms. With ?product=<id>&seller=<id> it opens
    (or creates) the room for that listing instead.
    """
    product_id = request.GET.get('product')
    seller_id = request.GET.get('seller')

    if product_id and seller_id:
        result = ChatService.find_or_create_room(product_id, seller_id, request.user)
        if result['success']:
            return redirect('chat:room', room_id=result['room'].pk)

        messages.error(request, result['error'])
        product_pk = parse_id(product_id)
        if result['code'] == ErrorCode.NOT_FOUND or product_pk is None:
            return redirect('products:feed')
        return redirect('products:detail', product_id=product_pk)

    context = {
        'rooms': ChatService.list_rooms_for_user(request.user),
    }
    return render(request, 'chat/room_list.html', context)


@login_required
def chat_room(request, room_id):
    result = ChatService.get_room_detail(room_id, request.user)
    if not result['success']:
        # non-participants get the same answer as a missing room
        raise Http404(result['error'])

    session = ChatRoomSession(room_id, request.user)
    opened = session.open()
    if not opened['success']:
        raise Http404(opened['error'])
    groups = session.group_by_date()
    session.close()

    context = {
        'detail': result['detail'],
        'room': result['detail'].room,
        'other_user': result['detail'].other_user,
        'groups': groups,
        'user_id': str(request.user.pk),
        'message_form': MessageForm(),
    }
    return render(request, 'chat/chat_room.html', context)


@login_required
def get_unread_count(request):
    '''API endpoint to get unread message count'''
    return JsonResponse({'unread_count': ChatService.unread_total(request.user)})
