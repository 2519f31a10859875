# chat/services.py
import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import transaction
from django.db.models import Count, Max, OuterRef, Q, Subquery

from core.results import ErrorCode, failure, is_authenticated, parse_id
from products.models import Product

from .models import ChatRoom, Message

logger = logging.getLogger(__name__)


@dataclass
class RoomSummary:
    """One row of the room list"""
    room: ChatRoom
    product: Product
    product_image_url: str | None
    other_user: object
    last_message: Message | None
    unread_count: int
    last_activity_at: datetime


@dataclass
class RoomDetail:
    """Header data for an open room"""
    room: ChatRoom
    product: Product
    product_image_url: str | None
    status_label: str
    other_user: object


def _load_room(room_id):
    room_id = parse_id(room_id)
    if room_id is None:
        return None
    return (
        ChatRoom.objects.select_related("product", "buyer", "seller")
        .filter(pk=room_id)
        .first()
    )


def _check_room_access(room_id, caller):
    """Return (room, None) for a participant, else (None, failure result)."""
    if not is_authenticated(caller):
        return None, failure(ErrorCode.UNAUTHORIZED, "You need to log in first.")

    room = _load_room(room_id)
    if room is None:
        return None, failure(ErrorCode.NOT_FOUND, "Chat room not found.")

    if not room.is_participant(caller.pk):
        logger.warning(f"[CHAT] {caller.pk} denied access to room {room_id}")
        return None, failure(ErrorCode.FORBIDDEN, "You are not a participant of this chat.")

    return room, None


class ChatService:
    """
    Data access for chat rooms and messages, always scoped to the caller.

    Every method takes the calling identity explicitly. Failures come back
    as result dicts (see core.results); nothing here raises for a rejected
    call.
    """

    @staticmethod
    def find_or_create_room(product_id, seller_id, caller):
        """
        Return the caller's room for this product, creating it on first contact.

        Lookup and insert run under a row lock on the product so two
        concurrent first contacts from the same buyer resolve to one room.
        """
        if not is_authenticated(caller):
            return failure(ErrorCode.UNAUTHORIZED, "You need to log in first.")

        if str(caller.pk) == str(seller_id):
            return failure(ErrorCode.INVALID_OPERATION, "You cannot chat about your own product.")

        product_id = parse_id(product_id)
        if product_id is None:
            return failure(ErrorCode.NOT_FOUND, "Product not found.")

        with transaction.atomic():
            product = (
                Product.objects.select_for_update()
                .filter(pk=product_id)
                .first()
            )
            if product is None:
                return failure(ErrorCode.NOT_FOUND, "Product not found.")

            if str(product.owner_id) != str(seller_id):
                logger.warning(
                    f"[CHAT] {caller.pk} asked for room on product {product_id} "
                    f"with seller {seller_id}, owner is {product.owner_id}"
                )
                return failure(ErrorCode.INVALID_OPERATION, "That user is not selling this product.")

            room = (
                ChatRoom.objects.filter(product=product, buyer=caller, seller_id=product.owner_id)
                .order_by("created_at", "id")
                .first()
            )
            if room is not None:
                return {"success": True, "room": room, "created": False}

            room = ChatRoom.objects.create(
                product=product,
                buyer=caller,
                seller_id=product.owner_id,
            )

        logger.info(f"[CHAT] Created room {room.pk} for product {product.pk}: buyer {caller.pk}, seller {product.owner_id}")
        return {"success": True, "room": room, "created": True}

    @staticmethod
    def list_rooms_for_user(caller):
        """Rooms the caller takes part in, most recent activity first."""
        if not is_authenticated(caller):
            return []

        last_message_id = (
            Message.objects.filter(chat_room=OuterRef("pk"))
            .order_by("-created_at", "-id")
            .values("id")[:1]
        )
        rooms = list(
            ChatRoom.objects.filter(Q(buyer=caller) | Q(seller=caller))
            .select_related("product", "buyer", "seller")
            .prefetch_related("product__images")
            .annotate(
                last_message_at=Max("messages__created_at"),
                unread=Count(
                    "messages",
                    filter=Q(messages__is_read=False) & ~Q(messages__sender=caller),
                ),
                last_message_id=Subquery(last_message_id),
            )
        )

        last_messages = Message.objects.in_bulk(
            [room.last_message_id for room in rooms if room.last_message_id]
        )

        summaries = []
        for room in rooms:
            last_message = last_messages.get(room.last_message_id)
            summaries.append(
                RoomSummary(
                    room=room,
                    product=room.product,
                    product_image_url=room.product.cover_image_url,
                    other_user=room.get_other_user(caller),
                    last_message=last_message,
                    unread_count=room.unread,
                    last_activity_at=room.last_message_at or room.created_at,
                )
            )

        summaries.sort(key=lambda s: (s.last_activity_at, s.room.pk), reverse=True)
        return summaries

    @staticmethod
    def get_room_detail(room_id, caller):
        room, error = _check_room_access(room_id, caller)
        if error:
            return error

        detail = RoomDetail(
            room=room,
            product=room.product,
            product_image_url=room.product.cover_image_url,
            status_label=room.product.status_label,
            other_user=room.get_other_user(caller),
        )
        return {"success": True, "detail": detail}

    @staticmethod
    def list_messages(room_id, caller):
        """All messages of a room, oldest first, ties broken by id."""
        room, error = _check_room_access(room_id, caller)
        if error:
            return error

        messages = list(
            Message.objects.filter(chat_room=room).order_by("created_at", "id")
        )
        return {"success": True, "messages": messages}

    @staticmethod
    def send_message(room_id, caller, content):
        if not is_authenticated(caller):
            return failure(ErrorCode.UNAUTHORIZED, "You need to log in first.")

        content = (content or "").strip()
        if not content:
            return failure(ErrorCode.VALIDATION, "Please enter a message.")

        room, error = _check_room_access(room_id, caller)
        if error:
            return error

        # post_save publishes the insert to the room's live feed
        message = Message.objects.create(
            chat_room=room,
            sender=caller,
            content=content,
        )
        logger.info(f"[CHAT] {caller.pk} sent message {message.pk} in room {room.pk}")
        return {"success": True, "message": message}

    @staticmethod
    def mark_read(room_id, caller):
        """
        Flip is_read for every unread message the caller did not send.

        Quietly does nothing (returns 0) for anonymous callers and
        non-participants. Safe to call repeatedly.
        """
        room_id = parse_id(room_id)
        if not is_authenticated(caller) or room_id is None:
            return 0

        room = ChatRoom.objects.filter(pk=room_id).only("buyer", "seller").first()
        if room is None or not room.is_participant(caller.pk):
            return 0

        updated = (
            Message.objects.filter(chat_room_id=room.pk, is_read=False)
            .exclude(sender=caller)
            .update(is_read=True)
        )
        if updated:
            logger.debug(f"[CHAT] {caller.pk} read {updated} message(s) in room {room.pk}")
        return updated

    @staticmethod
    def unread_total(caller):
        """Unread messages addressed to the caller across all rooms."""
        if not is_authenticated(caller):
            return 0
        return (
            Message.objects.filter(
                Q(chat_room__buyer=caller) | Q(chat_room__seller=caller),
                is_read=False,
            )
            .exclude(sender=caller)
            .count()
        )
