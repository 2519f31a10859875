# chat/session.py
"""
Client-side view of one open chat room.

A ChatRoomSession is seeded from the message snapshot and then fed insert
events from the live feed. It keeps a deduplicated sequence ordered by
(created_at, id), triggers read receipts when the counterpart writes, and
never appends optimistically: a sent message shows up once it comes back
through the feed or the next snapshot.

The session is not thread-safe; exactly one owner (the websocket consumer)
calls into it.
"""
import bisect
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from core.results import ErrorCode, failure

from .services import ChatService

logger = logging.getLogger(__name__)


class SessionState:
    LOADING = "loading"
    LIVE = "live"
    CLOSED = "closed"


@dataclass(frozen=True)
class ChatMessage:
    id: int
    chat_id: int
    sender_id: str
    content: str
    is_read: bool
    created_at: datetime

    @classmethod
    def from_model(cls, message):
        return cls(
            id=message.pk,
            chat_id=message.chat_room_id,
            sender_id=str(message.sender_id),
            content=message.content,
            is_read=message.is_read,
            created_at=message.created_at,
        )

    @classmethod
    def from_payload(cls, payload):
        """Build from a live-feed row image; raises ValueError on a malformed one."""
        try:
            created_at = payload["created_at"]
            if isinstance(created_at, str):
                created_at = parse_datetime(created_at)
            if not isinstance(created_at, datetime):
                raise ValueError("created_at is not a datetime")
            # must compare with the snapshot's aware timestamps
            if timezone.is_naive(created_at):
                raise ValueError("created_at has no UTC offset")
            content = payload["content"]
            if not isinstance(content, str):
                raise ValueError("content is not text")
            return cls(
                id=int(payload["id"]),
                chat_id=int(payload["chat_id"]),
                sender_id=str(payload["sender_id"]),
                content=content,
                is_read=bool(payload.get("is_read", False)),
                created_at=created_at,
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed message payload: {e}") from e

    def sort_key(self):
        return (self.created_at, self.id)

    def as_payload(self):
        return {
            "id": self.id,
            "chat_id": self.chat_id,
            "sender_id": self.sender_id,
            "content": self.content,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class DateGroup:
    date: date
    messages: list = field(default_factory=list)


def group_messages_by_date(messages):
    """
    Split an ordered message sequence into contiguous runs sharing a
    calendar day (in the active time zone). Appending to the sequence only
    ever extends the last group or opens a new one.
    """
    groups = []
    for message in messages:
        day = timezone.localtime(message.created_at).date()
        if not groups or groups[-1].date != day:
            groups.append(DateGroup(date=day))
        groups[-1].messages.append(message)
    return groups


class ChatRoomSession:
    def __init__(self, room_id, user, repository=ChatService):
        self.room_id = int(room_id)
        self.user = user
        self.repository = repository
        self.state = SessionState.LOADING
        self.draft = ""
        self._messages = []
        self._ids = set()

    @property
    def user_id(self):
        return str(self.user.pk)

    @property
    def messages(self):
        return tuple(self._messages)

    @property
    def message_ids(self):
        return frozenset(self._ids)

    @property
    def is_live(self):
        return self.state == SessionState.LIVE

    def open(self):
        """
        Load the snapshot and go live. On failure the session closes and the
        failure result is returned unchanged.
        """
        if self.state != SessionState.LOADING:
            return failure(ErrorCode.INVALID_OPERATION, "Session already opened.")

        result = self.repository.list_messages(self.room_id, self.user)
        if not result["success"]:
            self.state = SessionState.CLOSED
            return result

        for message in result["messages"]:
            self._insert(ChatMessage.from_model(message))

        self.state = SessionState.LIVE
        self.mark_read()
        logger.debug(f"[CHAT] Session for {self.user_id} live in room {self.room_id} with {len(self._messages)} message(s)")
        return {"success": True, "messages": self.messages}

    def receive(self, payload):
        """
        Apply one insert event from the live feed.

        Returns the ChatMessage when it was added, None when the event was
        ignored (session not live, other room, or already seen).
        """
        if not self.is_live:
            return None

        message = payload if isinstance(payload, ChatMessage) else ChatMessage.from_payload(payload)
        if message.chat_id != self.room_id:
            return None
        if message.id in self._ids:
            return None

        self._insert(message)
        if message.sender_id != self.user_id:
            self.mark_read()
            message = next(m for m in self._messages if m.id == message.id)
        return message

    def send(self, content):
        """
        Send through the repository. The draft is cleared while sending and
        restored when the send fails so the user can retry.
        """
        if self.state == SessionState.CLOSED:
            self.draft = content
            return failure(ErrorCode.INVALID_OPERATION, "This chat session is closed.")

        self.draft = ""
        result = self.repository.send_message(self.room_id, self.user, content)
        if not result["success"]:
            self.draft = content
        return result

    def mark_read(self):
        """Read receipt for everything the counterpart has sent so far."""
        updated = self.repository.mark_read(self.room_id, self.user)
        self._messages = [
            m if m.is_read or m.sender_id == self.user_id else replace(m, is_read=True)
            for m in self._messages
        ]
        return updated

    def group_by_date(self):
        return group_messages_by_date(self._messages)

    def close(self):
        self.state = SessionState.CLOSED

    def _insert(self, message):
        if message.id in self._ids:
            return
        bisect.insort(self._messages, message, key=ChatMessage.sort_key)
        self._ids.add(message.id)
