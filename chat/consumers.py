# chat/consumers.py
import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from core.results import ErrorCode

from .feed import room_group_name
from .session import ChatRoomSession

logger = logging.getLogger(__name__)

CLOSE_CODES = {
    ErrorCode.UNAUTHORIZED: 4401,
    ErrorCode.FORBIDDEN: 4403,
    ErrorCode.NOT_FOUND: 4404,
}


class ChatConsumer(AsyncWebsocketConsumer):
    """
    One open room session. Subscribes to the room's live feed, seeds a
    ChatRoomSession from the snapshot and relays inserts to the browser.

    Channels runs this consumer's handlers one at a time, so the session
    only ever has a single writer.
    """

    session = None
    room_group_name = None

    async def connect(self):
        self.room_id = self.scope['url_route']['kwargs']['room_id']
        self.user = self.scope.get('user')

        if not self.user or not self.user.is_authenticated:
            logger.info(f"[CHAT] Unauthenticated websocket for room {self.room_id} rejected")
            await self.close(code=CLOSE_CODES[ErrorCode.UNAUTHORIZED])
            return

        await self.accept()

        # Subscribe before loading the snapshot; anything delivered twice is
        # dropped by the session's id check.
        self.room_group_name = room_group_name(self.room_id)
        await self.channel_layer.group_add(self.room_group_name, self.channel_name)

        self.session = ChatRoomSession(self.room_id, self.user)
        result = await database_sync_to_async(self.session.open)()

        if not result['success']:
            logger.info(f"[CHAT] {self.user.pk} refused room {self.room_id}: {result['code']}")
            await self.send_json({
                'type': 'error',
                'code': result['code'],
                'message': result['error'],
            })
            await self.close(code=CLOSE_CODES.get(result['code'], 4400))
            return

        await self.send_json({
            'type': 'snapshot',
            'messages': [m.as_payload() for m in result['messages']],
        })

    async def disconnect(self, close_code):
        try:
            if self.room_group_name:
                await self.channel_layer.group_discard(self.room_group_name, self.channel_name)
        finally:
            if self.session is not None:
                self.session.close()
            logger.debug(f"[CHAT] Session closed for room {getattr(self, 'room_id', None)} ({close_code})")

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            await self.send_error(ErrorCode.VALIDATION, 'Invalid JSON received.')
            return

        if not isinstance(data, dict):
            await self.send_error(ErrorCode.VALIDATION, 'Expected a JSON object.')
            return

        if self.session is None or not self.session.is_live:
            await self.send_error(ErrorCode.INVALID_OPERATION, 'This chat session is not open.')
            return

        message_type = data.get('type')

        if message_type == 'message':
            content = data.get('content')
            if not isinstance(content, str):
                content = ''
            result = await database_sync_to_async(self.session.send)(content)
            if not result['success']:
                await self.send_json({
                    'type': 'send_failed',
                    'code': result['code'],
                    'error': result['error'],
                    'draft': self.session.draft,
                })

        elif message_type == 'read':
            await database_sync_to_async(self.session.mark_read)()

        else:
            await self.send_error(ErrorCode.VALIDATION, f"Unknown message type: {message_type!r}")

    async def message_insert(self, event):
        """Live feed handler for the `message.insert` event"""
        if self.session is None:
            return
        try:
            message = await database_sync_to_async(self.session.receive)(event['message'])
        except ValueError as e:
            logger.warning(f"[CHAT] Dropped malformed feed event in room {self.room_id}: {e}")
            return

        if message is not None:
            await self.send_json({
                'type': 'message',
                'message': message.as_payload(),
            })

    async def send_error(self, code, message):
        await self.send_json({
            'type': 'error',
            'code': code,
            'message': message,
        })

    async def send_json(self, content):
        await self.send(text_data=json.dumps(content))
