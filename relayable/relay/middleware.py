import logging
LOGGER = logging.getLogger(__name__)

import threading
from typing import Any, Callable, Dict, Optional

from relayable.relay.providers.backend import Backend
from relayable.relay.runs import RunController

STORAGE_NAMESPACE = 'openai'
THREAD_ID_KEY = 'thread-id'
MESSAGE_RESPONSES_KEY = 'message_responses'
RUN_STATUS_KEY = 'run_status'


class IncomingMessage:

    def __init__(self, text: str, sender: Optional[str] = None, extras: Optional[Dict[str, Any]] = None):
        self.text = text
        self.sender = sender
        self.extras = dict(extras) if extras else {}

    def get_text(self) -> str:
        return self.text

    def add_extras(self, key: str, value: Any) -> None:
        self.extras[key] = value

    def get_extras(self, key: Optional[str] = None, default=None):
        if key is None:
            return self.extras
        return self.extras.get(key, default)


class OpenAIMiddleware:
    """
    Pipeline middleware that answers every received message through the
    assistant. The user's thread id lives in the bot's user storage; the
    normalized responses are attached to the message extras under
    MESSAGE_RESPONSES_KEY.
    """

    def __init__(self, backend: Backend, controller: RunController):
        self.backend = backend
        self.controller = controller

    def thread_id_for(self, bot) -> str:
        return bot.user_storage().find(STORAGE_NAMESPACE).get_or_put(
            THREAD_ID_KEY,
            self.backend.create_thread,
        )

    def received(self, message: IncomingMessage, next: Callable, bot, cancel_event: Optional[threading.Event] = None):
        # Check whether we already had a thread for this user
        thread_id = self.thread_id_for(bot)

        result = self.controller.execute(thread_id=thread_id, text=message.get_text(), cancel_event=cancel_event)
        LOGGER.info(f"Run {result.run_id} on thread {thread_id} finished with status {result.status} and {len(result.responses)} response(s)")

        message.add_extras(MESSAGE_RESPONSES_KEY, result.responses)
        message.add_extras(RUN_STATUS_KEY, result.status)
        return next(message)

    def captured(self, message: IncomingMessage, next: Callable, bot):
        return next(message)

    def matching(self, message: IncomingMessage, pattern, regex_matched) -> bool:
        return True

    def heard(self, message: IncomingMessage, next: Callable, bot):
        return next(message)

    def sending(self, payload, next: Callable, bot):
        return next(payload)
