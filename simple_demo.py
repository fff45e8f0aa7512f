#!/usr/bin/env python3
"""
Super simple relayable demo: chat with your assistant from the terminal.

Needs OPENAI_API_KEY and OPENAI_ASSISTANT_ID in the environment (or .env).
"""

import logging
from relayable.relay.config import Config
from relayable.relay.middleware import IncomingMessage, MESSAGE_RESPONSES_KEY, RUN_STATUS_KEY
from relayable.relay.responses import TextResponse, ImageResponse
from relayable.relay.users import UserStorage
from relayable.relay.errors import RelayError


class TerminalBot:

    def __init__(self, user_id: str):
        self.storage = UserStorage(user_id)

    def user_storage(self) -> UserStorage:
        return self.storage


def render(message: IncomingMessage) -> None:
    for response in message.get_extras(MESSAGE_RESPONSES_KEY, []):
        if isinstance(response, TextResponse):
            print(f"   🤖 Assistant: {response.text}")
        elif isinstance(response, ImageResponse):
            url = response.url()
            print(f"   🖼️  Image {response.file_id}: {url[:60] + '...' if len(url) > 60 else url or '(no url)'}")
    status = message.get_extras(RUN_STATUS_KEY)
    if status != "completed":
        print(f"   ⚠️  Run ended with status: {status}")


def main():
    logging.basicConfig(level=logging.WARNING)
    print("🤖 Simple relayable Demo")
    print("=" * 30)

    try:
        middleware = Config.config().get_provider().middleware()
    except RelayError as e:
        print(f"❌ Error: {e}")
        return

    bot = TerminalBot(user_id="demo@example.com")
    while True:
        prompt = input("\n   👤 User: ").strip()
        if not prompt or prompt.lower() == "exit":
            break
        try:
            middleware.received(IncomingMessage(prompt, sender="demo@example.com"), render, bot)
        except RelayError as e:
            print(f"❌ Error: {e}")

    print("\n🎉 Demo complete!")


if __name__ == "__main__":
    main()
