# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
import logging
from typing import Any, Protocol

import websockets

__all__ = 'SUBSCRIBE_COMMAND', 'MessageProcessor', 'ValidationStream'


log = logging.getLogger(__name__)


SUBSCRIBE_COMMAND = {'command': 'subscribe', 'streams': ['validations']}


class MessageProcessor(Protocol):
    def process(self, raw: str | bytes, /) -> Any: ...


class ValidationStream:
    """
    Subscribe to the validations stream of a server and feed the messages to a processor.

    Messages are processed synchronously in arrival order. The stream runs
    until the connection is closed; reconnecting is left to the caller.
    """

    max_message_size: int = 2**20

    def __init__(self, url: str, processor: MessageProcessor) -> None:
        self.url = url
        self.processor = processor

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}(url={self.url!r}, processor={self.processor!r})'

    async def run(self) -> None:
        async with websockets.connect(self.url, max_size=self.max_message_size) as connection:
            log.info('Connected to %s', self.url)
            await connection.send(json.dumps(SUBSCRIBE_COMMAND))
            async for message in connection:
                self.processor.process(message)
        log.info('Connection to %s closed', self.url)
