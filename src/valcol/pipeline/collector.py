# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Self

from valcol.messages import DecodeError, ValidationMessage
from valcol.storage import InsertResult, StoreError, ValidationRecord, ValidationStore
from valcol.trust import decode_node_public_key, verify_validation

__all__ = 'PersistDecision', 'ValidationCollector'


log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PersistDecision:
    record: ValidationRecord | None = None
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.record is not None

    @classmethod
    def persist(cls, record: ValidationRecord) -> Self:
        return cls(record=record)

    @classmethod
    def drop(cls, reason: str) -> Self:
        return cls(reason=reason)


class ValidationCollector:
    """
    Decode and verify validation messages and hand the verified ones to the store.

    Every message is processed on its own. A message that fails at any stage
    is logged and dropped without affecting the ones that follow it. Inserts
    are started as background tasks and are not waited for.
    """

    def __init__(self, store: ValidationStore, *, key_decoder: Callable[[str], bytes] = decode_node_public_key) -> None:
        self.store = store
        self.key_decoder = key_decoder
        self._tasks: set[asyncio.Task[None]] = set()

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}(store={self.store!r})'

    @property
    def pending(self) -> int:
        """The number of inserts that are still in progress"""
        return len(self._tasks)

    def handle(self, public_key: str, data: str) -> PersistDecision:
        """Decide if the validation data signed by public_key (a network formatted node public key) should be stored"""
        try:
            key = self.key_decoder(public_key).hex().upper()
        except ValueError as exc:
            log.warning('Dropping validation with undecodable public key: %s', exc)
            return PersistDecision.drop(str(exc))

        try:
            payload = bytes.fromhex(data.upper())
        except ValueError as exc:
            log.warning('Dropping validation from %s with invalid hex data: %s', public_key, exc)
            return PersistDecision.drop(f'Invalid hex data: {exc}')

        try:
            message = ValidationMessage.from_wire(payload)
        except DecodeError as exc:
            log.warning('Validation parse error for message from %s: %s', public_key, exc)
            return PersistDecision.drop(str(exc))

        outcome = verify_validation(key, payload, message)
        if not outcome.verified:
            log.info('Dropping unverified validation for ledger %d from %s: %s', message.ledger_sequence, public_key, outcome.error)
            return PersistDecision.drop(outcome.error or 'Verification failed')

        if log.isEnabledFor(logging.DEBUG):
            log.debug('Verified validation from %s: %r', public_key, message.as_dict())

        return PersistDecision.persist(ValidationRecord(ledger_sequence=message.ledger_sequence, public_key=public_key, data=payload))

    def process(self, raw: str | bytes) -> PersistDecision:
        """Process one message from the validations stream, scheduling the insert if it is to be stored"""
        try:
            document = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            log.warning('Invalid validation message received (not JSON): %s', exc)
            return PersistDecision.drop(f'Invalid JSON: {exc}')

        if not isinstance(document, dict):
            log.warning('Invalid validation message received (not a JSON object)')
            return PersistDecision.drop('Not a JSON object')

        if document.get('type') == 'response':
            log.debug('Received subscription response with status %r', document.get('status'))
            return PersistDecision.drop('Subscription response')

        public_key = document.get('validation_public_key')
        data = document.get('data')
        if not isinstance(public_key, str) or not isinstance(data, str):
            log.warning('Invalid validation message received (missing validation_public_key or data)')
            return PersistDecision.drop('Missing validation_public_key or data')

        decision = self.handle(public_key, data)
        if decision.record is not None:
            self.schedule(decision.record)
        return decision

    def schedule(self, record: ValidationRecord) -> asyncio.Task[None]:
        task = asyncio.create_task(self._persist(record))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for all the inserts in progress to finish"""
        while self._tasks:
            await asyncio.gather(*self._tasks)

    async def _persist(self, record: ValidationRecord) -> None:
        try:
            result = await self.store.insert(record)
        except StoreError as exc:
            log.error('%s', exc)
            return
        except Exception:  # noqa: BLE001
            log.exception('Unexpected error while storing validation for ledger %d from %s', record.ledger_sequence, record.public_key)
            return
        match result:
            case InsertResult.Inserted:
                log.debug('Stored validation for ledger %d from %s', record.ledger_sequence, record.public_key)
            case InsertResult.Duplicate:
                log.debug('Validation for ledger %d from %s is already stored', record.ledger_sequence, record.public_key)
