# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol, Self

from sqlalchemy import Column, Index, Integer, LargeBinary, MetaData, String, Table, URL, insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.sql.dml import Insert

__all__ = 'InsertResult', 'StoreError', 'ValidationRecord', 'ValidationStore', 'DatabaseStore', 'metadata', 'validations'  # noqa: RUF022


metadata = MetaData()

validations = Table(
    'validations',
    metadata,
    Column('ledger', Integer, primary_key=True, autoincrement=False),
    Column('pubkey', String(100), primary_key=True),
    Column('data', LargeBinary),
    Index('validx', 'ledger'),
)


class StoreError(Exception):
    """Raised when a record cannot be written for a reason other than it being already stored."""


class InsertResult(Enum):
    Inserted = auto()
    Duplicate = auto()

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}.{self.name}'


@dataclass(frozen=True, slots=True)
class ValidationRecord:
    ledger_sequence: int
    public_key: str  # the network formatted node public key, as received
    data: bytes


class ValidationStore(Protocol):
    async def insert(self, record: ValidationRecord, /) -> InsertResult: ...


class DatabaseStore:
    """
    Store validation records in a SQL database through an asyncio SQLAlchemy engine.

    Inserting a record that is already stored is not an error and returns
    InsertResult.Duplicate. Every other database failure raises StoreError.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}({self.engine!r})'

    @classmethod
    def from_url(cls, url: str | URL, **kw: object) -> Self:
        return cls(create_async_engine(url, **kw))

    async def create_schema(self) -> None:
        try:
            async with self.engine.begin() as connection:
                await connection.run_sync(metadata.create_all)
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError(f'Failed to create the database schema: {exc}') from exc

    async def insert(self, record: ValidationRecord, /) -> InsertResult:
        statement = self._insert_statement().values(ledger=record.ledger_sequence, pubkey=record.public_key, data=record.data)
        try:
            async with self.engine.begin() as connection:
                result = await connection.execute(statement)
        except IntegrityError:
            return InsertResult.Duplicate
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError(f'Failed to store validation for ledger {record.ledger_sequence} from {record.public_key}: {exc}') from exc
        return InsertResult.Inserted if result.rowcount else InsertResult.Duplicate

    async def close(self) -> None:
        await self.engine.dispose()

    def _insert_statement(self) -> Insert:
        # Dialects without ON CONFLICT report duplicates through IntegrityError
        match self.engine.dialect.name:
            case 'postgresql':
                return postgresql.insert(validations).on_conflict_do_nothing(index_elements=['ledger', 'pubkey'])
            case 'sqlite':
                return sqlite.insert(validations).on_conflict_do_nothing(index_elements=['ledger', 'pubkey'])
            case _:
                return insert(validations)
