"""
Persistence of the listing cursor.

Every backend stores one CursorRecord and implements the same
load/save/reset contract. save() is a compare-and-swap on the record
revision, so two nodes that both believe they hold the listing role cannot
silently overwrite each other. Re-saving a cursor that was already committed
is accepted, which makes a retried save harmless.
"""
import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from listing_agent.core.exceptions import CursorConflictError, CursorPersistenceError
from listing_agent.models import EntryIdentity, ListingCursor

CURSOR_FORMAT_VERSION = 1
IDENTITY_SEPARATOR = "\u0000"


def encode_identity(identity: EntryIdentity) -> str:
    absolute_path, name = identity
    return f"{absolute_path}{IDENTITY_SEPARATOR}{name}"


def decode_identity(value: str) -> EntryIdentity:
    absolute_path, separator, name = value.partition(IDENTITY_SEPARATOR)
    if not separator:
        raise CursorPersistenceError(f"Malformed cursor identity: {value!r}")
    return (absolute_path, name)


class CursorRecord(BaseModel):
    """Persisted layout of the cursor (camelCase keys)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    version: int = CURSOR_FORMAT_VERSION
    listing_key: Optional[str] = None
    revision: int = 0
    watermark_instant: Optional[int] = None
    emitted_at_watermark: List[str] = []

    @classmethod
    def from_cursor(cls, cursor: ListingCursor) -> "CursorRecord":
        return cls(
            listing_key=cursor.listing_key,
            revision=cursor.revision,
            watermark_instant=cursor.watermark_instant,
            emitted_at_watermark=sorted(
                encode_identity(identity) for identity in cursor.emitted_at_watermark
            ),
        )

    def to_cursor(self) -> ListingCursor:
        return ListingCursor(
            watermark_instant=self.watermark_instant,
            emitted_at_watermark=frozenset(
                decode_identity(value) for value in self.emitted_at_watermark
            ),
            listing_key=self.listing_key,
            revision=self.revision,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def decode_record(raw: Union[str, bytes]) -> ListingCursor:
    """Parse a persisted record. Newer, unknown format versions are refused."""
    try:
        data = json.loads(raw)
        record = CursorRecord.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise CursorPersistenceError(f"Persisted cursor is unreadable: {e}") from e

    if record.version > CURSOR_FORMAT_VERSION:
        raise CursorPersistenceError(
            f"Persisted cursor has format version {record.version}, "
            f"this agent understands up to {CURSOR_FORMAT_VERSION}"
        )
    return record.to_cursor()


def next_committed(stored: Optional[ListingCursor], cursor: ListingCursor) -> Optional[ListingCursor]:
    """
    Compare-and-swap decision shared by the backends.

    Returns the cursor to write (revision bumped), or None when stored already
    holds exactly this commit. Raises CursorConflictError otherwise.
    """
    stored_revision = stored.revision if stored is not None else 0

    if stored_revision == cursor.revision:
        return ListingCursor(
            watermark_instant=cursor.watermark_instant,
            emitted_at_watermark=cursor.emitted_at_watermark,
            listing_key=cursor.listing_key,
            revision=cursor.revision + 1,
        )

    if (
        stored is not None
        and stored_revision == cursor.revision + 1
        and stored.same_content(cursor)
    ):
        return None

    raise CursorConflictError(cursor.revision, stored_revision)


class CursorStore(ABC):
    """Interface of every cursor backend."""

    @abstractmethod
    async def load(self) -> ListingCursor:
        """Persisted cursor, or the empty cursor when nothing was saved yet."""

    @abstractmethod
    async def save(self, cursor: ListingCursor) -> ListingCursor:
        """Persist cursor and return it stamped with its new revision."""

    @abstractmethod
    async def reset(self) -> ListingCursor:
        """Drop the persisted cursor and return the empty cursor."""

    @abstractmethod
    def scoped(self, scope: str) -> "CursorStore":
        """Sibling store for another listing, kept apart from this one."""

    async def close(self) -> None:
        return None


class InMemoryCursorStore(CursorStore):
    """Process-local store for tests and throwaway runs."""

    def __init__(self, initial: Optional[ListingCursor] = None):
        self._stored: Optional[ListingCursor] = initial
        self._lock = asyncio.Lock()
        self.save_count = 0

    async def load(self) -> ListingCursor:
        async with self._lock:
            return self._stored if self._stored is not None else ListingCursor()

    async def save(self, cursor: ListingCursor) -> ListingCursor:
        async with self._lock:
            committed = next_committed(self._stored, cursor)
            if committed is None:
                logging.debug("Cursor already committed, save skipped")
                return self._stored
            self._stored = committed
            self.save_count += 1
            return committed

    async def reset(self) -> ListingCursor:
        async with self._lock:
            self._stored = None
            return ListingCursor()

    def scoped(self, scope: str) -> "CursorStore":
        return InMemoryCursorStore()
