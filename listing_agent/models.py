from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Attribute timestamps are rendered like "2024-03-01T12:00:00+0000"
RECORD_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

EntryIdentity = Tuple[str, str]


class EntryKind(str, Enum):
    """Type of a remote path as reported by the store."""

    FILE = "FILE"
    DIRECTORY = "DIRECTORY"


class CycleState(str, Enum):
    """
    State of a single listing cycle.

    Normal flow: Idle -> Walking -> Filtering -> Emitting -> Committing -> Idle
    Failure: Walking/Filtering/Emitting/Committing -> Failed -> Idle (cursor untouched)
    """

    IDLE = "Idle"
    WALKING = "Walking"  # Remote tree is being listed
    FILTERING = "Filtering"  # Candidates are checked against the cursor
    EMITTING = "Emitting"  # Records are handed off downstream
    COMMITTING = "Committing"  # Cursor is advanced and persisted
    FAILED = "Failed"


@dataclass(frozen=True)
class EntryDescriptor:
    """
    Metadata snapshot of one remote file.

    Equality and hashing only look at (absolute_path, name). Two descriptors
    for the same file at different revisions compare equal and are told
    apart by modification_time.
    """

    name: str
    absolute_path: str
    relative_path: str
    modification_time: int = field(compare=False)
    access_time: int = field(default=0, compare=False)
    length: int = field(default=0, compare=False)
    block_size: int = field(default=0, compare=False)
    children_num: int = field(default=0, compare=False)
    owner: str = field(default="", compare=False)
    group: str = field(default="", compare=False)
    permission: str = field(default="", compare=False)
    kind: EntryKind = field(default=EntryKind.FILE, compare=False)

    @property
    def identity(self) -> EntryIdentity:
        return (self.absolute_path, self.name)


@dataclass(frozen=True)
class ListingCursor:
    """
    Incremental listing state.

    watermark_instant is None until the first entry has been listed (minus
    infinity). emitted_at_watermark holds the identities already emitted at
    exactly the watermark instant.
    """

    watermark_instant: Optional[int] = None
    emitted_at_watermark: FrozenSet[EntryIdentity] = frozenset()
    listing_key: Optional[str] = None
    revision: int = 0

    @property
    def is_empty(self) -> bool:
        return self.watermark_instant is None and not self.emitted_at_watermark

    def same_content(self, other: "ListingCursor") -> bool:
        return (
            self.watermark_instant == other.watermark_instant
            and self.emitted_at_watermark == other.emitted_at_watermark
            and self.listing_key == other.listing_key
        )


def format_record_time(epoch_millis: int) -> str:
    return datetime.fromtimestamp(epoch_millis / 1000, tz=timezone.utc).strftime(
        RECORD_TIME_FORMAT
    )


class ListingRecord(BaseModel):
    """
    Record handed to the pipeline for every emitted entry.

    Serialized with camelCase attribute names (absolutePath, ownerId, ...).
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    name: str = Field(..., description="Base name of the file")
    absolute_path: str = Field(..., description="Remote directory holding the file")
    relative_path: str = Field(..., description="Directory relative to the scan root")
    owner_id: str = Field(default="", description="Owner as reported by the store")
    group_id: str = Field(default="", description="Group as reported by the store")
    last_modified_time: str = Field(..., description="Modification time, ISO-8601")
    last_access_time: str = Field(..., description="Access time, ISO-8601")
    block_size: int = Field(default=0, ge=0)
    length: int = Field(default=0, ge=0)

    @classmethod
    def from_entry(cls, entry: EntryDescriptor) -> "ListingRecord":
        return cls(
            name=entry.name,
            absolute_path=entry.absolute_path,
            relative_path=entry.relative_path,
            owner_id=entry.owner,
            group_id=entry.group,
            last_modified_time=format_record_time(entry.modification_time),
            last_access_time=format_record_time(entry.access_time),
            block_size=entry.block_size,
            length=entry.length,
        )

    def attributes(self) -> dict:
        """Pipeline attribute map with camelCase keys and string values."""
        return {
            key: str(value)
            for key, value in self.model_dump(by_alias=True).items()
        }


class CycleResult(BaseModel):
    """Outcome of one listing cycle."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    cycle_id: str
    emitted_count: int = Field(default=0, ge=0)
    candidate_count: int = Field(default=0, ge=0)
    watermark_instant: Optional[int] = None
    error: Optional[Exception] = Field(default=None, exclude=True)
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    def summary(self) -> dict:
        return {
            "cycle_id": self.cycle_id,
            "succeeded": self.succeeded,
            "emitted_count": self.emitted_count,
            "candidate_count": self.candidate_count,
            "watermark_instant": self.watermark_instant,
            "error_type": type(self.error).__name__ if self.error else None,
            "error_message": self.error_message,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
