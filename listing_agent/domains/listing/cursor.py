"""
Watermark rules of the incremental listing.

The cursor remembers the newest modification instant that has been fully
listed (the watermark) and which files were already emitted at exactly that
instant (the tie set). A file is new when it is newer than the watermark, or
when it sits on the watermark but is not in the tie set. Without the tie set
a file written later with the same instant as the watermark would never be
listed.
"""
from typing import Iterable, List, Optional

from listing_agent.models import EntryDescriptor, ListingCursor

EMPTY_CURSOR = ListingCursor()


def is_new(entry: EntryDescriptor, cursor: ListingCursor) -> bool:
    watermark = cursor.watermark_instant
    if watermark is None:
        return True
    if entry.modification_time > watermark:
        return True
    return (
        entry.modification_time == watermark
        and entry.identity not in cursor.emitted_at_watermark
    )


def select_new_entries(entries: Iterable[EntryDescriptor], cursor: ListingCursor) -> List[EntryDescriptor]:
    """Entries that pass is_new, in their original order."""
    return [entry for entry in entries if is_new(entry, cursor)]


def advance(new_entries: Iterable[EntryDescriptor], previous: ListingCursor) -> ListingCursor:
    """
    Cursor after new_entries have been handed off.

    The watermark never moves backwards. When it moves forward, the tie set
    is rebuilt from the entries on the new watermark; entries older than the
    watermark are covered by the watermark alone. When it stays where it was,
    the entries on it are added to the existing tie set.
    """
    entries = list(new_entries)
    newest: Optional[int] = max((e.modification_time for e in entries), default=None)

    watermark = previous.watermark_instant
    if newest is not None and (watermark is None or newest > watermark):
        watermark = newest

    on_watermark = frozenset(
        entry.identity for entry in entries if entry.modification_time == watermark
    )
    if watermark == previous.watermark_instant:
        tie_set = previous.emitted_at_watermark | on_watermark
    else:
        tie_set = on_watermark

    return ListingCursor(
        watermark_instant=watermark,
        emitted_at_watermark=tie_set,
        listing_key=previous.listing_key,
        revision=previous.revision,
    )
