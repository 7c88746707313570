from listing_agent.models import (
    CycleResult,
    EntryDescriptor,
    EntryKind,
    ListingCursor,
    ListingRecord,
    format_record_time,
)


def make_entry(**overrides) -> EntryDescriptor:
    values = dict(
        name="report.txt",
        absolute_path="/data/sub",
        relative_path="/sub",
        modification_time=1_700_000_000_000,
        access_time=1_700_000_100_000,
        length=6,
        block_size=4096,
        owner="alice",
        group="analysts",
        permission="640",
    )
    values.update(overrides)
    return EntryDescriptor(**values)


class TestEntryDescriptor:
    def test_identity(self):
        assert make_entry().identity == ("/data/sub", "report.txt")

    def test_equality_ignores_revision_attributes(self):
        older = make_entry(modification_time=1, length=1)
        newer = make_entry(modification_time=2, length=2)

        assert older == newer
        assert hash(older) == hash(newer)
        assert older != make_entry(absolute_path="/data")

    def test_defaults_to_file(self):
        assert make_entry().kind == EntryKind.FILE


def test_format_record_time_is_utc():
    assert format_record_time(0) == "1970-01-01T00:00:00+0000"
    assert format_record_time(1_700_000_000_999) == "2023-11-14T22:13:20+0000"


class TestListingRecord:
    def test_from_entry(self):
        record = ListingRecord.from_entry(make_entry())

        assert record.name == "report.txt"
        assert record.owner_id == "alice"
        assert record.group_id == "analysts"
        assert record.last_modified_time == "2023-11-14T22:13:20+0000"
        assert record.last_access_time == "2023-11-14T22:15:00+0000"

    def test_serializes_with_camel_case_attribute_names(self):
        data = ListingRecord.from_entry(make_entry()).model_dump(by_alias=True)

        assert set(data) == {
            "name",
            "absolutePath",
            "relativePath",
            "ownerId",
            "groupId",
            "lastModifiedTime",
            "lastAccessTime",
            "blockSize",
            "length",
        }

    def test_attributes_are_strings(self):
        attributes = ListingRecord.from_entry(make_entry()).attributes()

        assert attributes["relativePath"] == "/sub"
        assert attributes["blockSize"] == "4096"
        assert attributes["length"] == "6"


class TestListingCursor:
    def test_empty(self):
        assert ListingCursor().is_empty
        assert not ListingCursor(watermark_instant=0).is_empty

    def test_same_content_ignores_revision(self):
        assert ListingCursor(watermark_instant=1, revision=1).same_content(
            ListingCursor(watermark_instant=1, revision=2)
        )
        assert not ListingCursor(watermark_instant=1).same_content(
            ListingCursor(watermark_instant=2)
        )


def test_cycle_result_summary():
    result = CycleResult(cycle_id="abc", emitted_count=2, candidate_count=3)

    summary = result.summary()

    assert result.succeeded
    assert summary["emitted_count"] == 2
    assert summary["error_type"] is None

    failed = CycleResult(cycle_id="def", error=ValueError("boom"))
    assert not failed.succeeded
    assert failed.summary()["error_type"] == "ValueError"
    assert failed.error_message == "boom"
