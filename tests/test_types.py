"""Tests for file and record types."""

import pytest
from pydantic import ValidationError

from vfiles.types import (
    ExportPayload,
    FileNode,
    FileType,
    OpenFileRecord,
    PersistenceFailure,
    StoreSnapshot,
)


class TestFileNode:
    """Tests for FileNode type."""

    def test_defaults(self):
        """FileNode has sensible defaults."""
        node = FileNode(name="notes.txt")
        assert node.id
        assert node.type == FileType.FILE
        assert node.type == "file"
        assert node.parent is None
        assert node.contents == ""
        assert node.editable is False

    def test_ids_are_unique(self):
        """Every node gets its own generated id."""
        ids = {FileNode().id for _ in range(50)}
        assert len(ids) == 50

    def test_enum_stored_as_value(self):
        """type is stored as its string value for persistence."""
        node = FileNode(name="src", type=FileType.DIRECTORY)
        assert node.type == "directory"
        assert node.model_dump()["type"] == "directory"
        assert node.is_directory is True

    def test_accepts_string_type(self):
        """Raw payloads use plain strings for type."""
        node = FileNode.model_validate({"id": "d1", "name": "src", "type": "directory"})
        assert node.is_directory

    def test_rejects_unknown_type(self):
        """Unknown node types are rejected."""
        with pytest.raises(ValidationError):
            FileNode(name="x", type="symlink")

    def test_is_frozen(self):
        """Nodes can only change through model_copy."""
        node = FileNode(name="a")
        with pytest.raises(ValidationError):
            node.name = "b"

        renamed = node.model_copy(update={"name": "b"})
        assert renamed.name == "b"
        assert renamed.id == node.id
        assert node.name == "a"


class TestExportPayload:
    """Tests for ExportPayload type."""

    def test_payload_shape(self):
        """Payload dumps as {"files": {id: node}}."""
        node = FileNode(id="f1", name="a.txt")
        payload = ExportPayload(files={"f1": node})

        dumped = payload.model_dump()
        assert list(dumped) == ["files"]
        assert dumped["files"]["f1"]["name"] == "a.txt"

    def test_payload_parses_json(self):
        """Backups parse back into nodes."""
        payload = ExportPayload.model_validate_json(
            '{"files": {"d1": {"id": "d1", "name": "src", "type": "directory"}}}'
        )
        assert payload.files["d1"].is_directory


class TestRecords:
    """Tests for store and reporting records."""

    def test_open_file_record_defaults(self):
        record = OpenFileRecord(file_id="f1")
        assert record.editor == "main"
        assert record.position == 0

    def test_snapshot_defaults_empty(self):
        snapshot = StoreSnapshot()
        assert snapshot.files == []
        assert snapshot.open_files == []
        assert snapshot.active_files == []

    def test_failure_has_timestamp(self):
        failure = PersistenceFailure(operation="move", error="boom")
        assert failure.occurred_at
        assert failure.failed_count == 0
