from __future__ import annotations

import json
from pathlib import Path

import pytest

from fediservers.datastore import (
    DEFAULT_DATA_ROOT,
    ensure_data_root,
    publish,
    resolve_data_root,
    write_json,
)
from fediservers.models import ServerRecord
from fediservers.services.aggregate import AggregateResult


def test_resolve_data_root() -> None:
    assert resolve_data_root() == DEFAULT_DATA_ROOT
    assert resolve_data_root("some/dir") == Path("some/dir")
    assert DEFAULT_DATA_ROOT.parts[-2:] == ("data", "servers")


def test_ensure_data_root_creates_directory(tmp_path: Path) -> None:
    root = ensure_data_root(tmp_path / "nested" / "servers")
    assert root.is_dir()


def test_write_json_is_pretty_and_keeps_unicode(tmp_path: Path) -> None:
    path = tmp_path / "out.json"
    write_json(path, [{"title": "Bokmål"}])

    text = path.read_text(encoding="utf-8")
    assert "Bokmål" in text
    assert '\n  {\n    "title"' in text


def test_publish_writes_three_views(tmp_path: Path) -> None:
    official = ServerRecord(domain="a.org", total_users=2)
    community = ServerRecord.placeholder("b.org", title="B")
    result = AggregateResult(combined=[official, community], official=[official], community=[community])

    written = publish(result, tmp_path)

    assert set(written) == {"combined", "official", "community"}
    combined = json.loads((tmp_path / "servers.json").read_text(encoding="utf-8"))
    assert [entry["domain"] for entry in combined] == ["a.org", "b.org"]
    assert json.loads((tmp_path / "servers-official.json").read_text(encoding="utf-8"))[0]["total_users"] == 2
    assert json.loads((tmp_path / "servers-community.json").read_text(encoding="utf-8"))[0]["version"] == "Unknown"


def test_publish_overwrites_previous_output(tmp_path: Path) -> None:
    (tmp_path / "servers.json").write_text('["stale"]', encoding="utf-8")

    publish(AggregateResult(), tmp_path)

    assert json.loads((tmp_path / "servers.json").read_text(encoding="utf-8")) == []


def test_publish_unwritable_root_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(OSError):
        publish(AggregateResult(), blocker / "servers")
