"""Utilities for reading and writing the published server directory files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

# The published files live in ``data/servers`` at the project root so the
# read-only API and the batch fetcher share one location.
_PROJECT_DIR = Path(__file__).resolve().parents[3]

#: Default location of the published directory files.
DEFAULT_DATA_ROOT = _PROJECT_DIR / "data" / "servers"

#: Name of the directory under the data root that holds the source lists.
SOURCE_SUBDIR = "_source"
OFFICIAL_SOURCE_FILENAME = "servers-official.txt"
COMMUNITY_SOURCE_FILENAME = "servers.txt"

COMBINED_FILENAME = "servers.json"
OFFICIAL_FILENAME = "servers-official.json"
COMMUNITY_FILENAME = "servers-community.json"
SCHEMA_FILENAME = "schema.json"


_Pathish = Union[str, Path]


def resolve_data_root(data_root: _Pathish | None = None) -> Path:
    """Return the directory holding the published ``servers*.json`` views.

    The batch fetcher writes the views there and the API serves them from
    there. ``None`` selects :data:`DEFAULT_DATA_ROOT`.
    Nothing is created on disk.
    """

    return DEFAULT_DATA_ROOT if data_root is None else Path(data_root)


def ensure_data_root(data_root: _Pathish | None = None) -> Path:
    """Create the publish directory if needed before the views are written."""

    root = resolve_data_root(data_root)
    root.mkdir(parents=True, exist_ok=True)
    return root


def write_json(path: _Pathish, payload: Any) -> None:
    """Persist *payload* to *path* as pretty-printed UTF-8 JSON."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fp:
        json.dump(payload, fp, ensure_ascii=False, indent=2)
        fp.write("\n")


def publish(result, data_root: _Pathish | None = None) -> Dict[str, Path]:
    """Write the combined, official and community views of ``result``.

    ``result`` is an :class:`~fediservers.services.aggregate.AggregateResult`.
    The same three files are overwritten on every run; any ``OSError`` is left
    to the caller.
    """

    root = ensure_data_root(data_root)
    views = {
        "combined": (COMBINED_FILENAME, result.combined),
        "official": (OFFICIAL_FILENAME, result.official),
        "community": (COMMUNITY_FILENAME, result.community),
    }

    written: Dict[str, Path] = {}
    for name, (filename, records) in views.items():
        path = root / filename
        write_json(path, [record.model_dump() for record in records])
        written[name] = path
    return written


__all__ = [
    "COMBINED_FILENAME",
    "COMMUNITY_FILENAME",
    "COMMUNITY_SOURCE_FILENAME",
    "DEFAULT_DATA_ROOT",
    "OFFICIAL_FILENAME",
    "OFFICIAL_SOURCE_FILENAME",
    "SCHEMA_FILENAME",
    "SOURCE_SUBDIR",
    "ensure_data_root",
    "publish",
    "resolve_data_root",
    "write_json",
]
