"""API routes serving the published server directory files."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from fediservers.datastore import (
    COMBINED_FILENAME,
    COMMUNITY_FILENAME,
    OFFICIAL_FILENAME,
    SCHEMA_FILENAME,
    resolve_data_root,
)

logger = logging.getLogger(__name__)

router = APIRouter()

JSON_MEDIA_TYPE = "application/json; charset=utf-8"


def _data_root(request: Request) -> Path:
    return resolve_data_root(getattr(request.app.state, "data_root", None))


def load_published_file(filename: str, data_root: str | Path | None = None) -> bytes:
    """Return the raw bytes of a published file.

    Raises :class:`fastapi.HTTPException` with status 500 when the file cannot
    be read.
    """

    path = resolve_data_root(data_root) / filename
    try:
        return path.read_bytes()
    except OSError as exc:
        logger.warning("Failed to read %s: %s", path, exc)
        raise HTTPException(status_code=500, detail=f"Unable to read {filename} file") from exc


def _json_file_response(request: Request, filename: str) -> Response:
    content = load_published_file(filename, _data_root(request))
    return Response(content=content, media_type=JSON_MEDIA_TYPE)


@router.get("/servers")
async def list_servers(request: Request) -> Response:
    """Return every server, official ones first."""

    return _json_file_response(request, COMBINED_FILENAME)


@router.get("/servers/official")
async def list_official_servers(request: Request) -> Response:
    return _json_file_response(request, OFFICIAL_FILENAME)


@router.get("/servers/community")
async def list_community_servers(request: Request) -> Response:
    return _json_file_response(request, COMMUNITY_FILENAME)


@router.get("/servers/schema")
async def server_schema(request: Request) -> Response:
    """Return the JSON schema describing a server entry."""

    return _json_file_response(request, SCHEMA_FILENAME)
