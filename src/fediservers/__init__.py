"""Fediverse server directory builder: fetch, enrich and publish instance metadata."""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

#: ``.env`` file at the project root, next to ``data/servers``.
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


def load_local_env(env_file: str | Path | None = None) -> bool:
    """Load settings such as ``CONCURRENCY`` from a ``.env`` file.

    Variables already present in the process environment keep their value.
    Returns ``True`` when the file existed and was read.
    """

    path = Path(env_file) if env_file is not None else ENV_FILE
    if not path.is_file():
        return False
    load_dotenv(path, override=False)
    return True


load_local_env()

from .config import FetcherConfig  # noqa: E402,F401
from .models import InstanceMetadata, ServerRecord  # noqa: E402,F401

__all__ = ["ENV_FILE", "FetcherConfig", "InstanceMetadata", "ServerRecord", "load_local_env"]
