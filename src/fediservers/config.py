"""Runtime configuration for the server directory fetcher."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, Field

from fediservers.datastore import (
    COMMUNITY_SOURCE_FILENAME,
    DEFAULT_DATA_ROOT,
    OFFICIAL_SOURCE_FILENAME,
    SOURCE_SUBDIR,
)

__all__ = [
    "CONCURRENCY_ENV_VAR",
    "DEFAULT_CONCURRENCY",
    "DEFAULT_JITTER",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    "FetcherConfig",
    "parse_concurrency",
]

CONCURRENCY_ENV_VAR = "CONCURRENCY"
DEFAULT_CONCURRENCY = 6
DEFAULT_TIMEOUT = 10.0
DEFAULT_JITTER = 0.25
DEFAULT_USER_AGENT = "NeoDB-Instance-Fetcher/1.0"


def parse_concurrency(raw: str | None, default: int = DEFAULT_CONCURRENCY) -> int:
    """Return a positive worker count from ``raw`` or ``default`` when unusable."""

    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


class FetcherConfig(BaseModel):
    """Settings for one batch run of the fetcher."""

    concurrency: int = Field(
        default=DEFAULT_CONCURRENCY,
        ge=1,
        description="Number of workers fetching instances in parallel",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Timeout in seconds applied to every outbound request",
    )
    jitter: float = Field(
        default=DEFAULT_JITTER,
        ge=0,
        description="Upper bound in seconds of the random pause a worker takes between domains",
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent sent to instances")
    data_root: Path = Field(
        default=DEFAULT_DATA_ROOT,
        description="Directory holding the published JSON files",
    )
    official_source: Path | None = Field(
        default=None,
        description="Text file listing official servers. Defaults to <data_root>/_source/servers-official.txt",
    )
    community_source: Path | None = Field(
        default=None,
        description="Text file listing community servers. Defaults to <data_root>/_source/servers.txt",
    )

    @property
    def official_path(self) -> Path:
        if self.official_source is not None:
            return self.official_source
        return self.data_root / SOURCE_SUBDIR / OFFICIAL_SOURCE_FILENAME

    @property
    def community_path(self) -> Path:
        if self.community_source is not None:
            return self.community_source
        return self.data_root / SOURCE_SUBDIR / COMMUNITY_SOURCE_FILENAME

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> "FetcherConfig":
        """Build a configuration from environment variables.

        Only the worker count is tunable through the environment. Keyword
        ``overrides`` whose value is not ``None`` take precedence.
        """

        env = os.environ if environ is None else environ
        values: dict[str, object] = {
            "concurrency": parse_concurrency(env.get(CONCURRENCY_ENV_VAR)),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
