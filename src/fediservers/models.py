"""Domain models used across the application."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "Unknown"
DEFAULT_CATEGORY = "general"
PLACEHOLDER_THUMBNAIL = "https://neodb.internal/placeholder"


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Users(_Lenient):
    active_month: Optional[int] = None


class Usage(_Lenient):
    users: Optional[Users] = None


class Thumbnail(_Lenient):
    url: Optional[str] = None
    blurhash: Optional[str] = None


class Registrations(_Lenient):
    enabled: Optional[bool] = None
    approval_required: Optional[bool] = None


class InstanceMetadata(_Lenient):
    """Subset of the ``/api/v2/instance`` response that the directory uses."""

    domain: Optional[str] = None
    title: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    usage: Optional[Usage] = None
    thumbnail: Optional[Thumbnail] = None
    registrations: Optional[Registrations] = None
    languages: Optional[List[str]] = None

    @property
    def active_month_users(self) -> int:
        if self.usage and self.usage.users and self.usage.users.active_month:
            return self.usage.users.active_month
        return 0

    @property
    def thumbnail_url(self) -> str:
        return (self.thumbnail.url or "") if self.thumbnail else ""

    @property
    def blurhash(self) -> str:
        return (self.thumbnail.blurhash or "") if self.thumbnail else ""

    @property
    def approval_required(self) -> bool:
        return bool(self.registrations and self.registrations.approval_required)


class ServerRecord(BaseModel):
    """Normalized entry published in the server directory.

    Every field carries a default so that the serialized JSON has the same
    keys no matter how much of the remote data could be fetched.
    """

    domain: str
    version: str = UNKNOWN
    title: str = ""
    description: str = ""
    languages: List[str] = Field(default_factory=list)
    display_languages: List[str] = Field(default_factory=list)
    region: str = ""
    display_region: str = ""
    categories: List[str] = Field(default_factory=lambda: [DEFAULT_CATEGORY])
    proxied_thumbnail: str = ""
    blurhash: str = ""
    icon: str = ""
    total_users: int = 0
    last_week_users: int = 0
    approval_required: bool = False
    language: str = ""
    display_language: str = ""
    category: str = DEFAULT_CATEGORY

    @classmethod
    def placeholder(cls, domain: str, *, title: str = "", description: str = "", icon: str = "") -> "ServerRecord":
        """Return the record published for a server whose API could not be read."""

        return cls(
            domain=domain,
            version=UNKNOWN,
            title=title or domain,
            description=description,
            languages=[UNKNOWN],
            display_languages=[],
            region=UNKNOWN,
            display_region="",
            categories=[UNKNOWN],
            proxied_thumbnail=PLACEHOLDER_THUMBNAIL,
            blurhash="",
            icon=icon,
            total_users=0,
            last_week_users=0,
            approval_required=False,
            language=UNKNOWN,
            display_language="",
            category=UNKNOWN,
        )


__all__ = [
    "DEFAULT_CATEGORY",
    "InstanceMetadata",
    "PLACEHOLDER_THUMBNAIL",
    "Registrations",
    "ServerRecord",
    "Thumbnail",
    "UNKNOWN",
    "Usage",
    "Users",
]
