"""Normalization of instance data into :class:`~fediservers.models.ServerRecord`."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional
from urllib.parse import urljoin, urlparse, urlunparse

from fediservers.models import DEFAULT_CATEGORY, InstanceMetadata, ServerRecord, UNKNOWN

logger = logging.getLogger(__name__)

__all__ = [
    "REGION_BY_TLD",
    "build_server_record",
    "capitalize_part",
    "determine_region",
    "display_language",
    "display_languages",
    "display_region",
    "generate_title_from_domain",
    "make_absolute_url",
    "placeholder_record",
]

DEFAULT_LANGUAGE = "en"

# Coarse ccTLD heuristic, not geolocation.
REGION_BY_TLD: Dict[str, str] = {
    **dict.fromkeys(
        (
            "dk", "de", "fr", "uk", "gb", "ru", "it", "es", "nl", "se",
            "no", "fi", "pl", "cz", "be", "pt", "gr", "ie", "hr", "hu",
            "sk", "si", "ro", "bg", "at", "ch", "ee", "lv", "lt",
        ),
        "europe",
    ),
    **dict.fromkeys(("jp", "cn", "kr", "tw", "hk", "sg", "in", "id", "th", "vn", "my"), "asia"),
    **dict.fromkeys(("au", "nz"), "oceania"),
    **dict.fromkeys(("ca", "us", "mx"), "north_america"),
}

# Checked in order; the first suffix match is stripped.
TITLE_TLDS = (
    "com", "org", "net", "edu", "gov", "mil", "int", "biz", "info", "name", "pro",
    "museum", "aero", "coop", "jobs", "mobi", "travel", "cat", "tel", "post",
    "social", "place", "app", "dev", "blog", "tech", "digital", "online", "website",
    "site", "club", "xyz", "tk", "ml", "ga", "cf", "space", "top", "work", "link",
    "dk", "de", "fr", "uk", "cn", "jp", "kr", "au", "ca", "us", "ru", "it", "es",
)

LANGUAGE_NAMES: Dict[str, str] = {
    "en": "English",
    "en-us": "English (US)",
    "en-gb": "English (UK)",
    "zh": "Chinese",
    "zh-cn": "Chinese (Simplified)",
    "zh-tw": "Chinese (Traditional)",
    "ja": "Japanese",
    "jp": "Japanese",
    "ko": "Korean",
    "kr": "Korean",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
    "ru": "Russian",
    "pt": "Portuguese",
    "pt-br": "Portuguese (Brazil)",
    "nl": "Dutch",
    "sv": "Swedish",
    "no": "Norwegian",
    "nb": "Norwegian (Bokmål)",
    "da": "Danish",
    "fi": "Finnish",
    "pl": "Polish",
    "cs": "Czech",
    "hu": "Hungarian",
    "he": "Hebrew",
    "iw": "Hebrew",
    "el": "Greek",
    "tr": "Turkish",
    "ar": "Arabic",
    "fa": "Persian",
    "ur": "Urdu",
    "hi": "Hindi",
    "id": "Indonesian",
    "vi": "Vietnamese",
    "th": "Thai",
    "uk": "Ukrainian",
    "ro": "Romanian",
    "bg": "Bulgarian",
    "sk": "Slovak",
    "sl": "Slovenian",
    "hr": "Croatian",
    "sr": "Serbian",
}


def make_absolute_url(candidate: str, domain: str) -> str:
    """Return ``candidate`` as an absolute URL, resolving it against ``domain``."""

    try:
        parsed = urlparse(candidate)
        if parsed.scheme and parsed.netloc:
            return urlunparse(parsed._replace(scheme=parsed.scheme.lower(), netloc=parsed.netloc.lower()))
        return urljoin(f"https://{domain}/", candidate)
    except (TypeError, ValueError) as exc:
        logger.warning("Failed to convert URL for %s: %s (%s)", domain, candidate, exc)
        return candidate


def determine_region(domain: str) -> str:
    """Guess a region slug from the top-level label of ``domain``."""

    tld = domain.rsplit(".", 1)[-1].lower() if domain else ""
    return REGION_BY_TLD.get(tld, "")


def display_region(region: str) -> str:
    if not region:
        return ""
    return " ".join(part[:1].upper() + part[1:] for part in region.split("_"))


def capitalize_part(part: str) -> str:
    """Capitalize one domain label, rendering a trailing ``db`` as ``DB``."""

    lowered = part.lower()
    if lowered == "db":
        return "DB"
    if lowered.endswith("db"):
        prefix = part[:-2]
        return prefix[:1].upper() + prefix[1:].lower() + "DB"
    return part[:1].upper() + part[1:].lower()


def generate_title_from_domain(domain: str) -> str:
    """Derive a display title such as ``"NeoDB"`` from ``neodb.social``."""

    try:
        lowered = domain.lower()
        working = lowered
        for tld in TITLE_TLDS:
            if working.endswith(f".{tld}"):
                working = working[: -(len(tld) + 1)]
                break

        if working == lowered:
            last_dot = working.rfind(".")
            if last_dot > 0:
                working = working[:last_dot]

        parts = [part for part in working.split(".") if part]
        title = " ".join(capitalize_part(part) for part in reversed(parts))
    except (AttributeError, TypeError) as exc:
        logger.warning("Failed to generate title for domain %s: %s", domain, exc)
        return domain
    return title or domain


def display_language(code: str) -> str:
    """Return a human readable name for a language ``code``."""

    if not code:
        return ""
    norm = code.lower().replace("_", "-")
    if norm in LANGUAGE_NAMES:
        return LANGUAGE_NAMES[norm]
    base = norm.split("-")[0]
    if base in LANGUAGE_NAMES:
        return LANGUAGE_NAMES[base]
    return "-".join(part[:1].upper() + part[1:] for part in norm.split("-"))


def display_languages(codes: Optional[Iterable[str]]) -> List[str]:
    if not codes:
        return []
    return [name for name in (display_language(code) for code in codes) if name]


def build_server_record(
    instance: InstanceMetadata,
    domain: str,
    *,
    description: str | None = None,
    icon: str = "",
) -> ServerRecord:
    """Map a successful instance API response onto a :class:`ServerRecord`.

    ``description`` replaces the API description when given (the pipeline
    passes the homepage fallback here).
    """

    languages = [code for code in (instance.languages or []) if code]
    primary = languages[0] if languages else DEFAULT_LANGUAGE
    if not languages:
        languages = [primary]
    region = determine_region(domain)

    thumbnail = instance.thumbnail_url
    if thumbnail:
        thumbnail = make_absolute_url(thumbnail, domain)

    return ServerRecord(
        domain=domain,
        version=instance.version or UNKNOWN,
        title=generate_title_from_domain(domain),
        description=description if description is not None else (instance.description or ""),
        languages=languages,
        display_languages=display_languages(languages),
        region=region,
        display_region=display_region(region),
        categories=[DEFAULT_CATEGORY],
        proxied_thumbnail=thumbnail,
        blurhash=instance.blurhash,
        icon=icon,
        total_users=instance.active_month_users,
        last_week_users=0,
        approval_required=instance.approval_required,
        language=primary,
        display_language=display_language(primary),
        category=DEFAULT_CATEGORY,
    )


def placeholder_record(domain: str, *, description: str = "", icon: str = "") -> ServerRecord:
    """Return the placeholder published when the instance API is unavailable."""

    return ServerRecord.placeholder(
        domain,
        title=generate_title_from_domain(domain),
        description=description,
        icon=icon,
    )
