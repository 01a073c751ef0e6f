"""Loading of the line-oriented server list files."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Set
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

__all__ = [
    "DomainGroups",
    "extract_domain",
    "is_valid_url",
    "load_domain_groups",
    "parse_server_urls",
    "read_server_urls",
    "strip_comment",
    "unique_domains",
]

_URL_BOUNDARY = re.compile(r"(?=https?://)")
_HOSTNAME = re.compile(r"[a-z0-9.-]+")


def strip_comment(line: str) -> str:
    """Drop everything from the first ``#`` or ``;`` on ``line``."""

    cuts = [index for index in (line.find("#"), line.find(";")) if index != -1]
    return line[: min(cuts)] if cuts else line


def _clean_hostname(hostname: str | None) -> str:
    """Return the ASCII form of ``hostname`` or ``""`` when it is not a host name."""

    if not hostname:
        return ""
    try:
        ascii_name = hostname.encode("idna").decode("ascii").lower()
    except UnicodeError:
        return ""
    return ascii_name if _HOSTNAME.fullmatch(ascii_name) else ""


def is_valid_url(candidate: str) -> bool:
    """Return ``True`` when ``candidate`` is an absolute URL with a usable host."""

    try:
        parsed = urlparse(candidate)
        # Accessing ``port`` validates the netloc.
        parsed.port
    except ValueError:
        return False
    return bool(parsed.scheme and _clean_hostname(parsed.hostname))


def extract_domain(url: str) -> str:
    """Return the lower-cased ASCII hostname of ``url`` or an empty string."""

    try:
        hostname = _clean_hostname(urlparse(url.strip()).hostname)
    except (AttributeError, ValueError):
        hostname = ""
    if not hostname:
        logger.warning("Invalid URL: %s", url)
    return hostname


def parse_server_urls(lines: Iterable[str]) -> List[str]:
    """Return the valid URLs found in ``lines``.

    A line may carry several URLs glued together; they are split before each
    ``http://`` or ``https://``.
    """

    urls: List[str] = []
    for line in lines:
        stripped = strip_comment(line).strip()
        if not stripped:
            continue
        for segment in _URL_BOUNDARY.split(stripped):
            segment = segment.strip()
            if not segment:
                continue
            if is_valid_url(segment):
                urls.append(segment)
            else:
                logger.warning("Skipping invalid URL segment: %s", segment)
    return urls


def read_server_urls(path: Path | str) -> List[str]:
    """Read a server list file. An unreadable file raises ``OSError``."""

    raw = Path(path).read_text(encoding="utf-8")
    return parse_server_urls(raw.splitlines())


def unique_domains(urls: Iterable[str]) -> List[str]:
    """Return the distinct domains of ``urls`` in first-seen order."""

    seen: Set[str] = set()
    domains: List[str] = []
    for url in urls:
        domain = extract_domain(url)
        if domain and domain not in seen:
            seen.add(domain)
            domains.append(domain)
    return domains


@dataclass
class DomainGroups:
    """Official and community domains read from the two source lists."""

    official: List[str] = field(default_factory=list)
    community: List[str] = field(default_factory=list)

    @property
    def official_set(self) -> Set[str]:
        return set(self.official)

    @property
    def community_set(self) -> Set[str]:
        return set(self.community)

    @property
    def combined(self) -> List[str]:
        """Unique domains across both groups, official ones first."""

        seen = set(self.official)
        return list(self.official) + [domain for domain in self.community if domain not in seen]

    def group_of(self, domain: str) -> str | None:
        if domain in self.official_set:
            return "official"
        if domain in self.community_set:
            return "community"
        return None


def load_domain_groups(official_path: Path | str, community_path: Path | str) -> DomainGroups:
    """Read both source lists and return their domains."""

    official_urls = read_server_urls(official_path)
    community_urls = read_server_urls(community_path)
    logger.info(
        "Found %d official servers, %d community servers.",
        len(official_urls),
        len(community_urls),
    )
    return DomainGroups(official=unique_domains(official_urls), community=unique_domains(community_urls))
