"""HTTP access to instance APIs and homepages."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from fediservers.config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from fediservers.models import InstanceMetadata
from fediservers.services.extract import (
    extract_homepage_logo,
    extract_icon_href,
    extract_meta_description,
)
from fediservers.services.normalize import make_absolute_url

logger = logging.getLogger(__name__)

__all__ = ["HomepageCache", "InstanceFetcher", "build_session"]

INSTANCE_API_PATH = "/api/v2/instance"
JSON_ACCEPT = "application/json"
HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

# Each source is tried exactly once.
_NO_RETRY = Retry(total=0, raise_on_status=False)


def build_session(user_agent: str = DEFAULT_USER_AGENT, pool_size: int = 10) -> requests.Session:
    """Return a session carrying the fetcher headers and a pool sized for the workers."""

    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    adapter = HTTPAdapter(max_retries=_NO_RETRY, pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class HomepageCache:
    """Homepage HTML per domain, shared by the description, icon and logo lookups.

    A failed fetch is stored as ``None`` so the homepage is requested at most
    once per run. Each domain is owned by a single worker, so entries are
    never contended.
    """

    def __init__(self) -> None:
        self._pages: Dict[str, Optional[str]] = {}

    def __contains__(self, domain: str) -> bool:
        return domain in self._pages

    def __len__(self) -> int:
        return len(self._pages)

    def get(self, domain: str) -> Optional[str]:
        return self._pages.get(domain)

    def get_or_fetch(self, domain: str, loader: Callable[[str], Optional[str]]) -> Optional[str]:
        if domain not in self._pages:
            self._pages[domain] = loader(domain)
        return self._pages[domain]


class InstanceFetcher:
    """Fetch instance metadata and homepage details for a domain."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        cache: HomepageCache | None = None,
    ) -> None:
        self._session = session or build_session()
        self.timeout = timeout
        self.cache = cache if cache is not None else HomepageCache()

    def fetch_instance_info(self, domain: str) -> InstanceMetadata | None:
        """Return the parsed ``/api/v2/instance`` response or ``None`` on any failure."""

        api_url = f"https://{domain}{INSTANCE_API_PATH}"
        logger.info("Fetching: %s", api_url)
        try:
            response = self._session.get(
                api_url,
                headers={"Accept": JSON_ACCEPT},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
            instance = InstanceMetadata.model_validate(payload)
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Failed to fetch info for %s: %s", domain, exc)
            return None

        logger.info("Successfully fetched info for %s", domain)
        return instance

    def _download_homepage(self, domain: str) -> Optional[str]:
        home_url = f"https://{domain}/"
        logger.info("Fetching homepage: %s", home_url)
        try:
            response = self._session.get(
                home_url,
                headers={"Accept": HTML_ACCEPT},
                timeout=self.timeout,
                allow_redirects=True,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Failed to fetch homepage for %s: %s", domain, exc)
            return None
        return response.text

    def fetch_homepage(self, domain: str) -> Optional[str]:
        """Return the homepage HTML for ``domain``, fetching it at most once."""

        return self.cache.get_or_fetch(domain, self._download_homepage)

    def fetch_homepage_description(self, domain: str) -> str:
        html = self.fetch_homepage(domain)
        if html is None:
            return ""
        description = extract_meta_description(html)
        if description:
            logger.info("Found description from homepage of %s: %r", domain, description[:50])
        else:
            logger.info("No description found in homepage meta tags of %s", domain)
        return description

    def fetch_homepage_logo(self, domain: str) -> str:
        html = self.fetch_homepage(domain)
        if html is None:
            return ""
        src = extract_homepage_logo(html)
        return make_absolute_url(src, domain) if src else ""

    def fetch_homepage_icon(self, domain: str) -> str:
        """Return an absolute icon URL from the homepage, or ``""``.

        ``<link rel="icon">`` is preferred; the navigation logo is used when the
        page declares no icon.
        """

        html = self.fetch_homepage(domain)
        if html is None:
            return ""
        href = extract_icon_href(html)
        if href:
            logger.info("Found icon href in homepage of %s", domain)
            return make_absolute_url(href, domain)
        logo = self.fetch_homepage_logo(domain)
        if not logo:
            logger.info("No icon or logo found in homepage of %s", domain)
        return logo
