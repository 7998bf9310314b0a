"""Small helpers shared by the entity mappers and sync steps."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

OKTA_DOMAIN_PATTERN = re.compile(r"\.(okta|oktapreview|okta-emea)\.com$")


@dataclass
class OktaAccountInfo:
    name: str
    preview: bool


def to_array(value: Any) -> List[Any]:
    """Coerce a value that may be a single object or a list into a list.

    Example:
        >>> to_array({"href": "a"})
        [{'href': 'a'}]
        >>> to_array(None)
        []
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def parse_time(value: Any) -> Optional[int]:
    """Convert an Okta ISO-8601 timestamp to epoch milliseconds; anything else maps to ``None``."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable timestamp: %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def format_time(value: datetime) -> str:
    """Format a datetime the way the Okta API expects query timestamps."""
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_account_info(org_url: str) -> OktaAccountInfo:
    """Derive the org subdomain and preview flag from the org URL.

    Example:
        >>> get_account_info("https://acme.oktapreview.com")
        OktaAccountInfo(name='acme', preview=True)
    """
    host = urlsplit(org_url).hostname or ""
    return OktaAccountInfo(
        name=host.split(".")[0],
        preview=host.endswith(".oktapreview.com"),
    )


def get_admin_url(org_url: str) -> str:
    """Return the admin console base URL for an org URL.

    ``https://acme.okta.com`` becomes ``https://acme-admin.okta.com``.
    Custom domains are returned unchanged.
    """
    parts = urlsplit(org_url)
    host = parts.hostname or ""
    if not OKTA_DOMAIN_PATTERN.search(host):
        return org_url
    subdomain, _, rest = host.partition(".")
    if not subdomain.endswith("-admin"):
        subdomain = f"{subdomain}-admin"
    return urlunsplit((parts.scheme, f"{subdomain}.{rest}", "", "", ""))


def build_web_link(org_url: str, path: str) -> str:
    """Resolve an admin console path against the org's admin URL."""
    return urljoin(get_admin_url(org_url), path)
