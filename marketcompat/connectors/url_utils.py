"""
Marketplace URL utilities.

Derives the REST identifiers of an add-on from its marketplace URL and
normalizes any add-on URL to its Data Center version-history page.
"""

import re
from urllib.parse import urlparse

from marketcompat.models import AddonIdentifiers
from marketcompat.utils.logging_config import logger

VERSION_HISTORY_SEGMENT = "/version-history"
VERSION_HISTORY_QUERY = "versionHistoryHosting=dataCenter"

# Path segments that can follow the add-on id but are not slugs
NON_SLUG_SEGMENTS = {"version-history", "overview"}

_NUMERIC_ID_RE = re.compile(r'^\d+$')


def normalize_version_history_url(url: str) -> str:
    """
    Normalize an add-on URL to its Data Center version-history page.

    ``https://host/apps/123/foo/`` becomes
    ``https://host/apps/123/foo/version-history?versionHistoryHosting=dataCenter``.
    An existing query string is dropped when the URL already points at the
    version-history page.
    """
    url = str(url or "").strip()
    if VERSION_HISTORY_SEGMENT in url:
        base = url.split("?")[0]
    else:
        base = re.sub(r'/$', '', url) + VERSION_HISTORY_SEGMENT
    return f"{base}?{VERSION_HISTORY_QUERY}"


def extract_addon_identifiers(marketplace_url: str) -> AddonIdentifiers:
    """
    Extract the numeric add-on id and slug from a marketplace URL.

    ``.../apps/1215215/scriptrunner`` yields id ``1215215`` and slug
    ``scriptrunner``. Malformed URLs yield empty identifiers instead of raising.
    """
    try:
        path = urlparse(str(marketplace_url or "")).path
    except ValueError as e:
        logger.debug(f"Could not parse marketplace URL {marketplace_url!r}: {e}")
        return AddonIdentifiers()

    parts = [p for p in path.split("/") if p]
    if "apps" not in parts:
        return AddonIdentifiers()

    idx = parts.index("apps")
    addon_id = parts[idx + 1] if idx + 1 < len(parts) else None
    slug = parts[idx + 2] if idx + 2 < len(parts) else None

    if not addon_id or not _NUMERIC_ID_RE.match(addon_id):
        return AddonIdentifiers()
    if slug in NON_SLUG_SEGMENTS:
        slug = None
    return AddonIdentifiers(id=addon_id, slug=slug)
