"""
Embedded page state source.

The marketplace version-history page ships its full application state as JSON
inside ``<script id="initial-state">``. Reading it needs no rendering, which
makes it the most reliable and cheapest source.
"""

import re
import json
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from marketcompat.connectors.base import FetchContext, VersionSource
from marketcompat.connectors.http import HttpClient
from marketcompat.models import RawVersionRecord
from marketcompat.utils.error_handling import MalformedUpstreamDataError
from marketcompat.utils.logging_config import logger

INITIAL_STATE_SCRIPT_ID = "initial-state"

# Hosting values that identify the Data Center compatibility entry
DATACENTER_HOSTING_MARKERS = ("datacenter", "data_center")
DATACENTER_HOSTING_EXACT = {"server_and_dc"}

_VERSION_NAME_RE = re.compile(r'^\d+\.\d+')
MAX_VERSION_NAME_LENGTH = 25


def select_datacenter_compatibility(candidates: List[Any]) -> Optional[Dict[str, Any]]:
    """Return the first compatibility entry flagged for Data Center hosting."""
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        hosting = str(candidate.get("hosting") or candidate.get("type") or "").lower()
        if any(marker in hosting for marker in DATACENTER_HOSTING_MARKERS):
            return candidate
        if hosting in DATACENTER_HOSTING_EXACT:
            return candidate
    return None


def extract_version_record(node: Dict[str, Any], version: str) -> Optional[RawVersionRecord]:
    """
    Build a record from a version node of the page state or REST payload.

    Returns None when the node carries no Data Center compatibility entry or
    the entry lacks either bound.
    """
    embedded = node.get("_embedded") or {}
    candidates: List[Any] = []
    for value in (
        embedded.get("compatibilities") if isinstance(embedded, dict) else None,
        node.get("compatibility"),
        node.get("compatibilities"),
    ):
        if isinstance(value, list):
            candidates.extend(value)

    dc = select_datacenter_compatibility(candidates)
    if dc is None:
        return None

    dc_embedded = dc.get("_embedded") or {}
    compatible_versions = dc_embedded.get("compatibleVersions") if isinstance(dc_embedded, dict) else None
    compatible_versions = compatible_versions if isinstance(compatible_versions, dict) else {}

    min_version = dc.get("min") or dc.get("minVersion") or compatible_versions.get("min") or ""
    max_version = dc.get("max") or dc.get("maxVersion") or compatible_versions.get("max") or ""
    if not min_version or not max_version:
        return None

    release = node.get("release") if isinstance(node.get("release"), dict) else {}
    return RawVersionRecord(
        version=str(version),
        compatibility=f"{min_version} - {max_version}",
        min_version=str(min_version),
        max_version=str(max_version),
        release_date=str(node.get("releaseDate") or release.get("date") or ""),
        release_summary=str(release.get("notes") or node.get("releaseSummary") or ""),
    )


def walk_initial_state(node: Any, collected: List[RawVersionRecord],
                       depth: int = 0, max_depth: int = 15) -> None:
    """
    Depth-bounded search of a JSON tree for version nodes.

    A dict whose ``name`` or ``version`` looks like a short dotted version is a
    candidate; once a record is extracted from it the walk does not descend
    further into that node.
    """
    if depth > max_depth:
        return

    if isinstance(node, list):
        for item in node:
            walk_initial_state(item, collected, depth + 1, max_depth)
        return

    if not isinstance(node, dict):
        return

    version = node.get("name") or node.get("version") or ""
    if isinstance(version, (str, int, float)):
        version = str(version)
        if version and _VERSION_NAME_RE.match(version) and len(version) < MAX_VERSION_NAME_LENGTH:
            record = extract_version_record(node, version)
            if record is not None:
                collected.append(record)
                return

    for value in node.values():
        walk_initial_state(value, collected, depth + 1, max_depth)


def extract_state_json(html: str) -> Any:
    """
    Locate and decode the initial-state JSON island.

    Raises:
        MalformedUpstreamDataError: If the tag is missing or its JSON is invalid,
            including after unescaping HTML-entity quotes
    """
    soup = BeautifulSoup(html, "html.parser")
    script = soup.find("script", id=INITIAL_STATE_SCRIPT_ID)
    if script is None:
        raise MalformedUpstreamDataError("initial-state script tag not found", method=InitialStateSource.name)

    raw = script.string if script.string is not None else script.get_text()
    try:
        return json.loads(raw)
    except RecursionError as e:
        raise MalformedUpstreamDataError("initial-state JSON nested too deeply",
                                         method=InitialStateSource.name, cause=e)
    except (TypeError, ValueError):
        pass

    decoded = raw.replace("&quot;", '"').replace("&amp;", "&")
    try:
        return json.loads(decoded)
    except (TypeError, ValueError, RecursionError) as e:
        raise MalformedUpstreamDataError("initial-state JSON parse failed", method=InitialStateSource.name, cause=e)


class InitialStateSource(VersionSource):
    """Reads version data from the page's embedded initial-state JSON."""

    name = "initial-state"
    label = "Method 1"

    def __init__(self, http: HttpClient, config=None):
        super().__init__(config)
        self.http = http
        self.max_depth = self.config.get("INITIAL_STATE_MAX_DEPTH", 15)

    async def fetch(self, context: FetchContext) -> List[RawVersionRecord]:
        context.progress(f"  [{self.label}] Fetching page HTML for initial-state JSON...")
        html = await self.http.get_text(context.page_url, headers={"Accept": "text/html"})

        state = extract_state_json(html)
        records: List[RawVersionRecord] = []
        walk_initial_state(state, records, max_depth=self.max_depth)

        if not records:
            raise MalformedUpstreamDataError("No version data found in initial-state", method=self.name)

        logger.debug(f"initial-state yielded {len(records)} records for {context.plugin.name}")
        context.progress(f"  [{self.label}] Found {len(records)} versions")
        return records
