"""
Marketplace REST API source.

``GET /rest/2/addons/{id|slug}/versions?hosting=datacenter&limit=L&offset=O``
returns version items either under ``_embedded.versions`` or ``versions``.
"""

import asyncio
import json
from typing import Any, Dict, List

from marketcompat.connectors.base import FetchContext, VersionSource
from marketcompat.connectors.http import HttpClient
from marketcompat.connectors.initial_state import extract_version_record
from marketcompat.models import RawVersionRecord
from marketcompat.utils.error_handling import AcquisitionError, MalformedUpstreamDataError
from marketcompat.utils.logging_config import logger


def extract_page_items(data: Any) -> List[Dict[str, Any]]:
    if not isinstance(data, dict):
        raise MalformedUpstreamDataError("Unexpected REST payload", method=RestApiSource.name)
    embedded = data.get("_embedded")
    if isinstance(embedded, dict) and isinstance(embedded.get("versions"), list):
        return embedded["versions"]
    if isinstance(data.get("versions"), list):
        return data["versions"]
    return []


class RestApiSource(VersionSource):
    """Pages through the public versions endpoint for one add-on."""

    name = "rest-api"
    label = "Method 2"

    def __init__(self, http: HttpClient, config=None):
        super().__init__(config)
        self.http = http
        self.api_base = self.config.get("MARKETPLACE_API_BASE").rstrip("/")
        self.page_size = self.config.get("REST_PAGE_SIZE", 50)
        self.page_delay = self.config.get("REST_PAGE_DELAY", 0.4)

    def is_applicable(self, context: FetchContext) -> bool:
        return bool(context.identifiers)

    def build_url(self, key: str, offset: int) -> str:
        return (f"{self.api_base}/rest/2/addons/{key}/versions"
                f"?hosting=datacenter&limit={self.page_size}&offset={offset}")

    async def fetch(self, context: FetchContext) -> List[RawVersionRecord]:
        key = context.identifiers.key
        if not key:
            raise AcquisitionError("No ID or slug found", method=self.name)

        context.progress(f"  [{self.label}] REST API using key: {key}")
        records: List[RawVersionRecord] = []
        offset = 0

        while True:
            url = self.build_url(key, offset)
            if offset == 0:
                context.progress(f"  [{self.label}] Requesting: {url}")
            else:
                logger.debug(f"Requesting {url}")

            body = await self.http.get_text(url)
            try:
                data = json.loads(body)
            except ValueError as e:
                raise MalformedUpstreamDataError("REST API returned malformed JSON",
                                                 method=self.name, url=url, cause=e)

            items = extract_page_items(data)
            if not items:
                break

            for item in items:
                if not isinstance(item, dict):
                    continue
                record = extract_version_record(item, item.get("name") or item.get("version") or "")
                if record is not None:
                    records.append(record)

            offset += self.page_size
            # A short page is taken to be the last one
            if len(items) < self.page_size:
                break
            await asyncio.sleep(self.page_delay)

        if not records:
            raise MalformedUpstreamDataError("API returned 0 DC versions", method=self.name)

        context.progress(f"  [{self.label}] Found {len(records)} versions")
        return records
