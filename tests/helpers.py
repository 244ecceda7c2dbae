"""
Shared test helpers: canned upstream payloads and stub version sources.
"""

import json
from typing import List, Optional

from marketcompat.config import Config
from marketcompat.connectors.base import FetchContext, VersionSource
from marketcompat.models import RawVersionRecord
from marketcompat.utils.error_handling import AcquisitionError


def dc_version_node(name: str, min_version: str, max_version: str, **extra) -> dict:
    """A version node as it appears in initial-state and REST payloads."""
    node = {
        "name": name,
        "release": {"date": "2024-01-01", "notes": f"Release {name}"},
        "compatibilities": [
            {"hosting": "cloud", "min": "1001.0.0", "max": "1001.0.0"},
            {"hosting": "datacenter", "min": min_version, "max": max_version},
        ],
    }
    node.update(extra)
    return node


def state_page(state, escape_quotes: bool = False) -> str:
    body = json.dumps(state)
    if escape_quotes:
        body = body.replace('"', "&quot;")
    return state_page_raw(body)


def state_page_raw(body: str) -> str:
    """A version-history page whose initial-state island holds ``body`` verbatim."""
    return (
        "<html><head><title>Versions</title></head><body>"
        f'<script id="initial-state" type="application/json">{body}</script>'
        "</body></html>"
    )


class StubSource(VersionSource):
    """Version source returning canned records or raising canned errors."""

    def __init__(self, name: str, records: Optional[List[RawVersionRecord]] = None,
                 error: Optional[Exception] = None, applicable: bool = True):
        super().__init__(Config(load_env=False))
        self.name = name
        self.label = name
        self.records = records or []
        self.error = error
        self.applicable = applicable
        self.calls = 0

    def is_applicable(self, context: FetchContext) -> bool:
        return self.applicable

    async def fetch(self, context: FetchContext) -> List[RawVersionRecord]:
        self.calls += 1
        context.progress(f"  [{self.label}] attempt")
        if self.error is not None:
            raise self.error
        return list(self.records)


def failing_source(name: str, reason: str = "boom") -> StubSource:
    return StubSource(name, error=AcquisitionError(reason, method=name))
