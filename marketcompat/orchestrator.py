"""
Per-plugin fetch orchestration.

Sources are attempted strictly one after another in priority order. The first
source that returns at least one record wins and later sources are never
touched; every failure is recorded with the tag of the source that raised it.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from marketcompat.connectors.base import FetchContext, VersionSource
from marketcompat.connectors.url_utils import extract_addon_identifiers, normalize_version_history_url
from marketcompat.models import PluginDescriptor, RawVersionRecord
from marketcompat.progress import ProgressReporter, ensure_reporter
from marketcompat.utils.error_handling import (
    AllMethodsExhaustedError,
    CompatError,
    SourceFailure,
)
from marketcompat.utils.logging_config import with_context


@dataclass
class FetchOutcome:
    """Records from the winning source, plus failures of the sources before it."""

    versions: List[RawVersionRecord]
    method: str
    failures: List[SourceFailure]


class FetchOrchestrator:
    """Tries each version source in order for one plugin."""

    def __init__(self, sources: Sequence[VersionSource], progress: Optional[ProgressReporter] = None):
        self.sources = list(sources)
        self.progress = ensure_reporter(progress)

    def build_context(self, plugin: PluginDescriptor) -> FetchContext:
        return FetchContext(
            plugin=plugin,
            page_url=normalize_version_history_url(plugin.marketplace_url),
            identifiers=extract_addon_identifiers(plugin.marketplace_url),
            progress=self.progress,
        )

    async def fetch(self, plugin: PluginDescriptor) -> FetchOutcome:
        """
        Fetch the version records of one plugin.

        Raises:
            AllMethodsExhaustedError: If no source produced a record
        """
        context = self.build_context(plugin)
        log = with_context(plugin=plugin.name)
        failures: List[SourceFailure] = []

        for source in self.sources:
            if not source.is_applicable(context):
                log.debug(f"Skipping {source.name}: not applicable")
                continue

            try:
                versions = await source.fetch(context)
            except CompatError as e:
                reason = e.message
            except Exception as e:
                # Anything else a source raises is still only that tier's failure
                log.exception(f"{source.name} raised unexpectedly")
                reason = f"{type(e).__name__}: {e}"
            else:
                if versions:
                    return FetchOutcome(list(versions), source.name, failures)
                reason = "no versions returned"

            log.warning(f"{source.name} failed: {reason}")
            self.progress(f"  [{source.label}] Failed: {reason}")
            failures.append(SourceFailure(source.name, reason))

        raise AllMethodsExhaustedError(failures)
