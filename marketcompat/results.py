"""
Result construction.

Matches acquired version records against the target platform version and
derives the recommendation and compatible span for one plugin.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Sequence

from marketcompat.models import (
    FETCH_METHOD_FAILED,
    CompatibleVersionEntry,
    PluginDescriptor,
    PluginResult,
    RawVersionRecord,
)
from marketcompat.versioning import (
    compare_versions,
    is_version_in_range,
    parse_compatibility_string,
    version_sort_key,
)


def _compatible_entries(records: Sequence[RawVersionRecord], target_version: str) -> List[CompatibleVersionEntry]:
    entries = []
    for record in records:
        min_version, max_version = record.min_version, record.max_version
        if not min_version or not max_version:
            parsed = parse_compatibility_string(record.compatibility)
            min_version, max_version = parsed.min_version, parsed.max_version
        if not min_version or not max_version:
            continue

        if is_version_in_range(target_version, min_version, max_version):
            span = f"{min_version} - {max_version}"
            entries.append(CompatibleVersionEntry(
                plugin_version=record.version,
                compatibility_range=span,
                compatibility=record.compatibility or span,
                release_date=record.release_date or "",
                release_summary=record.release_summary or "",
            ))
    return entries


def build_result(plugin: PluginDescriptor, records: Sequence[RawVersionRecord],
                 target_version: str, fetch_method: str) -> PluginResult:
    """
    Build the report for one plugin from its acquired records.

    ``compatible_versions`` is ordered newest first; ``recommended_version`` is
    its head. ``compatible`` is True only when the installed version itself is
    among the compatible ones.
    """
    entries = _compatible_entries(records, target_version)
    entries.sort(key=lambda e: version_sort_key(e.plugin_version), reverse=True)

    compatible = any(compare_versions(e.plugin_version, plugin.current_version) == 0 for e in entries)

    recommended = entries[0].plugin_version if entries else None
    version_range = None
    if entries:
        ascending = sorted(entries, key=lambda e: version_sort_key(e.plugin_version))
        lowest, highest = ascending[0].plugin_version, ascending[-1].plugin_version
        version_range = highest if lowest == highest else f"{lowest} - {highest}"

    return PluginResult(
        plugin_name=plugin.name,
        plugin_url=plugin.marketplace_url,
        current_version=plugin.current_version,
        target_version=target_version,
        fetch_method=fetch_method,
        compatible=compatible,
        compatible_versions=entries,
        compatible_version_range=version_range,
        recommended_version=recommended,
        total_versions_checked=len(records),
        all_versions=list(records),
        error=None,
    )


def build_failed_result(plugin: PluginDescriptor, target_version: str, error: str) -> PluginResult:
    """Result for a plugin whose acquisition failed on every method."""
    return PluginResult(
        plugin_name=plugin.name,
        plugin_url=plugin.marketplace_url,
        current_version=plugin.current_version,
        target_version=target_version,
        fetch_method=FETCH_METHOD_FAILED,
        compatible=None,
        error=error,
    )


@dataclass
class BatchSummary:
    total: int = 0
    compatible: int = 0
    not_compatible: int = 0
    needs_upgrade: int = 0
    errors: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    def __str__(self) -> str:
        return (f"Compatible: {self.compatible}   Not Compatible: {self.not_compatible}   "
                f"Needs Upgrade: {self.needs_upgrade}   Errors: {self.errors}")


def summarize_results(results: Sequence[PluginResult]) -> BatchSummary:
    """
    Count results by outcome.

    ``needs_upgrade`` is a subset of ``not_compatible``: plugins whose installed
    version is incompatible but which have a compatible release.
    """
    summary = BatchSummary(total=len(results))
    for result in results:
        if result.compatible is None:
            summary.errors += 1
        elif result.compatible:
            summary.compatible += 1
        else:
            summary.not_compatible += 1
            if result.compatible_versions:
                summary.needs_upgrade += 1
    return summary
