"""
marketcompat: resolve which marketplace plugin versions are compatible with a
target Data Center release.

Example usage:
    import asyncio
    from marketcompat import PluginDescriptor, check_compatibility

    plugins = [PluginDescriptor("ScriptRunner",
                                "https://marketplace.atlassian.com/apps/6820/scriptrunner-for-jira",
                                "8.10.0")]
    results = asyncio.run(check_compatibility(plugins, "9.12", print))
"""

from marketcompat.batch import BatchRunner, check_compatibility
from marketcompat.connectors.url_utils import extract_addon_identifiers, normalize_version_history_url
from marketcompat.models import (
    AddonIdentifiers,
    CompatibleVersionEntry,
    PluginDescriptor,
    PluginResult,
    RawVersionRecord,
)
from marketcompat.orchestrator import FetchOrchestrator, FetchOutcome
from marketcompat.results import build_result, summarize_results
from marketcompat.versioning import (
    compare_versions,
    is_version_in_range,
    parse_compatibility_string,
)

__version__ = "1.0.0"

__all__ = [
    "BatchRunner",
    "check_compatibility",
    "extract_addon_identifiers",
    "normalize_version_history_url",
    "AddonIdentifiers",
    "CompatibleVersionEntry",
    "PluginDescriptor",
    "PluginResult",
    "RawVersionRecord",
    "FetchOrchestrator",
    "FetchOutcome",
    "build_result",
    "summarize_results",
    "compare_versions",
    "is_version_in_range",
    "parse_compatibility_string",
]
