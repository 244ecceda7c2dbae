"""
Base interface for version sources.

Each acquisition method (embedded page state, REST API, rendered browser DOM)
implements ``VersionSource``. The fetch orchestrator walks a priority-ordered
list of sources and stops at the first one that returns records.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from marketcompat.config import config as default_config
from marketcompat.models import AddonIdentifiers, PluginDescriptor, RawVersionRecord
from marketcompat.progress import ProgressReporter


@dataclass
class FetchContext:
    """Everything a source needs to look up one plugin."""

    plugin: PluginDescriptor
    page_url: str
    identifiers: AddonIdentifiers
    progress: ProgressReporter


class VersionSource(ABC):
    """
    Base class for acquisition methods.

    Subclasses set ``name`` (the tag recorded in ``PluginResult.fetch_method``
    and in failure reports) and ``label`` (used in progress lines).
    """

    name: str = "base"
    label: str = "Method"

    def __init__(self, config=None):
        self.config = config or default_config

    def is_applicable(self, context: FetchContext) -> bool:
        """Whether this source can be attempted for the given plugin."""
        return True

    @abstractmethod
    async def fetch(self, context: FetchContext) -> List[RawVersionRecord]:
        """
        Fetch all version records for one plugin.

        Returns:
            A non-empty list of records

        Raises:
            AcquisitionError: If the source cannot produce any record
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
