#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Domain models for marketcompat.

Field names are snake_case in Python; ``to_dict`` produces the camelCase
shape consumed by the persistence and reporting collaborators.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

FETCH_METHOD_FAILED = "failed"


@dataclass(frozen=True)
class PluginDescriptor:
    """A plugin to check, as supplied by the caller."""

    name: str
    marketplace_url: str
    current_version: str
    product_type: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PluginDescriptor':
        """
        Create a descriptor from a dictionary.

        Both snake_case and camelCase keys are accepted.
        """
        def pick(*keys):
            for key in keys:
                value = data.get(key)
                if value is not None:
                    return str(value).strip()
            return None

        return cls(
            name=pick("name") or "",
            marketplace_url=pick("marketplace_url", "marketplaceUrl") or "",
            current_version=pick("current_version", "currentVersion") or "",
            product_type=pick("product_type", "productType", "type"),
            notes=pick("notes"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "marketplaceUrl": self.marketplace_url,
            "currentVersion": self.current_version,
            "type": self.product_type,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class VersionSegment:
    """One dot-delimited piece of a version string."""

    num: int = 0
    alpha: str = ""


@dataclass(frozen=True)
class AddonIdentifiers:
    """Numeric id and slug extracted from a marketplace URL."""

    id: Optional[str] = None
    slug: Optional[str] = None

    @property
    def key(self) -> Optional[str]:
        """REST resource key; the id is preferred over the slug."""
        return self.id or self.slug

    def __bool__(self) -> bool:
        return bool(self.id or self.slug)


@dataclass
class RawVersionRecord:
    """A version row as produced by any acquisition method."""

    version: str
    compatibility: Optional[str] = None
    min_version: Optional[str] = None
    max_version: Optional[str] = None
    release_date: str = ""
    release_summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "compatibility": self.compatibility,
            "minVersion": self.min_version,
            "maxVersion": self.max_version,
            "releaseDate": self.release_date,
            "releaseSummary": self.release_summary,
        }


@dataclass
class CompatibleVersionEntry:
    """A raw record proven to cover the target version."""

    plugin_version: str
    compatibility_range: str
    compatibility: str
    release_date: str = ""
    release_summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pluginVersion": self.plugin_version,
            "compatibilityRange": self.compatibility_range,
            "compatibility": self.compatibility,
            "releaseDate": self.release_date,
            "releaseSummary": self.release_summary,
        }


@dataclass
class PluginResult:
    """Per-plugin outcome of a compatibility check."""

    plugin_name: str
    plugin_url: str
    current_version: str
    target_version: str
    fetch_method: str
    compatible: Optional[bool]
    compatible_versions: List[CompatibleVersionEntry] = field(default_factory=list)
    compatible_version_range: Optional[str] = None
    recommended_version: Optional[str] = None
    total_versions_checked: int = 0
    all_versions: List[RawVersionRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def status(self) -> str:
        """
        Classify the result for reporting.

        Returns one of ``compatible``, ``needs-upgrade`` (the installed version
        is not compatible but another one is), ``not-compatible`` or ``error``.
        """
        if self.compatible is None:
            return "error"
        if self.compatible:
            return "compatible"
        if self.compatible_versions:
            return "needs-upgrade"
        return "not-compatible"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pluginName": self.plugin_name,
            "pluginUrl": self.plugin_url,
            "currentVersion": self.current_version,
            "targetVersion": self.target_version,
            "fetchMethod": self.fetch_method,
            "compatible": self.compatible,
            "status": self.status,
            "compatibleVersions": [cv.to_dict() for cv in self.compatible_versions],
            "compatibleVersionRange": self.compatible_version_range,
            "recommendedVersion": self.recommended_version,
            "totalVersionsChecked": self.total_versions_checked,
            "allVersions": [v.to_dict() for v in self.all_versions],
            "error": self.error,
        }
