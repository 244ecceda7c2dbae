"""
Version comparison and compatibility-string parsing.

Versions are compared segment by segment. Each dot-delimited segment splits
into a leading numeric run and an alphabetic remainder, so vendor tokens such
as ``8.0a`` or ``7.13.0-m1`` still order deterministically. The ordering is
total but deliberately not semver-aware.
"""

import re
import functools
from dataclasses import dataclass
from typing import List, Optional, Tuple

from marketcompat.models import VersionSegment

ParsedVersion = Tuple[VersionSegment, ...]

# Dotted version tokens, digit-led or letter-led, including alphanumeric segments
VERSION_TOKEN_RE = re.compile(
    r'[0-9][0-9a-zA-Z]*(?:\.[0-9a-zA-Z]+)+|[a-zA-Z][0-9a-zA-Z]*(?:\.[0-9a-zA-Z]+)+'
)
_SEGMENT_RE = re.compile(r'^(\d*)(.*)$', re.DOTALL)
_PAD = VersionSegment(0, "")


@dataclass(frozen=True)
class CompatibilityRange:
    """Bounds extracted from a free-text compatibility string."""

    min_version: Optional[str] = None
    max_version: Optional[str] = None
    raw_text: str = ""

    @property
    def is_resolved(self) -> bool:
        return bool(self.min_version and self.max_version)


def parse_segment(seg: Optional[str]) -> VersionSegment:
    seg = str(seg or "").strip().lower()
    match = _SEGMENT_RE.match(seg)
    digits, alpha = match.group(1), match.group(2)
    return VersionSegment(int(digits) if digits else 0, alpha)


def parse_version(vstr: Optional[str]) -> ParsedVersion:
    """Parse a version string; an empty or absent string yields one zero segment."""
    if not vstr:
        return (_PAD,)
    return tuple(parse_segment(part) for part in str(vstr).strip().split("."))


def compare_segments(a: VersionSegment, b: VersionSegment) -> int:
    if a.num != b.num:
        return -1 if a.num < b.num else 1
    if a.alpha == b.alpha:
        return 0
    # "8" < "8a"
    if a.alpha == "":
        return -1
    if b.alpha == "":
        return 1
    return -1 if a.alpha < b.alpha else 1


def compare_versions(a: Optional[str], b: Optional[str]) -> int:
    """
    Compare two version strings.

    Returns:
        -1, 0 or 1 as ``a`` sorts before, equal to, or after ``b``.
        The shorter operand is right-padded with zero segments, so
        ``2.0.0`` equals ``2.0``.
    """
    sa = parse_version(a)
    sb = parse_version(b)
    for i in range(max(len(sa), len(sb))):
        result = compare_segments(
            sa[i] if i < len(sa) else _PAD,
            sb[i] if i < len(sb) else _PAD,
        )
        if result != 0:
            return result
    return 0


version_sort_key = functools.cmp_to_key(compare_versions)


def is_version_in_range(target: Optional[str], min_version: Optional[str],
                        max_version: Optional[str]) -> bool:
    """Inclusive range check; False when any bound is empty or absent."""
    if not target or not min_version or not max_version:
        return False
    return (compare_versions(target, min_version) >= 0
            and compare_versions(target, max_version) <= 0)


def extract_version_tokens(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [t for t in VERSION_TOKEN_RE.findall(str(text)) if "." in t]


def parse_compatibility_string(text: Optional[str]) -> CompatibilityRange:
    """
    Extract a [min, max] pair from free-form compatibility text.

    The first dotted token is the minimum and the last the maximum; a single
    token is both. Reversed pairs are swapped.

    >>> parse_compatibility_string("Confluence Data Center 8.0 - 9.0")
    CompatibilityRange(min_version='8.0', max_version='9.0', raw_text='Confluence Data Center 8.0 - 9.0')
    """
    raw_text = str(text or "").strip()
    tokens = extract_version_tokens(raw_text)
    if not tokens:
        return CompatibilityRange(None, None, raw_text)
    if len(tokens) == 1:
        return CompatibilityRange(tokens[0], tokens[0], raw_text)

    low, high = tokens[0], tokens[-1]
    if compare_versions(low, high) > 0:
        low, high = high, low
    return CompatibilityRange(low, high, raw_text)
