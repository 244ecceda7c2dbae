"""
Version sources for marketcompat.

Sources are tried in the order returned by ``default_sources``: embedded page
state, REST API, rendered browser DOM.
"""

from typing import List

from marketcompat.browser import BrowserSession
from marketcompat.connectors.base import FetchContext, VersionSource
from marketcompat.connectors.http import HttpClient
from marketcompat.connectors.initial_state import InitialStateSource
from marketcompat.connectors.rest_api import RestApiSource
from marketcompat.connectors.rendered_dom import RenderedDomSource
from marketcompat.connectors.url_utils import extract_addon_identifiers, normalize_version_history_url


def default_sources(http: HttpClient, session: BrowserSession, config=None) -> List[VersionSource]:
    """Build the priority-ordered source list for one batch."""
    return [
        InitialStateSource(http, config),
        RestApiSource(http, config),
        RenderedDomSource(session, config),
    ]


__all__ = [
    'FetchContext',
    'VersionSource',
    'HttpClient',
    'InitialStateSource',
    'RestApiSource',
    'RenderedDomSource',
    'default_sources',
    'extract_addon_identifiers',
    'normalize_version_history_url',
]
