"""
Common fixtures for marketcompat tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from marketcompat.config import Config
from marketcompat.connectors.base import FetchContext
from marketcompat.connectors.url_utils import extract_addon_identifiers, normalize_version_history_url
from marketcompat.models import PluginDescriptor
from marketcompat.progress import ProgressReporter

SCRIPTRUNNER_URL = "https://marketplace.atlassian.com/apps/1215215/scriptrunner"


@pytest.fixture
def test_config():
    """Configuration with every delay disabled."""
    cfg = Config(load_env=False)
    cfg.set("REST_PAGE_DELAY", 0)
    cfg.set("PLUGIN_DELAY", 0)
    cfg.set("BROWSER_LOAD_MORE_DELAY", 0)
    return cfg


@pytest.fixture
def reporter():
    return ProgressReporter()


@pytest.fixture
def plugin():
    return PluginDescriptor(
        name="ScriptRunner",
        marketplace_url=SCRIPTRUNNER_URL,
        current_version="8.10.0",
    )


@pytest.fixture
def fetch_context(plugin, reporter):
    return FetchContext(
        plugin=plugin,
        page_url=normalize_version_history_url(plugin.marketplace_url),
        identifiers=extract_addon_identifiers(plugin.marketplace_url),
        progress=reporter,
    )


@pytest.fixture
def mock_http():
    """HttpClient stand-in whose get_text is an AsyncMock."""
    http = MagicMock()
    http.get_text = AsyncMock()
    return http
