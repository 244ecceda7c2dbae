"""
Unit tests for domain models and the default source chain.
"""

from unittest.mock import MagicMock

from marketcompat.connectors import (
    InitialStateSource,
    RenderedDomSource,
    RestApiSource,
    default_sources,
)
from marketcompat.models import AddonIdentifiers, PluginDescriptor, RawVersionRecord


class TestPluginDescriptor:

    def test_from_dict_camel_case(self):
        plugin = PluginDescriptor.from_dict({
            "name": " ScriptRunner ",
            "marketplaceUrl": "https://marketplace.example.com/apps/1/sr",
            "currentVersion": 8.1,
            "type": "jira",
        })
        assert plugin == PluginDescriptor("ScriptRunner", "https://marketplace.example.com/apps/1/sr",
                                          "8.1", product_type="jira")

    def test_from_dict_snake_case(self):
        plugin = PluginDescriptor.from_dict({
            "name": "Gliffy",
            "marketplace_url": "https://marketplace.example.com/apps/2/gliffy",
            "current_version": "10.0",
            "notes": "diagrams",
        })
        assert plugin.current_version == "10.0"
        assert plugin.notes == "diagrams"
        assert plugin.product_type is None

    def test_to_dict(self):
        data = PluginDescriptor("A", "https://m.example.com/apps/1/a", "1.0", "confluence").to_dict()
        assert data == {
            "name": "A",
            "marketplaceUrl": "https://m.example.com/apps/1/a",
            "currentVersion": "1.0",
            "type": "confluence",
            "notes": None,
        }


class TestAddonIdentifiers:

    def test_key_prefers_id(self):
        assert AddonIdentifiers(id="12", slug="thing").key == "12"
        assert AddonIdentifiers(slug="thing").key == "thing"


class TestRawVersionRecord:

    def test_to_dict(self):
        record = RawVersionRecord("1.0", "8.0 - 9.0", "8.0", "9.0", "2024-01-01", "notes")
        assert record.to_dict() == {
            "version": "1.0",
            "compatibility": "8.0 - 9.0",
            "minVersion": "8.0",
            "maxVersion": "9.0",
            "releaseDate": "2024-01-01",
            "releaseSummary": "notes",
        }


class TestDefaultSources:

    def test_priority_order(self, test_config):
        sources = default_sources(MagicMock(), MagicMock(), test_config)
        assert [type(s) for s in sources] == [InitialStateSource, RestApiSource, RenderedDomSource]
        assert [s.name for s in sources] == ["initial-state", "rest-api", "browser"]
        assert all(s.config is test_config for s in sources)
