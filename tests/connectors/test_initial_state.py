"""
Unit tests for the embedded page state source.
"""

import pytest

from marketcompat.connectors.initial_state import (
    InitialStateSource,
    extract_state_json,
    extract_version_record,
    select_datacenter_compatibility,
    walk_initial_state,
)
from marketcompat.utils.error_handling import MalformedUpstreamDataError, NetworkError
from tests.helpers import dc_version_node, state_page, state_page_raw


class TestSelectDatacenterCompatibility:

    @pytest.mark.parametrize("hosting", ["datacenter", "DataCenter", "data_center", "server_and_dc"])
    def test_datacenter_markers(self, hosting):
        entry = {"hosting": hosting, "min": "1.0", "max": "2.0"}
        assert select_datacenter_compatibility([{"hosting": "cloud"}, entry]) is entry

    def test_type_field_used_when_hosting_absent(self):
        entry = {"type": "DATACENTER"}
        assert select_datacenter_compatibility([entry]) is entry

    def test_no_match(self):
        assert select_datacenter_compatibility([{"hosting": "cloud"}, {"hosting": "server"}, "junk"]) is None


class TestExtractVersionRecord:

    def test_plain_min_max(self):
        record = extract_version_record(dc_version_node("2.1.0", "8.0.0", "9.4.0"), "2.1.0")
        assert record.version == "2.1.0"
        assert (record.min_version, record.max_version) == ("8.0.0", "9.4.0")
        assert record.compatibility == "8.0.0 - 9.4.0"
        assert record.release_date == "2024-01-01"
        assert record.release_summary == "Release 2.1.0"

    def test_embedded_compatible_versions(self):
        node = {
            "version": "3.0",
            "releaseDate": "2023-05-05",
            "releaseSummary": "Bug fixes",
            "_embedded": {"compatibilities": [
                {"hosting": "datacenter", "_embedded": {"compatibleVersions": {"min": "7.0", "max": "8.0"}}},
            ]},
        }
        record = extract_version_record(node, "3.0")
        assert (record.min_version, record.max_version) == ("7.0", "8.0")
        assert record.release_date == "2023-05-05"
        assert record.release_summary == "Bug fixes"

    def test_min_version_max_version_keys(self):
        node = {"compatibility": [{"hosting": "datacenter", "minVersion": "1.0", "maxVersion": "1.5"}]}
        record = extract_version_record(node, "0.9")
        assert (record.min_version, record.max_version) == ("1.0", "1.5")

    def test_missing_bound(self):
        node = {"compatibilities": [{"hosting": "datacenter", "min": "1.0"}]}
        assert extract_version_record(node, "1.0") is None

    def test_no_datacenter_entry(self):
        node = {"compatibilities": [{"hosting": "cloud", "min": "1.0", "max": "2.0"}]}
        assert extract_version_record(node, "1.0") is None


class TestWalkInitialState:

    def test_finds_nested_versions(self):
        state = {"app": {"versions": {"items": [
            dc_version_node("1.0.0", "8.0", "8.9"),
            dc_version_node("2.0.0", "8.5", "9.4"),
        ]}}}
        records = []
        walk_initial_state(state, records)
        assert [r.version for r in records] == ["1.0.0", "2.0.0"]

    def test_ignores_non_version_names(self):
        state = {"name": "ScriptRunner", "children": [{"name": "a-very-long-version-like-name-1.2.3.4.5"}]}
        records = []
        walk_initial_state(state, records)
        assert records == []

    def test_does_not_descend_into_matched_node(self):
        outer = dc_version_node("1.0", "8.0", "9.0", nested=[dc_version_node("9.9", "1.0", "2.0")])
        records = []
        walk_initial_state([outer], records)
        assert [r.version for r in records] == ["1.0"]

    def test_descends_into_unmatched_version_node(self):
        # A version-named node without a DC entry is still searched
        state = {"name": "5.0", "history": [dc_version_node("4.0", "8.0", "9.0")]}
        records = []
        walk_initial_state(state, records)
        assert [r.version for r in records] == ["4.0"]

    def test_depth_bound(self):
        node = dc_version_node("1.0", "8.0", "9.0")
        for _ in range(20):
            node = {"wrapper": node}
        records = []
        walk_initial_state(node, records, max_depth=15)
        assert records == []
        walk_initial_state(node, records, max_depth=25)
        assert len(records) == 1


class TestExtractStateJson:

    def test_plain_json(self):
        assert extract_state_json(state_page({"a": 1})) == {"a": 1}

    def test_entity_escaped_json(self):
        assert extract_state_json(state_page({"a": "b & c"}, escape_quotes=True)) == {"a": "b & c"}

    def test_missing_tag(self):
        with pytest.raises(MalformedUpstreamDataError, match="script tag not found"):
            extract_state_json("<html><script id='other'>{}</script></html>")

    def test_nesting_too_deep_for_decoder(self):
        with pytest.raises(MalformedUpstreamDataError, match="nested too deeply") as exc_info:
            extract_state_json(state_page_raw("[" * 100000 + "]" * 100000))
        assert isinstance(exc_info.value.cause, RecursionError)

    def test_unparseable(self):
        with pytest.raises(MalformedUpstreamDataError, match="JSON parse failed"):
            extract_state_json('<script id="initial-state">{not json</script>')


class TestInitialStateSource:

    @pytest.mark.asyncio
    async def test_fetch(self, mock_http, fetch_context, test_config):
        mock_http.get_text.return_value = state_page({"versions": [
            dc_version_node("8.10.0", "8.0", "9.4"),
            dc_version_node("9.0.0", "9.0", "10.0"),
        ]})
        source = InitialStateSource(mock_http, test_config)

        records = await source.fetch(fetch_context)

        assert [r.version for r in records] == ["8.10.0", "9.0.0"]
        mock_http.get_text.assert_awaited_once_with(fetch_context.page_url, headers={"Accept": "text/html"})
        assert "  [Method 1] Found 2 versions" in fetch_context.progress.history

    @pytest.mark.asyncio
    async def test_no_versions(self, mock_http, fetch_context, test_config):
        mock_http.get_text.return_value = state_page({"app": {"title": "nothing"}})
        source = InitialStateSource(mock_http, test_config)

        with pytest.raises(MalformedUpstreamDataError, match="No version data found"):
            await source.fetch(fetch_context)

    @pytest.mark.asyncio
    async def test_network_error_propagates(self, mock_http, fetch_context, test_config):
        mock_http.get_text.side_effect = NetworkError("HTTP 503")
        source = InitialStateSource(mock_http, test_config)

        with pytest.raises(NetworkError):
            await source.fetch(fetch_context)
