#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Batch compatibility checking.

Plugins are processed one at a time with a fixed pause between them, which
keeps the load on the marketplace polite. One HTTP session and one headless
browser are shared by the whole batch and released when it ends, whatever
the per-plugin outcomes were.
"""

import asyncio
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from marketcompat.browser import BrowserConfig, BrowserSession
from marketcompat.config import config as default_config
from marketcompat.connectors import HttpClient, default_sources
from marketcompat.models import PluginDescriptor, PluginResult
from marketcompat.orchestrator import FetchOrchestrator
from marketcompat.progress import ProgressCallback, ProgressReporter, ensure_reporter
from marketcompat.results import build_failed_result, build_result
from marketcompat.utils.error_handling import AllMethodsExhaustedError, InputValidationError
from marketcompat.utils.logging_config import logger

PluginInput = Union[PluginDescriptor, Mapping[str, Any]]


def _default_browser_factory(config) -> BrowserSession:
    return BrowserSession(BrowserConfig.from_config(config))


def _default_http_factory(config) -> HttpClient:
    return HttpClient(config)


def validate_batch_input(plugins: Optional[Sequence[PluginInput]], target_version: Optional[str]) -> List[PluginDescriptor]:
    """
    Check batch input before any network activity.

    Raises:
        InputValidationError: If the target version is blank, the plugin list
            is empty, or an entry is not a plugin descriptor
    """
    if not target_version or not str(target_version).strip():
        raise InputValidationError("Target version is required", field="target_version")
    if not plugins:
        raise InputValidationError("Plugin list is empty", field="plugins")

    descriptors = []
    for index, plugin in enumerate(plugins):
        if isinstance(plugin, PluginDescriptor):
            descriptors.append(plugin)
        elif isinstance(plugin, Mapping):
            descriptors.append(PluginDescriptor.from_dict(plugin))
        else:
            raise InputValidationError(f"Plugin #{index + 1} is not a plugin descriptor", field="plugins")
    return descriptors


class BatchRunner:
    """
    Runs the fetch orchestrator and result builder over a plugin list.

    Args:
        config: Configuration object (defaults to the module-level config)
        progress: Callable or ProgressReporter receiving status lines
        browser_factory: Builds the shared ``BrowserSession`` for a batch
        http_factory: Builds the shared ``HttpClient`` for a batch
        sources_factory: Builds the priority-ordered source list
    """

    def __init__(
        self,
        config=None,
        progress: Optional[Union[ProgressCallback, ProgressReporter]] = None,
        browser_factory: Callable[[Any], BrowserSession] = _default_browser_factory,
        http_factory: Callable[[Any], HttpClient] = _default_http_factory,
        sources_factory=default_sources,
    ):
        self.config = config or default_config
        self.progress = ensure_reporter(progress)
        self.browser_factory = browser_factory
        self.http_factory = http_factory
        self.sources_factory = sources_factory
        self.plugin_delay = self.config.get("PLUGIN_DELAY", 2.0)

    async def run(self, plugins: Sequence[PluginInput], target_version: str) -> List[PluginResult]:
        """
        Check every plugin against ``target_version``.

        Returns:
            One result per plugin, in input order

        Raises:
            InputValidationError: On a blank target or empty plugin list
            ResourceError: If the headless browser cannot be launched
        """
        descriptors = validate_batch_input(plugins, target_version)
        target_version = str(target_version).strip()
        total = len(descriptors)

        self.progress("Launching browser (used only as final fallback)...")
        results: List[PluginResult] = []

        async with self.http_factory(self.config) as http, self.browser_factory(self.config) as session:
            orchestrator = FetchOrchestrator(
                self.sources_factory(http, session, self.config), self.progress
            )
            for index, plugin in enumerate(descriptors):
                self.progress(f"[{index + 1}/{total}] Processing: {plugin.name}")
                results.append(await self._check_plugin(orchestrator, plugin, target_version))

                if index < total - 1 and self.plugin_delay > 0:
                    await asyncio.sleep(self.plugin_delay)

        logger.info(f"Checked {total} plugins against {target_version}")
        return results

    async def _check_plugin(self, orchestrator: FetchOrchestrator, plugin: PluginDescriptor,
                            target_version: str) -> PluginResult:
        try:
            outcome = await orchestrator.fetch(plugin)
        except AllMethodsExhaustedError as e:
            self.progress(f"  ✗ Error: {e.message}")
            return build_failed_result(plugin, target_version, e.message)

        result = build_result(plugin, outcome.versions, target_version, outcome.method)
        self.progress(f"  ✓ Found {len(result.compatible_versions)} compatible versions")
        return result


async def check_compatibility(
    plugins: Sequence[PluginInput],
    target_version: str,
    progress_callback: Optional[ProgressCallback] = None,
    config=None,
) -> List[PluginResult]:
    """Check a plugin list against a target version with the default sources."""
    runner = BatchRunner(config=config, progress=progress_callback)
    return await runner.run(plugins, target_version)
