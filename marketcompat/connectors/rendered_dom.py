"""
Rendered DOM source.

Last-resort method: render the version-history page in the shared headless
browser, expand the paginated history and scrape the ARIA treegrid. Each row
carries at least three grid cells (version, compatibility text, release date).
"""

import re
import asyncio
from typing import List, Optional, Sequence

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError
from playwright.async_api import Error as PlaywrightError

from marketcompat.browser import BrowserSession
from marketcompat.connectors.base import FetchContext, VersionSource
from marketcompat.models import RawVersionRecord
from marketcompat.utils.error_handling import AcquisitionError, MalformedUpstreamDataError
from marketcompat.utils.logging_config import logger
from marketcompat.versioning import parse_compatibility_string

GRID_SELECTOR = '[role="treegrid"]'
FALLBACK_GRID_SELECTOR = '[role="row"], table'
ROW_SELECTOR = '[role="treegrid"] [role="row"], [role="rowgroup"] [role="row"]'
CELL_SELECTOR = '[role="gridcell"]'
MIN_CELLS_PER_ROW = 3

_ROW_VERSION_RE = re.compile(r'(?:^|\s)(\d+\.[0-9a-zA-Z.]+)(?:$|\s)')

# Clicks the first visible, enabled "load more"/"show more" button
LOAD_MORE_SCRIPT = """
() => {
  const buttons = Array.from(document.querySelectorAll('button'));
  const btn = buttons.find(b => {
    const t = (b.textContent || '').toLowerCase();
    return t.includes('load more') || t.includes('show more');
  });
  if (btn && !btn.disabled && btn.offsetParent !== null) {
    btn.scrollIntoView({ block: 'center' });
    btn.click();
    return true;
  }
  return false;
}
"""

# Returns the text of every grid cell, row by row
ROW_CELLS_SCRIPT = """
([rowSelector, cellSelector]) => Array.from(document.querySelectorAll(rowSelector)).map(row =>
  Array.from(row.querySelectorAll(cellSelector)).map(cell => cell.innerText || cell.textContent || '')
)
"""


def parse_row(cells: Sequence[str]) -> Optional[RawVersionRecord]:
    """Turn one row's cell texts into a record, or None if it has no version."""
    if len(cells) < MIN_CELLS_PER_ROW:
        return None

    match = _ROW_VERSION_RE.search(cells[0] or "")
    if not match:
        return None

    compatibility = (cells[1] or "").strip()
    parsed = parse_compatibility_string(compatibility)
    return RawVersionRecord(
        version=match.group(1).strip(),
        compatibility=compatibility,
        min_version=parsed.min_version,
        max_version=parsed.max_version,
        release_date=(cells[2] or "").strip(),
    )


def parse_rows(rows: Sequence[Sequence[str]]) -> List[RawVersionRecord]:
    records = []
    for cells in rows:
        record = parse_row(cells)
        if record is not None:
            records.append(record)
    return records


class RenderedDomSource(VersionSource):
    """Scrapes the version-history treegrid from a rendered page."""

    name = "browser"
    label = "Method 3"

    def __init__(self, session: BrowserSession, config=None):
        super().__init__(config)
        self.session = session
        self.navigation_timeout = self.config.get("BROWSER_NAVIGATION_TIMEOUT", 60) * 1000
        self.grid_timeout = self.config.get("BROWSER_GRID_TIMEOUT", 15) * 1000
        self.fallback_timeout = self.config.get("BROWSER_FALLBACK_TIMEOUT", 5) * 1000
        self.max_load_more = self.config.get("BROWSER_MAX_LOAD_MORE", 25)
        self.load_more_delay = self.config.get("BROWSER_LOAD_MORE_DELAY", 2.0)

    async def fetch(self, context: FetchContext) -> List[RawVersionRecord]:
        context.progress(f"  [{self.label}] Browser rendering: {context.page_url}")
        try:
            async with self.session.page() as page:
                await page.goto(context.page_url, wait_until="networkidle",
                                timeout=self.navigation_timeout)
                await self._wait_for_grid(page)
                await self._expand_history(page, context)
                rows = await page.evaluate(ROW_CELLS_SCRIPT, [ROW_SELECTOR, CELL_SELECTOR])
        except PlaywrightTimeoutError as e:
            raise AcquisitionError(f"Timeout: {e}", method=self.name, url=context.page_url, cause=e)
        except PlaywrightError as e:
            raise AcquisitionError(str(e), method=self.name, url=context.page_url, cause=e)

        records = parse_rows(rows or [])
        if not records:
            raise MalformedUpstreamDataError("No rows found. DOM selector mismatch.", method=self.name)

        context.progress(f"  [{self.label}] Extracted {len(records)} versions from DOM")
        return records

    async def _wait_for_grid(self, page: Page) -> None:
        try:
            await page.wait_for_selector(GRID_SELECTOR, timeout=self.grid_timeout)
        except PlaywrightTimeoutError:
            logger.debug(f"{GRID_SELECTOR} not found, waiting for any row-like element")
            await page.wait_for_selector(FALLBACK_GRID_SELECTOR, timeout=self.fallback_timeout)

    async def _expand_history(self, page: Page, context: FetchContext) -> int:
        clicks = 0
        while clicks < self.max_load_more:
            clicked = await page.evaluate(LOAD_MORE_SCRIPT)
            if not clicked:
                break
            await asyncio.sleep(self.load_more_delay)
            clicks += 1
            if clicks % 5 == 0:
                context.progress(f"  [{self.label}] Expanded history ({clicks} clicks)")
        return clicks
