"""Extraction of document links from the search results table."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from bs4 import BeautifulSoup
from playwright.sync_api import Page

from .config import ScraperConfig
from .utils import log_line


@dataclass(frozen=True)
class LinkRecord:
    href: str
    label: str


def resolve_href(href: str, base_origin: str) -> str:
    """Prefix site-relative ``href`` values with ``base_origin``.

    Anything not starting with ``/`` is returned unchanged.
    """

    if href.startswith("/"):
        return f"{base_origin}{href}"
    return href


def extract_links(html: str, *, base_origin: str, selector: str) -> List[LinkRecord]:
    """Return the anchors matched by ``selector`` in document order."""

    soup = BeautifulSoup(html, "html5lib")
    links: List[LinkRecord] = []
    for anchor in soup.select(selector):
        href = anchor.get("href")
        label = anchor.get_text().strip()
        if not href:
            log_line(f"[LINKS] Ignoring anchor without href: {label!r}")
            continue
        links.append(LinkRecord(href=resolve_href(str(href).strip(), base_origin), label=label))
    return links


def extract_links_from_page(page: Page, cfg: ScraperConfig) -> List[LinkRecord]:
    """Read the live DOM (without touching it) and extract the result links."""

    log_line("Targeting <a> tags within the specific div and table...")
    links = extract_links(
        page.content(),
        base_origin=cfg.base_origin,
        selector=cfg.link_selector,
    )
    log_line(f"Found {len(links)} PDFs to download.")
    return links


__all__ = ["LinkRecord", "resolve_href", "extract_links", "extract_links_from_page"]
