"""Generic pagination layer.

This module provides the pager protocol that turns backend responses into
pages and derives the request for each following page.

Architecture:
    The paging layer consists of:
    - definitions.py: Page, PageRequest, NextRequest, PagerState, EntitySelector
    - pagers.py: Pager protocol and the link-following and cursor strategies
    - telemetry.py: Structured logging

Usage:
    Endpoints opt into pagination by providing a pager (or a pager factory)
    in their endpoint specifications. The REST runner drives the pager.
"""

from __future__ import annotations

from .definitions import (
    EntitySelector,
    NextRequest,
    Page,
    PageRequest,
    PagerState,
    coerce_selector,
    extract_pager,
)
from .pagers import ODataPager, Pager, QueryPager

__all__ = [
    "EntitySelector",
    "NextRequest",
    "Page",
    "PageRequest",
    "Pager",
    "PagerState",
    "ODataPager",
    "QueryPager",
    "coerce_selector",
    "extract_pager",
]
