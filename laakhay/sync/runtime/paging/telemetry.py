"""Structured logging for page streams.

This module provides telemetry hooks for pagination, emitting structured
logs for observability.
"""

from __future__ import annotations

import logging

from .definitions import Page

logger = logging.getLogger(__name__)


def log_page_extracted(
    *,
    entity_type: str,
    page_index: int,
    page: Page,
    latency_ms: float | None = None,
) -> None:
    """Log extraction of a single page.

    Args:
        entity_type: Entity type being paged
        page_index: Zero-based index of the page in its stream
        page: The extracted page
        latency_ms: Request latency in milliseconds (optional)
    """
    logger.debug(
        "page_extracted",
        extra={
            "entity_type": entity_type,
            "page_index": page_index,
            "entities": len(page.entities),
            "entity_count": page.entity_count,
            "is_last_page": page.is_last_page,
            "latency_ms": latency_ms,
        },
    )


def log_page_stream_complete(*, entity_type: str, pages: int, entity_count: int) -> None:
    """Log the end of a page stream."""
    logger.info(
        "page_stream_complete",
        extra={
            "entity_type": entity_type,
            "pages": pages,
            "entity_count": entity_count,
        },
    )


def log_page_stream_stopped(*, entity_type: str, pages: int, entity_count: int) -> None:
    """Log a page stream abandoned because its session was stopped."""
    logger.info(
        "page_stream_stopped",
        extra={
            "entity_type": entity_type,
            "pages": pages,
            "entity_count": entity_count,
        },
    )


def log_page_error(
    *,
    entity_type: str,
    page_index: int,
    error_type: str,
    error_message: str,
) -> None:
    """Log a failed page request or extraction.

    Args:
        entity_type: Entity type being paged
        page_index: Zero-based index of the page that failed
        error_type: Type of error (e.g. "TransportError")
        error_message: Error message
    """
    logger.error(
        "page_request_error",
        extra={
            "entity_type": entity_type,
            "page_index": page_index,
            "error_type": error_type,
            "error_message": error_message,
        },
    )
