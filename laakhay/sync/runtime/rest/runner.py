"""REST request runner using endpoint specs and response adapters."""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, replace
from typing import Any

from ..paging import EntitySelector, Page, PageRequest, Pager, coerce_selector
from ..paging.telemetry import log_page_error, log_page_extracted, log_page_stream_complete
from .transport import RESTTransport


@dataclass(frozen=True)
class RestEndpointSpec:
    entity_type: str
    method: str  # "GET" | "POST"
    build_path: Callable[[dict[str, Any]], str]
    build_query: Callable[[dict[str, Any]], dict[str, Any]] | None = None
    build_body: Callable[[dict[str, Any]], Any] | None = None
    build_headers: Callable[[dict[str, Any]], dict[str, str]] | None = None
    # Where unpaginated list responses keep their records
    selector: EntitySelector | str | None = None
    # Pager can be static or a factory function that creates a pager from params
    pager: Pager | Callable[[dict[str, Any]], Pager] | None = None
    # Filter keys accepting a list of values in a single request
    multi_value_filters: frozenset[str] = frozenset()


class ResponseAdapter:
    def parse(self, response: Any, params: dict[str, Any]) -> Any:
        return response

    def parse_record(self, record: Any, params: dict[str, Any]) -> Any:
        return record


class RestRunner:
    def __init__(self, transport: RESTTransport) -> None:
        self._t = transport

    @staticmethod
    def build_request(spec: RestEndpointSpec, params: dict[str, Any]) -> PageRequest:
        return PageRequest(
            method=spec.method.upper(),
            url=spec.build_path(params),
            query=spec.build_query(params) if spec.build_query else None,
            body=spec.build_body(params) if spec.build_body else None,
            headers=spec.build_headers(params) if spec.build_headers else None,
        )

    async def run(
        self, *, spec: RestEndpointSpec, adapter: ResponseAdapter, params: dict[str, Any]
    ) -> Any:
        response = await self._t.send(self.build_request(spec, params))
        return adapter.parse(response.json(), params)

    async def iter_pages(
        self,
        *,
        spec: RestEndpointSpec,
        adapter: ResponseAdapter,
        params: dict[str, Any],
        pager: Pager | None = None,
    ) -> AsyncIterator[Page]:
        """Yield each page of records returned for ``params``.

        Without a pager the endpoint returns a single page. With one, the
        pager amends the first request and derives every following request
        until it reports the last page.
        """
        request = self.build_request(spec, params)

        if pager is None:
            response = await self._send(spec, request, 0)
            records = coerce_selector(spec.selector).select(response.json())
            page = self._adapt(Page.create(records, request=request), adapter, params)
            log_page_extracted(entity_type=spec.entity_type, page_index=0, page=page)
            yield page
            return

        query, body, headers = pager.prepare_initial_request(
            request.query, request.body, request.headers
        )
        request = replace(request, query=query, body=body, headers=headers)

        previous: Page | None = None
        index = 0
        while True:
            start = time.perf_counter()
            response = await self._send(spec, request, index)
            try:
                page = pager.extract_page(response.json(), response.headers, request, previous)
            except Exception as e:
                log_page_error(
                    entity_type=spec.entity_type,
                    page_index=index,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                raise
            page = self._adapt(page, adapter, params)
            log_page_extracted(
                entity_type=spec.entity_type,
                page_index=index,
                page=page,
                latency_ms=(time.perf_counter() - start) * 1000,
            )
            yield page

            if page.is_last_page:
                log_page_stream_complete(
                    entity_type=spec.entity_type, pages=index + 1, entity_count=page.entity_count
                )
                return

            next_request = page.next_request
            request = PageRequest(
                method=request.method,
                url=next_request.url,
                body=next_request.body if next_request.body is not None else request.body,
                headers=(
                    next_request.headers if next_request.headers is not None else request.headers
                ),
            )
            previous = page
            index += 1

    async def _send(self, spec: RestEndpointSpec, request: PageRequest, index: int):
        try:
            return await self._t.send(request)
        except Exception as e:
            log_page_error(
                entity_type=spec.entity_type,
                page_index=index,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise

    @staticmethod
    def _adapt(page: Page, adapter: ResponseAdapter, params: dict[str, Any]) -> Page:
        records = tuple(adapter.parse_record(record, params) for record in page.entities)
        return replace(page, entities=records)
