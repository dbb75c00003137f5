"""HTTP client for the indexed-source (LSIF) query service."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from codeintel.errors import SourceQueryError

from .models import Hover, Location, SourceQuery

logger = logging.getLogger(__name__)


class HttpIndexedSourceClient:
    """``IndexedSourceClient`` over HTTP.

    Endpoints are ``GET {base_url}/definitions``, ``/references`` and ``/hover``.
    The references endpoint advertises its next page through a ``Link`` header
    with ``rel="next"``; that URL is the upload's resume token and is requested
    verbatim on the following page, provided it stays on ``base_url``'s origin.

    Parameters
    ----------
    base_url:
        Root URL of the query service.
    timeout:
        Per-request timeout in seconds.
    http_client:
        Pre-built ``httpx.Client`` (tests inject one with a ``MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._client = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpIndexedSourceClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # IndexedSourceClient
    # ------------------------------------------------------------------

    def definitions(self, query: SourceQuery) -> list[Location]:
        response = self._get("/definitions", params=_params(query))
        return _locations(response, query)

    def references(self, query: SourceQuery) -> tuple[list[Location], str]:
        if query.cursor:
            response = self._get(self._resume_url(query))
        else:
            params = _params(query)
            if query.limit is not None:
                params["limit"] = query.limit
            response = self._get("/references", params=params)

        next_url = response.links.get("next", {}).get("url", "")
        if next_url:
            # Resolve relative links now so the token is usable on its own
            next_url = str(response.request.url.join(next_url))
        return _locations(response, query), next_url

    def hover(self, query: SourceQuery) -> Hover | None:
        response = self._get("/hover", params=_params(query))
        payload = _json(response, query)
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise SourceQueryError(f"upload {query.upload_id}: expected a hover object")
        if not payload.get("text"):
            return None
        try:
            return Hover.model_validate(payload)
        except ValidationError as exc:
            raise SourceQueryError(f"upload {query.upload_id}: invalid hover payload: {exc}") from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resume_url(self, query: SourceQuery) -> httpx.URL:
        """Return the resume token as a URL, refusing any other origin than ``base_url``.

        Tokens arrive inside a caller-supplied cursor, so they are untrusted.
        """
        try:
            url = self._client.base_url.join(query.cursor)
        except httpx.InvalidURL as exc:
            raise SourceQueryError(f"upload {query.upload_id}: invalid resume token: {exc}") from exc

        base = self._client.base_url
        if (url.scheme, url.host, url.port) != (base.scheme, base.host, base.port):
            raise SourceQueryError(
                f"upload {query.upload_id}: resume token points outside {base.scheme}://{base.host}"
            )
        return url

    def _get(self, url: str | httpx.URL, params: dict[str, Any] | None = None) -> httpx.Response:
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SourceQueryError(f"indexed source request failed: {exc}") from exc
        logger.debug("GET %s -> %s", response.request.url, response.status_code)
        return response


def _params(query: SourceQuery) -> dict[str, Any]:
    return {
        "repository": query.repository_id,
        "commit": query.commit,
        "path": query.path,
        "line": query.line,
        "character": query.character,
        "uploadId": query.upload_id,
    }


def _json(response: httpx.Response, query: SourceQuery) -> Any:
    # 204 / empty body means the upload has no answer
    if not response.content.strip():
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise SourceQueryError(f"upload {query.upload_id}: response is not JSON: {exc}") from exc


def _locations(response: httpx.Response, query: SourceQuery) -> list[Location]:
    payload = _json(response, query)
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise SourceQueryError(f"upload {query.upload_id}: expected a list of locations")
    try:
        return [Location.model_validate(item) for item in payload]
    except ValidationError as exc:
        raise SourceQueryError(f"upload {query.upload_id}: invalid location payload: {exc}") from exc
