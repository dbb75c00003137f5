"""Multi-upload query resolver: translate, query, then merge or short-circuit.

Uploads arrive ordered by ascending commit distance from the target commit and
are never reordered:

* ``definitions`` / ``hover`` walk the uploads in order and return the first
  non-empty answer.
* ``references`` accumulates one page from every upload still in play and
  hands back a cursor holding each upload's resume token.

An upload whose commit has no counterpart for the queried line is skipped.
Every other failure aborts the whole request.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from functools import partial
from typing import TypeVar

from codeintel.errors import CodeIntelError, QueryCancelled, SourceQueryError
from codeintel.positions.translator import PositionAdjuster

from .cursor import decode_cursor, encode_cursor
from .models import (
    Hover,
    IndexedSourceClient,
    Location,
    LocationConnection,
    QueryConfig,
    SourceQuery,
    Upload,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# How often a blocked fan-out re-checks the caller's cancel event
_CANCEL_POLL_SECONDS = 0.05


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise QueryCancelled("request cancelled by caller")


class QueryResolver:
    """Answers position queries for one path at one commit across many uploads.

    Parameters
    ----------
    repository_id:
        Repository the uploads belong to; passed through to the source.
    commit:
        The commit the caller's positions are expressed in.
    path:
        Repository-relative file path.
    uploads:
        Candidate uploads, ordered by ascending commit distance from *commit*.
    client:
        ``IndexedSourceClient`` answering per-upload queries.
    adjuster:
        ``PositionAdjuster`` moving positions into each upload's commit.
    config:
        ``QueryConfig``; defaults apply when omitted.
    """

    def __init__(
        self,
        repository_id: int,
        commit: str,
        path: str,
        uploads: Sequence[Upload],
        client: IndexedSourceClient,
        adjuster: PositionAdjuster,
        config: QueryConfig | None = None,
    ) -> None:
        self.repository_id = repository_id
        self.commit = commit
        self.path = path
        self.uploads = tuple(uploads)
        self.config = config or QueryConfig()
        self._client = client
        self._adjuster = adjuster

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def definitions(
        self,
        line: int,
        character: int,
        cancel_event: threading.Event | None = None,
    ) -> LocationConnection:
        """Return definitions from the closest upload that has any."""
        for upload in self.uploads:
            _check_cancelled(cancel_event)
            query = self._source_query(upload, line, character)
            if query is None:
                continue

            locations = self._call(self._client.definitions, query)
            _check_cancelled(cancel_event)
            if locations:
                logger.debug("definitions answered by upload %d (%s)", upload.id, upload.commit)
                return LocationConnection(locations=locations)

        _check_cancelled(cancel_event)
        return LocationConnection()

    def hover(
        self,
        line: int,
        character: int,
        cancel_event: threading.Event | None = None,
    ) -> Hover | None:
        """Return hover text from the closest upload that has any, else ``None``."""
        for upload in self.uploads:
            _check_cancelled(cancel_event)
            query = self._source_query(upload, line, character)
            if query is None:
                continue

            hover = self._call(self._client.hover, query)
            _check_cancelled(cancel_event)
            if hover is not None and hover.text:
                logger.debug("hover answered by upload %d (%s)", upload.id, upload.commit)
                return hover

        _check_cancelled(cancel_event)
        return None

    def references(
        self,
        line: int,
        character: int,
        after: str | None = None,
        first: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> LocationConnection:
        """Return one page of references accumulated across uploads.

        Parameters
        ----------
        after:
            ``end_cursor`` of the previous page; ``None``/``""`` for the first page.
        first:
            Page size passed to every upload; falls back to ``config.page_size``.
        cancel_event:
            Set by the caller to abandon the request.

        Raises
        ------
        CursorDecodeError
            If *after* is not a cursor this resolver produced.
        QueryCancelled
            If *cancel_event* is set before every upload has answered.
        """
        # Upload id → resume token. Uploads missing from a non-empty cursor
        # were exhausted earlier (or started after the first page) and would
        # only repeat or reorder results.
        resume_tokens = decode_cursor(after)
        limit = first if first is not None else self.config.page_size

        in_play = [u for u in self.uploads if not resume_tokens or u.id in resume_tokens]
        tasks = [
            partial(self._reference_page, upload, line, character, limit, resume_tokens.get(upload.id))
            for upload in in_play
        ]
        pages = self._gather(tasks, cancel_event)

        locations: list[Location] = []
        next_tokens: dict[int, str] = {}
        for upload, (page, next_token) in zip(in_play, pages):
            locations.extend(page)
            if next_token:
                next_tokens[upload.id] = next_token

        return LocationConnection(locations=locations, end_cursor=encode_cursor(next_tokens))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _source_query(
        self,
        upload: Upload,
        line: int,
        character: int,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> SourceQuery | None:
        position = self._adjuster.adjust(upload.commit, self.commit, self.path, line, character)
        if position is None:
            logger.debug("skipping upload %d: line %d is not stable at %s", upload.id, line, upload.commit)
            return None

        return SourceQuery(
            repository_id=self.repository_id,
            commit=self.commit,
            path=self.path,
            line=position.line,
            character=position.character,
            upload_id=upload.id,
            limit=limit,
            cursor=cursor,
        )

    def _reference_page(
        self,
        upload: Upload,
        line: int,
        character: int,
        limit: int | None,
        cursor: str | None,
    ) -> tuple[list[Location], str]:
        query = self._source_query(upload, line, character, limit=limit, cursor=cursor)
        if query is None:
            return [], ""
        return self._call(self._client.references, query)

    def _call(self, method: Callable[[SourceQuery], T], query: SourceQuery) -> T:
        try:
            return method(query)
        except CodeIntelError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise SourceQueryError(f"upload {query.upload_id}: {exc}") from exc

    def _gather(
        self,
        tasks: Sequence[Callable[[], T]],
        cancel_event: threading.Event | None,
    ) -> list[T]:
        """Run *tasks* and return their results in task order."""
        if self.config.max_workers <= 1 or len(tasks) <= 1:
            results: list[T] = []
            for task in tasks:
                _check_cancelled(cancel_event)
                results.append(task())
            # A cancel that lands during the last call still discards its page
            _check_cancelled(cancel_event)
            return results

        pool = ThreadPoolExecutor(
            max_workers=min(self.config.max_workers, len(tasks)),
            thread_name_prefix="codeintel-references",
        )
        futures = [pool.submit(task) for task in tasks]
        try:
            pending = set(futures)
            while pending:
                _check_cancelled(cancel_event)
                done, pending = wait(pending, timeout=_CANCEL_POLL_SECONDS, return_when=FIRST_EXCEPTION)
                # Surface the failure of the closest upload first
                for future in futures:
                    if future not in done:
                        continue
                    exc = future.exception()
                    if exc is not None:
                        raise exc
            _check_cancelled(cancel_event)
            return [future.result() for future in futures]
        finally:
            # Abandon whatever has not started; running branches finish detached
            pool.shutdown(wait=False, cancel_futures=True)
