"""Mock upload scenarios — deterministic repositories for resolver smoke testing.

Each ``MockQueryScenario`` carries several versions of one file, the uploads
indexed at some of those versions, and the answers each upload's index holds.
It provides a ``DiffSource`` (diffs generated on the fly with ``difflib``) and
an ``IndexedSourceClient`` so it can be injected into ``QueryResolver`` without
a git repository or a running query service.

Usage::

    from codeintel.seed.mock_uploads import get_scenario

    scenario = get_scenario("checkout_drift")
    resolver = scenario.resolver()
    print(resolver.definitions(line=8, character=13))

Line numbers in these scenarios are 1-based, matching ``git diff`` output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from difflib import unified_diff

from codeintel.positions.models import Position, Range
from codeintel.positions.translator import PositionAdjuster
from codeintel.query.models import Hover, Location, QueryConfig, SourceQuery, Upload
from codeintel.query.resolver import QueryResolver

# ---------------------------------------------------------------------------
# Diff source
# ---------------------------------------------------------------------------


class InMemoryDiffSource:
    """``DiffSource`` over a commit → file content map for a single path."""

    def __init__(self, path: str, versions: dict[str, str]) -> None:
        self.path = path
        self._versions = dict(versions)
        self.calls: list[tuple[str, str, str]] = []

    def get_diff(self, commit_a: str, commit_b: str, path: str) -> str:
        self.calls.append((commit_a, commit_b, path))
        if path != self.path:
            raise FileNotFoundError(f"No mock content for {path}")
        before = _lines(self._versions[commit_a])
        after = _lines(self._versions[commit_b])
        return "".join(unified_diff(before, after, fromfile=f"a/{path}", tofile=f"b/{path}"))


def _lines(content: str) -> list[str]:
    lines = content.splitlines(keepends=True)
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n"
    return lines


# ---------------------------------------------------------------------------
# Indexed source
# ---------------------------------------------------------------------------


@dataclass
class SymbolEntry:
    """What an upload's index knows about the symbol on one line."""
    definitions: list[Location] = field(default_factory=list)
    references: list[Location] = field(default_factory=list)
    hover: str = ""
    hover_range: Range | None = None


@dataclass
class UploadIndex:
    upload: Upload
    symbols: dict[int, SymbolEntry]   # line (upload coordinates) → entry


class InMemoryIndexedSource:
    """``IndexedSourceClient`` answering from ``UploadIndex`` tables.

    Reference pages are cut from the full list; the resume token is
    ``"<upload_id>:<offset>"``. Every call is recorded in ``calls`` as
    ``(kind, upload_id, line)``.
    """

    def __init__(self, indexes: list[UploadIndex]) -> None:
        self._indexes = {ix.upload.id: ix for ix in indexes}
        self.calls: list[tuple[str, int, int]] = []

    def _entry(self, kind: str, query: SourceQuery) -> SymbolEntry:
        self.calls.append((kind, query.upload_id, query.line))
        index = self._indexes.get(query.upload_id)
        if index is None:
            raise LookupError(f"upload {query.upload_id} is not indexed")
        return index.symbols.get(query.line, SymbolEntry())

    def definitions(self, query: SourceQuery) -> list[Location]:
        return list(self._entry("definitions", query).definitions)

    def references(self, query: SourceQuery) -> tuple[list[Location], str]:
        refs = self._entry("references", query).references
        offset = 0
        if query.cursor:
            upload_id, _, raw_offset = query.cursor.partition(":")
            if int(upload_id) != query.upload_id:
                raise ValueError(f"resume token {query.cursor!r} belongs to another upload")
            offset = int(raw_offset)
        end = len(refs) if query.limit is None else min(offset + query.limit, len(refs))
        next_token = f"{query.upload_id}:{end}" if end < len(refs) else ""
        return list(refs[offset:end]), next_token

    def hover(self, query: SourceQuery) -> Hover | None:
        entry = self._entry("hover", query)
        if not entry.hover:
            return None
        return Hover(text=entry.hover, range=entry.hover_range)


# ---------------------------------------------------------------------------
# Scenario bundle
# ---------------------------------------------------------------------------


@dataclass
class MockQueryScenario:
    """One repository path, its versions, and the uploads indexed over them."""
    scenario_id: str
    description: str
    repository_id: int
    path: str
    target_commit: str
    versions: dict[str, str]          # commit → content of ``path``
    indexes: list[UploadIndex]        # ordered by ascending commit distance

    @property
    def uploads(self) -> list[Upload]:
        return [ix.upload for ix in self.indexes]

    def diff_source(self) -> InMemoryDiffSource:
        return InMemoryDiffSource(self.path, self.versions)

    def client(self) -> InMemoryIndexedSource:
        return InMemoryIndexedSource(self.indexes)

    def resolver(
        self,
        config: QueryConfig | None = None,
        diff_source: InMemoryDiffSource | None = None,
        client: InMemoryIndexedSource | None = None,
    ) -> QueryResolver:
        return QueryResolver(
            repository_id=self.repository_id,
            commit=self.target_commit,
            path=self.path,
            uploads=self.uploads,
            client=client or self.client(),
            adjuster=PositionAdjuster(diff_source or self.diff_source()),
            config=config,
        )


def _loc(repository_id: int, commit: str, path: str, line: int, start: int, end: int) -> Location:
    return Location(
        repository_id=repository_id,
        commit=commit,
        path=path,
        range=Range(
            start=Position(line=line, character=start),
            end=Position(line=line, character=end),
        ),
    )


# ---------------------------------------------------------------------------
# Scenario 1: checkout_drift
# The target commit is not indexed. The nearest upload lacks the logging line
# and the renamed generator variable; the older one also lacks the docstring.
# ---------------------------------------------------------------------------

_PATH = "src/checkout.py"
_REPO_ID = 42

_V1_COMMIT = "a1f3c9e07d2b"
_V2_COMMIT = "b7d41e29c5aa"
_V3_COMMIT = "c02e8f6b1d93"

_V1 = '''\
import os

def total(items):
    return sum(i.price for i in items)

def checkout(cart):
    amount = total(cart.items)
    return charge(amount)
'''

_V2 = '''\
"""Checkout flow."""
import os

def total(items):
    return sum(i.price for i in items)

def checkout(cart):
    amount = total(cart.items)
    return charge(amount)
'''

_V3 = '''\
"""Checkout flow."""
import os

def total(items):
    return sum(item.price for item in items)

def checkout(cart):
    amount = total(cart.items)
    log.info("charging %s", amount)
    return charge(amount)
'''


def _total_entry(commit: str, def_line: int, use_line: int, extra_refs: list[Location] | None = None) -> SymbolEntry:
    definition = _loc(_REPO_ID, commit, _PATH, def_line, 4, 9)
    return SymbolEntry(
        definitions=[definition],
        references=[definition, _loc(_REPO_ID, commit, _PATH, use_line, 13, 18), *(extra_refs or [])],
        hover="def total(items) -> float",
        hover_range=definition.range,
    )


def _v2_index(upload_id: int) -> UploadIndex:
    entry = _total_entry(_V2_COMMIT, def_line=4, use_line=8)
    return UploadIndex(
        upload=Upload(id=upload_id, commit=_V2_COMMIT),
        symbols={4: entry, 8: entry},
    )


def _v1_index(upload_id: int) -> UploadIndex:
    entry = _total_entry(
        _V1_COMMIT, def_line=3, use_line=7,
        extra_refs=[_loc(_REPO_ID, _V1_COMMIT, "src/cart.py", 12, 8, 13)],
    )
    return UploadIndex(
        upload=Upload(id=upload_id, commit=_V1_COMMIT),
        symbols={3: entry, 7: entry},
    )


CHECKOUT_DRIFT = MockQueryScenario(
    scenario_id="checkout_drift",
    description=(
        "Target commit adds a logging call and rewrites total()'s body. "
        "Two older uploads are indexed: one with the module docstring, one without. "
        "Queries on total() resolve through the nearest upload; the rewritten "
        "body line has no counterpart in either."
    ),
    repository_id=_REPO_ID,
    path=_PATH,
    target_commit=_V3_COMMIT,
    versions={_V1_COMMIT: _V1, _V2_COMMIT: _V2, _V3_COMMIT: _V3},
    indexes=[_v2_index(upload_id=2), _v1_index(upload_id=1)],
)


# ---------------------------------------------------------------------------
# Scenario 2: indexed_head
# The target commit itself is indexed, so no diff is needed for the first upload.
# ---------------------------------------------------------------------------

INDEXED_HEAD = MockQueryScenario(
    scenario_id="indexed_head",
    description=(
        "The queried commit has its own upload; positions pass through untouched "
        "and older uploads only contribute to references."
    ),
    repository_id=_REPO_ID,
    path=_PATH,
    target_commit=_V2_COMMIT,
    versions={_V1_COMMIT: _V1, _V2_COMMIT: _V2},
    indexes=[_v2_index(upload_id=2), _v1_index(upload_id=1)],
)


ALL_SCENARIOS: dict[str, MockQueryScenario] = {
    s.scenario_id: s for s in (CHECKOUT_DRIFT, INDEXED_HEAD)
}


def get_scenario(scenario_id: str) -> MockQueryScenario:
    """Return the scenario named *scenario_id*.

    Raises
    ------
    KeyError
        If no such scenario exists.
    """
    if scenario_id not in ALL_SCENARIOS:
        raise KeyError(
            f"Unknown scenario '{scenario_id}'. Available: {', '.join(sorted(ALL_SCENARIOS))}"
        )
    return ALL_SCENARIOS[scenario_id]
