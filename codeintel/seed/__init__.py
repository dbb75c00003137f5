"""Deterministic in-memory repositories and indexes for resolver fixtures."""

from .mock_uploads import (
    ALL_SCENARIOS,
    CHECKOUT_DRIFT,
    INDEXED_HEAD,
    InMemoryDiffSource,
    InMemoryIndexedSource,
    MockQueryScenario,
    SymbolEntry,
    UploadIndex,
    get_scenario,
)

__all__ = [
    "ALL_SCENARIOS",
    "CHECKOUT_DRIFT",
    "INDEXED_HEAD",
    "InMemoryDiffSource",
    "InMemoryIndexedSource",
    "MockQueryScenario",
    "SymbolEntry",
    "UploadIndex",
    "get_scenario",
]
