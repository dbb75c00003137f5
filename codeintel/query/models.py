"""Typed contracts for multi-upload code-intelligence queries."""

from __future__ import annotations

import os
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from codeintel.positions.models import Range


class Upload(BaseModel):
    """An indexed snapshot of the repository at one commit."""

    model_config = ConfigDict(frozen=True)

    id: int
    commit: str = Field(min_length=1)


class Location(BaseModel):
    model_config = ConfigDict(frozen=True, validate_by_name=True)

    repository_id: int = Field(alias="repositoryId")
    commit: str
    path: str
    range: Range


class Hover(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    range: Range | None = None


class LocationConnection(BaseModel):
    """A page of locations plus the opaque cursor for the next page."""

    locations: list[Location] = Field(default_factory=list)
    end_cursor: str = ""

    @property
    def has_next_page(self) -> bool:
        return self.end_cursor != ""


class SourceQuery(BaseModel):
    """One request against a single upload, already in that upload's coordinates."""

    model_config = ConfigDict(frozen=True)

    repository_id: int
    commit: str
    path: str
    line: int
    character: int
    upload_id: int
    limit: int | None = Field(default=None, gt=0)
    cursor: str | None = None


# ---------------------------------------------------------------------------
# Indexed source protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class IndexedSourceClient(Protocol):
    """RPC client for the service that answers queries against indexed uploads."""

    def definitions(self, query: SourceQuery) -> list[Location]:
        """Return definition locations for the symbol at the query position."""
        ...

    def references(self, query: SourceQuery) -> tuple[list[Location], str]:
        """Return one page of references and the resume token ("" when exhausted)."""
        ...

    def hover(self, query: SourceQuery) -> Hover | None:
        """Return hover text for the symbol at the query position, if any."""
        ...


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class QueryConfig(BaseModel):
    index_url: str = "http://localhost:3186"
    timeout: float = Field(default=30.0, gt=0.0)
    page_size: int | None = Field(default=None, gt=0,
                                  description="Default references page size. None = server default.")
    max_workers: int = Field(default=1, ge=1,
                             description="Concurrent per-upload reference queries. 1 = sequential.")
    repo_path: str = "."

    @classmethod
    def from_env(cls) -> "QueryConfig":
        page_size = os.environ.get("CODEINTEL_PAGE_SIZE", "").strip()
        return cls(
            index_url=os.environ.get("CODEINTEL_INDEX_URL", "http://localhost:3186"),
            timeout=float(os.environ.get("CODEINTEL_TIMEOUT", "30")),
            page_size=int(page_size) if page_size else None,
            max_workers=int(os.environ.get("CODEINTEL_MAX_WORKERS", "1")),
            repo_path=os.environ.get("CODEINTEL_REPO_PATH", "."),
        )
