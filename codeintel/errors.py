"""Exception taxonomy for position translation and multi-upload queries.

Every fatal condition surfaces as a subclass of ``CodeIntelError``.  A line
with no stable counterpart in another commit is *not* an error: the translator
returns ``None`` for it and the resolver skips that upload.
"""

from __future__ import annotations


class CodeIntelError(Exception):
    """Base class for all errors raised by this package."""


class DiffUnavailable(CodeIntelError):
    """The diff collaborator could not produce a diff (process or service failure)."""


class DiffParseError(CodeIntelError):
    """The diff text is not well-formed unified-diff syntax for a single file."""


class MalformedHunkError(CodeIntelError):
    """A hunk body does not contain the lines its header claims."""


class SourceQueryError(CodeIntelError):
    """An indexed source failed to answer a definitions/references/hover query."""


class CursorDecodeError(CodeIntelError, ValueError):
    """An inbound pagination cursor is not a value this package produced."""


class QueryCancelled(CodeIntelError):
    """The caller cancelled the request before all uploads were queried."""
