"""Opaque pagination cursor spanning several uploads.

Wire format: standard base64 of a JSON object mapping each upload id (as a
decimal string key) to that upload's resume token. An upload with no entry in a
non-empty cursor has nothing left to contribute.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping

from codeintel.errors import CursorDecodeError


def encode_cursor(cursors: Mapping[int, str]) -> str:
    """Encode upload id → resume token into a single cursor string.

    An empty mapping encodes to ``""``, meaning there are no further pages.
    """
    if not cursors:
        return ""

    payload = {str(upload_id): token for upload_id, token in sorted(cursors.items())}
    encoded = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(encoded).decode("ascii")


def decode_cursor(after: str | None) -> dict[int, str]:
    """Decode a cursor produced by ``encode_cursor``.

    ``None`` and ``""`` both decode to ``{}`` (first page).

    Raises
    ------
    CursorDecodeError
        If *after* was not produced by ``encode_cursor``.
    """
    if not after:
        return {}

    try:
        decoded = base64.b64decode(after.encode("ascii"), validate=True)
        raw = json.loads(decoded)
    except (UnicodeError, binascii.Error, ValueError) as exc:
        raise CursorDecodeError(f"invalid cursor: {exc}") from exc

    if not isinstance(raw, dict):
        raise CursorDecodeError("invalid cursor: expected an object of upload ids")

    cursors: dict[int, str] = {}
    for key, token in raw.items():
        try:
            upload_id = int(key)
        except ValueError as exc:
            raise CursorDecodeError(f"invalid cursor: upload id {key!r} is not an integer") from exc
        if not isinstance(token, str):
            raise CursorDecodeError(f"invalid cursor: token for upload {upload_id} is not a string")
        cursors[upload_id] = token
    return cursors
