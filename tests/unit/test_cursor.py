"""Unit tests for the multi-upload pagination cursor."""

from __future__ import annotations

import base64
import json

import pytest

from codeintel.errors import CursorDecodeError
from codeintel.query.cursor import decode_cursor, encode_cursor


class TestEncode:
    def test_empty_mapping_encodes_to_empty_string(self):
        assert encode_cursor({}) == ""

    def test_wire_format_is_base64_json_keyed_by_upload_id(self):
        cursor = encode_cursor({7: "https://lsif/references?cursor=abc"})
        assert json.loads(base64.b64decode(cursor)) == {"7": "https://lsif/references?cursor=abc"}

    def test_encoding_is_independent_of_insertion_order(self):
        assert encode_cursor({1: "a", 2: "b"}) == encode_cursor({2: "b", 1: "a"})


class TestDecode:
    def test_empty_string_decodes_to_empty_mapping(self):
        assert decode_cursor("") == {}

    def test_none_decodes_to_empty_mapping(self):
        assert decode_cursor(None) == {}

    def test_round_trip(self):
        cursors = {1: "tokA2", 3: "tokC2", 9_000_000_000: "big-id"}
        assert decode_cursor(encode_cursor(cursors)) == cursors

    def test_keys_come_back_as_ints(self):
        decoded = decode_cursor(encode_cursor({12: "x"}))
        assert list(decoded) == [12]


class TestDecodeErrors:
    def test_not_base64(self):
        with pytest.raises(CursorDecodeError):
            decode_cursor("%%% not base64 %%%")

    def test_not_json(self):
        with pytest.raises(CursorDecodeError):
            decode_cursor(base64.b64encode(b"{not json").decode())

    def test_not_an_object(self):
        with pytest.raises(CursorDecodeError, match="object"):
            decode_cursor(base64.b64encode(b'["a", "b"]').decode())

    def test_non_integer_upload_id(self):
        with pytest.raises(CursorDecodeError, match="not an integer"):
            decode_cursor(base64.b64encode(b'{"abc": "tok"}').decode())

    def test_non_string_token(self):
        with pytest.raises(CursorDecodeError, match="not a string"):
            decode_cursor(base64.b64encode(b'{"1": 5}').decode())

    def test_non_ascii_input(self):
        with pytest.raises(CursorDecodeError):
            decode_cursor("cursör")

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            decode_cursor("!!!")
