"""Tests for the request/response envelope codec."""

from __future__ import annotations

import json
from dataclasses import dataclass

import pytest

from transmission_transport.errors import TransmissionMalformedResponse
from transmission_transport.methods import (
    SessionGet,
    SessionGetArgs,
    SessionGetFields,
    TorrentAddArgs,
)
from transmission_transport.protocol import (
    MethodDescriptor,
    ResponseEnvelope,
    WireModel,
    build_request,
    decode_response,
    encode_request,
    to_wire,
    wire_field,
)


@dataclass(frozen=True)
class _Nested(WireModel):
    inner_value: int | None = wire_field("inner-value")
    unset: str | None = wire_field("unset")


@dataclass(frozen=True)
class _Outer(WireModel):
    child: _Nested | None = wire_field("child")
    children: list[_Nested] | None = wire_field("children")


@dataclass(frozen=True)
class _Required(WireModel):
    count: int = wire_field("count", required=True)


class TestBuildRequest:
    """Tests for build_request()."""

    def test_arguments_omitted_when_absent(self):
        """Test no arguments key is emitted, not even null."""
        envelope = build_request(MethodDescriptor("session-stats", dict))
        assert envelope == {"method": "session-stats"}
        assert "arguments" not in envelope

    def test_empty_arguments_object_is_kept(self):
        """Test an arguments object with no fields set is sent as {}."""
        envelope = build_request(
            MethodDescriptor("session-get", SessionGet, SessionGetArgs())
        )
        assert envelope == {"method": "session-get", "arguments": {}}

    def test_unset_fields_omitted(self):
        """Test unset argument fields are dropped rather than nulled."""
        args = TorrentAddArgs(filename="magnet:?xt=urn:btih:abc", paused=False)
        envelope = build_request(MethodDescriptor("torrent-add", dict, args))
        assert envelope["arguments"] == {
            "filename": "magnet:?xt=urn:btih:abc",
            "paused": False,
        }

    def test_nested_unset_fields_omitted(self):
        """Test omission applies recursively to nested shapes."""
        args = _Outer(child=_Nested(inner_value=3), children=[_Nested(), _Nested(1)])
        envelope = build_request(MethodDescriptor("test", dict, args))
        assert envelope["arguments"] == {
            "child": {"inner-value": 3},
            "children": [{}, {"inner-value": 1}],
        }

    def test_enums_use_wire_values(self):
        """Test enum members are sent as their protocol strings."""
        args = SessionGetArgs(
            fields=[SessionGetFields.RPC_VERSION, SessionGetFields.CONFIG_DIR]
        )
        envelope = build_request(MethodDescriptor("session-get", SessionGet, args))
        assert envelope["arguments"] == {"fields": ["rpc-version", "config-dir"]}

    def test_mapping_arguments_drop_none(self):
        """Test plain mapping arguments also drop unset values."""
        envelope = build_request(
            MethodDescriptor("torrent-start", dict, {"ids": [1, 2], "extra": None})
        )
        assert envelope["arguments"] == {"ids": [1, 2]}

    def test_tag_only_when_given(self):
        """Test the request tag is emitted only when set."""
        descriptor = MethodDescriptor("session-stats", dict)
        assert "tag" not in build_request(descriptor)
        assert build_request(descriptor, tag=7)["tag"] == 7

    def test_encode_request_is_json(self):
        """Test encode_request produces a UTF-8 JSON body."""
        body = encode_request(MethodDescriptor("session-stats", dict))
        assert isinstance(body, bytes)
        assert json.loads(body) == {"method": "session-stats"}


class TestDecodeResponse:
    """Tests for decode_response()."""

    def test_decode_typed_arguments(self):
        """Test arguments are decoded into the requested result type."""
        body = b'{"arguments": {"rpc-version": 17, "config-dir": "/cfg"}, "result": "success"}'
        response = decode_response(body, SessionGet)

        assert isinstance(response, ResponseEnvelope)
        assert response.arguments == SessionGet(rpc_version=17, config_dir="/cfg")
        assert response.result == "success"
        assert response.is_success
        assert response.tag is None

    def test_decode_accepts_str(self):
        """Test a str body decodes the same as bytes."""
        response = decode_response('{"arguments": {}, "result": "success"}', dict)
        assert response.arguments == {}

    def test_result_passed_through(self):
        """Test a non-success result string is not treated as an error."""
        response = decode_response(
            b'{"arguments": {}, "result": "no such method"}', SessionGet
        )
        assert response.result == "no such method"
        assert not response.is_success

    def test_unknown_keys_ignored(self):
        """Test fields the result type does not know about are ignored."""
        response = decode_response(
            b'{"arguments": {"rpc-version": 17, "speed-limit-up": 5}, "result": "success"}',
            SessionGet,
        )
        assert response.arguments.rpc_version == 17

    def test_tag_decoded(self):
        """Test the echoed tag is exposed."""
        response = decode_response(
            b'{"arguments": {}, "result": "success", "tag": 12}', dict
        )
        assert response.tag == 12

    def test_dict_result_type_returns_raw_arguments(self):
        """Test dict as result type yields the raw arguments mapping."""
        response = decode_response(
            b'{"arguments": {"a": [1, 2]}, "result": "success"}', dict
        )
        assert response.arguments == {"a": [1, 2]}

    @pytest.mark.parametrize(
        "body",
        [
            b"<html>Unauthorized</html>",
            b"",
            b"[]",
            b'{"arguments": {}}',
            b'{"result": "success"}',
            b'{"arguments": [], "result": "success"}',
            b'{"arguments": {}, "result": 1}',
            b'{"arguments": {}, "result": "success", "tag": "x"}',
        ],
    )
    def test_malformed_envelope(self, body: bytes):
        """Test bodies that are not an RPC envelope are rejected."""
        with pytest.raises(TransmissionMalformedResponse):
            decode_response(body, dict, method="session-get", status=200)

    def test_wrong_field_type_is_malformed(self):
        """Test a sub-field of the wrong JSON type is rejected."""
        with pytest.raises(TransmissionMalformedResponse, match="SessionGet"):
            decode_response(
                b'{"arguments": {"rpc-version": "17"}, "result": "success"}',
                SessionGet,
            )

    def test_missing_required_field_is_malformed(self):
        """Test a missing required sub-field is rejected."""
        with pytest.raises(TransmissionMalformedResponse, match="count"):
            decode_response(b'{"arguments": {}, "result": "success"}', _Required)

    def test_error_carries_context(self):
        """Test malformed errors record method and HTTP status."""
        with pytest.raises(TransmissionMalformedResponse) as exc_info:
            decode_response(b"nope", dict, method="torrent-get", status=500)
        assert exc_info.value.method == "torrent-get"
        assert exc_info.value.status == 500


class TestWireModel:
    """Tests for WireModel.from_wire()."""

    def test_null_counts_as_absent(self):
        """Test null values leave optional fields unset."""
        assert SessionGet.from_wire({"rpc-version": None}) == SessionGet()

    def test_non_object_rejected(self):
        """Test a non-object payload raises TypeError."""
        with pytest.raises(TypeError):
            SessionGet.from_wire(["rpc-version"])

    def test_bool_is_not_int(self):
        """Test JSON booleans do not satisfy integer fields."""
        with pytest.raises(TypeError):
            SessionGet.from_wire({"rpc-version": True})

    def test_to_wire(self):
        """Test to_wire encodes a model into its arguments object."""
        assert to_wire(_Nested(inner_value=1)) == {"inner-value": 1}
