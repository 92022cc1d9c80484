"""Envelope codec for Transmission RPC requests and responses.

Every remote call shares one wire shape:

    request:  {"method": "<name>", "arguments": {...}, "tag": <int>}
    response: {"arguments": {...}, "result": "<status>", "tag": <int>}

``arguments`` and ``tag`` are omitted from a request when unset. The daemon
distinguishes a missing ``arguments`` object from an empty one, and treats an
omitted field inside ``arguments`` as "keep the server-side default", so unset
values are always dropped rather than sent as ``null``.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from .errors import TransmissionMalformedResponse

R = TypeVar("R")
M = TypeVar("M", bound="WireModel")

SUCCESS = "success"


def wire_field(
    name: str,
    *,
    decode: Callable[[Any], Any] | None = None,
    required: bool = False,
) -> Any:
    """Declare a dataclass field together with its wire name.

    Optional fields default to ``None`` and are omitted on encode.
    """
    metadata: dict[str, Any] = {"wire": name}
    if decode is not None:
        metadata["decode"] = decode
    if required:
        return field(metadata=metadata)
    return field(default=None, metadata=metadata)


def expect(*types: type) -> Callable[[Any], Any]:
    """Return a decoder that only accepts values of the given JSON types."""

    def check(value: Any) -> Any:
        # bool is an int subclass; only accept it when asked for explicitly
        if isinstance(value, bool) and bool not in types:
            raise TypeError(f"expected {_type_names(types)}, got bool")
        if not isinstance(value, types):
            raise TypeError(
                f"expected {_type_names(types)}, got {type(value).__name__}"
            )
        return value

    return check


def list_of(decode: Callable[[Any], Any]) -> Callable[[Any], list[Any]]:
    """Return a decoder for a JSON array whose items use ``decode``."""

    def check(value: Any) -> list[Any]:
        if not isinstance(value, list):
            raise TypeError(f"expected list, got {type(value).__name__}")
        return [decode(item) for item in value]

    return check


def _type_names(types: tuple[type, ...]) -> str:
    return " or ".join(t.__name__ for t in types)


def to_wire(obj: Any) -> Any:
    """Recursively convert argument values into JSON-ready structures."""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [to_wire(item) for item in obj]
    if isinstance(obj, Mapping):
        return {
            str(key): to_wire(value) for key, value in obj.items() if value is not None
        }
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        result: dict[str, Any] = {}
        for f in dataclasses.fields(obj):
            value = getattr(obj, f.name)
            if value is not None:
                result[f.metadata.get("wire", f.name)] = to_wire(value)
        return result
    return obj


class WireModel:
    """Mixin for dataclasses that map onto an RPC ``arguments`` object."""

    @classmethod
    def from_wire(cls: type[M], data: Any) -> M:
        """Build an instance from a decoded JSON object.

        Unknown keys are ignored. ``null`` counts as absent.

        Raises:
            TypeError: If ``data`` is not an object or a value has the wrong type
            ValueError: If a required field is missing
        """
        if not isinstance(data, Mapping):
            raise TypeError(
                f"{cls.__name__} expects an object, got {type(data).__name__}"
            )
        kwargs: dict[str, Any] = {}
        for f in dataclasses.fields(cls):  # type: ignore[arg-type]
            wire = f.metadata.get("wire", f.name)
            value = data.get(wire)
            if value is None:
                if (
                    f.default is dataclasses.MISSING
                    and f.default_factory is dataclasses.MISSING
                ):
                    raise ValueError(f"{cls.__name__} is missing required field {wire!r}")
                continue
            decode = f.metadata.get("decode")
            kwargs[f.name] = decode(value) if decode is not None else value
        return cls(**kwargs)


@dataclass(frozen=True)
class MethodDescriptor(Generic[R]):
    """A remote procedure name, its arguments and the expected result shape.

    ``result_type`` is either a ``WireModel`` subclass or ``dict`` to receive
    the raw ``arguments`` mapping.
    """

    method: str
    result_type: type[R]
    arguments: Any = None


@dataclass(frozen=True)
class ResponseEnvelope(Generic[R]):
    """Decoded daemon reply.

    ``result`` is passed through as sent; the transport never interprets it.
    """

    arguments: R
    result: str
    tag: int | None = None

    @property
    def is_success(self) -> bool:
        return self.result == SUCCESS


def build_request(
    descriptor: MethodDescriptor[Any],
    *,
    tag: int | None = None,
) -> dict[str, Any]:
    """Build the request envelope for a method descriptor."""
    envelope: dict[str, Any] = {"method": descriptor.method}
    if descriptor.arguments is not None:
        envelope["arguments"] = to_wire(descriptor.arguments)
    if tag is not None:
        envelope["tag"] = tag
    return envelope


def encode_request(
    descriptor: MethodDescriptor[Any],
    *,
    tag: int | None = None,
) -> bytes:
    """Serialize the request envelope to a UTF-8 JSON body."""
    return json.dumps(build_request(descriptor, tag=tag)).encode("utf-8")


def decode_response(
    body: bytes | str,
    result_type: type[R],
    *,
    method: str | None = None,
    status: int | None = None,
) -> ResponseEnvelope[R]:
    """Parse a daemon reply into a typed response envelope.

    Args:
        body: Raw response body.
        result_type: ``WireModel`` subclass (or ``dict``) for ``arguments``.
        method: Method name, recorded on errors for diagnosis.
        status: HTTP status, recorded on errors for diagnosis.

    Raises:
        TransmissionMalformedResponse: If the body is not a valid envelope or
            its arguments do not fit ``result_type``.
    """
    try:
        data = json.loads(body)
    except ValueError as err:
        raise TransmissionMalformedResponse(
            "Response body is not valid JSON", method=method, status=status
        ) from err

    if not isinstance(data, dict):
        raise TransmissionMalformedResponse(
            "Response body is not a JSON object", method=method, status=status
        )

    result = data.get("result")
    if not isinstance(result, str):
        raise TransmissionMalformedResponse(
            "Response is missing string field 'result'", method=method, status=status
        )

    raw_arguments = data.get("arguments")
    if not isinstance(raw_arguments, dict):
        raise TransmissionMalformedResponse(
            "Response is missing object field 'arguments'",
            method=method,
            status=status,
        )

    tag = data.get("tag")
    if tag is not None and (isinstance(tag, bool) or not isinstance(tag, int)):
        raise TransmissionMalformedResponse(
            "Response field 'tag' is not an integer", method=method, status=status
        )

    try:
        arguments = _decode_arguments(raw_arguments, result_type)
    except (TypeError, ValueError) as err:
        raise TransmissionMalformedResponse(
            f"Response arguments do not match {result_type.__name__}: {err}",
            method=method,
            status=status,
        ) from err

    return ResponseEnvelope(arguments=arguments, result=result, tag=tag)


def _decode_arguments(raw: dict[str, Any], result_type: type[R]) -> R:
    if result_type is dict:
        return raw  # type: ignore[return-value]
    from_wire = getattr(result_type, "from_wire", None)
    if from_wire is None:
        raise TypeError(f"{result_type.__name__} cannot be decoded from the wire")
    return from_wire(raw)
