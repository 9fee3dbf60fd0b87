"""
Content codecs for the discovery client.

A codec pairs a serialization format with its media type. The client runs the
same request/response orchestration for every codec, so JSON and XML differ
only in how values become bytes and bytes become values.
"""

import collections.abc
import dataclasses
import re
import types
import typing
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json, to_jsonable_python

from ..exceptions import DecodeError, EncodeError

HEADER_ACCEPT = "Accept"
HEADER_CONTENT_TYPE = "Content-Type"

MEDIA_JSON = "application/json"
MEDIA_XML = "application/xml"

_XML_NAME = re.compile(r"^[A-Za-z_][\w.\-]*$")
_XML_LIST_ITEM = "item"


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


class Codec(ABC):
    """Serialization format used by the content-negotiated helpers."""

    name: str
    media_type: str

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """Serialize a value, raising EncodeError on failure."""

    @abstractmethod
    def decode(self, data: bytes, target: Any) -> Any:
        """Deserialize ``data`` into an instance of ``target``.

        Raises DecodeError on failure.
        """


class JSONCodec(Codec):
    """JSON codec backed by pydantic."""

    name = "JSON"
    media_type = MEDIA_JSON

    def encode(self, value: Any) -> bytes:
        try:
            return to_json(value)
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise EncodeError(f"failed to marshal request object: {e}") from e

    def decode(self, data: bytes, target: Any) -> Any:
        try:
            return _adapter(target).validate_json(data)
        except ValidationError as e:
            raise DecodeError(f"failed to decode JSON response: {e}") from e


class XMLCodec(Codec):
    """XML codec.

    Values are rendered through their JSON-compatible form: mapping keys become
    child elements, sequences become repeated elements and scalars become text.
    The root tag is the value's class name for models and dataclasses, else
    ``root_tag``.
    """

    name = "XML"
    media_type = MEDIA_XML

    def __init__(self, root_tag: str = "root"):
        self.root_tag = root_tag

    def encode(self, value: Any) -> bytes:
        try:
            data = to_jsonable_python(value)
            root = ET.Element(self._root_tag_for(value))
            self._build(root, data)
            return ET.tostring(root, encoding="utf-8")
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise EncodeError(f"failed to marshal request object: {e}") from e

    def decode(self, data: bytes, target: Any) -> Any:
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise DecodeError(f"failed to decode XML response: {e}") from e

        value = _align(self._to_python(root), target)
        try:
            return _adapter(target).validate_python(value)
        except ValidationError as e:
            raise DecodeError(f"failed to decode XML response: {e}") from e

    def _root_tag_for(self, value: Any) -> str:
        if isinstance(value, BaseModel) or (
            dataclasses.is_dataclass(value) and not isinstance(value, type)
        ):
            return type(value).__name__
        return self.root_tag

    def _build(self, parent: ET.Element, data: Any) -> None:
        if isinstance(data, dict):
            for key, value in data.items():
                if not isinstance(key, str) or not _XML_NAME.match(key):
                    raise ValueError(f"invalid XML element name: {key!r}")
                if value is None:
                    continue
                if isinstance(value, list):
                    for item in value:
                        self._build(ET.SubElement(parent, key), item)
                else:
                    self._build(ET.SubElement(parent, key), value)
        elif isinstance(data, list):
            for item in data:
                self._build(ET.SubElement(parent, _XML_LIST_ITEM), item)
        elif isinstance(data, bool):
            parent.text = "true" if data else "false"
        elif data is not None:
            parent.text = str(data)

    def _to_python(self, element: ET.Element) -> Any:
        result: dict[str, Any] = dict(element.attrib)
        children = list(element)
        if not children:
            text = element.text or ""
            if not result:
                return text
            if text.strip():
                result["_text"] = text
            return result

        for child in children:
            child_data = self._to_python(child)
            if child.tag in result:
                if not isinstance(result[child.tag], list):
                    result[child.tag] = [result[child.tag]]
                result[child.tag].append(child_data)
            else:
                result[child.tag] = child_data
        return result


_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, collections.abc.Sequence)


def _is_sequence(annotation: Any) -> bool:
    return typing.get_origin(annotation) in _SEQUENCE_ORIGINS or annotation in (
        list,
        tuple,
        set,
        frozenset,
    )


def _is_record(annotation: Any) -> bool:
    return isinstance(annotation, type) and (
        issubclass(annotation, BaseModel) or dataclasses.is_dataclass(annotation)
    )


def _align(value: Any, annotation: Any, wrapped: bool = True) -> Any:
    """Reshape parsed XML so repeated-element fields line up with the target type.

    XML cannot tell a one-element sequence from a single child, and a
    top-level sequence arrives wrapped in ``item`` elements. ``wrapped`` is
    False for values read from a named child, where each element is one item
    of a sequence rather than its container.
    """
    origin = typing.get_origin(annotation)

    if origin is typing.Annotated:
        return _align(value, typing.get_args(annotation)[0], wrapped)

    if origin in (typing.Union, types.UnionType):
        candidates = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(candidates) == 1:
            return _align(value, candidates[0], wrapped)
        return value

    if _is_sequence(annotation):
        if wrapped:
            # container element with no item children
            if value == "":
                return []
            if isinstance(value, dict) and list(value) == [_XML_LIST_ITEM]:
                value = value[_XML_LIST_ITEM]
        if not isinstance(value, list):
            value = [value]
        args = typing.get_args(annotation)
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            return value
        if args:
            return [_align(item, args[0]) for item in value]
        return value

    # empty element, every field was omitted on encode
    if value == "" and (origin is dict or annotation is dict or _is_record(annotation)):
        return {}

    if origin is dict and isinstance(value, dict):
        args = typing.get_args(annotation)
        return {key: _align(item, args[1], wrapped=False) for key, item in value.items()}

    if not isinstance(value, dict) or not _is_record(annotation):
        return value

    aligned = dict(value)
    if issubclass(annotation, BaseModel):
        for name, field in annotation.model_fields.items():
            key = field.alias or name
            for candidate in {name, key}:
                if candidate in aligned:
                    aligned[candidate] = _align(
                        aligned[candidate], field.annotation, wrapped=False
                    )
            # an empty sequence encodes to no elements at all
            if (
                name not in aligned
                and key not in aligned
                and field.is_required()
                and _is_sequence(field.annotation)
            ):
                aligned[key] = []
        return aligned

    hints = typing.get_type_hints(annotation)
    for field in dataclasses.fields(annotation):
        if field.name in aligned:
            aligned[field.name] = _align(
                aligned[field.name], hints[field.name], wrapped=False
            )
        elif (
            field.default is dataclasses.MISSING
            and field.default_factory is dataclasses.MISSING
            and _is_sequence(hints[field.name])
        ):
            aligned[field.name] = []
    return aligned


JSON = JSONCodec()
XML = XMLCodec()
