"""Decoder for the dict nodes of a property-list library export.

A dict node is not read as alternating key/value pairs. Its children are first
split into per-type streams (see ``build_dict_node``), and ``decode_dict_node``
then walks the declared keys in order, giving each key the next unconsumed value
from the first non-exhausted stream in this precedence:

    string, integer, date, true, false, array

Keys left over once every stream is exhausted are dropped from the record.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from metadata.types import PlistArrayNode, PlistDictNode, RawRecord

logger = logging.getLogger(__name__)

PLAYLIST_ITEMS_KEY = "Playlist Items"
TRACK_ID_KEY = "Track ID"
MAX_NESTING_DEPTH = 32

_ENTITY_REPLACEMENTS = (
    ("&#38;", "&"),
    ("&#39;", "'"),
    ("&quot;", '"'),
    ("&lt;", "<"),
    ("&gt;", ">"),
)
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def unescape_entities(value: str) -> str:
    """Replace the five entity forms left behind by the exporter."""
    if not isinstance(value, str):
        return value
    for entity, literal in _ENTITY_REPLACEMENTS:
        value = value.replace(entity, literal)
    return value


def _parse_integer(text: str) -> Any:
    try:
        return int(text.strip())
    except ValueError:
        return text


def _parse_date(text: str) -> Any:
    try:
        return datetime.strptime(text.strip(), _DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return text


def build_array_node(element: ET.Element, *, depth: int = 0) -> PlistArrayNode:
    if depth > MAX_NESTING_DEPTH:
        logger.warning("Plist nesting deeper than %d levels; truncating", MAX_NESTING_DEPTH)
        return PlistArrayNode()
    dicts: list[PlistDictNode] = []
    values: list[Any] = []
    for child in element:
        if child.tag == "dict":
            dicts.append(build_dict_node(child, depth=depth + 1))
        elif child.tag == "array":
            values.append(build_array_node(child, depth=depth + 1))
        elif child.tag == "integer":
            values.append(_parse_integer(child.text or ""))
        elif child.tag == "date":
            values.append(_parse_date(child.text or ""))
        elif child.tag in {"true", "false"}:
            values.append(child.tag == "true")
        else:
            values.append(child.text or "")
    return PlistArrayNode(dicts=tuple(dicts), values=tuple(values))


def build_dict_node(element: ET.Element, *, depth: int = 0) -> PlistDictNode:
    """Split the children of a ``<dict>`` element into type-segregated streams."""
    if depth > MAX_NESTING_DEPTH:
        logger.warning("Plist nesting deeper than %d levels; truncating", MAX_NESTING_DEPTH)
        return PlistDictNode()
    keys: list[str] = []
    strings: list[str] = []
    integers: list[Any] = []
    dates: list[Any] = []
    arrays: list[PlistArrayNode] = []
    dicts: list[PlistDictNode] = []
    true_count = 0
    false_count = 0
    for child in element:
        tag = child.tag
        if tag == "key":
            keys.append(child.text or "")
        elif tag == "string":
            strings.append(child.text or "")
        elif tag == "integer":
            integers.append(_parse_integer(child.text or ""))
        elif tag == "date":
            dates.append(_parse_date(child.text or ""))
        elif tag == "true":
            true_count += 1
        elif tag == "false":
            false_count += 1
        elif tag == "array":
            arrays.append(build_array_node(child, depth=depth + 1))
        elif tag == "dict":
            dicts.append(build_dict_node(child, depth=depth + 1))
        # <real> and <data> have no stream of their own.
    return PlistDictNode(
        keys=tuple(keys),
        strings=tuple(strings),
        integers=tuple(integers),
        dates=tuple(dates),
        true_count=true_count,
        false_count=false_count,
        arrays=tuple(arrays),
        dicts=tuple(dicts),
    )


@dataclass
class _StreamCursor:
    string: int = 0
    integer: int = 0
    date: int = 0
    true: int = 0
    false: int = 0
    array: int = 0


def _decode_playlist_items(node: PlistArrayNode, depth: int) -> list[RawRecord]:
    items: list[RawRecord] = []
    for item_node in node.dicts:
        item = decode_dict_node(item_node, depth=depth + 1)
        track_id = item.get(TRACK_ID_KEY)
        if track_id:
            items.append({TRACK_ID_KEY: track_id})
    return items


def _take_value(node: PlistDictNode, cursor: _StreamCursor, key: str, depth: int) -> tuple[bool, Any]:
    if cursor.string < len(node.strings):
        value = unescape_entities(node.strings[cursor.string])
        cursor.string += 1
        return True, value
    if cursor.integer < len(node.integers):
        value = node.integers[cursor.integer]
        cursor.integer += 1
        return True, value
    if cursor.date < len(node.dates):
        value = node.dates[cursor.date]
        cursor.date += 1
        return True, value
    if cursor.true < node.true_count:
        cursor.true += 1
        return True, True
    if cursor.false < node.false_count:
        cursor.false += 1
        return True, False
    if cursor.array < len(node.arrays):
        array_node = node.arrays[cursor.array]
        cursor.array += 1
        if key == PLAYLIST_ITEMS_KEY and array_node.dicts and depth < MAX_NESTING_DEPTH:
            return True, _decode_playlist_items(array_node, depth)
        return True, array_node
    return False, None


def decode_dict_node(node: PlistDictNode, *, depth: int = 0) -> RawRecord:
    """Rebuild the ordered record for one dict node.

    Every declared key draws from the streams in precedence order; a key for which
    no stream has a value left is omitted rather than set to ``None``.
    """
    record: RawRecord = {}
    cursor = _StreamCursor()
    for key in node.keys:
        found, value = _take_value(node, cursor, key, depth)
        if found:
            record[key] = value
    return record
