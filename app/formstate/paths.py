"""
Field paths: the dotted/indexed names HTML forms use for nested data.

    thing.name   -> ["thing", "name"]
    tasks[1]     -> ["tasks", 1]
    tasks[]      -> ["tasks", APPEND]
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

APPEND: Any = object()

_NAME_RE = re.compile(r"[^.\[\]]+(?:\.[^.\[\]]+|\[\d*\])*")
_SEGMENT_RE = re.compile(r"([^.\[\]]+)|\[(\d*)\]")


def parse_path(name: str) -> list[str | int]:
    """
    Split a field name into segments.

    Names that are not well formed are kept whole as a single key, so they
    still round-trip through format_path().
    """
    if not _NAME_RE.fullmatch(name or ""):
        return [name]
    segments: list[str | int] = []
    for key, index in _SEGMENT_RE.findall(name):
        if key:
            segments.append(key)
        elif index == "":
            segments.append(APPEND)
        else:
            segments.append(int(index))
    return segments


def format_path(segments: Iterable[str | int]) -> str:
    out = ""
    for seg in segments:
        if isinstance(seg, int):
            out += f"[{seg}]"
        elif seg is APPEND:
            out += "[]"
        elif out:
            out += f".{seg}"
        else:
            out = seg
    return out


def get_value(source: Any, segments: list[str | int], default: Any = None) -> Any:
    cur = source
    for seg in segments:
        if seg is APPEND:
            return default
        if isinstance(seg, int):
            if not isinstance(cur, list) or seg >= len(cur):
                return default
            cur = cur[seg]
        else:
            if not isinstance(cur, dict) or seg not in cur:
                return default
            cur = cur[seg]
    return cur


def set_value(target: dict, segments: list[str | int], value: Any) -> None:
    """
    Assign `value` at `segments`, creating dicts/lists on the way down.

    Lists are padded with None up to an int index, so callers bound indices
    before getting here (see build_payload()).
    """
    cur: Any = target
    for i, seg in enumerate(segments):
        last = i == len(segments) - 1
        nxt = None if last else segments[i + 1]
        container: Any = [] if isinstance(nxt, int) or nxt is APPEND else {}

        if seg is APPEND:
            if last:
                cur.append(value)
                return
            cur.append(container)
            cur = container
        elif isinstance(seg, int):
            while len(cur) <= seg:
                cur.append(None)
            if last:
                cur[seg] = value
                return
            if not isinstance(cur[seg], type(container)):
                cur[seg] = container
            cur = cur[seg]
        else:
            if last:
                cur[seg] = value
                return
            if not isinstance(cur.get(seg), type(container)):
                cur[seg] = container
            cur = cur[seg]


def build_payload(items: Iterable[tuple[str, list[str]]]) -> tuple[dict, list[str]]:
    """
    Turn flat (name, values) pairs into a nested structure.

    A name submitted more than once becomes a list, as does any name ending in "[]".

    An index can't exceed the number of values submitted, since a form that
    renders its list densely never sends one that does. Names carrying such an
    index are left out of the payload and returned as the second item.
    """
    items = [(name, list(values)) for name, values in items]
    limit = sum(len(values) for _, values in items)

    payload: dict = {}
    rejected: list[str] = []
    for name, values in items:
        segments = parse_path(name)
        if any(isinstance(seg, int) and seg >= limit for seg in segments):
            rejected.append(name)
            continue
        if segments[-1] is APPEND:
            for v in values:
                set_value(payload, segments, v)
        elif len(values) > 1:
            set_value(payload, segments, values)
        elif values:
            set_value(payload, segments, values[0])
    return payload, rejected


def compact(value: Any) -> Any:
    """
    Drop what an HTML form cannot distinguish from "not entered".

    Empty strings become None, None members are removed from objects and an
    object left with no members becomes None itself. List items keep their
    position so errors stay addressable by index.
    """
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            v = compact(v)
            if v is not None:
                out[k] = v
        return out or None
    if isinstance(value, list):
        return [compact(v) for v in value]
    return value
