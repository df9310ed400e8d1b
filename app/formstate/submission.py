"""
Parsing and validating submitted form data against a pydantic schema.

The same schema (or a relaxed copy of it) is used for the full submit and for
single-field "validate" intents, so the server and the in-form checks agree on
messages.
"""
from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.formstate.errors import ValidationError
from app.formstate.paths import APPEND, build_payload, compact, format_path, get_value, parse_path, set_value

logger = logging.getLogger(__name__)

INTENT_FIELD = "__intent__"
INTENT_TYPES = ("insert", "remove", "validate")

REQUIRED_MESSAGE = "Required"
INVALID_INDEX_MESSAGE = "Invalid index"
_MESSAGES = {
    "missing": REQUIRED_MESSAGE,
    "string_type": "Expected string",
    "bool_type": "Expected boolean",
    "bool_parsing": "Expected boolean",
    "list_type": "Expected array",
    "model_type": "Expected object",
    "model_attributes_type": "Expected object",
}


@dataclass(frozen=True)
class Intent:
    type: str
    payload: dict[str, Any]

    def serialize(self) -> str:
        return json.dumps({"type": self.type, "payload": self.payload}, sort_keys=True)


@dataclass
class Submission:
    status: str | None
    payload: dict
    value: dict | None = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)
    intent: Intent | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def reply(self) -> dict:
        """State the view needs to re-render: the user's entries plus per-field messages."""
        return {
            "status": self.status,
            "initial_value": self.payload,
            "field_errors": self.field_errors,
        }


def _items(raw: Mapping) -> list[tuple[str, list[str]]]:
    if hasattr(raw, "lists"):
        pairs = list(raw.lists())
    else:
        pairs = [(k, list(v) if isinstance(v, (list, tuple)) else [v]) for k, v in raw.items()]
    return [(k, v) for k, v in pairs if k and k != INTENT_FIELD]


def _parse(raw: Mapping) -> tuple[dict, dict[str, list[str]]]:
    payload, rejected = build_payload(_items(raw))
    return payload, {name: [INVALID_INDEX_MESSAGE] for name in rejected}


def _field_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        if err.get("input") is None:
            msg = REQUIRED_MESSAGE
        else:
            msg = _MESSAGES.get(err["type"], err["msg"])
        errors.setdefault(format_path(err["loc"]), []).append(msg)
    return errors


def coerce(payload: dict, schema: type[BaseModel]) -> dict:
    """Validate a nested payload; returns the typed value or raises ValidationError."""
    try:
        model = schema.model_validate(compact(payload) or {})
    except PydanticValidationError as exc:
        raise ValidationError(_field_errors(exc)) from exc
    return model.model_dump(exclude_none=True)


def _validate_payload(
    payload: dict,
    schema: type[BaseModel],
    intent: Intent | None = None,
    path_errors: dict[str, list[str]] | None = None,
) -> Submission:
    path_errors = path_errors or {}
    try:
        value = coerce(payload, schema)
    except ValidationError as e:
        errors = {**e.field_errors, **path_errors}
        return Submission(status="error", payload=payload, field_errors=errors, intent=intent)
    if path_errors:
        return Submission(status="error", payload=payload, field_errors=path_errors, intent=intent)
    return Submission(status="success", payload=payload, value=value, intent=intent)


def validate(raw: Mapping, schema: type[BaseModel]) -> Submission:
    """
    Validate raw form data (a werkzeug MultiDict or a plain mapping of field
    path to string or list of strings) against `schema`.

    Unknown fields are ignored by the schema. Never raises for bad input:
    failures come back as an error Submission keyed by field path.
    """
    payload, path_errors = _parse(raw)
    return _validate_payload(payload, schema, path_errors=path_errors)


def parse_intent(raw: str | None) -> Intent | None:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed intent: %r", raw)
        return None
    if not isinstance(data, dict) or data.get("type") not in INTENT_TYPES:
        logger.warning("Ignoring unknown intent: %r", raw)
        return None
    payload = data.get("payload")
    name = payload.get("name") if isinstance(payload, dict) else None
    if not isinstance(name, str) or not name.strip():
        logger.warning("Ignoring intent without a field name: %r", raw)
        return None
    return Intent(type=data["type"], payload=payload)


def _index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def apply_intent(payload: dict, intent: Intent) -> dict:
    """
    Return a copy of `payload` with an insert/remove applied to a list field.

    Items after the affected index shift by one, so inserting and then
    removing at the same index gives back the original list.
    """
    out = copy.deepcopy(payload)
    segments = parse_path(intent.payload["name"])
    if APPEND in segments:
        logger.warning("Ignoring intent on an append-style name: %s", intent.payload)
        return out
    items = get_value(out, segments)
    if not isinstance(items, list) and any(isinstance(seg, int) for seg in segments):
        # only existing list items may be addressed by index
        logger.warning("Ignoring intent on a missing list item: %s", intent.payload)
        return out
    items = list(items) if isinstance(items, list) else []

    if intent.type == "insert":
        index = _index(intent.payload.get("index"))
        if index is None or index > len(items):
            index = len(items)
        default = intent.payload.get("default_value")
        items.insert(index, "" if default is None else default)
    elif intent.type == "remove":
        index = _index(intent.payload.get("index"))
        if index is None or index >= len(items):
            logger.warning("Ignoring remove intent with bad index: %s", intent.payload)
            return out
        del items[index]
    else:
        return out

    set_value(out, segments, items)
    return out


def _within(path: str, name: str) -> bool:
    return path == name or path.startswith(name + ".") or path.startswith(name + "[")


def parse_submission(
    raw: Mapping,
    schema: type[BaseModel],
    *,
    field_schema: type[BaseModel] | None = None,
) -> Submission:
    """
    Parse a POSTed form, honouring any list or validate intent it carries.

    `field_schema` is used for single-field validate intents and defaults to
    `schema`. Intent submissions come back with status None: the form is
    re-rendered, not accepted.
    """
    intent_raw = raw.get(INTENT_FIELD)
    intent = parse_intent(intent_raw if isinstance(intent_raw, str) else None)
    payload, path_errors = _parse(raw)

    if intent is None:
        return _validate_payload(payload, schema, path_errors=path_errors)

    if intent.type == "validate":
        name = intent.payload["name"]
        result = _validate_payload(payload, field_schema or schema, intent, path_errors)
        errors = {p: msgs for p, msgs in result.field_errors.items() if _within(p, name)}
        return Submission(status=None, payload=payload, field_errors=errors, intent=intent)

    return Submission(status=None, payload=apply_intent(payload, intent), field_errors=path_errors, intent=intent)
