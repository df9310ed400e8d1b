"""
View binding: turns a Submission reply (or loader defaults) into the ids,
values and aria attributes the templates put on form controls.

Templates render the returned dicts with Jinja's `xmlattr` filter, which
drops attributes whose value is None.
"""
from __future__ import annotations

from typing import Any

from app.formstate.paths import format_path, get_value, parse_path
from app.formstate.submission import INTENT_FIELD, Intent

_CHECKED_VALUES = (True, "on")


class FormMetadata:
    def __init__(
        self,
        form_id: str,
        *,
        default_value: dict | None = None,
        last_result: dict | None = None,
    ):
        self.id = form_id
        self.error_id = f"{form_id}-form-error"
        self.default_value = default_value or {}
        if last_result:
            self.initial_value = last_result.get("initial_value") or {}
            self.field_errors: dict[str, list[str]] = last_result.get("field_errors") or {}
        else:
            self.initial_value = self.default_value
            self.field_errors = {}

    @property
    def errors(self) -> list[str]:
        return self.field_errors.get("", [])

    @property
    def valid(self) -> bool:
        return not any(self.field_errors.values())

    def field(self, name: str) -> FieldMetadata:
        return FieldMetadata(self, name)

    def __getitem__(self, name: str) -> FieldMetadata:
        return self.field(name)

    def props(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "method": "post",
            "novalidate": "novalidate",
            "aria-invalid": "true" if self.errors else None,
            "aria-describedby": self.error_id if self.errors else None,
        }

    def _intent_button(self, intent: Intent) -> dict[str, Any]:
        return {
            "type": "submit",
            "name": INTENT_FIELD,
            "value": intent.serialize(),
            "form": self.id,
            "formnovalidate": "formnovalidate",
        }

    def insert_button(self, name: str, index: int | None = None, default_value: Any = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": name}
        if index is not None:
            payload["index"] = index
        if default_value is not None:
            payload["default_value"] = default_value
        return self._intent_button(Intent("insert", payload))

    def remove_button(self, name: str, index: int) -> dict[str, Any]:
        return self._intent_button(Intent("remove", {"name": name, "index": index}))


class FieldMetadata:
    def __init__(self, form: FormMetadata, name: str):
        self.form = form
        self.name = name
        self.id = f"{form.id}-field-{name}"
        self.error_id = f"{self.id}-error"

    @property
    def initial_value(self) -> Any:
        return get_value(self.form.initial_value, parse_path(self.name))

    @property
    def errors(self) -> list[str]:
        return self.form.field_errors.get(self.name, [])

    @property
    def all_errors(self) -> dict[str, list[str]]:
        """Errors for this field and everything nested under it."""
        name = self.name
        return {
            path: msgs
            for path, msgs in self.form.field_errors.items()
            if path == name or path.startswith(name + ".") or path.startswith(name + "[")
        }

    @property
    def valid(self) -> bool:
        return not self.errors

    def fieldset(self) -> Fieldset:
        return Fieldset(self)

    def field_list(self) -> list[FieldMetadata]:
        items = self.initial_value
        if not isinstance(items, list):
            return []
        base = parse_path(self.name)
        return [FieldMetadata(self.form, format_path([*base, i])) for i in range(len(items))]

    def input_props(self, type: str = "text") -> dict[str, Any]:
        props: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "form": self.form.id,
            "type": type,
            "aria-invalid": "true" if self.errors else None,
            "aria-describedby": self.error_id if self.errors else None,
        }
        value = self.initial_value
        if type == "checkbox":
            props["value"] = "on"
            props["checked"] = "checked" if value in _CHECKED_VALUES else None
        elif type != "password" and value is not None and not isinstance(value, (dict, list)):
            props["value"] = value
        return props

    def fieldset_props(self) -> dict[str, Any]:
        invalid = bool(self.all_errors)
        return {
            "id": self.id,
            "name": self.name,
            "form": self.form.id,
            "aria-invalid": "true" if invalid else None,
            "aria-describedby": self.error_id if invalid else None,
        }


class Fieldset:
    """Child fields of a nested object, addressed as `fieldset.name` or `fieldset["name"]`."""

    def __init__(self, parent: FieldMetadata):
        self._parent = parent

    def __getitem__(self, key: str) -> FieldMetadata:
        return FieldMetadata(self._parent.form, f"{self._parent.name}.{key}")

    def __getattr__(self, key: str) -> FieldMetadata:
        if key.startswith("_"):
            raise AttributeError(key)
        return self[key]
