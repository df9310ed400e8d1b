from __future__ import annotations

import copy

SAMPLE_USERS: tuple[dict, ...] = (
    {
        "id": "1",
        "email": "dusty+one@postal.io",
        "thing": {"name": "one"},
        "remember": True,
        "tasks": ["1", "2"],
    },
    {
        "id": "2",
        "email": "dusty+2@postal.io",
        "thing": {"name": "two"},
        "remember": False,
    },
)


def find_by_id(user_id: str) -> dict:
    """Return a copy of the sample record with this id, or {} if there is none."""
    for record in SAMPLE_USERS:
        if record["id"] == user_id:
            return copy.deepcopy(record)
    return {}


def next_user_id(user_id: str) -> str | None:
    """The id after `user_id`, or None when `user_id` isn't numeric."""
    try:
        return str(int(user_id) + 1)
    except (TypeError, ValueError):
        return None
