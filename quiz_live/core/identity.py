"""User identity normalisation shared by every id comparison."""

from __future__ import annotations

UserId = int | str


def normalize_user_id(user_id: UserId | float | None) -> str | None:
    """Return the canonical string form of a user id, or None when absent.

    The transport delivers ids as numbers or strings depending on the
    producer, so every comparison goes through this function. ``None``,
    empty strings and the number ``0`` all mean "no identity".
    """
    if user_id is None or isinstance(user_id, bool):
        return None
    if isinstance(user_id, float):
        if not user_id.is_integer():
            return str(user_id)
        user_id = int(user_id)
    if isinstance(user_id, int):
        return str(user_id) if user_id != 0 else None
    text = str(user_id).strip()
    if not text:
        return None
    return text


def same_user(left: UserId | float | None, right: UserId | float | None) -> bool:
    """True when both ids are present and refer to the same user."""
    normalized_left = normalize_user_id(left)
    if normalized_left is None:
        return False
    return normalized_left == normalize_user_id(right)
