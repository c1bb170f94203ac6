"""Custom override resolution

A form carries a single map of field key -> user-pinned value. A pinned value
replaces the computed one verbatim; None or an empty string means the field
is not pinned and the computed value is used.
"""

from typing import Any, Mapping, Optional

from .coercion import parse_number


def has_override(overrides: Optional[Mapping[str, Any]], key: str) -> bool:
    if not overrides or key not in overrides:
        return False
    value = overrides[key]
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


class OverrideResolver:
    """Resolves overrides for one calculation and remembers which ones applied"""

    def __init__(self, overrides: Optional[Mapping[str, Any]] = None):
        self.overrides = dict(overrides or {})
        self.applied: list[str] = []

    def get(self, key: str, computed: float) -> float:
        if has_override(self.overrides, key):
            if key not in self.applied:
                self.applied.append(key)
            return parse_number(self.overrides[key])
        return computed

    def is_custom(self, key: str) -> bool:
        return key in self.applied
