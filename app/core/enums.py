"""Helpers for str-enum columns."""
import enum
from typing import Any, Optional


def enum_value(v: Any) -> Optional[str]:
    """Bare string value of a str-enum member or plain str. None stays None."""
    if v is None:
        return None
    return v.value if isinstance(v, enum.Enum) else str(v)
