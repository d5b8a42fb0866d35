"""
Input sanitisation for projection models.

Numbers arriving from forms and stored client records are frequently strings
("5,000"), blanks or missing altogether. Every projection input model derives
from SanitizedModel so that malformed numeric fields fall back to the field's
documented default before pydantic validation runs.
"""

import math
import re
from typing import Any, Optional, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, model_validator

# Thousands separators, whitespace and currency symbols
_FORMATTING = re.compile(r"[,\s$]")


def to_number(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Coerce a loosely typed value to a finite float.

    Args:
        value: Raw value (number, numeric string, None, ...)
        default: Value returned when the input cannot be parsed

    Returns:
        The parsed float, or ``default`` for unparseable or non-finite input
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = _FORMATTING.sub("", value)
        try:
            number = float(cleaned)
        except ValueError:
            return default
    else:
        return default

    if not math.isfinite(number):
        return default
    return number


def _numeric_kind(annotation: Any) -> Optional[type]:
    """Return float/int when the annotation is a (possibly optional) number."""
    if annotation in (float, int):
        return annotation
    if get_origin(annotation) is Union:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1 and args[0] in (float, int):
            return args[0]
    return None


class SanitizedModel(BaseModel):
    """Base model that replaces malformed numeric input with field defaults."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def sanitize_numbers(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        cleaned = dict(data)
        for name, field in cls.model_fields.items():
            key = field.alias if field.alias and field.alias in cleaned else name
            if key not in cleaned:
                continue
            kind = _numeric_kind(field.annotation)
            if kind is None:
                continue

            number = to_number(cleaned[key], default=None)
            if number is None:
                # Fall back to the declared default
                del cleaned[key]
            elif kind is int:
                cleaned[key] = int(number)
            else:
                cleaned[key] = number
        return cleaned
