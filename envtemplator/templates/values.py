"""
Generic Value Helpers
=====================

Template functions receive whatever the template hands them: mappings,
sequences, scalars, arbitrary objects or Jinja2 ``Undefined``. The helpers
here classify those values, read fields out of them, and build the uniform
"wrong shape" errors every function raises.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, List, Optional, Tuple

from jinja2 import Undefined

from ..errors import TemplateFunctionError


class _Missing:
    """Marker for an absent field; distinct from ``None``."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def is_absent(value: Any) -> bool:
    """True for the missing marker and Jinja2 undefined values."""
    return value is MISSING or isinstance(value, Undefined)


def is_empty(value: Any) -> bool:
    """True for absent values, ``None`` and the empty string."""
    return is_absent(value) or value is None or (isinstance(value, str) and value == "")


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_collection(value: Any) -> bool:
    """
    True for iterables other than strings, mappings and undefined values.

    Covers lists and tuples as well as generators from Jinja2 filters such as
    ``map`` or ``select`` and dict views like ``Env.keys()``.
    """
    if is_absent(value) or isinstance(value, (str, bytes, bytearray, Mapping)):
        return False
    return isinstance(value, Iterable)


def kind_of(value: Any) -> str:
    """Name the observed kind of a value, for error messages."""
    if is_absent(value):
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "mapping"
    if is_collection(value):
        return "sequence"
    return type(value).__name__


def shape_error(func_name: str, expected: str, value: Any) -> TemplateFunctionError:
    return TemplateFunctionError(
        f"must pass {expected} to '{func_name}'; received {value!r}; kind {kind_of(value)}",
        function=func_name,
    )


def require_sequence(func_name: str, value: Any) -> List[Any]:
    """
    Return a list of the items of a collection argument.

    Iterators are consumed once, here.

    Raises:
        TemplateFunctionError: If value is a scalar, a string or a mapping
    """
    if not is_collection(value):
        raise shape_error(func_name, "a sequence", value)
    return list(value)


def require_mapping(func_name: str, value: Any) -> Mapping:
    if not isinstance(value, Mapping):
        raise shape_error(func_name, "a mapping", value)
    return value


def require_string(func_name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise shape_error(func_name, "a string", value)
    return value


def _step(value: Any, part: str) -> Any:
    if isinstance(value, Mapping):
        return value[part] if part in value else MISSING
    if is_sequence(value):
        if part.lstrip("-").isdigit():
            index = int(part)
            if -len(value) <= index < len(value):
                return value[index]
        return MISSING
    if value is None or is_absent(value) or isinstance(value, (str, int, float, bool)):
        return MISSING
    if part.startswith("_"):
        return MISSING
    return getattr(value, part, MISSING)


def get_field(entry: Any, field: str) -> Any:
    """
    Read a possibly dotted field from an entry.

    A mapping key equal to the whole field name wins over dotted traversal,
    so labels such as ``com.example.role`` can be addressed directly.

    Returns:
        The field value, or MISSING when any step is absent
    """
    if isinstance(entry, Mapping) and field in entry:
        return entry[field]
    value = entry
    for part in field.split("."):
        value = _step(value, part)
        if value is MISSING:
            return MISSING
    return value


def to_text(value: Any) -> str:
    """String form used for group keys and lexicographic comparison."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None or is_absent(value):
        return ""
    return str(value)


def to_number(value: Any) -> Optional[float]:
    """Numeric form of a value, or None when it does not parse as a number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def normalize_criteria(func_name: str, criteria: Tuple[Any, ...]) -> List[Tuple[str, Any]]:
    """
    Flatten criteria arguments into ``(field, value)`` pairs.

    Each argument is either a mapping of field to expected value or a
    two-item sequence.
    """
    pairs: List[Tuple[str, Any]] = []
    for criterion in criteria:
        if isinstance(criterion, Mapping):
            pairs.extend((str(k), v) for k, v in criterion.items())
        elif is_sequence(criterion) and len(criterion) == 2:
            field, value = criterion
            pairs.append((require_string(func_name, field), value))
        else:
            raise shape_error(func_name, "a mapping or a (field, value) pair", criterion)
    return pairs


__all__ = [
    "MISSING",
    "is_absent",
    "is_empty",
    "is_sequence",
    "is_collection",
    "kind_of",
    "shape_error",
    "require_sequence",
    "require_mapping",
    "require_string",
    "get_field",
    "to_text",
    "to_number",
    "normalize_criteria",
]
