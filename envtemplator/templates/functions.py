"""
Template Function Library
=========================

Functions callable from templates, both as globals and as filters:

    {{ where(services, "Role", "web") }}
    {{ services | groupBy("Zone") }}

Every function works on plain Python data (mappings, sequences, scalars) or
on objects whose attributes are read as fields. None of them mutates its
arguments; results are always new lists and dicts. A value of the wrong
shape raises TemplateFunctionError naming the function, the value and its
kind, which fails the render.

Session-bound functions (``include``, ``eval``, ``envall``) are added by the
renderer, see ``renderer.RenderSession``.
"""

import hashlib
import json
import os
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote_plus

import yaml

from ..constants import Messages
from ..errors import TemplateFunctionError
from ..logger import get_logger
from .values import (
    get_field,
    is_absent,
    is_empty,
    is_collection,
    normalize_criteria,
    require_mapping,
    require_sequence,
    require_string,
    shape_error,
    to_number,
    to_text,
)

logger = get_logger(__name__)


# ============================================================================
# Validation
# ============================================================================


def required(message: str, value: Any) -> Any:
    """
    Fail the render with ``message`` when value is missing or empty.

    Returns:
        value unchanged when present
    """
    if is_empty(value):
        raise TemplateFunctionError(message, function="required")
    return value


def require(value: Any) -> Any:
    """Deprecated single-argument form of required(); warns on every call."""
    logger.warning(Messages.REQUIRE_DEPRECATED)
    if is_empty(value):
        raise TemplateFunctionError(Messages.REQUIRE_MISSING, function="require")
    return value


def coalesce(*values: Any) -> Any:
    """Return the first value that is neither missing, None nor an empty string."""
    for value in values:
        if not is_empty(value):
            return value
    return None


# ============================================================================
# Filtering
# ============================================================================


def _matches(entry: Any, field: str, value: Any) -> bool:
    found = get_field(entry, field)
    return not is_absent(found) and found == value


def _has_field(entry: Any, field: str) -> bool:
    return not is_absent(get_field(entry, field))


def where(entries: Any, field: str, value: Any) -> List[Any]:
    """Entries whose field equals value. Entries lacking the field never match."""
    items = require_sequence("where", entries)
    return [entry for entry in items if _matches(entry, field, value)]


def where_not(entries: Any, field: str, value: Any) -> List[Any]:
    """Entries whose field does not equal value, including those lacking it."""
    items = require_sequence("whereNot", entries)
    return [entry for entry in items if not _matches(entry, field, value)]


def where_exist(entries: Any, field: str) -> List[Any]:
    items = require_sequence("whereExist", entries)
    return [entry for entry in items if _has_field(entry, field)]


def where_not_exist(entries: Any, field: str) -> List[Any]:
    items = require_sequence("whereNotExist", entries)
    return [entry for entry in items if not _has_field(entry, field)]


def where_any(entries: Any, *criteria: Any) -> List[Any]:
    """
    Entries satisfying at least one criterion.

    Criteria are mappings of field to expected value, or (field, value)
    pairs. With no criteria nothing matches.
    """
    items = require_sequence("whereAny", entries)
    pairs = normalize_criteria("whereAny", criteria)
    return [
        entry for entry in items if any(_matches(entry, field, value) for field, value in pairs)
    ]


def where_all(entries: Any, *criteria: Any) -> List[Any]:
    """Entries satisfying every criterion. With no criteria everything matches."""
    items = require_sequence("whereAll", entries)
    pairs = normalize_criteria("whereAll", criteria)
    return [
        entry for entry in items if all(_matches(entry, field, value) for field, value in pairs)
    ]


# ============================================================================
# Grouping
# ============================================================================


def _group(
    func_name: str,
    entries: Any,
    field: str,
    keys_for: Callable[[Any], List[str]],
) -> Dict[str, List[Any]]:
    groups: Dict[str, List[Any]] = {}
    for entry in require_sequence(func_name, entries):
        for key in keys_for(get_field(entry, field)):
            groups.setdefault(key, []).append(entry)
    return groups


def group_by(entries: Any, field: str) -> Dict[str, List[Any]]:
    """
    Group entries by the string form of a field.

    Entries without the field are left out. Keys appear in first-seen order
    and each group keeps input order.
    """
    return _group(
        "groupBy", entries, field, lambda value: [] if is_absent(value) else [to_text(value)]
    )


def group_by_with_default(entries: Any, field: str, default: Any) -> Dict[str, List[Any]]:
    """Like groupBy, but entries without the field go under ``default``."""
    default_key = to_text(default)
    return _group(
        "groupByWithDefault",
        entries,
        field,
        lambda value: [default_key] if is_absent(value) else [to_text(value)],
    )


def group_by_keys(entries: Any, field: str) -> List[str]:
    """Distinct group keys of a field, in first-seen order."""
    groups = _group(
        "groupByKeys", entries, field, lambda value: [] if is_absent(value) else [to_text(value)]
    )
    return list(groups.keys())


def group_by_multi(entries: Any, field: str, separator: str) -> Dict[str, List[Any]]:
    """
    Group entries under every key of a delimited field value.

    An entry with ``Tags: "a,b"`` and separator ``","`` lands in both group
    ``a`` and group ``b``.
    """
    if not isinstance(separator, str) or not separator:
        raise shape_error("groupByMulti", "a non-empty separator", separator)

    def split_keys(value: Any) -> List[str]:
        if is_absent(value):
            return []
        keys: List[str] = []
        for key in to_text(value).split(separator):
            if key not in keys:
                keys.append(key)
        return keys

    return _group("groupByMulti", entries, field, split_keys)


# ============================================================================
# Sorting
# ============================================================================


def _column_keys(entries: List[Any], field: str) -> List[tuple]:
    values = [get_field(entry, field) for entry in entries]
    present = [value for value in values if not is_absent(value) and value is not None]
    numeric = bool(present) and all(to_number(value) is not None for value in present)

    keys = []
    for value in values:
        if is_absent(value) or value is None:
            keys.append((0,))
        elif numeric:
            keys.append((1, to_number(value)))
        else:
            keys.append((1, to_text(value)))
    return keys


def _sort_objects(func_name: str, entries: Any, fields: tuple, descending: bool) -> List[Any]:
    items = require_sequence(func_name, entries)
    if not fields:
        raise TemplateFunctionError(
            f"'{func_name}' needs at least one field to sort by", function=func_name
        )
    for field in fields:
        require_string(func_name, field)

    columns = [_column_keys(items, field) for field in fields]
    row_keys = [tuple(column[i] for column in columns) for i in range(len(items))]
    order = sorted(range(len(items)), key=lambda i: row_keys[i], reverse=descending)
    return [items[i] for i in order]


def sort_objects_by_keys_asc(entries: Any, *fields: str) -> List[Any]:
    """
    Stable ascending sort of entries by one or more fields.

    A field compares numerically when every present value parses as a
    number, otherwise by string form. Entries lacking a field sort first.
    """
    return _sort_objects("sortObjectsByKeysAsc", entries, fields, descending=False)


def sort_objects_by_keys_desc(entries: Any, *fields: str) -> List[Any]:
    """Descending counterpart of sortObjectsByKeysAsc; equal keys keep input order."""
    return _sort_objects("sortObjectsByKeysDesc", entries, fields, descending=True)


def _sort_strings(func_name: str, values: Any, descending: bool) -> List[str]:
    items = require_sequence(func_name, values)
    for item in items:
        if not isinstance(item, str):
            raise shape_error(func_name, "a sequence of strings", items)
    return sorted(items, reverse=descending)


def sort_strings_asc(values: Any) -> List[str]:
    return _sort_strings("sortStringsAsc", values, descending=False)


def sort_strings_desc(values: Any) -> List[str]:
    return _sort_strings("sortStringsDesc", values, descending=True)


# ============================================================================
# Collections
# ============================================================================


def intersect(a: Any, b: Any) -> List[Any]:
    """Elements of ``a`` also present in ``b``, in ``a``'s order, without duplicates."""
    left = require_sequence("intersect", a)
    right = require_sequence("intersect", b)
    result: List[Any] = []
    for item in left:
        if item in right and item not in result:
            result.append(item)
    return result


def closest(entries: Any, field: str, target: Any) -> Optional[Any]:
    """
    Entry whose numeric field is nearest to target.

    On equal distance the entry met first wins. Entries whose field is
    missing or not numeric are skipped; None is returned when none remain.
    """
    items = require_sequence("closest", entries)
    goal = to_number(target)
    if goal is None:
        raise shape_error("closest", "a numeric target", target)

    best = None
    best_distance = None
    for entry in items:
        number = to_number(get_field(entry, field))
        if number is None:
            continue
        distance = abs(number - goal)
        if best_distance is None or distance < best_distance:
            best, best_distance = entry, distance
    return best


def contains(collection: Any, item: Any) -> bool:
    """Substring test for strings, key test for mappings, membership for sequences."""
    if collection is None or is_absent(collection):
        return False
    if isinstance(collection, str):
        return isinstance(item, str) and item in collection
    if isinstance(collection, Mapping) or is_collection(collection):
        try:
            return item in collection
        except TypeError:
            return False
    raise shape_error("contains", "a string, mapping or sequence", collection)


def keys(mapping: Any) -> List[Any]:
    return list(require_mapping("keys", mapping).keys())


def when(condition: Any, if_true: Any, if_false: Any) -> Any:
    return if_true if condition else if_false


# ============================================================================
# Strings
# ============================================================================


def comment(prefix: str, text: Any) -> str:
    """Prefix every line of text with ``prefix``."""
    body = require_string("comment", text)
    return "".join(prefix + line for line in body.splitlines(keepends=True))


def replace(value: str, old: str, new: str, count: int = -1) -> str:
    return require_string("replace", value).replace(old, new, count)


def split(value: str, separator: str) -> List[str]:
    text = require_string("split", value)
    if separator == "":
        return list(text)
    return text.split(separator)


def split_n(value: str, separator: str, n: int) -> List[str]:
    """Split into at most n parts; n == 0 gives no parts, n < 0 splits fully."""
    text = require_string("splitN", value)
    if n == 0:
        return []
    if n < 0:
        return split(text, separator)
    return text.split(separator, n - 1)


def to_lower(value: str) -> str:
    return require_string("toLower", value).lower()


def to_upper(value: str) -> str:
    return require_string("toUpper", value).upper()


_TRUE_STRINGS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_STRINGS = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool(value: Any) -> bool:
    text = require_string("parseBool", value)
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise TemplateFunctionError(f"parseBool: invalid syntax {text!r}", function="parseBool")


def query_escape(value: str) -> str:
    return quote_plus(require_string("queryEscape", value))


def sha1(value: str) -> str:
    return hashlib.sha1(require_string("sha1", value).encode("utf-8")).hexdigest()


# ============================================================================
# Serialization
# ============================================================================


def _dump_yaml(value: Any) -> str:
    text = yaml.safe_dump(value, default_flow_style=False, sort_keys=False, allow_unicode=True)
    # plain top-level scalars get an explicit document end marker
    if text.endswith("\n...\n"):
        text = text[: -len("...\n")]
    return text.rstrip("\n")


def from_yaml(text: Any) -> Any:
    """Parse YAML; a parse failure yields ``{"Error": message}`` instead of failing."""
    source = require_string("fromYaml", text)
    try:
        return yaml.safe_load(source)
    except yaml.YAMLError as e:
        return {"Error": str(e)}


def must_from_yaml(text: Any) -> Any:
    source = require_string("mustFromYaml", text)
    try:
        return yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise TemplateFunctionError(f"mustFromYaml: {e}", function="mustFromYaml") from e


def to_yaml(value: Any) -> str:
    """Serialize to block-style YAML; an unserializable value yields ``""``."""
    try:
        return _dump_yaml(value)
    except yaml.YAMLError:
        return ""


def must_to_yaml(value: Any) -> str:
    try:
        return _dump_yaml(value)
    except yaml.YAMLError as e:
        raise TemplateFunctionError(f"mustToYaml: {e}", function="mustToYaml") from e


def to_json(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise TemplateFunctionError(f"json: {e}", function="json") from e


def parse_json(text: Any) -> Any:
    source = require_string("parseJson", text)
    try:
        return json.loads(source)
    except json.JSONDecodeError as e:
        raise TemplateFunctionError(f"parseJson: {e}", function="parseJson") from e


# ============================================================================
# Filesystem
# ============================================================================


def exists(path: Any) -> bool:
    """
    Whether a path exists.

    Raises:
        TemplateFunctionError: For stat failures other than "not found"
    """
    target = require_string("exists", path)
    try:
        os.stat(target)
    except FileNotFoundError:
        return False
    except OSError as e:
        raise TemplateFunctionError(f"exists: {e}", function="exists") from e
    return True


def dir_list(path: Any) -> List[str]:
    target = require_string("dir", path)
    try:
        return sorted(os.listdir(target))
    except OSError as e:
        raise TemplateFunctionError(f"dir: {e}", function="dir") from e


# ============================================================================
# Registry
# ============================================================================

FUNCTIONS: Dict[str, Callable[..., Any]] = {
    "require": require,
    "required": required,
    "closest": closest,
    "coalesce": coalesce,
    "comment": comment,
    "contains": contains,
    "dir": dir_list,
    "exists": exists,
    "groupBy": group_by,
    "groupByWithDefault": group_by_with_default,
    "groupByKeys": group_by_keys,
    "groupByMulti": group_by_multi,
    "intersect": intersect,
    "keys": keys,
    "replace": replace,
    "parseBool": parse_bool,
    "fromYaml": from_yaml,
    "toYaml": to_yaml,
    "mustFromYaml": must_from_yaml,
    "mustToYaml": must_to_yaml,
    "queryEscape": query_escape,
    "split": split,
    "splitN": split_n,
    "sortStringsAsc": sort_strings_asc,
    "sortStringsDesc": sort_strings_desc,
    "sortObjectsByKeysAsc": sort_objects_by_keys_asc,
    "sortObjectsByKeysDesc": sort_objects_by_keys_desc,
    "toLower": to_lower,
    "toUpper": to_upper,
    "when": when,
    "where": where,
    "whereNot": where_not,
    "whereExist": where_exist,
    "whereNotExist": where_not_exist,
    "whereAny": where_any,
    "whereAll": where_all,
    "json": to_json,
    "toJson": to_json,
    "parseJson": parse_json,
    "fromJson": parse_json,
    "sha1": sha1,
}
"""Template-facing name to implementation"""


__all__ = ["FUNCTIONS"] + sorted({fn.__name__ for fn in FUNCTIONS.values()})
