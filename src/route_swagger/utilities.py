"""Small string, path and dict helpers shared by the swagger builders."""

import re
from typing import Any, Iterable

from route_swagger.settings import PathReplacement

KEEP_EMPTY = ("default", "example")


def replace_in_path(path: str, targets: Iterable[str], replacements: list[PathReplacement]) -> str:
    """Apply every replacement aimed at one of ``targets`` (or ``all``)."""
    targets = set(targets)
    for item in replacements:
        if item.replace_in == "all" or item.replace_in in targets:
            path = re.sub(item.pattern, item.replacement, path)
    return path


def starts_with_base_path(path: str, base_path: str) -> bool:
    """Prefix test that only matches whole path segments."""
    if not base_path or base_path == "/":
        return False
    base_path = base_path.rstrip("/")
    return path == base_path or path.startswith(base_path + "/")


def delete_empty_properties(obj: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``obj`` without ``None``, empty list or empty dict values."""
    out = {}
    for key, value in obj.items():
        if value is None:
            continue
        if key not in KEEP_EMPTY and isinstance(value, (list, dict)) and not value:
            continue
        out[key] = value
    return out


def first_char_upper(text: str) -> str:
    return text[:1].upper() + text[1:]


def create_id(method: str, path: str) -> str:
    """Derive an operation id such as ``getWidgetsId`` from method and path."""
    parts = []
    for segment in path.split("/"):
        words = re.split(r"[^0-9A-Za-z]+", segment)
        parts.extend(first_char_upper(word) for word in words if word)
    return method.lower() + "".join(parts)


def sort_first_item(items: list[Any], first: Any) -> list[Any]:
    """Move ``first`` to the front, keeping the relative order of the rest."""
    if first is None or first not in items:
        return list(items)
    return [first] + [item for item in items if item != first]


def get_groups(
    path: str,
    base_path: str,
    prefix_size: int,
    replacements: list[PathReplacement],
) -> list[str]:
    """Group label for a route: its leading path segment(s) after the base path."""
    if starts_with_base_path(path, base_path):
        path = path[len(base_path.rstrip("/")):]
    segments = [s for s in path.split("/") if s and not s.startswith("{")]
    if not segments:
        return []
    group = "/".join(segments[:max(prefix_size, 1)])
    group = replace_in_path(group, ["groups"], replacements)
    return [group] if group else []
