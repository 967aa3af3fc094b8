"""Named, reusable object shapes shared across one document."""

import json
from typing import Any

from route_swagger.settings import Settings


class Definitions:
    """Owns one definitions map and the cache used to deduplicate it.

    A fresh instance is made for every build; nothing is shared between
    documents.
    """

    def __init__(self, settings: Settings, definitions: dict[str, Any], cache: dict[str, str], ref_root: str):
        self.settings = settings
        self.definitions = definitions
        self.cache = cache
        self.ref_root = ref_root
        self._reserved: set[str] = set()

    def ref(self, name: str) -> str:
        return f"#/{self.ref_root}/{name}"

    def append(self, label: str | None, definition: dict[str, Any]) -> str:
        """Store ``definition`` and return its name, reusing an identical one."""
        key = _cache_key(definition)
        if self.settings.reuse_definitions and key in self.cache:
            return self.cache[key]
        name = self._next_name(label)
        self.definitions[name] = definition
        self.cache.setdefault(key, name)
        return name

    def reserve(self, label: str | None) -> str:
        """Claim a name for a definition whose body is not built yet."""
        name = self._next_name(label)
        self.definitions[name] = {}
        self._reserved.add(name)
        return name

    def fill(self, name: str, definition: dict[str, Any]) -> None:
        self.definitions[name] = definition
        self._reserved.discard(name)
        self.cache.setdefault(_cache_key(definition), name)

    def _next_name(self, label: str | None) -> str:
        if label and label not in self.definitions:
            return label
        base = label if label and self.settings.definition_prefix == "useLabel" else "Model"
        n = 1
        while f"{base}{n}" in self.definitions:
            n += 1
        return f"{base}{n}"


def _cache_key(definition: dict[str, Any]) -> str:
    return json.dumps(definition, sort_keys=True, default=str)
