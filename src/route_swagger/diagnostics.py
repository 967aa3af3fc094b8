"""Diagnostic sink for problems found while translating routes.

Problems in a single route never abort the build. They are recorded here
and forwarded to the standard logging module.
"""

import logging

logger = logging.getLogger(__name__)


class Diagnostics:
    """Collects (tags, message) entries in the order they were logged."""

    def __init__(self):
        self.entries: list[tuple[list[str], str]] = []

    def log(self, tags: list[str], message: str) -> None:
        self.entries.append((list(tags), message))
        logger.log(_level_for(tags), "[%s] %s", ",".join(tags), message)

    @property
    def errors(self) -> list[str]:
        return [msg for tags, msg in self.entries if "error" in tags]

    @property
    def warnings(self) -> list[str]:
        return [msg for tags, msg in self.entries if "warning" in tags]


def _level_for(tags: list[str]) -> int:
    if "error" in tags:
        return logging.ERROR
    if "warning" in tags:
        return logging.WARNING
    return logging.DEBUG
