"""Pass registry: look up analysis passes by identifier."""

from __future__ import annotations

import logging

from quillpass.passes.base import Pass

logger = logging.getLogger("quillpass.passes")


class PassRegistry:
    """Registry of pass instances keyed by their ``id``."""

    def __init__(self) -> None:
        self._passes: dict[str, Pass] = {}

    def register(self, pass_: Pass) -> Pass:
        """Register *pass_*, replacing any pass with the same id."""
        self._passes[pass_.id] = pass_
        return pass_

    def get(self, pass_id: str) -> Pass | None:
        return self._passes.get(pass_id)

    def all(self) -> list[Pass]:
        """All registered passes in registration order."""
        return list(self._passes.values())

    def get_enabled(self, enabled_ids: list[str]) -> list[Pass]:
        """Resolve *enabled_ids* to passes, keeping the caller's order.

        Unknown identifiers are dropped.
        """
        enabled: list[Pass] = []
        for pass_id in enabled_ids:
            pass_ = self._passes.get(pass_id)
            if pass_ is None:
                logger.debug("Ignoring unknown pass id '%s'", pass_id)
                continue
            enabled.append(pass_)
        return enabled

    def __contains__(self, pass_id: object) -> bool:
        return pass_id in self._passes

    def __len__(self) -> int:
        return len(self._passes)
