"""
Feature definitions and endpoint coverage.

A feature covers endpoints in two ways:
- Whole controllers: every action of the controller belongs to the feature
- Other actions: individual (controller, action) pairs outside those controllers

Other actions can be given in any of these forms:
    {"controller": "users", "action": "my_pages"}
    {"controller": "users", "actions": ["my_pages", "my_files"]}
    ("users", "my_pages")
    ("users", ["my_pages", "my_files"])
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)


def normalize_name(value: Any) -> str:
    """Return the canonical string form of a controller or action name."""
    return str(value).strip()


def _normalize_names(raw: Any) -> frozenset[str]:
    """Normalize one name or an iterable of names; a single string is one name."""
    if raw is None:
        return frozenset()
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        return frozenset({normalize_name(raw)})
    return frozenset(normalize_name(name) for name in raw)


@dataclass(frozen=True)
class ActionCoverage:
    """One controller plus the actions of it covered by a feature."""

    controller: str
    actions: frozenset[str] = field(default_factory=frozenset)

    def matches(self, controller: str, action: str) -> bool:
        return controller == self.controller and action in self.actions

    @classmethod
    def parse(cls, entry: Any) -> Optional["ActionCoverage"]:
        """
        Build coverage from a mapping or a (controller, actions) pair.

        Returns None for entries that cannot be understood, so registration
        of the remaining coverage still goes through.
        """
        if isinstance(entry, Mapping):
            controller = entry.get("controller")
            raw_actions = entry.get("actions", entry.get("action"))
        elif isinstance(entry, (tuple, list)) and len(entry) == 2:
            controller, raw_actions = entry
        else:
            logger.warning("Skipping unrecognised action coverage: %r", entry)
            return None

        if controller is None or normalize_name(controller) == "":
            logger.warning("Skipping action coverage without controller: %r", entry)
            return None

        return cls(
            controller=normalize_name(controller),
            actions=_normalize_names(raw_actions),
        )


@dataclass(frozen=True)
class FeatureDefinition:
    """
    A feature of the application and the endpoints it guards.

    Attributes:
        identifier: Name of the feature, used for lookups and enabled lists
        controllers: Controllers completely covered by the feature
        other_actions: Finer grained coverage, checked in order
    """

    identifier: str
    controllers: frozenset[str] = field(default_factory=frozenset)
    other_actions: tuple[ActionCoverage, ...] = ()

    @classmethod
    def build(
        cls,
        identifier: str,
        controllers: Iterable[Any],
        other_actions: Optional[Iterable[Any]] = None,
    ) -> "FeatureDefinition":
        """Create a definition from raw registration arguments."""
        coverage = []
        for entry in other_actions or ():
            parsed = ActionCoverage.parse(entry)
            if parsed is not None:
                coverage.append(parsed)

        return cls(
            identifier=identifier,
            controllers=_normalize_names(controllers),
            other_actions=tuple(coverage),
        )

    def includes_action(self, controller: Any, action: Any) -> bool:
        """Whether the endpoint (controller, action) is covered by this feature."""
        controller = normalize_name(controller)
        if controller in self.controllers:
            return True

        action = normalize_name(action)
        return any(cov.matches(controller, action) for cov in self.other_actions)
