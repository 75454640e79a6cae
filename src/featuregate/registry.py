"""Ordered registry of the application's features."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any, Optional

from featuregate.definitions import FeatureDefinition

logger = logging.getLogger(__name__)


class FeatureRegistry:
    """
    In-memory catalog of feature definitions, in registration order.

    Build it once while the application starts and hand it to the request
    handling code. Registration is not synchronised, so every add_feature()
    call must happen before requests are served.

    Identifiers are not required to be unique and coverage may overlap.
    Lookups return the first registered feature that covers an endpoint.
    """

    def __init__(self) -> None:
        self._features: list[FeatureDefinition] = []

    def add_feature(
        self,
        identifier: str,
        controllers: Iterable[Any],
        other_actions: Optional[Iterable[Any]] = None,
    ) -> FeatureDefinition:
        """
        Register a feature.

        Args:
            identifier: Name of the feature, e.g. "File sharing"
            controllers: Controllers completely related to the feature
            other_actions: Other (controller, action) coverage, see
                featuregate.definitions for the accepted forms

        Returns:
            The stored definition
        """
        definition = FeatureDefinition.build(identifier, controllers, other_actions)
        if identifier in self:
            logger.warning(
                "Feature %r registered more than once; the first registration wins",
                identifier,
            )
        self._features.append(definition)
        logger.debug(
            "Registered feature %r (controllers=%s, other_actions=%d)",
            identifier,
            sorted(definition.controllers),
            len(definition.other_actions),
        )
        return definition

    @property
    def all_features(self) -> tuple[FeatureDefinition, ...]:
        return tuple(self._features)

    def feature_for(self, controller: Any, action: Any) -> Optional[str]:
        """Identifier of the first feature covering the endpoint, or None."""
        for feature in self._features:
            if feature.includes_action(controller, action):
                return feature.identifier
        return None

    def get(self, identifier: str) -> FeatureDefinition:
        for feature in self._features:
            if feature.identifier == identifier:
                return feature
        raise KeyError(f"Unknown feature: {identifier}")

    def identifiers(self) -> list[str]:
        return [feature.identifier for feature in self._features]

    def __contains__(self, identifier: object) -> bool:
        return any(feature.identifier == identifier for feature in self._features)

    def __iter__(self) -> Iterator[FeatureDefinition]:
        return iter(self.all_features)

    def __len__(self) -> int:
        return len(self._features)
