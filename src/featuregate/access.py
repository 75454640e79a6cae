"""
Per-request feature access checks.

Usage:
    checker = AccessChecker(registry)
    checker.enable_features(["Wiki"])  # from the session, user profile, ...
    checker.check_feature_access("files", "index")  # denial handler runs

The denial handler is any callable taking the feature name. The default one
raises FeatureAccessDenied; pass another to redirect, flash a message or
build an error response instead.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Callable, Literal, NoReturn, Optional

from featuregate.registry import FeatureRegistry

logger = logging.getLogger(__name__)

AccessOutcome = Literal["unguarded", "allowed", "denied"]

DenialHandler = Callable[[str], Any]


class FeatureGateError(Exception):
    """Base class for featuregate errors."""
    pass


class FeatureAccessDenied(FeatureGateError):
    """Raised by the default denial handler for a feature that is not enabled."""

    def __init__(self, feature_name: str):
        self.feature_name = feature_name
        super().__init__(f"{feature_name} feature is not enabled")


def raise_access_denied(feature_name: str) -> NoReturn:
    """Default denial handler: fail with an authorization error."""
    raise FeatureAccessDenied(feature_name)


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of resolving one endpoint against the enabled features."""

    outcome: AccessOutcome
    feature: Optional[str] = None

    @property
    def permitted(self) -> bool:
        return self.outcome != "denied"


class AccessChecker:
    """
    Gate for a single request or caller.

    Resolution of the feature behind an endpoint only depends on the
    registry. The enabled features start out empty, so every guarded
    endpoint is denied until enable_features() is called.
    """

    def __init__(
        self,
        registry: FeatureRegistry,
        denial_handler: Optional[DenialHandler] = None,
        enabled_features: Optional[Iterable[str]] = None,
    ) -> None:
        self.registry = registry
        self.denial_handler = denial_handler or raise_access_denied
        self._enabled: tuple[str, ...] = ()
        if enabled_features is not None:
            self.enable_features(enabled_features)

    @property
    def enabled_features(self) -> tuple[str, ...]:
        return self._enabled

    def enable_features(self, feature_names: Optional[Iterable[str]]) -> None:
        """Replace the enabled features with ``feature_names``."""
        self._enabled = tuple(feature_names or ())

    def is_feature_enabled(self, feature_name: str) -> bool:
        return feature_name in self._enabled

    def feature_accessed(self, controller: Any, action: Any) -> Optional[str]:
        """Name of the feature guarding the endpoint, None if unguarded."""
        return self.registry.feature_for(controller, action)

    def evaluate(self, controller: Any, action: Any) -> AccessDecision:
        """Resolve the endpoint without invoking the denial handler."""
        feature = self.feature_accessed(controller, action)
        if feature is None:
            return AccessDecision(outcome="unguarded")
        if not self.is_feature_enabled(feature):
            return AccessDecision(outcome="denied", feature=feature)
        return AccessDecision(outcome="allowed", feature=feature)

    def check_feature_access(self, controller: Any, action: Any) -> Any:
        """
        Check the endpoint against the enabled features.

        Returns None when the request may proceed. Otherwise returns whatever
        the denial handler returns; the default handler raises instead.
        """
        decision = self.evaluate(controller, action)
        if decision.permitted:
            return None

        logger.info(
            "Denied %s#%s: feature %r is not enabled",
            controller,
            action,
            decision.feature,
        )
        return self.handle_invalid_feature_access(decision.feature)

    def handle_invalid_feature_access(self, feature_name: str) -> Any:
        return self.denial_handler(feature_name)
