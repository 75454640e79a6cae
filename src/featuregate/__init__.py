"""
featuregate - controller-level feature gating

Lets an application declare named features, map each feature to the
controller/action endpoints it covers, and deny requests whose feature is
not in the caller's enabled list.

Main components:
- definitions: Feature coverage records and the endpoint membership test
- registry: Ordered catalog of features built at startup
- access: Per-request access checker and denial handlers
- config: Settings loaded from the environment
- web: FastAPI guard dependency and demo application
"""

from featuregate.access import (
    AccessChecker,
    AccessDecision,
    DenialHandler,
    FeatureAccessDenied,
    FeatureGateError,
    raise_access_denied,
)
from featuregate.definitions import ActionCoverage, FeatureDefinition
from featuregate.registry import FeatureRegistry

__version__ = "1.0.0"

__all__ = [
    "AccessChecker",
    "AccessDecision",
    "ActionCoverage",
    "DenialHandler",
    "FeatureAccessDenied",
    "FeatureDefinition",
    "FeatureGateError",
    "FeatureRegistry",
    "raise_access_denied",
]
