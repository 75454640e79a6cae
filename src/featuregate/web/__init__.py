"""FastAPI integration for featuregate."""

from featuregate.web.guard import (
    FeatureDenialResponse,
    FeatureGateNotInstalled,
    install_feature_gate,
    not_found_denial,
    redirect_denial,
    require_feature_access,
    session_enabled_features,
)

__all__ = [
    "FeatureDenialResponse",
    "FeatureGateNotInstalled",
    "install_feature_gate",
    "not_found_denial",
    "redirect_denial",
    "require_feature_access",
    "session_enabled_features",
]
