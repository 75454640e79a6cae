"""
Route guards enforcing feature access in FastAPI applications.

Usage:
    registry = FeatureRegistry()
    registry.add_feature("Wiki", ["wiki"], [{"controller": "users", "action": "my_pages"}])

    app = FastAPI()
    install_feature_gate(app, registry)

    router = APIRouter(prefix="/wiki", dependencies=[Depends(require_feature_access("wiki"))])

The router (or any name given to require_feature_access) plays the part of
the controller; the action defaults to the name of the matched route, which
FastAPI derives from the handler function.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from featuregate.access import (
    AccessChecker,
    DenialHandler,
    FeatureAccessDenied,
    FeatureGateError,
    raise_access_denied,
)
from featuregate.config import settings
from featuregate.registry import FeatureRegistry

logger = logging.getLogger(__name__)

EnabledFeaturesSource = Callable[[Request], Optional[Iterable[str]]]


class FeatureGateNotInstalled(FeatureGateError):
    """Raised when a guarded route runs on an app without install_feature_gate()."""
    pass


class FeatureDenialResponse(FeatureGateError):
    """Carries the response a denial handler returned for a denied request."""

    def __init__(self, feature_name: str, response: Response):
        self.feature_name = feature_name
        self.response = response
        super().__init__(f"{feature_name} feature is not enabled")


def session_enabled_features(request: Request) -> list[str]:
    """
    Read the caller's enabled features from the session.

    Falls back to settings.default_enabled_features when the session has no
    list or SessionMiddleware is not installed.
    """
    if "session" in request.scope:
        stored = request.session.get(settings.session_key)
        if isinstance(stored, str):
            return [stored]
        if stored is not None:
            return list(stored)
    return list(settings.default_enabled_features)


async def feature_access_denied_handler(
    request: Request, exc: FeatureAccessDenied
) -> JSONResponse:
    """Turn the default authorization failure into an HTTP error response."""
    return JSONResponse(
        status_code=settings.denial_status_code,
        content={"detail": str(exc), "feature": exc.feature_name},
    )


async def feature_denial_response_handler(
    request: Request, exc: FeatureDenialResponse
) -> Response:
    """Send the response a denial handler returned, e.g. a redirect."""
    return exc.response


def not_found_denial(feature_name: str) -> None:
    """Denial handler answering 404, hiding that the feature exists."""
    raise HTTPException(status_code=404, detail="Feature not enabled")


def redirect_denial(url: str, status_code: int = 303) -> DenialHandler:
    """Denial handler factory redirecting the caller to ``url``."""
    def redirect(feature_name: str) -> None:
        raise HTTPException(
            status_code=status_code,
            detail=f"{feature_name} feature is not enabled",
            headers={"Location": url},
        )

    return redirect


def install_feature_gate(
    app: FastAPI,
    registry: FeatureRegistry,
    *,
    denial_handler: Optional[DenialHandler] = None,
    enabled_features_source: Optional[EnabledFeaturesSource] = None,
) -> None:
    """
    Attach the feature registry and access strategies to an application.

    Args:
        app: The application whose routes use require_feature_access()
        registry: Features registered at startup
        denial_handler: Called with the feature name on denial; defaults
            to raising FeatureAccessDenied, answered with
            settings.denial_status_code
        enabled_features_source: Returns the caller's enabled features for a
            request; defaults to session_enabled_features
    """
    app.state.feature_registry = registry
    app.state.feature_denial_handler = denial_handler or raise_access_denied
    app.state.enabled_features_source = (
        enabled_features_source or session_enabled_features
    )
    app.add_exception_handler(FeatureAccessDenied, feature_access_denied_handler)
    app.add_exception_handler(FeatureDenialResponse, feature_denial_response_handler)
    logger.info("Feature gate installed with features: %s", registry.identifiers())


def _route_action(request: Request) -> str:
    route = request.scope.get("route")
    name = getattr(route, "name", None)
    if name:
        return name
    endpoint = request.scope.get("endpoint")
    return getattr(endpoint, "__name__", "")


def require_feature_access(controller: str, action: Optional[str] = None):
    """
    Dependency factory guarding routes of ``controller``.

    Usage:
        @app.get("/files", dependencies=[Depends(require_feature_access("files", "index"))])

    The checker built for the request is kept on request.state.feature_access
    so handlers can ask it about other features.

    FastAPI ignores the return value of a dependency, so a denial always ends
    in an exception: a Response returned by the denial handler is sent as is,
    any other return value falls back to FeatureAccessDenied.
    """
    def check_feature(request: Request) -> None:
        state = request.app.state
        registry = getattr(state, "feature_registry", None)
        if registry is None:
            raise FeatureGateNotInstalled(
                "install_feature_gate() must be called before serving guarded routes"
            )

        checker = AccessChecker(registry, denial_handler=state.feature_denial_handler)
        checker.enable_features(state.enabled_features_source(request))
        request.state.feature_access = checker

        endpoint_action = action or _route_action(request)
        decision = checker.evaluate(controller, endpoint_action)
        if decision.permitted:
            return None

        result = checker.check_feature_access(controller, endpoint_action)
        if isinstance(result, Response):
            raise FeatureDenialResponse(decision.feature, result)
        raise FeatureAccessDenied(decision.feature)

    return check_feature
