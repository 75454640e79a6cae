"""
Demo application showing feature gating on a small file sharing site.

Features:
- "Files": the files and file_comments controllers
- "Wiki": the wiki controller plus the users#my_pages action

The caller's enabled features live in the signed session cookie and are set
through PUT /session/features.
"""

from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from pydantic import BaseModel, Field
from starlette.middleware.sessions import SessionMiddleware

from featuregate.access import DenialHandler
from featuregate.config import settings
from featuregate.log import configure_logging
from featuregate.registry import FeatureRegistry
from featuregate.web.guard import (
    EnabledFeaturesSource,
    install_feature_gate,
    require_feature_access,
    session_enabled_features,
)


class FeatureSelection(BaseModel):
    """Enabled feature names for the current caller."""

    features: list[str] = Field(default_factory=list)


def build_registry() -> FeatureRegistry:
    """Register the demo application's features."""
    registry = FeatureRegistry()
    registry.add_feature("Files", ["files", "file_comments"])
    registry.add_feature(
        "Wiki",
        ["wiki"],
        [{"controller": "users", "action": "my_pages"}],
    )
    return registry


files_router = APIRouter(
    prefix="/files",
    dependencies=[Depends(require_feature_access("files"))],
)
file_comments_router = APIRouter(
    prefix="/files/{file_id}/comments",
    dependencies=[Depends(require_feature_access("file_comments"))],
)
wiki_router = APIRouter(
    prefix="/wiki",
    dependencies=[Depends(require_feature_access("wiki"))],
)
users_router = APIRouter(
    prefix="/users",
    dependencies=[Depends(require_feature_access("users"))],
)
session_router = APIRouter(prefix="/session")


@files_router.get("")
async def index():
    return {"files": []}


@files_router.get("/{file_id}")
async def show(file_id: int):
    return {"file": {"id": file_id}}


@file_comments_router.get("")
async def comments_index(file_id: int):
    return {"file_id": file_id, "comments": []}


@wiki_router.get("")
async def wiki_index():
    return {"pages": []}


@users_router.get("/me/pages")
async def my_pages():
    return {"pages": []}


@users_router.get("/me/profile")
async def edit_profile():
    return {"profile": {}}


@session_router.get("/features")
async def get_session_features(request: Request) -> FeatureSelection:
    return FeatureSelection(features=session_enabled_features(request))


@session_router.put("/features")
async def set_session_features(
    selection: FeatureSelection, request: Request
) -> FeatureSelection:
    request.session[settings.session_key] = selection.features
    return selection


def create_app(
    registry: Optional[FeatureRegistry] = None,
    *,
    denial_handler: Optional[DenialHandler] = None,
    enabled_features_source: Optional[EnabledFeaturesSource] = None,
) -> FastAPI:
    """Build the demo application, registering the default features if none are given."""
    app = FastAPI(
        title="featuregate demo",
        description="Controller level feature gating",
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        max_age=settings.session_max_age_seconds,
    )
    install_feature_gate(
        app,
        registry if registry is not None else build_registry(),
        denial_handler=denial_handler,
        enabled_features_source=enabled_features_source,
    )

    @app.get("/features")
    async def list_features(request: Request):
        enabled = set(request.app.state.enabled_features_source(request) or ())
        return {
            "features": [
                {"identifier": name, "enabled": name in enabled}
                for name in request.app.state.feature_registry.identifiers()
            ]
        }

    app.include_router(files_router)
    app.include_router(file_comments_router)
    app.include_router(wiki_router)
    app.include_router(users_router)
    app.include_router(session_router)
    return app


app = create_app()


# Only for debugging
if __name__ == "__main__":
    import uvicorn
    configure_logging()
    uvicorn.run("featuregate.web.main:app", host="0.0.0.0", port=8000, reload=True)
