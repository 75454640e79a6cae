"""Unit tests for the FastAPI feature gate and demo application."""

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.testclient import TestClient

from featuregate.config import settings
from featuregate.registry import FeatureRegistry
from featuregate.web.guard import (
    FeatureGateNotInstalled,
    install_feature_gate,
    not_found_denial,
    redirect_denial,
    require_feature_access,
)
from featuregate.web.main import build_registry, create_app


def _enable(client, *features):
    response = client.put("/session/features", json={"features": list(features)})
    assert response.status_code == 200


def _header_features(request):
    raw = request.headers.get("x-features", "")
    return [name for name in raw.split(",") if name]


@pytest.fixture
def client():
    return TestClient(create_app())


class TestDemoApp:

    def test_build_registry(self):
        registry = build_registry()
        assert registry.identifiers() == ["Files", "Wiki"]

    def test_guarded_route_denied_without_features(self, client):
        response = client.get("/files")
        assert response.status_code == 403
        assert response.json() == {
            "detail": "Files feature is not enabled",
            "feature": "Files",
        }

    def test_guarded_route_allowed_when_enabled(self, client):
        _enable(client, "Files")
        assert client.get("/files").status_code == 200
        assert client.get("/files/7").json() == {"file": {"id": 7}}
        assert client.get("/files/7/comments").status_code == 200

    def test_other_action_guarded_by_wiki(self, client):
        _enable(client, "Files")
        assert client.get("/users/me/pages").status_code == 403
        assert client.get("/users/me/profile").status_code == 200

        _enable(client, "Wiki")
        assert client.get("/users/me/pages").status_code == 200
        assert client.get("/wiki").status_code == 200
        assert client.get("/files").status_code == 403

    def test_session_features_round_trip(self, client):
        assert client.get("/session/features").json() == {"features": []}
        _enable(client, "Wiki")
        assert client.get("/session/features").json() == {"features": ["Wiki"]}

    def test_list_features(self, client):
        _enable(client, "Wiki")
        assert client.get("/features").json() == {
            "features": [
                {"identifier": "Files", "enabled": False},
                {"identifier": "Wiki", "enabled": True},
            ]
        }

    def test_default_enabled_features_used_without_session_value(self, client, monkeypatch):
        monkeypatch.setattr(settings, "default_enabled_features", ["Files"])
        assert client.get("/files").status_code == 200
        assert client.get("/wiki").status_code == 403

    def test_empty_registry_guards_nothing(self):
        client = TestClient(create_app(FeatureRegistry()))
        assert client.get("/files").status_code == 200
        assert client.get("/users/me/pages").status_code == 200

    def test_custom_enabled_features_source(self):
        client = TestClient(create_app(enabled_features_source=_header_features))
        assert client.get("/wiki").status_code == 403
        assert client.get("/wiki", headers={"X-Features": "Wiki"}).status_code == 200

    def test_not_found_denial(self):
        client = TestClient(create_app(denial_handler=not_found_denial))
        response = client.get("/files")
        assert response.status_code == 404
        assert response.json() == {"detail": "Feature not enabled"}

    def test_redirect_denial(self):
        client = TestClient(create_app(denial_handler=redirect_denial("/upgrade")))
        response = client.get("/wiki", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/upgrade"

    def test_returned_response_is_sent_instead_of_route(self, denials):
        def redirect_to_upgrade(feature_name):
            denials(feature_name)
            return RedirectResponse("/upgrade", status_code=303)

        client = TestClient(create_app(denial_handler=redirect_to_upgrade))
        response = client.get("/files", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/upgrade"
        assert denials.calls == ["Files"]

    def test_returning_handler_still_denies(self, denials):
        denials.result = None
        client = TestClient(create_app(denial_handler=denials))
        response = client.get("/files")
        assert response.status_code == 403
        assert response.json()["feature"] == "Files"
        assert denials.calls == ["Files"]

    def test_allowed_route_skips_denial_handler(self, denials):
        client = TestClient(create_app(denial_handler=denials))
        _enable(client, "Files")
        assert client.get("/files").status_code == 200
        assert client.get("/users/me/profile").status_code == 200
        assert denials.calls == []

    def test_list_features_uses_installed_source(self):
        client = TestClient(create_app(enabled_features_source=_header_features))
        response = client.get("/features", headers={"X-Features": "Files"})
        assert response.json() == {
            "features": [
                {"identifier": "Files", "enabled": True},
                {"identifier": "Wiki", "enabled": False},
            ]
        }

    def test_session_string_is_one_feature(self):
        app = create_app()

        @app.put("/session/raw")
        async def store_raw(request: Request):
            request.session[settings.session_key] = "Wiki"
            return {}

        client = TestClient(app)
        client.put("/session/raw")
        assert client.get("/session/features").json() == {"features": ["Wiki"]}
        assert client.get("/wiki").status_code == 200

    def test_checker_available_on_request_state(self, client):
        captured = {}

        @client.app.get("/inspect", dependencies=[Depends(require_feature_access("inspector"))])
        async def inspect_state(request: Request):
            captured["enabled"] = request.state.feature_access.enabled_features
            return {}

        _enable(client, "Wiki")
        assert client.get("/inspect").status_code == 200
        assert captured["enabled"] == ("Wiki",)


class TestRequireFeatureAccess:

    def _app(self, registry, **kwargs):
        app = FastAPI()
        install_feature_gate(app, registry, **kwargs)
        return app

    def test_explicit_action(self):
        registry = FeatureRegistry()
        registry.add_feature("Reports", [], [("dashboard", "reports")])
        app = self._app(registry, enabled_features_source=lambda request: [])

        @app.get("/", dependencies=[Depends(require_feature_access("dashboard", "reports"))])
        async def home():
            return {}

        assert TestClient(app).get("/").status_code == 403

    def test_action_defaults_to_route_name(self):
        registry = FeatureRegistry()
        registry.add_feature("Reports", [], [("dashboard", "reports")])
        app = self._app(registry, enabled_features_source=lambda request: [])

        @app.get("/reports", dependencies=[Depends(require_feature_access("dashboard"))])
        async def reports():
            return {}

        @app.get("/summary", dependencies=[Depends(require_feature_access("dashboard"))])
        async def summary():
            return {}

        client = TestClient(app)
        assert client.get("/reports").status_code == 403
        assert client.get("/summary").status_code == 200

    def test_denial_status_code_setting(self, monkeypatch):
        monkeypatch.setattr(settings, "denial_status_code", 401)
        registry = FeatureRegistry()
        registry.add_feature("Files", ["files"])
        app = self._app(registry)

        @app.get("/files", dependencies=[Depends(require_feature_access("files"))])
        async def index():
            return {}

        assert TestClient(app).get("/files").status_code == 401

    def test_guard_without_install_raises(self):
        app = FastAPI()

        @app.get("/files", dependencies=[Depends(require_feature_access("files"))])
        async def index():
            return {}

        with pytest.raises(FeatureGateNotInstalled):
            TestClient(app).get("/files")
