"""Tests for the frontend module."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from mdgrow.web.frontend import RELOAD_SCRIPT_PATH, load_asset, router


class TestLoadAsset:
    """Tests for load_asset function."""

    def test_reload_script(self) -> None:
        """Reload client listens on the event stream."""
        script = load_asset("reload.js")
        assert "EventSource" in script
        assert "/__reload__" in script

    def test_stylesheets(self) -> None:
        assert "body" in load_asset("listing.css")
        assert "mdgrow-sidebar" in load_asset("document.css")


class TestRouter:
    """Tests for the frontend router."""

    def test_router_has_reload_script_route(self) -> None:
        routes = [route.path for route in router.routes]
        assert RELOAD_SCRIPT_PATH in routes

    def test_reload_script_served_as_javascript(self) -> None:
        app = FastAPI()
        app.include_router(router)

        response = TestClient(app).get(RELOAD_SCRIPT_PATH)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/javascript")
        assert "EventSource" in response.text
