"""Tests for the bundled example application."""

import logging

import pytest
from starlette.testclient import TestClient

from subdivision import Subdivision
from subdivision.example.app import ROUTES_PATH, create_app


class TestExampleApp:
    @pytest.mark.asyncio
    async def test_routes_from_every_module(self) -> None:
        application = await create_app()
        with TestClient(application) as client:
            assert client.get("/user").text == "User info"
            assert client.get("/admin/log").text == "Got the log"
            assert client.post("/admin/log").text == "Posted something to the log"
            assert client.get("/modules/admin/log").text == "Got the log"

    @pytest.mark.asyncio
    async def test_user_middleware_runs_in_relative_order(self, caplog: pytest.LogCaptureFixture) -> None:
        application = await create_app()
        with caplog.at_level(logging.INFO, logger="subdivision.example.modules.users.manifest"):
            with TestClient(application) as client:
                client.get("/user")

        messages = [
            record.getMessage()
            for record in caplog.records
            if record.name == "subdivision.example.modules.users.manifest"
        ]
        assert messages == ["Verified user", "Did something with user"]

    @pytest.mark.asyncio
    async def test_resolved_order_of_top_level_routes(self) -> None:
        engine = Subdivision()
        await create_app(engine)

        assert [
            (addin.type, addin.get("verb"), addin.get("route") or addin.get("mount"))
            for addin in engine.get_addins(ROUTES_PATH)
        ] == [
            ("Route", "use", None),
            ("Route", "use", None),
            ("Route", "get", "/user"),
            ("Route", "get", "/admin/log"),
            ("Route", "post", "/admin/log"),
            ("SubRouter", None, "/modules"),
        ]
