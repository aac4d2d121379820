"""
App factory, configuration and middleware tests.
"""

import json
import logging

import pytest

from finishline.config import ProductionConfig, TestingConfig
from finishline.middleware.logging_config import JSONFormatter, ReadableFormatter


class TestConfig:
    def test_testing_config(self, app):
        assert app.config["TESTING"] is True
        assert app.config["SLACK_NOTIFICATIONS_ENABLED"] is False
        assert TestingConfig.SQLALCHEMY_ENGINE_OPTIONS == {}

    def test_production_requires_database_url(self, monkeypatch):
        monkeypatch.setattr(ProductionConfig, "SQLALCHEMY_DATABASE_URI", None)
        with pytest.raises(RuntimeError, match="DATABASE_URL"):
            ProductionConfig()

    def test_production_requires_secret_key(self, monkeypatch):
        monkeypatch.setattr(ProductionConfig, "SQLALCHEMY_DATABASE_URI", "postgresql://db/finishline")
        monkeypatch.delenv("SECRET_KEY", raising=False)
        with pytest.raises(RuntimeError, match="SECRET_KEY"):
            ProductionConfig()


class TestRequestGuard:
    def test_oversized_body_413(self, client, app):
        body = "x" * (app.config["MAX_CONTENT_LENGTH"] + 1)
        res = client.post("/api/v1/change-requests/review", data=json.dumps({"pad": body}),
                          content_type="application/json")
        assert res.status_code == 413

    def test_cors_header_for_known_origin(self, client):
        res = client.get("/api/v1/health/ready", headers={"Origin": "https://finishlinebyner.com"})
        assert res.headers.get("Access-Control-Allow-Origin") == "https://finishlinebyner.com"


class TestLogFormatters:
    def _record(self, **extra):
        record = logging.LogRecord("finishline.test", logging.INFO, __file__, 10, "CR #%s created", (4,), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter_includes_known_extras(self):
        line = JSONFormatter().format(self._record(cr_id=4, request_id="abc", unrelated="x"))
        entry = json.loads(line)
        assert entry["msg"] == "CR #4 created"
        assert entry["level"] == "INFO"
        assert entry["cr_id"] == 4
        assert entry["request_id"] == "abc"
        assert "unrelated" not in entry

    def test_readable_formatter_shows_request_id(self):
        line = ReadableFormatter().format(self._record(request_id="abc"))
        assert "(abc)" in line
        assert "CR #4 created" in line
