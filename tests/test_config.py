# Tests for config.py and api/results.py
# Created: 2026-10-19

import pytest
from pydantic import ValidationError

from togethertax.api.results import ApiResult
from togethertax.api.schemas import RefreshResponse
from togethertax.config import API_ENDPOINTS, Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TOGETHERTAX_API_TIMEOUT", raising=False)
        settings = Settings(_env_file=None)
        assert settings.api_timeout == 10.0
        assert settings.login_path == "/login"
        assert settings.site_url == "https://togethertax.co.kr"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TOGETHERTAX_API_BASE_URL", "https://api.togethertax.co.kr")
        monkeypatch.setenv("TOGETHERTAX_API_TIMEOUT", "2.5")
        settings = Settings(_env_file=None)
        assert settings.api_base_url == "https://api.togethertax.co.kr"
        assert settings.api_timeout == 2.5

    def test_refresh_endpoint(self):
        assert API_ENDPOINTS["auth_refresh"] == "/auth/refresh"


class TestApiResult:
    def test_success(self):
        result = ApiResult.success({"a": 1}, 200)
        assert result.ok
        assert result.to_dict() == {"data": {"a": 1}, "status": 200}

    def test_failure(self):
        result = ApiResult.failure("nope", 404)
        assert not result.ok
        assert result.data is None
        assert result.to_dict() == {"error": "nope", "status": 404}

    def test_empty_error_gets_fallback_message(self):
        result = ApiResult.failure("", 0)
        assert result.error == "알 수 없는 오류가 발생했습니다."

    def test_both_fields_rejected(self):
        with pytest.raises(ValueError):
            ApiResult(status=200, data={"a": 1}, error="x")


class TestRefreshResponse:
    def test_reads_access_token_alias(self):
        parsed = RefreshResponse.model_validate({"accessToken": "abc", "user": {"id": 1}})
        assert parsed.access_token == "abc"

    @pytest.mark.parametrize("payload", [{}, {"accessToken": ""}, {"accessToken": None}, []])
    def test_rejects_missing_token(self, payload):
        with pytest.raises(ValidationError):
            RefreshResponse.model_validate(payload)
