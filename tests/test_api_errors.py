"""Tests for API error handling and input validation."""

import pytest

from src.api_errors.config import (
    DEFAULT_ERROR_CONFIG,
    ERROR_SEVERITY_MAP,
    ERROR_STATUS_MAP,
    ErrorCode,
    ErrorConfig,
    ErrorSeverity,
)
from src.api_errors.exceptions import (
    NotFoundError,
    PlatformNotConfiguredError,
    RateLimitError,
    ServiceUnavailableError,
    SocialAPIError,
    UpstreamError,
    ValidationError,
)
from src.api_errors.handlers import (
    ErrorResponse,
    create_error_response,
    handle_social_error,
    handle_unhandled_error,
)
from src.api_errors.validators import coerce_limit, validate_handle, validate_platform
from src.logging_config import RequestContext
from src.social_catalog import Platform


class TestErrorConfig:
    """Tests for error configuration."""

    def test_error_code_enum_values(self):
        assert ErrorCode.VALIDATION_ERROR.value == "VALIDATION_ERROR"
        assert ErrorCode.PLATFORM_NOT_CONFIGURED.value == "PLATFORM_NOT_CONFIGURED"

    def test_error_status_map_covers_all_codes(self):
        for code in ErrorCode:
            assert code in ERROR_STATUS_MAP

    def test_error_severity_map_covers_all_codes(self):
        for code in ErrorCode:
            assert code in ERROR_SEVERITY_MAP

    def test_status_codes(self):
        assert ERROR_STATUS_MAP[ErrorCode.INVALID_PLATFORM] == 400
        assert ERROR_STATUS_MAP[ErrorCode.PROFILE_NOT_FOUND] == 404
        assert ERROR_STATUS_MAP[ErrorCode.RATE_LIMIT_EXCEEDED] == 429
        assert ERROR_STATUS_MAP[ErrorCode.PLATFORM_NOT_CONFIGURED] == 501
        assert ERROR_STATUS_MAP[ErrorCode.UPSTREAM_ERROR] == 502

    def test_default_config(self):
        assert DEFAULT_ERROR_CONFIG.include_request_id is True
        assert DEFAULT_ERROR_CONFIG.suppress_internal_details is True


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_base_defaults(self):
        exc = SocialAPIError("boom")
        assert exc.status_code == 500
        assert exc.error_code == ErrorCode.INTERNAL_ERROR
        assert exc.details == []

    def test_validation_error_field_detail(self):
        exc = ValidationError("'handle' is required", field="handle")
        assert exc.status_code == 400
        assert exc.details == [{"field": "handle", "issue": "'handle' is required"}]

    def test_not_found_names_platform_and_handle(self):
        exc = NotFoundError("No profile", ErrorCode.PROFILE_NOT_FOUND, platform="instagram", handle="@nobody")
        assert exc.status_code == 404
        assert exc.details == [{"platform": "instagram", "handle": "@nobody"}]

    def test_platform_not_configured(self):
        exc = PlatformNotConfiguredError("TikTok is not configured", platform="tiktok")
        assert exc.status_code == 501
        assert exc.platform == "tiktok"

    def test_upstream_error(self):
        exc = UpstreamError("Graph API down", upstream_status=503)
        assert exc.status_code == 502
        assert exc.upstream_status == 503

    def test_rate_limit_retry_after_header(self):
        exc = RateLimitError(retry_after=30)
        assert exc.status_code == 429
        assert exc.headers == {"Retry-After": "30"}

    def test_service_unavailable(self):
        assert ServiceUnavailableError().status_code == 503

    def test_all_inherit_from_base(self):
        for exc in (ValidationError(), NotFoundError(), UpstreamError(), RateLimitError()):
            assert isinstance(exc, SocialAPIError)


class TestErrorResponse:
    """Tests for the error envelope."""

    def test_envelope_shape(self):
        body = ErrorResponse(code="X", message="m").to_dict()
        assert set(body["error"]) == {"code", "message", "timestamp"}

    def test_details_and_request_id_included_when_set(self):
        body = ErrorResponse(code="X", message="m", details=[{"a": 1}], request_id="r").to_dict()
        assert body["error"]["details"] == [{"a": 1}]
        assert body["error"]["request_id"] == "r"

    def test_create_error_response_resolves_status(self):
        response = create_error_response(ErrorCode.PROFILE_NOT_FOUND, "gone")
        assert response.status_code == 404
        assert response.code == "PROFILE_NOT_FOUND"

    def test_handle_social_error_carries_request_id(self):
        with RequestContext(request_id="req-1"):
            response = handle_social_error(ValidationError("bad", field="q"))
        assert response.request_id == "req-1"
        assert response.status_code == 400

    def test_handle_social_error_custom_message(self):
        config = ErrorConfig(custom_error_messages={"UPSTREAM_ERROR": "Try again later"})
        response = handle_social_error(UpstreamError("raw upstream text"), config)
        assert response.message == "Try again later"

    def test_handle_social_error_truncates(self):
        config = ErrorConfig(max_error_detail_length=5)
        response = handle_social_error(SocialAPIError("x" * 50), config)
        assert response.message == "xxxxx"

    def test_unhandled_error_hides_details(self):
        response = handle_unhandled_error(RuntimeError("secret"))
        assert response.status_code == 500
        assert "secret" not in response.message

    def test_unhandled_error_shows_details_when_allowed(self):
        config = ErrorConfig(suppress_internal_details=False)
        response = handle_unhandled_error(RuntimeError("secret"), config)
        assert response.message == "RuntimeError: secret"


class TestValidators:
    """Tests for input validators."""

    def test_validate_platform_aliases(self):
        assert validate_platform("twitter") == Platform.X
        assert validate_platform(" IG ") == Platform.INSTAGRAM

    def test_validate_platform_missing(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_platform("  ")
        assert exc_info.value.error_code == ErrorCode.MISSING_REQUIRED_FIELD

    def test_validate_platform_unknown_names_value(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_platform("myspace")
        assert exc_info.value.error_code == ErrorCode.INVALID_PLATFORM
        assert "myspace" in exc_info.value.message

    def test_validate_handle(self):
        assert validate_handle("  @Alice ") == "@Alice"

    def test_validate_handle_missing(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_handle(None)
        assert exc_info.value.error_code == ErrorCode.MISSING_REQUIRED_FIELD

    def test_validate_handle_only_at_signs(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_handle("@@@")
        assert exc_info.value.error_code == ErrorCode.INVALID_HANDLE

    @pytest.mark.parametrize("raw,expected", [
        (None, 8),
        ("", 8),
        ("abc", 8),
        ("0", 8),
        (-3, 8),
        ("5", 5),
        (3.7, 4),
        (500, 50),
        (float("nan"), 8),
    ])
    def test_coerce_limit(self, raw, expected):
        assert coerce_limit(raw, default=8, maximum=50) == expected
