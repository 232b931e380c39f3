# tests/errors/test_base.py
"""Tests for contact_api/errors/base.py module."""

from unittest.mock import MagicMock

from contact_api.errors import BaseAppError, create_exception_handler, error_response


class TestBaseAppError:
    """Tests for BaseAppError exception."""

    def test_default_values(self) -> None:
        error = BaseAppError()
        assert error.detail == "Internal Server Error"
        assert error.status_code == 500
        assert error.headers == {}

    def test_str_representation(self) -> None:
        assert str(BaseAppError(detail="Test error")) == "Test error"


def test_error_response_envelope() -> None:
    response = error_response("Nope", 418, {"X-Reason": "teapot"})

    assert response.status_code == 418
    assert response.body == b'{"error":"Nope"}'
    assert response.headers["X-Reason"] == "teapot"


class TestCreateExceptionHandler:
    """Tests for create_exception_handler factory function."""

    async def test_handler_with_base_app_error(self) -> None:
        logger = MagicMock()
        handler = create_exception_handler(logger)

        request = MagicMock()
        request.headers.get.return_value = None
        request.client.host = "192.168.1.1"
        request.url.path = "/api/contact"

        response = await handler(request, BaseAppError(detail="Test error", status_code=400))

        assert response.status_code == 400
        assert response.body == b'{"error":"Test error"}'
        logger.warning.assert_called_once_with(
            "Test error for ip: 192.168.1.1 for endpoint /api/contact",
        )

    async def test_handler_hides_other_attributes(self) -> None:
        handler = create_exception_handler(MagicMock())
        request = MagicMock()
        request.headers.get.return_value = "203.0.113.9"

        error = BaseAppError(detail="Failed", status_code=500)
        error.smtp_response = "535 5.7.8 auth failed for contact@topea.me"

        response = await handler(request, error)

        assert response.body == b'{"error":"Failed"}'

    async def test_handler_with_plain_exception(self) -> None:
        handler = create_exception_handler(MagicMock())
        request = MagicMock()
        request.headers.get.return_value = None

        response = await handler(request, ValueError("boom"))

        assert response.status_code == 500
        assert response.body == b'{"error":"Internal Server Error"}'
