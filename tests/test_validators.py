"""Tests for service name validation."""

from __future__ import annotations

import pytest

from svc_scaffold.validators import MAX_NAME_LENGTH, ServiceNameError, validate_service_name


class TestValidateServiceName:
    @pytest.mark.parametrize("name", ["orders", "order-api", "order_api", "svc2", "a"])
    def test_accepts_valid_names(self, name: str) -> None:
        assert validate_service_name(name) == name

    @pytest.mark.parametrize(
        "name",
        ["Orders", "2orders", "-orders", "orders-", "order--api", "order api", "order/api", "ü"],
    )
    def test_rejects_invalid_names(self, name: str) -> None:
        with pytest.raises(ServiceNameError, match="Invalid service name"):
            validate_service_name(name)

    def test_rejects_empty(self) -> None:
        with pytest.raises(ServiceNameError, match="not specified"):
            validate_service_name("")

    def test_rejects_too_long(self) -> None:
        with pytest.raises(ServiceNameError, match="longer than"):
            validate_service_name("a" * (MAX_NAME_LENGTH + 1))

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            validate_service_name("Bad Name")
