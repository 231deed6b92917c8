"""Tests for pydantic payload validation."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, Field

from apps.flask_toolkit.validation import VALIDATION_MESSAGE, validate_payload
from contracts.errors import BadRequestError


class Address(BaseModel):
    city: str


class Customer(BaseModel):
    name: str = Field(min_length=2)
    tags: list[str] = Field(default_factory=list)
    address: Address


def test_valid_payload_returns_model() -> None:
    customer = validate_payload(Customer, {"name": "Ann", "address": {"city": "Lyon"}})

    assert customer.name == "Ann"
    assert customer.address.city == "Lyon"


def test_invalid_payload_raises_bad_request_with_field_errors() -> None:
    with pytest.raises(BadRequestError) as excinfo:
        validate_payload(Customer, {"name": "A", "tags": ["ok", 3], "address": {}})

    exc = excinfo.value
    assert exc.status_code == 400
    assert exc.message == VALIDATION_MESSAGE
    assert set(exc.errors) == {"name", "tags.1", "address.city"}
    assert all(isinstance(messages, list) for messages in exc.errors.values())
    assert exc.__cause__ is not None


def test_missing_payload_is_validated_as_empty() -> None:
    with pytest.raises(BadRequestError) as excinfo:
        validate_payload(Customer, None)

    assert set(excinfo.value.errors) == {"name", "address"}
