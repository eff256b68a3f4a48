"""
Tests for request body validation and serialization.
"""

import json
import pytest

from pydantic import ValidationError as PydanticValidationError

from coinbase_client.models import (
    AccountDetails, ApplicationDetails, CreateAccountRequest, CreateApplicationRequest,
    CreateUserRequest, NewUserDetails, UpdateUserRequest, UserChanges,
)
from coinbase_client.runtime.errors import ErrorCode, ValidationError


class TestRequestValidation:

    def test_named_account(self):
        assert CreateAccountRequest.named("Savings").to_payload() == {"account": {"name": "Savings"}}

    def test_optional_fields_omitted(self):
        request = CreateUserRequest(user=NewUserDetails(email="a@example.com", password="pw"))

        assert request.to_payload() == {"user": {"email": "a@example.com", "password": "pw"}}

    def test_partial_user_update(self):
        request = UpdateUserRequest(user=UserChanges(native_currency="CAD"))

        assert json.loads(request.to_json()) == {"user": {"native_currency": "CAD"}}

    def test_construction_rejects_missing_required(self):
        with pytest.raises(PydanticValidationError):
            CreateApplicationRequest(application=ApplicationDetails(name="App"))

    def test_unknown_fields_rejected(self):
        with pytest.raises(PydanticValidationError):
            AccountDetails(name="x", colour="blue")

    def test_payload_revalidates(self):
        request = CreateAccountRequest.model_construct(account=AccountDetails.model_construct(name=""))

        with pytest.raises(ValidationError) as exc_info:
            request.to_payload()

        error = exc_info.value
        assert error.code == ErrorCode.VALIDATION_ERROR
        assert error.details["errors"][0]["loc"] == ["account", "name"]
        assert isinstance(error.cause, PydanticValidationError)

