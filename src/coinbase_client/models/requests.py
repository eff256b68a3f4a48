"""
Coinbase v1 request bodies.

Required fields are declared per request type; optional fields left as None
are omitted from the serialized body.
"""

from __future__ import annotations
import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from ..runtime.errors import ValidationError


class RequestModel(BaseModel):
    """Base for request bodies."""

    model_config = {"populate_by_name": True, "extra": "forbid", "validate_assignment": True}

    def to_payload(self) -> Dict[str, Any]:
        """
        Re-validate and convert to the JSON payload.

        Raises:
            ValidationError: If a required field is missing or invalid
        """
        try:
            checked = type(self).model_validate(self.model_dump())
        except PydanticValidationError as e:
            raise ValidationError(
                f"{type(self).__name__} does not satisfy its requirements",
                details={"errors": [
                    {"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()
                ]},
                cause=e,
            ) from e
        return checked.model_dump(mode="json", exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_payload())


# =============================================================================
# Accounts
# =============================================================================

class AccountDetails(RequestModel):
    name: str = Field(min_length=1)


class CreateAccountRequest(RequestModel):
    account: AccountDetails

    @classmethod
    def named(cls, name: str) -> CreateAccountRequest:
        return cls(account=AccountDetails(name=name))


class UpdateAccountRequest(RequestModel):
    account: AccountDetails

    @classmethod
    def named(cls, name: str) -> UpdateAccountRequest:
        return cls(account=AccountDetails(name=name))


# =============================================================================
# Users
# =============================================================================

class NewUserDetails(RequestModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    referrer_id: Optional[str] = None


class CreateUserRequest(RequestModel):
    user: NewUserDetails
    client_id: Optional[str] = None
    scopes: Optional[str] = None


class UserChanges(RequestModel):
    name: Optional[str] = None
    email: Optional[str] = None
    pin: Optional[str] = None
    native_currency: Optional[str] = None
    time_zone: Optional[str] = None


class UpdateUserRequest(RequestModel):
    user: UserChanges


# =============================================================================
# OAuth applications
# =============================================================================

class ApplicationDetails(RequestModel):
    name: str = Field(min_length=1)
    redirect_uri: str = Field(min_length=1)


class CreateApplicationRequest(RequestModel):
    application: ApplicationDetails


__all__ = [
    "RequestModel",
    "AccountDetails",
    "CreateAccountRequest",
    "UpdateAccountRequest",
    "NewUserDetails",
    "CreateUserRequest",
    "UserChanges",
    "UpdateUserRequest",
    "ApplicationDetails",
    "CreateApplicationRequest",
]
