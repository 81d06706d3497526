"""Form payloads. Required text fields reject empty and whitespace-only input."""

from typing import Optional

from pydantic import BaseModel, field_validator


def _required(value: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError("This field is required")
    return str(value).strip()


class BusinessForm(BaseModel):
    name: str
    description: Optional[str] = None
    industry_category: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, v):
        return _required(v)


class AudienceForm(BaseModel):
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, v):
        return _required(v)


class ManualAudienceForm(BaseModel):
    manual_description: str
    name: Optional[str] = None

    @field_validator("manual_description")
    @classmethod
    def description_required(cls, v):
        return _required(v)


class SessionForm(BaseModel):
    business_type_id: str
    audience_id: str
    mission_objective: str

    @field_validator("business_type_id", "audience_id", "mission_objective")
    @classmethod
    def fields_required(cls, v):
        return _required(v)


class LoginForm(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_required(cls, v):
        v = _required(v)
        if "@" not in v:
            raise ValueError("Enter a valid email address")
        return v

    @field_validator("password")
    @classmethod
    def password_required(cls, v):
        if not v:
            raise ValueError("This field is required")
        return v
