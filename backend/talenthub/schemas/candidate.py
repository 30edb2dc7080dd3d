import re
from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, field_validator

PHONE_PATTERN = re.compile(r"^[0-9+\-\s()]+$")

# Column limits from the candidates table
NAME_MAX_LENGTH = 255
PHONE_MAX_LENGTH = 20
# Largest value a signed 32-bit INTEGER column holds
MAX_INTEGER = 2_147_483_647


class CandidateBase(BaseModel):
    name: str
    email: str
    phone: str
    skills: str
    experience: int
    department: str

    @field_validator("name", "department")
    @classmethod
    def validate_required_text(cls, v: str, info) -> str:
        v = v.strip()
        label = info.field_name.capitalize()
        if not v:
            raise ValueError(f"{label} is required")
        if len(v) > NAME_MAX_LENGTH:
            raise ValueError(f"{label} must be at most {NAME_MAX_LENGTH} characters long")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, v: str) -> str:
        # Checked but stored exactly as submitted, without normalization
        v = v.strip()
        if not v:
            raise ValueError("Email is required")
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError:
            raise ValueError("Please provide a valid email")
        if len(v) > NAME_MAX_LENGTH:
            raise ValueError(f"Email must be at most {NAME_MAX_LENGTH} characters long")
        return v

    @field_validator("skills")
    @classmethod
    def validate_skills(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Skills are required")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Phone is required")
        if not PHONE_PATTERN.match(v):
            raise ValueError("Please provide a valid phone number")
        if len(v) > PHONE_MAX_LENGTH:
            raise ValueError(f"Phone must be at most {PHONE_MAX_LENGTH} characters long")
        return v

    @field_validator("experience", mode="before")
    @classmethod
    def reject_boolean_experience(cls, v):
        # bool is an int subclass and would otherwise be accepted as 0 or 1
        if isinstance(v, bool):
            raise ValueError("Experience must be a non-negative integer")
        return v

    @field_validator("experience")
    @classmethod
    def validate_experience(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Experience must be a non-negative integer")
        if v > MAX_INTEGER:
            raise ValueError(f"Experience must be at most {MAX_INTEGER}")
        return v


class CandidateCreate(CandidateBase):
    """Body for both creating and fully replacing a candidate."""


class CandidateResponse(CandidateBase):
    id: int
    user_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
