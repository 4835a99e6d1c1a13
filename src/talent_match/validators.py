"""Input schemas for service operations.

Services validate raw input against these models before touching a store;
``validate`` turns pydantic failures into ``ValidationError`` results.
"""

import re
from typing import Any, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from talent_match.config import settings
from talent_match.core.errors import ValidationError
from talent_match.core.ids import is_valid_id
from talent_match.core.models import ApplicationStatus, MatchStatus, Role

ModelT = TypeVar("ModelT", bound=BaseModel)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_PAGE_SIZE = settings.max_page_size
# Keeps the row offset within a 53-bit safe integer
MAX_PAGE = (2**53 - 1) // MAX_PAGE_SIZE


def _check_id(value: Any, label: str) -> str:
    if not is_valid_id(value):
        raise ValueError(f"{label} must be a valid 24-character hex identifier")
    return value


def _format_error(error: Mapping[str, Any]) -> str:
    message = str(error.get("msg", "Invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {message}" if location else message


def validate(schema: Type[ModelT], data: Mapping[str, Any]) -> Union[ModelT, ValidationError]:
    """Validate ``data`` against ``schema``, returning the model or a ``ValidationError``."""
    try:
        return schema.model_validate(dict(data))
    except PydanticValidationError as e:
        details = [_format_error(err) for err in e.errors()]
        return ValidationError("Validation failed", details=details)


class ApplyInput(BaseModel):
    job_id: str

    @field_validator("job_id", mode="before")
    @classmethod
    def _job_id(cls, v):
        return _check_id(v, "Job ID")


class ReviewInput(BaseModel):
    application_id: str
    status: ApplicationStatus
    reviewer_id: str

    @field_validator("application_id", mode="before")
    @classmethod
    def _application_id(cls, v):
        return _check_id(v, "Application ID")

    @field_validator("reviewer_id", mode="before")
    @classmethod
    def _reviewer_id(cls, v):
        return _check_id(v, "Reviewer ID")


class ApplicationListQuery(BaseModel):
    page: int = Field(1, ge=1, le=MAX_PAGE, description="1-based page number")
    limit: int = Field(10, ge=1, le=MAX_PAGE_SIZE, description="Page size")
    status: Optional[ApplicationStatus] = Field(None, description="Status filter")


class MatchInput(BaseModel):
    user_id: str
    job_id: str
    matched_by: str
    status: MatchStatus = MatchStatus.MATCHED

    @field_validator("user_id", "job_id", "matched_by", mode="before")
    @classmethod
    def _ids(cls, v, info):
        labels = {"user_id": "User ID", "job_id": "Job ID", "matched_by": "MatchedBy ID"}
        return _check_id(v, labels[info.field_name])


class RegisterInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=50)
    email: str
    password: str = Field(..., min_length=6, max_length=20)
    role: Role = Role.TALENT
    location: Optional[str] = Field(None, max_length=100)
    skills: List[str] = Field(default_factory=list)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        if not _EMAIL_PATTERN.match(v):
            raise ValueError("Please provide a valid email address")
        return v.lower()

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if not (re.search(r"[a-z]", v) and re.search(r"[A-Z]", v) and re.search(r"\d", v)):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return v


class LoginInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str
    password: str = Field(..., min_length=6)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        if not _EMAIL_PATTERN.match(v):
            raise ValueError("Please provide a valid email address")
        return v.lower()


class JobInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=2, max_length=100)
    description: str = Field(..., min_length=10, max_length=3000)
    location: str = Field(..., min_length=2, max_length=100)
    required_skills: List[str] = Field(default_factory=list)

    @field_validator("required_skills")
    @classmethod
    def _skills(cls, v: List[str]) -> List[str]:
        skills = [skill.strip() for skill in v]
        if any(len(skill) > 200 for skill in skills):
            raise ValueError("Each required skill cannot exceed 200 characters")
        return [skill for skill in skills if skill]
