"""API models for request/response schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _Request(BaseModel):
    """Request bodies accept both snake_case and the camelCase the web client sends."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ApplyRequest(_Request):
    """Talent applying to a job."""
    job_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("job_id", "jobId"),
        description="Job identifier",
    )


class ReviewRequest(_Request):
    """Admin review decision."""
    status: Optional[str] = Field(None, description="pending, matched, rejected or withdrawn")


class MatchCreateRequest(_Request):
    """Admin-initiated match."""
    user_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("user_id", "userId"),
        description="Talent identifier",
    )
    job_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("job_id", "jobId"),
        description="Job identifier",
    )
    status: Optional[str] = Field(None, description="matched, viewed or applied")


class SelfMatchRequest(_Request):
    """Talent creating their own match with a job."""
    job_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("job_id", "jobId"),
        description="Job identifier",
    )


class RegisterRequest(_Request):
    name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Email address")
    password: Optional[str] = Field(None, description="Password")
    role: Optional[str] = Field(None, description="talent or admin")
    location: Optional[str] = Field(None, description="Talent location")
    skills: Optional[List[str]] = Field(None, description="Talent skills")


class LoginRequest(_Request):
    email: Optional[str] = Field(None, description="Email address")
    password: Optional[str] = Field(None, description="Password")


class JobCreateRequest(_Request):
    title: Optional[str] = Field(None, description="Job title")
    description: Optional[str] = Field(None, description="Job description")
    location: Optional[str] = Field(None, description="Job location")
    required_skills: Optional[List[str]] = Field(
        None,
        validation_alias=AliasChoices("required_skills", "requiredSkills"),
        description="Required skills",
    )


class HealthCheck(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Check timestamp")
    version: str = Field(..., description="Service version")
    components: Dict[str, str] = Field(..., description="Component status")


class ErrorResponse(BaseModel):
    """Error response model."""
    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[List[Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error timestamp")
