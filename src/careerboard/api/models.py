"""API models for request/response schemas."""

from typing import Dict, List, Optional, Any
from pydantic import BaseModel, Field
from datetime import datetime

from careerboard.core.models import Application, ApplicationDetails, Job


class ApplicationSubmission(ApplicationDetails):
    """Request body for submitting an application."""
    job_id: str = Field(..., description="Job to apply to")


class WithdrawRequest(BaseModel):
    """Request body for withdrawing an application."""
    reason: Optional[str] = Field(None, max_length=500, description="Why the application is withdrawn")


class NotesRequest(BaseModel):
    """Request body for replacing personal notes."""
    text: str = Field(..., description="New personal notes")


class JobListResponse(BaseModel):
    """Page of job listings."""
    jobs: List[Job] = Field(..., description="Jobs on this page")
    total_count: int = Field(..., description="Jobs matching the filters")
    page: int = Field(..., description="Current page, starting at 1")
    total_pages: int = Field(..., description="Number of pages")


class JobDetailResponse(BaseModel):
    """A job with related listings."""
    job: Job = Field(..., description="The job")
    related_jobs: List[Job] = Field(default_factory=list, description="Other jobs in the same category")
    has_applied: bool = Field(False, description="Whether the current user already applied")


class RecommendedJobsResponse(BaseModel):
    """Recommended jobs for the current user."""
    jobs: List[Job] = Field(..., description="Recommended jobs")
    criteria: Dict[str, List[str]] = Field(default_factory=dict, description="Criteria derived from the profile")


class ApplicationListResponse(BaseModel):
    """Page of the current user's applications."""
    applications: List[Application] = Field(..., description="Applications on this page")
    total_count: int = Field(..., description="Applications matching the filters")
    page: int = Field(..., description="Current page, starting at 1")
    total_pages: int = Field(..., description="Number of pages")


class HealthCheck(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Overall system status")
    timestamp: datetime = Field(..., description="Check timestamp")
    version: str = Field(..., description="Application version")
    components: Dict[str, str] = Field(..., description="Component health status")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error timestamp")
