"""Core data models for careerboard."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints, field_validator, model_validator
from typing_extensions import Annotated

from careerboard.core.clock import ensure_utc, utc_now


COVER_LETTER_MIN_LENGTH = 50
COVER_LETTER_MAX_LENGTH = 1500
PERSONAL_NOTES_MAX_LENGTH = 1000

CoverLetter = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        min_length=COVER_LETTER_MIN_LENGTH,
        max_length=COVER_LETTER_MAX_LENGTH,
    ),
]
PersonalNotes = Annotated[str, StringConstraints(max_length=PERSONAL_NOTES_MAX_LENGTH)]
HttpUrl = Annotated[str, StringConstraints(pattern=r"^https?://.+")]
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


def new_id() -> str:
    """Generate a document identifier."""
    return uuid4().hex


class JobStatus(str, Enum):
    """Publication status of a job posting."""
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"
    DRAFT = "draft"


class JobType(str, Enum):
    """Type of employment."""
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"
    FREELANCE = "Freelance"


class WorkMode(str, Enum):
    """Where the work happens."""
    ON_SITE = "On-site"
    REMOTE = "Remote"
    HYBRID = "Hybrid"


class ExperienceLevel(str, Enum):
    """Seniority a job is aimed at."""
    ENTRY = "Entry Level"
    MID = "Mid Level"
    SENIOR = "Senior Level"
    EXECUTIVE = "Executive"


class JobCategory(str, Enum):
    """Job category."""
    TECHNOLOGY = "Technology"
    MARKETING = "Marketing"
    SALES = "Sales"
    DESIGN = "Design"
    FINANCE = "Finance"
    HUMAN_RESOURCES = "Human Resources"
    OPERATIONS = "Operations"
    CUSTOMER_SERVICE = "Customer Service"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    LEGAL = "Legal"
    MANUFACTURING = "Manufacturing"
    OTHER = "Other"


class Currency(str, Enum):
    """Salary currency."""
    USD = "USD"
    INR = "INR"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"


class SalaryPeriod(str, Enum):
    """Salary period."""
    HOURLY = "hourly"
    MONTHLY = "monthly"
    ANNUALLY = "annually"


class ApplicationStatus(str, Enum):
    """Application status, in order of typical progression."""
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under-review"
    SHORTLISTED = "shortlisted"
    INTERVIEW = "interview"
    SELECTED = "selected"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class NoticePeriod(str, Enum):
    """Applicant notice period."""
    IMMEDIATE = "Immediate"
    DAYS_15 = "15 days"
    MONTH_1 = "1 month"
    MONTHS_2 = "2 months"
    MONTHS_3 = "3 months"
    OTHER = "Other"


class ApplicationSource(str, Enum):
    """How the applicant found the job."""
    DIRECT = "direct"
    REFERRAL = "referral"
    JOB_BOARD = "job-board"
    SOCIAL_MEDIA = "social-media"
    OTHER = "other"


class InterviewMode(str, Enum):
    """Interview format."""
    IN_PERSON = "In-person"
    VIDEO_CALL = "Video Call"
    PHONE_CALL = "Phone Call"


class ExperienceBucket(str, Enum):
    """Experience bucket a job seeker reports on their profile."""
    FRESHER = "Fresher"
    UNDER_ONE_YEAR = "0-1 years"
    ONE_TO_THREE_YEARS = "1-3 years"
    THREE_TO_FIVE_YEARS = "3-5 years"
    FIVE_PLUS_YEARS = "5+ years"


class Salary(BaseModel):
    """Salary range offered for a job."""
    min: Optional[float] = Field(None, ge=0, description="Minimum salary")
    max: Optional[float] = Field(None, ge=0, description="Maximum salary")
    currency: Currency = Field(Currency.USD, description="Salary currency")
    period: SalaryPeriod = Field(SalaryPeriod.ANNUALLY, description="Salary period")

    @model_validator(mode="after")
    def check_range(self) -> "Salary":
        if self.min is not None and self.max is not None and self.max < self.min:
            raise ValueError("Maximum salary must be greater than or equal to minimum salary")
        return self


class Job(BaseModel):
    """A job posting."""
    id: str = Field(default_factory=new_id, description="Job identifier")
    title: str = Field(..., min_length=1, max_length=100, description="Job title")
    company: str = Field(..., min_length=1, max_length=100, description="Company name")
    description: str = Field(..., max_length=2000, description="Job description")
    requirements: str = Field(..., max_length=1500, description="Job requirements")
    location: str = Field(..., min_length=1, description="Job location")
    job_type: JobType = Field(..., description="Type of employment")
    work_mode: WorkMode = Field(..., description="Work mode")
    experience_level: ExperienceLevel = Field(..., description="Required experience level")
    category: JobCategory = Field(..., description="Job category")
    salary: Optional[Salary] = Field(None, description="Salary range")
    skills: List[str] = Field(default_factory=list, description="Required skills")
    benefits: List[str] = Field(default_factory=list, description="Benefits offered")
    tags: List[str] = Field(default_factory=list, description="Search tags")
    application_deadline: UtcDatetime = Field(..., description="Last moment applications are accepted")
    company_email: str = Field(..., description="Company contact email")
    status: JobStatus = Field(JobStatus.ACTIVE, description="Publication status")
    total_applications: int = Field(0, ge=0, description="Applications received")
    view_count: int = Field(0, ge=0, description="Detail page views")
    featured: bool = Field(False, description="Listed ahead of other jobs")
    urgent: bool = Field(False, description="Hiring urgently")
    company_description: Optional[str] = Field(None, max_length=1000, description="About the company")
    company_website: Optional[HttpUrl] = Field(None, description="Company website")
    external_application_url: Optional[HttpUrl] = Field(None, description="Apply outside the board")
    created_at: UtcDatetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: UtcDatetime = Field(default_factory=utc_now, description="Last update time")

    @field_validator("title", "company", "location")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("skills", "benefits")
    @classmethod
    def strip_items(cls, value: List[str]) -> List[str]:
        return [item.strip() for item in value if item and item.strip()]

    @field_validator("tags")
    @classmethod
    def normalise_tags(cls, value: List[str]) -> List[str]:
        return [tag.strip().lower() for tag in value if tag and tag.strip()]

    def is_accepting_applications(self, now: datetime) -> bool:
        """Active and the deadline has not passed."""
        return self.status == JobStatus.ACTIVE and now <= self.application_deadline


class StatusChange(BaseModel):
    """One entry of an application's status history."""
    status: ApplicationStatus = Field(..., description="Status entered")
    changed_at: UtcDatetime = Field(..., description="When the status was entered")
    notes: Optional[str] = Field(None, description="Optional note")


class Interview(BaseModel):
    """Interview details visible to the applicant."""
    scheduled: bool = Field(False, description="Whether an interview is scheduled")
    date_time: Optional[UtcDatetime] = Field(None, description="Interview date and time")
    mode: Optional[InterviewMode] = Field(None, description="Interview format")
    location: Optional[str] = Field(None, description="Venue for in-person interviews")
    meeting_link: Optional[str] = Field(None, description="Link for video calls")
    instructions: Optional[str] = Field(None, description="Preparation instructions")
    feedback: Optional[str] = Field(None, description="Feedback after the interview")


class QuestionnaireResponse(BaseModel):
    """Answer to a job-specific screening question."""
    question: str
    answer: str


class ApplicationDetails(BaseModel):
    """Applicant-supplied fields of a new application."""
    model_config = ConfigDict(extra="forbid")

    cover_letter: CoverLetter = Field(..., description="Cover letter")
    resume: Optional[str] = Field(None, description="Resume path or URL")
    expected_salary: Optional[float] = Field(None, ge=0, description="Expected salary")
    available_from: Optional[UtcDatetime] = Field(None, description="Earliest start date")
    notice_period: Optional[NoticePeriod] = Field(None, description="Notice period")
    application_source: ApplicationSource = Field(ApplicationSource.DIRECT, description="How the job was found")
    referral_source: Optional[str] = Field(None, description="Who referred the applicant")
    questionnaire: List[QuestionnaireResponse] = Field(default_factory=list, description="Screening answers")
    personal_notes: Optional[PersonalNotes] = Field(None, description="Private notes")


class Application(BaseModel):
    """A job application and its tracking state."""
    id: str = Field(default_factory=new_id, description="Application identifier")
    job_id: str = Field(..., description="Job applied to")
    applicant_id: str = Field(..., description="Applicant user id")
    cover_letter: CoverLetter = Field(..., description="Cover letter")
    resume: Optional[str] = Field(None, description="Resume path or URL")
    expected_salary: Optional[float] = Field(None, ge=0, description="Expected salary")
    available_from: Optional[UtcDatetime] = Field(None, description="Earliest start date")
    notice_period: Optional[NoticePeriod] = Field(None, description="Notice period")
    application_source: ApplicationSource = Field(ApplicationSource.DIRECT, description="How the job was found")
    referral_source: Optional[str] = Field(None, description="Who referred the applicant")
    questionnaire: List[QuestionnaireResponse] = Field(default_factory=list, description="Screening answers")
    status: ApplicationStatus = Field(ApplicationStatus.SUBMITTED, description="Current status")
    status_history: List[StatusChange] = Field(default_factory=list, description="Append-only status log")
    interview: Interview = Field(default_factory=Interview, description="Interview details")
    viewed_by_employer: bool = Field(False, description="Whether the employer opened the application")
    viewed_at: Optional[UtcDatetime] = Field(None, description="When the employer first opened it")
    response_date: Optional[UtcDatetime] = Field(None, description="First status change away from submitted")
    last_follow_up: Optional[UtcDatetime] = Field(None, description="Last follow-up by the applicant")
    follow_up_count: int = Field(0, ge=0, description="Follow-ups recorded")
    personal_notes: Optional[PersonalNotes] = Field(None, description="Private notes")
    created_at: UtcDatetime = Field(default_factory=utc_now, description="Submission time")
    updated_at: UtcDatetime = Field(default_factory=utc_now, description="Last update time")

    def is_owned_by(self, user_id: str) -> bool:
        return self.applicant_id == user_id

    @property
    def latest_change(self) -> Optional[StatusChange]:
        return self.status_history[-1] if self.status_history else None


class Education(BaseModel):
    """Educational background."""
    degree: Optional[str] = None
    institution: Optional[str] = None
    year: Optional[int] = None


class JobPreferences(BaseModel):
    """User job preferences and criteria."""
    desired_salary_min: Optional[float] = Field(None, ge=0, description="Minimum salary expectation")
    desired_salary_max: Optional[float] = Field(None, ge=0, description="Maximum salary expectation")
    preferred_locations: List[str] = Field(default_factory=list, description="Preferred locations")
    preferred_job_types: List[JobType] = Field(default_factory=list, description="Preferred job types")
    preferred_work_modes: List[WorkMode] = Field(default_factory=list, description="Remote, hybrid, on-site")
    preferred_categories: List[JobCategory] = Field(default_factory=list, description="Preferred categories")


class UserProfile(BaseModel):
    """Profile fields of a job seeker that the core reads."""
    id: str = Field(default_factory=new_id, description="Unique user identifier")
    name: str = Field(..., max_length=50, description="Full name")
    email: str = Field(..., description="Email address")
    location: Optional[str] = Field(None, description="Current location")
    resume: Optional[str] = Field(None, description="Resume path or URL")
    skills: List[str] = Field(default_factory=list, description="User skills")
    experience: Optional[ExperienceBucket] = Field(None, description="Experience bucket")
    education: Education = Field(default_factory=Education, description="Educational background")
    job_preferences: JobPreferences = Field(default_factory=JobPreferences, description="Job preferences")

    @field_validator("skills")
    @classmethod
    def strip_skills(cls, value: List[str]) -> List[str]:
        return [skill.strip() for skill in value if skill and skill.strip()]


def to_document(model: BaseModel) -> Dict[str, Any]:
    """Serialise a model for the document store."""
    return model.model_dump(mode="python")
