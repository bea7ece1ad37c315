"""Request and response schemas for signup and login."""

import re
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from .directory import normalize_email
from .models.user import ROLE_ADVISORY, ROLE_CONTRIBUTOR
from .tokens import SessionClaims

CONTRIBUTOR_ROLES = (
    "educator",
    "student",
    "developer",
    "designer",
    "researcher",
    "content_creator",
    "other",
)
CONTRIBUTOR_TECHNIQUES = (
    "lecture",
    "project_based",
    "flipped_classroom",
    "gamification",
    "peer_learning",
    "self_paced",
    "other",
)
PASSWORD_MIN_LENGTH = 8
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def first_error_message(exc: ValidationError) -> str:
    """Turn the first pydantic error into a message fit for the client."""
    error = exc.errors()[0]
    if error["type"] == "value_error":
        return str(error["ctx"]["error"])
    if not error["loc"]:
        return "Invalid JSON body"
    return "Invalid value for " + ".".join(str(part) for part in error["loc"])


# -- validated, role-specific profiles ---------------------------------------


class ContributorProfile(BaseModel):
    """Profile stored for ``roleType == "contributor"``."""

    model_config = ConfigDict(populate_by_name=True)

    role_type: Literal["contributor"] = Field(ROLE_CONTRIBUTOR, alias="roleType")
    role: str
    role_other: Optional[str] = Field(None, alias="roleOther")
    experience_text: str = Field(alias="experienceText")
    technique: str
    technique_other: Optional[str] = Field(None, alias="techniqueOther")


class AdvisoryProfile(BaseModel):
    """Profile stored for ``roleType == "advisory"``."""

    model_config = ConfigDict(populate_by_name=True)

    role_type: Literal["advisory"] = Field(ROLE_ADVISORY, alias="roleType")
    position_title: str = Field(alias="positionTitle")
    experience_years: str = Field(alias="experienceYears")
    domain: str
    lms_features: str = Field(alias="lmsFeatures")


Profile = Annotated[Union[ContributorProfile, AdvisoryProfile], Field(discriminator="role_type")]


def profile_record(profile: Profile) -> dict:
    """Serialize a profile for the JSON column, without the discriminant."""
    return profile.model_dump(by_alias=True, exclude={"role_type"}, exclude_none=True)


class NewAccount(BaseModel):
    """A fully validated signup: common fields plus exactly one profile."""

    name: str
    email: str
    password: str = Field(repr=False)
    profile: Profile
    remember: bool = True

    @property
    def role_type(self) -> str:
        return self.profile.role_type


# -- wire payloads -------------------------------------------------------------


class ContributorInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: Optional[str] = None
    role_other: Optional[str] = Field(None, alias="roleOther")
    experience_text: Optional[str] = Field(None, alias="experienceText")
    technique: Optional[str] = None
    technique_other: Optional[str] = Field(None, alias="techniqueOther")


class AdvisoryInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    position_title: Optional[str] = Field(None, alias="positionTitle")
    experience_years: Optional[str] = Field(None, alias="experienceYears")
    domain: Optional[str] = None
    lms_features: Optional[str] = Field(None, alias="lmsFeatures")

    @field_validator("experience_years", mode="before")
    @classmethod
    def _years_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class SignupRequest(BaseModel):
    """Request body for creating an account.

    Validate with ``context={"free_text_min_length": n}`` to override the
    minimum length of experience and feature feedback text.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = Field(None, repr=False)
    role_type: Optional[str] = Field(None, alias="roleType")
    contributor: Optional[ContributorInput] = None
    advisory: Optional[AdvisoryInput] = None
    remember: bool = True

    @model_validator(mode="after")
    def _check_fields(self, info: ValidationInfo) -> "SignupRequest":
        min_length = (info.context or {}).get("free_text_min_length", 1)

        if _blank(self.name):
            raise ValueError("Name is required")
        if _blank(self.email):
            raise ValueError("Email is required")
        if not EMAIL_RE.match(self.email.strip()):
            raise ValueError("Email address is invalid")
        if not self.password or len(self.password) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
        if not self.role_type:
            raise ValueError("Role type is required")

        if self.role_type == ROLE_CONTRIBUTOR:
            _check_contributor(self.contributor, min_length)
        elif self.role_type == ROLE_ADVISORY:
            _check_advisory(self.advisory, min_length)
        else:
            raise ValueError("Role type must be 'contributor' or 'advisory'")
        return self

    def to_account(self) -> NewAccount:
        """Build the validated account, keeping only the profile that matches."""
        if self.role_type == ROLE_CONTRIBUTOR:
            c = self.contributor
            profile = ContributorProfile(
                role=c.role,
                role_other=c.role_other.strip() if c.role == "other" else None,
                experience_text=c.experience_text.strip(),
                technique=c.technique,
                technique_other=c.technique_other.strip() if c.technique == "other" else None,
            )
        else:
            a = self.advisory
            profile = AdvisoryProfile(
                position_title=a.position_title.strip(),
                experience_years=a.experience_years.strip(),
                domain=a.domain.strip(),
                lms_features=a.lms_features.strip(),
            )
        return NewAccount(
            name=self.name.strip(),
            email=normalize_email(self.email),
            password=self.password,
            profile=profile,
            remember=self.remember,
        )


def _check_contributor(c: Optional[ContributorInput], min_length: int) -> None:
    if c is None:
        raise ValueError("Contributor details are required")
    if not c.role:
        raise ValueError("Contributor role is required")
    if c.role not in CONTRIBUTOR_ROLES:
        raise ValueError("Contributor role is not recognised")
    if c.role == "other" and _blank(c.role_other):
        raise ValueError("Contributor role (other) is required")
    if _blank(c.experience_text):
        raise ValueError("Contributor experience is required")
    if len(c.experience_text.strip()) < min_length:
        raise ValueError(f"Contributor experience must be at least {min_length} characters")
    if not c.technique:
        raise ValueError("Contributor technique is required")
    if c.technique not in CONTRIBUTOR_TECHNIQUES:
        raise ValueError("Contributor technique is not recognised")
    if c.technique == "other" and _blank(c.technique_other):
        raise ValueError("Contributor technique (other) is required")


def _check_advisory(a: Optional[AdvisoryInput], min_length: int) -> None:
    if a is None:
        raise ValueError("Advisory details are required")
    if _blank(a.position_title):
        raise ValueError("Position title is required")
    if _blank(a.experience_years):
        raise ValueError("Experience is required")
    if _blank(a.domain):
        raise ValueError("Domain is required")
    if _blank(a.lms_features):
        raise ValueError("Feature feedback is required")
    if len(a.lms_features.strip()) < min_length:
        raise ValueError(f"Feature feedback must be at least {min_length} characters")


class LoginRequest(BaseModel):
    """Request body for user login."""

    email: Optional[str] = None
    password: Optional[str] = Field(None, repr=False)
    remember: bool = False

    @model_validator(mode="after")
    def _check_fields(self) -> "LoginRequest":
        if _blank(self.email) or not self.password:
            raise ValueError("Email and password are required")
        self.email = normalize_email(self.email)
        return self


class AuthResponse(BaseModel):
    """Identity snapshot and session token returned by signup and login."""

    success: bool = True
    user: SessionClaims
    token: str


class SessionResponse(BaseModel):
    success: bool = True
    user: SessionClaims


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class DashboardResponse(BaseModel):
    """Personalized dashboard data for a signed-in user."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    greeting: str
    role_label: str = Field(alias="roleLabel")
    user: SessionClaims
    profile: dict
