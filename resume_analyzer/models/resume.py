# resume_analyzer/models/resume.py
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SectionType(str, Enum):
    EDUCATION = "education"
    EXPERIENCE = "experience"
    SKILLS = "skills"
    OTHER = "other"


class ResumeSection(BaseModel):
    title: str = ""
    content: str = ""
    type: SectionType = SectionType.OTHER


# --- Coercion helpers for untrusted JSON (LLM output, provider fields) ---
def as_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    return ""


def as_text_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    items = []
    for item in value:
        text = as_text(item)
        if text:
            items.append(text)
    return items


def _entries(value: Any, identifying_fields: tuple) -> List[Dict[str, Any]]:
    """Keeps mapping entries that carry at least one identifying field."""
    if not isinstance(value, list):
        return []
    kept = []
    for item in value:
        fields = item.model_dump() if isinstance(item, BaseModel) else item
        if not isinstance(fields, dict):
            continue
        if any(as_text(fields.get(name)) for name in identifying_fields):
            kept.append(item)
    return kept


class ContactInfo(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return as_text(value)


class EducationEntry(BaseModel):
    institution: str = ""
    degree: str = ""
    field: str = ""
    year: str = ""
    gpa: str = ""
    level: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return as_text(value)


class ExperienceEntry(BaseModel):
    company: str = ""
    title: str = ""
    start_date: str = Field(alias="startDate", default="")
    end_date: str = Field(alias="endDate", default="")
    description: str = ""

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return as_text(value)


class Skills(BaseModel):
    technical: List[str] = Field(default_factory=list)
    soft: List[str] = Field(default_factory=list)
    industry: List[str] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> List[str]:
        return as_text_list(value)

    def flattened(self) -> List[str]:
        return self.technical + self.soft + self.industry


class ExtractedResumeData(BaseModel):
    contact_info: ContactInfo = Field(alias="contactInfo", default_factory=ContactInfo)
    education: List[EducationEntry] = Field(default_factory=list)
    experience: List[ExperienceEntry] = Field(default_factory=list)
    skills: Skills = Field(default_factory=Skills)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("contact_info", "skills", mode="before")
    @classmethod
    def _object_or_empty(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, (dict, BaseModel)) else {}

    @field_validator("education", mode="before")
    @classmethod
    def _drop_unidentified_education(cls, value: Any) -> List[Any]:
        return _entries(value, ("institution", "degree"))

    @field_validator("experience", mode="before")
    @classmethod
    def _drop_unidentified_experience(cls, value: Any) -> List[Any]:
        return _entries(value, ("company", "title"))


class ValidationResult(BaseModel):
    is_valid: bool = Field(alias="isValid", default=True)
    errors: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)
