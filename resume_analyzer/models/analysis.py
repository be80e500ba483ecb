# resume_analyzer/models/analysis.py
import datetime
import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from resume_analyzer.models.resume import ExtractedResumeData, as_text, as_text_list


class SkillsMatch(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


def skills_match_for_score(score: int) -> SkillsMatch:
    if score >= 75:
        return SkillsMatch.HIGH
    if score >= 50:
        return SkillsMatch.MEDIUM
    return SkillsMatch.LOW


def normalize_skills_match(value: Any, score: int) -> SkillsMatch:
    """Reads High/Medium/Low from the leading word, e.g. "High - strong overlap"."""
    words = re.findall(r"[a-z]+", as_text(value).lower())
    if words:
        for level in SkillsMatch:
            if words[0] == level.value.lower():
                return level
    return skills_match_for_score(score)


def _flatten_strings(value: Any) -> List[str]:
    """Accepts a list, a comma string, or a mapping of category -> list."""
    if isinstance(value, dict):
        flattened: List[str] = []
        for items in value.values():
            for item in _flatten_strings(items):
                if item not in flattened:
                    flattened.append(item)
        return flattened
    return as_text_list(value)


def _score(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, str):
        match = re.search(r"-?\d+(?:\.\d+)?", value)
        if not match:
            return 0
        value = match.group(0)
    try:
        score = round(float(value))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, score))


class AnalysisNarrative(BaseModel):
    strengths: List[str] = Field(default_factory=list)
    gaps: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> List[str]:
        if isinstance(value, str):
            return [value.strip()] if value.strip() else []
        return as_text_list(value)


class ResumeAnalysis(BaseModel):
    education_level: str = Field(alias="educationLevel", default="Unknown")
    years_experience: str = Field(alias="yearsExperience", default="Unknown")
    skills_match: SkillsMatch = Field(alias="skillsMatch", default=SkillsMatch.LOW)
    key_skills: List[str] = Field(alias="keySkills", default_factory=list)
    missing_requirements: List[str] = Field(
        alias="missingRequirements", default_factory=list
    )
    overall_score: int = Field(alias="overallScore", default=0, ge=0, le=100)
    fallback: bool = False
    analysis: Optional[AnalysisNarrative] = None
    extracted_data: Optional[ExtractedResumeData] = Field(
        alias="extractedData", default=None
    )
    debug_info: Optional[Dict[str, Any]] = Field(alias="debugInfo", default=None)

    model_config = ConfigDict(populate_by_name=True)

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LLMAnalysisResult(BaseModel):
    """Shape of the analysis stage reply, repaired field by field."""

    education_level: str = Field(alias="educationLevel", default="")
    years_experience: str = Field(alias="yearsExperience", default="")
    skills_match: str = Field(alias="skillsMatch", default="")
    key_skills: List[str] = Field(alias="keySkills", default_factory=list)
    missing_requirements: List[str] = Field(
        alias="missingRequirements", default_factory=list
    )
    overall_score: int = Field(alias="overallScore", default=0)
    analysis: AnalysisNarrative = Field(default_factory=AnalysisNarrative)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("education_level", "years_experience", "skills_match", mode="before")
    @classmethod
    def _coerce_summary(cls, value: Any) -> str:
        if isinstance(value, (list, tuple)):
            return "; ".join(as_text_list(value))
        if isinstance(value, dict):
            return "; ".join(f"{k}: {as_text(v)}" for k, v in value.items() if as_text(v))
        return as_text(value)

    @field_validator("key_skills", "missing_requirements", mode="before")
    @classmethod
    def _coerce_skill_list(cls, value: Any) -> List[str]:
        return _flatten_strings(value)

    @field_validator("overall_score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> int:
        return _score(value)

    @field_validator("analysis", mode="before")
    @classmethod
    def _object_or_empty(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, (dict, BaseModel)) else {}

    def to_analysis(self) -> ResumeAnalysis:
        return ResumeAnalysis(
            educationLevel=self.education_level or "Not available",
            yearsExperience=self.years_experience or "Not available",
            skillsMatch=normalize_skills_match(self.skills_match, self.overall_score),
            keySkills=self.key_skills,
            missingRequirements=self.missing_requirements,
            overallScore=self.overall_score,
            fallback=False,
            analysis=self.analysis,
        )


class AnalysisRecord(BaseModel):
    """One row of the application_analyses table."""

    application_id: int
    job_id: Optional[int] = None
    education_level: Optional[str] = None
    years_experience: Optional[str] = None
    skills_match: Optional[str] = None
    key_skills: Optional[List[str]] = None
    missing_requirements: Optional[List[str]] = None
    overall_score: Optional[int] = None
    fallback: Optional[bool] = None
    analyzed_at: Optional[str] = None

    @classmethod
    def from_analysis(
        cls, application_id: int, job_id: Optional[int], analysis: ResumeAnalysis
    ) -> "AnalysisRecord":
        return cls(
            application_id=application_id,
            job_id=job_id,
            education_level=analysis.education_level,
            years_experience=analysis.years_experience,
            skills_match=analysis.skills_match.value,
            key_skills=analysis.key_skills,
            missing_requirements=analysis.missing_requirements,
            overall_score=analysis.overall_score,
            fallback=analysis.fallback,
            analyzed_at=datetime.datetime.now(datetime.timezone.utc).isoformat(),
        )

    def to_analysis(self) -> ResumeAnalysis:
        score = _score(self.overall_score)
        return ResumeAnalysis(
            educationLevel=self.education_level or "Unknown",
            yearsExperience=self.years_experience or "Unknown",
            skillsMatch=normalize_skills_match(self.skills_match, score),
            keySkills=self.key_skills or [],
            missingRequirements=self.missing_requirements or [],
            overallScore=score,
            fallback=bool(self.fallback),
        )


class AnalyzeResumeRequest(BaseModel):
    resume_url: Optional[str] = Field(alias="resumeUrl", default=None)
    resume_content: Optional[str] = Field(alias="resumeContent", default=None)
    job_description: Optional[str] = Field(alias="jobDescription", default=None)
    job_id: Optional[int] = Field(alias="jobId", default=None)
    applicant_id: Optional[int] = Field(alias="applicantId", default=None)
    force_update: bool = Field(alias="forceUpdate", default=False)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("force_update", mode="before")
    @classmethod
    def _falsy_is_false(cls, value: Any) -> Any:
        return False if value is None else value
