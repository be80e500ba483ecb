import re
from typing import Any, List, Mapping

from pydantic import BaseModel, ValidationError

from resume_analyzer.constants import PRESENT_WORDS
from resume_analyzer.exceptions import ExtractionFailure
from resume_analyzer.models.resume import ExtractedResumeData, ValidationResult, as_text
from resume_analyzer.parsers.extract_education import detect_education_level

YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
SKILL_BUCKETS = ("technical", "soft", "industry")


def _filled(value: Any) -> bool:
    return bool(as_text(value))


def _has_year(value: Any) -> bool:
    return bool(YEAR_RE.search(as_text(value)))


def _is_present(value: Any) -> bool:
    return as_text(value).lower() in PRESENT_WORDS


def _check_education(education: List[Any], errors: List[str]) -> None:
    for index, entry in enumerate(education, start=1):
        if not isinstance(entry, Mapping):
            errors.append(f"Education entry {index} is not an object")
            continue
        if not _filled(entry.get("institution")):
            errors.append(f"Education entry {index} is missing an institution")
        if not _filled(entry.get("degree")):
            errors.append(f"Education entry {index} is missing a degree")
        year = entry.get("year")
        if _filled(year) and not _has_year(year):
            errors.append(f"Education entry {index} has an invalid year: {as_text(year)!r}")


def _check_experience(experience: List[Any], errors: List[str]) -> None:
    for index, entry in enumerate(experience, start=1):
        if not isinstance(entry, Mapping):
            errors.append(f"Experience entry {index} is not an object")
            continue
        if not _filled(entry.get("company")):
            errors.append(f"Experience entry {index} is missing a company")
        if not _filled(entry.get("title")):
            errors.append(f"Experience entry {index} is missing a title")
        start_date = entry.get("startDate")
        if _filled(start_date) and not _has_year(start_date):
            errors.append(
                f"Experience entry {index} has an invalid start date: {as_text(start_date)!r}"
            )
        end_date = entry.get("endDate")
        if _filled(end_date) and not (_has_year(end_date) or _is_present(end_date)):
            errors.append(
                f"Experience entry {index} has an invalid end date: {as_text(end_date)!r}"
            )


def validate_resume_data(data: Any) -> ValidationResult:
    """
    Checks a structured profile, either a model or the raw mapping.
    Never raises; the caller decides what a failed check means.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    if not isinstance(data, Mapping):
        return ValidationResult(isValid=False, errors=["Resume data must be an object"])

    errors: List[str] = []

    contact = data.get("contactInfo")
    if not isinstance(contact, Mapping):
        contact = {}
    if not _filled(contact.get("name")):
        errors.append("Contact info is missing a name")
    if not (_filled(contact.get("email")) or _filled(contact.get("phone"))):
        errors.append("Contact info needs an email or a phone number")

    education = data.get("education")
    if isinstance(education, list):
        _check_education(education, errors)
    else:
        errors.append("Education must be a list")

    experience = data.get("experience")
    if isinstance(experience, list):
        _check_experience(experience, errors)
    else:
        errors.append("Experience must be a list")

    skills = data.get("skills")
    if not isinstance(skills, Mapping):
        errors.append("Skills must be an object")
    else:
        for bucket in SKILL_BUCKETS:
            if not isinstance(skills.get(bucket), list):
                errors.append(f"Skills '{bucket}' must be a list")

    return ValidationResult(isValid=not errors, errors=errors)


def clean_resume_data(raw: Any) -> ExtractedResumeData:
    """Trims strings, defaults missing lists and drops unidentifiable entries."""
    if isinstance(raw, ExtractedResumeData):
        data = raw
    elif isinstance(raw, Mapping):
        try:
            data = ExtractedResumeData.model_validate(dict(raw))
        except ValidationError as e:
            raise ExtractionFailure(f"Resume data failed validation: {e}") from e
    else:
        raise ExtractionFailure(
            f"Expected a JSON object for resume data, got {type(raw).__name__}"
        )

    for entry in data.education:
        if entry.degree and not entry.level:
            entry.level = detect_education_level(entry.degree)
    return data


def is_complete_profile(data: ExtractedResumeData) -> bool:
    """A profile good enough to skip extraction altogether."""
    return validate_resume_data(data).is_valid and bool(data.education or data.experience)
