import copy

import pytest

from resume_analyzer.exceptions import ExtractionFailure
from resume_analyzer.models.resume import ExtractedResumeData
from resume_analyzer.services.validation import (
    clean_resume_data,
    is_complete_profile,
    validate_resume_data,
)

from conftest import EXTRACTED_PROFILE


def test_valid_profile_passes():
    result = validate_resume_data(EXTRACTED_PROFILE)
    assert result.is_valid
    assert result.errors == []


def test_invalid_education_year_is_reported():
    data = copy.deepcopy(EXTRACTED_PROFILE)
    data["education"][0]["year"] = "abcd"

    result = validate_resume_data(data)

    assert not result.is_valid
    assert "Education entry 1 has an invalid year: 'abcd'" in result.errors


def test_present_is_a_valid_end_date():
    data = copy.deepcopy(EXTRACTED_PROFILE)
    data["experience"][0]["endDate"] = "Present"
    assert validate_resume_data(data).is_valid


def test_missing_contact_details_are_reported():
    data = copy.deepcopy(EXTRACTED_PROFILE)
    data["contactInfo"] = {"name": "", "email": "", "phone": ""}

    errors = validate_resume_data(data).errors

    assert "Contact info is missing a name" in errors
    assert "Contact info needs an email or a phone number" in errors


def test_structural_errors_never_raise():
    result = validate_resume_data({"education": "none", "skills": []})

    assert not result.is_valid
    assert "Education must be a list" in result.errors
    assert "Experience must be a list" in result.errors
    assert "Skills must be an object" in result.errors


def test_non_object_input():
    result = validate_resume_data(["not", "a", "profile"])
    assert result.errors == ["Resume data must be an object"]


def test_validate_accepts_models():
    profile = ExtractedResumeData.model_validate(EXTRACTED_PROFILE)
    assert validate_resume_data(profile).is_valid


def test_clean_resume_data_repairs_loose_values():
    profile = clean_resume_data(
        {
            "contactInfo": {"name": "  Jane Doe ", "email": None, "phone": 5551234567},
            "education": [
                {"institution": "State University", "degree": "M.S.", "year": 2019},
                {"field": "Orphaned field"},
                "not an entry",
            ],
            "experience": [{"title": "Engineer"}, {"description": "no identity"}],
            "skills": {"technical": "Python, Go", "soft": None},
        }
    )

    assert profile.contact_info.name == "Jane Doe"
    assert profile.contact_info.email == ""
    assert profile.contact_info.phone == "5551234567"
    assert len(profile.education) == 1
    assert profile.education[0].year == "2019"
    assert profile.education[0].level == "Master's"
    assert [e.title for e in profile.experience] == ["Engineer"]
    assert profile.skills.technical == ["Python", "Go"]
    assert profile.skills.soft == []
    assert profile.skills.industry == []


def test_clean_resume_data_rejects_non_objects():
    with pytest.raises(ExtractionFailure):
        clean_resume_data([EXTRACTED_PROFILE])


def test_complete_profile_needs_history():
    profile = clean_resume_data(EXTRACTED_PROFILE)
    assert is_complete_profile(profile)

    profile.education = []
    profile.experience = []
    assert not is_complete_profile(profile)
