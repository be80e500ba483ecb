from typing import List

from resume_analyzer.models.analysis import ResumeAnalysis, SkillsMatch

EDUCATION_KEYWORDS = ("education", "degree", "university")
EXPERIENCE_KEYWORDS = ("experience", "work", "employment")
SKILLS_KEYWORDS = ("skills", "expertise", "technologies")


def _mentions(text_lower: str, keywords) -> bool:
    return any(keyword in text_lower for keyword in keywords)


def fallback_analysis(resume_text: str) -> ResumeAnalysis:
    """Low-confidence keyword check used when no language model result is available."""
    text_lower = (resume_text or "").lower()
    has_education = _mentions(text_lower, EDUCATION_KEYWORDS)
    has_experience = _mentions(text_lower, EXPERIENCE_KEYWORDS)
    has_skills = _mentions(text_lower, SKILLS_KEYWORDS)
    complete = has_education and has_experience and has_skills

    missing: List[str] = []
    if not has_education:
        missing.append("No education information found in resume")
    if not has_experience:
        missing.append("No work experience found in resume")
    if not has_skills:
        missing.append("No skills section found in resume")
    missing.append("Detailed comparison with the job description unavailable")

    return ResumeAnalysis(
        educationLevel=(
            "Education mentioned (not verified)" if has_education else "Not found"
        ),
        yearsExperience=(
            "Experience mentioned (not verified)" if has_experience else "Not found"
        ),
        skillsMatch=SkillsMatch.MEDIUM if complete else SkillsMatch.LOW,
        keySkills=(
            ["Skills mentioned; automated matching unavailable"] if has_skills else []
        ),
        missingRequirements=missing,
        overallScore=50 if complete else 30,
        fallback=True,
    )


def missing_parameters_analysis() -> ResumeAnalysis:
    return ResumeAnalysis(
        educationLevel="Unknown",
        yearsExperience="Unknown",
        skillsMatch=SkillsMatch.LOW,
        keySkills=[],
        missingRequirements=["Resume and job description are both required for analysis"],
        overallScore=0,
        fallback=True,
    )
