from typing import List

from resume_analyzer.models.resume import (
    ExtractedResumeData,
    ResumeSection,
    SectionType,
    Skills,
)
from resume_analyzer.parsers.extract_education import extract_education
from resume_analyzer.parsers.extract_experience import extract_experience
from resume_analyzer.parsers.extract_profile import extract_contact_info
from resume_analyzer.parsers.extract_skills import extract_skills


def extract_resume_from_sections(sections: List[ResumeSection]) -> ExtractedResumeData:
    contact_lines: List[str] = []
    education = []
    experience = []
    skill_contents: List[str] = []

    for section in sections:
        if section.type == SectionType.EDUCATION:
            education.extend(extract_education(section.content))
        elif section.type == SectionType.EXPERIENCE:
            experience.extend(extract_experience(section.content))
        elif section.type == SectionType.SKILLS:
            skill_contents.append(section.content)
        elif not section.title:
            contact_lines.extend(section.content.splitlines())

    # Resumes without a leading block still tend to carry an email somewhere
    if not contact_lines:
        for section in sections:
            contact_lines.extend(section.content.splitlines())

    skills = extract_skills("\n".join(skill_contents)) if skill_contents else Skills()
    return ExtractedResumeData(
        contactInfo=extract_contact_info(contact_lines),
        education=education,
        experience=experience,
        skills=skills,
    )
