from resume_analyzer.models.resume import ExtractedResumeData
from resume_analyzer.parsers.main_extractor import extract_resume_from_sections
from resume_analyzer.parsers.section_parser import split_into_sections


def parse_resume_text(text: str) -> ExtractedResumeData:
    # Step 1. Split the raw text into labelled sections
    sections = split_into_sections(text)
    if not sections:
        return ExtractedResumeData()

    # Step 2. Decompose each section into structured entries
    return extract_resume_from_sections(sections)
