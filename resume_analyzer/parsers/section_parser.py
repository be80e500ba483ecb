import re
from typing import Dict, List, Optional, Tuple

from resume_analyzer.models.resume import ResumeSection, SectionType

# Section type -> header phrases. Add a section type or a language here,
# classify_header needs no change.
SECTION_KEYWORDS: Dict[SectionType, Tuple[str, ...]] = {
    SectionType.EDUCATION: (
        "education",
        "educational background",
        "academic background",
        "university",
        "college",
        "school",
        "institute",
        "academy",
        "bachelor",
        "master",
        "phd",
        "doctorate",
        "degree",
        "diploma",
        "certificate",
        "graduated",
        "graduation",
    ),
    SectionType.EXPERIENCE: (
        "experience",
        "work",
        "employment",
        "career",
        "professional",
        "work experience",
        "professional experience",
        "employment history",
        "work history",
        "career history",
    ),
    SectionType.SKILLS: (
        "skills",
        "expertise",
        "competencies",
        "technologies",
        "technical skills",
        "professional skills",
        "core competencies",
        "key skills",
        "areas of expertise",
    ),
}

ENTRY_SEPARATOR = re.compile(r"\n[ \t]*\n")


def _is_all_upper_case(line: str) -> bool:
    return any(ch.isalpha() for ch in line) and line == line.upper()


def classify_header(line: str) -> Optional[SectionType]:
    """Returns the section type a header line opens, or None for content lines."""
    text = line.strip()
    if not text:
        return None
    text_lower = text.lower()

    for section_type, phrases in SECTION_KEYWORDS.items():
        for phrase in phrases:
            if text_lower == phrase or text_lower == f"{phrase}:":
                return section_type

    if not _is_all_upper_case(text):
        return None

    # Longest phrase wins so "PROFESSIONAL SKILLS" is a skills header.
    best: Optional[Tuple[int, SectionType]] = None
    for section_type, phrases in SECTION_KEYWORDS.items():
        for phrase in phrases:
            if phrase in text_lower and (best is None or len(phrase) > best[0]):
                best = (len(phrase), section_type)
    return best[1] if best else None


def split_into_sections(text: str) -> List[ResumeSection]:
    sections: List[ResumeSection] = []
    title = ""
    section_type = SectionType.OTHER
    content_lines: List[str] = []

    def close_section() -> None:
        content = "\n".join(content_lines).strip("\n")
        if title or content.strip():
            sections.append(
                ResumeSection(title=title, content=content, type=section_type)
            )

    for line in (text or "").splitlines():
        header_type = classify_header(line)
        if header_type is None:
            content_lines.append(line.rstrip())
            continue
        close_section()
        title = line.strip()
        section_type = header_type
        content_lines = []

    close_section()
    return sections


def split_entries(content: str) -> List[List[str]]:
    """Blank-line separated blocks, each as its non-empty stripped lines."""
    entries = []
    for block in ENTRY_SEPARATOR.split(content or ""):
        lines = [line.strip() for line in block.splitlines() if line.strip()]
        if lines:
            entries.append(lines)
    return entries
