import re
from typing import List

from resume_analyzer.models.resume import EducationEntry
from resume_analyzer.parsers.patterns import GPA_PATTERN, YEAR_PATTERN
from resume_analyzer.parsers.section_parser import split_entries

DOCTORATE = "Doctorate"
MASTERS = "Master's"
BACHELORS = "Bachelor's"
ASSOCIATES = "Associate's"
CERTIFICATION = "Certification"
OTHER = "Other"

# Checked top to bottom, so "Master of Arts" never reaches the associate rule.
EDUCATION_LEVEL_PATTERNS = [
    (DOCTORATE, re.compile(r"\b(?:ph\.?\s?d|doctor(?:ate)?|d\.?phil|ed\.?d)(?![a-z])")),
    (
        MASTERS,
        re.compile(
            r"\b(?:master'?s?|m\.?s\.?c?|mba|m\.?a|m\.?eng|m\.?tech|m\.?phil)(?![a-z])"
        ),
    ),
    (
        BACHELORS,
        re.compile(
            r"\b(?:bachelor'?s?|b\.?s\.?c?|b\.?a|b\.?eng|b\.?tech|b\.e\.|undergraduate)(?![a-z])"
        ),
    ),
    (ASSOCIATES, re.compile(r"\b(?:associate'?s?|a\.a\.|a\.s\.)(?![a-z])")),
    (CERTIFICATION, re.compile(r"\b(?:certificat\w*|diploma|certified)(?![a-z])")),
]

_EDGE_PUNCTUATION = " \t,;:|-–—()"


def detect_education_level(degree: str) -> str:
    degree_lower = (degree or "").lower()
    for level, pattern in EDUCATION_LEVEL_PATTERNS:
        if pattern.search(degree_lower):
            return level
    return OTHER


def _split_degree_and_field(line: str, year: str):
    if year and year in line:
        before, _, after = line.partition(year)
        return before.strip(_EDGE_PUNCTUATION), after.strip(_EDGE_PUNCTUATION)
    for separator in (" in ", ","):
        if separator in line:
            degree, _, field = line.partition(separator)
            return degree.strip(_EDGE_PUNCTUATION), field.strip(_EDGE_PUNCTUATION)
    return line.strip(_EDGE_PUNCTUATION), ""


def extract_education_entry(lines: List[str]) -> EducationEntry:
    entry_text = "\n".join(lines)
    year_match = YEAR_PATTERN.search(entry_text)
    year = year_match.group(0) if year_match else ""

    institution = lines[0].strip(_EDGE_PUNCTUATION) if lines else ""
    if year and institution == year:
        institution = ""

    degree, field = "", ""
    if len(lines) > 1:
        degree, field = _split_degree_and_field(lines[1], year)

    gpa_match = GPA_PATTERN.search(entry_text)
    # "GPA: 3.8" after the year would otherwise read as the field of study
    if gpa_match and field:
        field = GPA_PATTERN.sub("", field).strip(_EDGE_PUNCTUATION)

    return EducationEntry(
        institution=institution,
        degree=degree,
        field=field,
        year=year,
        gpa=gpa_match.group(1).rstrip(".") if gpa_match else "",
        level=detect_education_level(degree) if degree else "",
    )


def extract_education(content: str) -> List[EducationEntry]:
    entries = []
    for lines in split_entries(content):
        entry = extract_education_entry(lines)
        if entry.institution or entry.degree:
            entries.append(entry)
    return entries
