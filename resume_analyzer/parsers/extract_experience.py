from typing import List, Tuple

from resume_analyzer.models.resume import ExperienceEntry
from resume_analyzer.parsers.patterns import (
    BULLET_CHARS,
    DATE_RANGE_PATTERNS,
    STARTS_WITH_DATE_PATTERN,
    YEAR_PATTERN,
    is_date_line,
)
from resume_analyzer.parsers.section_parser import split_entries


def extract_date_range(entry_text: str) -> Tuple[str, str]:
    for pattern in DATE_RANGE_PATTERNS:
        match = pattern.search(entry_text)
        if match:
            return match.group(1).strip(), match.group(2).strip()

    years = YEAR_PATTERN.findall(entry_text)
    start_date = years[0] if years else ""
    end_date = years[1] if len(years) > 1 else ""
    return start_date, end_date


def _strip_bullet(line: str) -> str:
    return line.lstrip(BULLET_CHARS).strip()


def _without_date_range(line: str) -> str:
    for pattern in DATE_RANGE_PATTERNS:
        line = pattern.sub("", line)
    return line.strip(" \t,;:|-–—()")


def extract_experience_entry(lines: List[str]) -> ExperienceEntry:
    start_date, end_date = extract_date_range("\n".join(lines))

    header_lines = [line for line in lines if not is_date_line(line)]
    first, second = "", ""
    if header_lines:
        first = _without_date_range(header_lines[0])
    if len(header_lines) > 1:
        second = _without_date_range(header_lines[1])

    starts_with_date = bool(lines) and bool(STARTS_WITH_DATE_PATTERN.match(lines[0]))
    if starts_with_date:
        company, title = second, first
    else:
        company, title = first, second

    description_lines = [_strip_bullet(line) for line in header_lines[2:]]
    return ExperienceEntry(
        company=company,
        title=title,
        startDate=start_date,
        endDate=end_date,
        description="\n".join(line for line in description_lines if line),
    )


def extract_experience(content: str) -> List[ExperienceEntry]:
    entries = []
    for lines in split_entries(content):
        entry = extract_experience_entry(lines)
        if entry.company or entry.title:
            entries.append(entry)
    return entries
