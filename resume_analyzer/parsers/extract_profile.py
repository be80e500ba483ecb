from typing import List

from resume_analyzer.models.resume import ContactInfo
from resume_analyzer.parsers.patterns import (
    EMAIL_PATTERN,
    LOCATION_PATTERN,
    NAME_PATTERN,
    PHONE_PATTERN,
)


def _looks_like_name(line: str) -> bool:
    # Usually 2-4 words made of letters, e.g. "Jane Q. Doe"
    words = line.split()
    return 1 < len(words) <= 4 and bool(NAME_PATTERN.match(line))


def extract_contact_info(lines: List[str]) -> ContactInfo:
    """Reads contact details from the lines that precede the first section."""
    name = email = phone = location = ""
    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            continue
        if not email:
            match = EMAIL_PATTERN.search(line)
            if match:
                email = match.group(0)
        if not phone:
            match = PHONE_PATTERN.search(line)
            if match:
                phone = match.group(0).strip()
        if not location:
            match = LOCATION_PATTERN.search(line)
            if match and "@" not in match.group(1):
                location = match.group(1).strip()
        if not name and _looks_like_name(line):
            name = line
    return ContactInfo(name=name, email=email, phone=phone, location=location)
