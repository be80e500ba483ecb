# resume_analyzer/parsers/patterns.py
import re

# --- Regex Patterns ---
month_pattern_str = (
    r"\b(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?"
    r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\b\.?"
)
year_pattern_str = r"(?:19|20)\d{2}"
present_pattern_str = r"(?:Present|Current|Now)"
date_separator_pattern_str = r"\s*(?:-|–|—|\bto\b)\s*"

MONTH_RANGE_PATTERN = re.compile(
    rf"({month_pattern_str}\s+{year_pattern_str})"
    rf"{date_separator_pattern_str}"
    rf"({month_pattern_str}\s+{year_pattern_str}|\b{present_pattern_str}\b)",
    re.IGNORECASE,
)
YEAR_RANGE_PATTERN = re.compile(
    rf"\b({year_pattern_str})"
    rf"{date_separator_pattern_str}"
    rf"({year_pattern_str}\b|\b{present_pattern_str}\b)",
    re.IGNORECASE,
)
SLASH_RANGE_PATTERN = re.compile(
    rf"\b(\d{{1,2}}/{year_pattern_str})"
    rf"{date_separator_pattern_str}"
    rf"(\d{{1,2}}/{year_pattern_str}\b|\b{present_pattern_str}\b)",
    re.IGNORECASE,
)
# Tried in this order; the first match wins.
DATE_RANGE_PATTERNS = (MONTH_RANGE_PATTERN, YEAR_RANGE_PATTERN, SLASH_RANGE_PATTERN)

YEAR_PATTERN = re.compile(rf"\b{year_pattern_str}\b")
STARTS_WITH_DATE_PATTERN = re.compile(
    rf"^\s*(?:{month_pattern_str}|\d{{4}}\b)", re.IGNORECASE
)
# Everything a date-only line may consist of.
DATE_TOKEN_PATTERN = re.compile(
    rf"{month_pattern_str}|\d{{1,2}}/\d{{4}}|\d{{4}}|\b{present_pattern_str}\b|\bto\b",
    re.IGNORECASE,
)

GPA_PATTERN = re.compile(r"\bGPA[:\s]*([\d.]+(?:\s*/\s*[\d.]+)?)", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,7}\b")
PHONE_PATTERN = re.compile(
    r"(?:\+?\d{1,3}[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\b"
)
LOCATION_PATTERN = re.compile(r"\b([A-Z][A-Za-z .'-]+,\s*[A-Z]{2})\b")
NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z .'-]+$")

BULLET_CHARS = "•◦▪*-–·"


def is_date_line(line: str) -> bool:
    """True when the line holds nothing but dates and separators."""
    if not YEAR_PATTERN.search(line) and not re.search(
        rf"\b{present_pattern_str}\b", line, re.IGNORECASE
    ):
        return False
    remainder = DATE_TOKEN_PATTERN.sub("", line)
    return not re.search(r"[A-Za-z0-9]", remainder)
