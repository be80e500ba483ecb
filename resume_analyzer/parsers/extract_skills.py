import re
from typing import Dict, List, Optional

from resume_analyzer.models.resume import Skills
from resume_analyzer.parsers.patterns import BULLET_CHARS

TECHNICAL = "technical"
SOFT = "soft"
INDUSTRY = "industry"

# Category -> trigger words that switch the running category.
CATEGORY_TRIGGERS: Dict[str, tuple] = {
    TECHNICAL: ("technical", "programming", "tools"),
    SOFT: ("soft", "interpersonal", "communication"),
    INDUSTRY: ("industry", "domain"),
}
# Words that, together with triggers, make up a bare category label line.
LABEL_WORDS = {"skills", "skill", "tools", "languages", "knowledge", "expertise", "and"}

TOKEN_SEPARATOR = re.compile(r",|;|\band\b", re.IGNORECASE)


def category_for(text: str) -> Optional[str]:
    text_lower = text.lower()
    for category, triggers in CATEGORY_TRIGGERS.items():
        if any(re.search(rf"\b{trigger}s?\b", text_lower) for trigger in triggers):
            return category
    return None


def _is_label_only(text: str) -> bool:
    triggers = {t for group in CATEGORY_TRIGGERS.values() for t in group}
    words = re.findall(r"[a-z]+", text.lower())
    return bool(words) and all(w in triggers or w in LABEL_WORDS for w in words)


def tokenize_skills(text: str) -> List[str]:
    tokens = []
    for token in TOKEN_SEPARATOR.split(text):
        token = token.strip().lstrip(BULLET_CHARS).strip(" .")
        if token:
            tokens.append(token)
    return tokens


def extract_skills(content: str) -> Skills:
    buckets: Dict[str, List[str]] = {TECHNICAL: [], SOFT: [], INDUSTRY: []}
    current = TECHNICAL

    for raw_line in (content or "").splitlines():
        line = raw_line.strip().lstrip(BULLET_CHARS).strip()
        if not line:
            continue

        if ":" in line:
            label, _, items = line.partition(":")
            current = category_for(label) or current
        else:
            current = category_for(line) or current
            if _is_label_only(line):
                continue
            items = line

        for token in tokenize_skills(items):
            if token not in buckets[current]:
                buckets[current].append(token)

    return Skills(**buckets)
