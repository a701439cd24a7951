"""Free-text extraction: monetary values and profile entities"""

import re
from typing import Any, Dict, Optional

# Amount with optional two-digit decimals, comma or dot separated
_NUMBER = r"\d+(?:[.,]\d{2})?"
_NUMBER_PATTERN = re.compile(_NUMBER)

# Tried in order; only the first family that matches anything is consulted
VALUE_PATTERNS = (
    re.compile(rf"R\$\s*({_NUMBER})"),
    re.compile(rf"({_NUMBER})?\s*reais?", re.IGNORECASE),
    re.compile(rf"({_NUMBER})\s*(?:R\$|reais?)", re.IGNORECASE),
)

_UPPER = "A-ZÀ-ÖØ-Ý"
_LOWER = "a-zß-öø-ÿ"
_CAPITALIZED_WORDS = rf"([{_UPPER}][{_LOWER}]+(?:\s+[{_UPPER}][{_LOWER}]+)*)"
_LOWERCASE_WORDS = rf"([{_LOWER}]+(?:\s+[{_LOWER}]+)*)"

# Keywords are case-insensitive, the captured words are not
NAME_PATTERN = re.compile(rf"\b(?i:me chamo|meu nome é|sou)\s+{_CAPITALIZED_WORDS}")
CITY_PATTERN = re.compile(rf"\b(?i:moro em|cidade|de)\s+{_CAPITALIZED_WORDS}")
AGE_PATTERN = re.compile(r"\b(\d{1,2})\s*anos?\b", re.IGNORECASE)
PROFESSION_PATTERN = re.compile(rf"\b(?i:trabalho como|sou|profissão)\s+{_LOWERCASE_WORDS}")


def extract_value(text: str) -> Optional[float]:
    """
    Extract a monetary amount in reais from free text.

    Families, in order:
    - "R$ 50,00"      (symbol prefix)
    - "50 reais"      (suffix, number optional)
    - "50,00 R$"      (number before either marker)

    The first family with at least one match wins, even when none of its
    matches carry a parsable number. Comma decimals are normalized to dots.
    """
    for pattern in VALUE_PATTERNS:
        matches = [match.group(0) for match in pattern.finditer(text)]
        if not matches:
            continue
        for matched_text in matches:
            number = _NUMBER_PATTERN.search(matched_text)
            if number:
                return float(number.group(0).replace(",", "."))
        return None
    return None


def extract_entities(text: str) -> Dict[str, Any]:
    """Pull name, city, age and profession; each one is optional"""
    entities: Dict[str, Any] = {}

    name_match = NAME_PATTERN.search(text)
    if name_match:
        entities["name"] = name_match.group(1)

    city_match = CITY_PATTERN.search(text)
    if city_match:
        entities["city"] = city_match.group(1)

    age_match = AGE_PATTERN.search(text)
    if age_match:
        entities["age"] = int(age_match.group(1))

    profession_match = PROFESSION_PATTERN.search(text)
    if profession_match:
        entities["profession"] = profession_match.group(1)

    return entities
