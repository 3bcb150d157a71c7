# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-01
# Description: LocationExtractor
# -----------------------------------------------------------------------------
import re
from typing import Dict, List, Optional

NEAR_ME_PHRASES = (
    "near me",
    "nearby",
    "close by",
    "close to me",
    "in my area",
    "around here",
    "around me",
    "local",
    "nearby me",
)

_NEAR_ME_PATTERNS = [re.compile(rf"\b{re.escape(p)}\b", re.IGNORECASE) for p in NEAR_ME_PHRASES]

# Historic / colloquial name -> official name
LOCATION_ALIASES: Dict[str, str] = {
    "bombay": "Mumbai",
    "bangalore": "Bengaluru",
    "calcutta": "Kolkata",
    "madras": "Chennai",
    "poona": "Pune",
    "gurgaon": "Gurugram",
    "cochin": "Kochi",
    "trivandrum": "Thiruvananthapuram",
    "calicut": "Kozhikode",
    "baroda": "Vadodara",
    "vizag": "Visakhapatnam",
    "vizagapatam": "Visakhapatnam",
    "mysore": "Mysuru",
    "secunderabad": "Hyderabad",
    "pondicherry": "Puducherry",
    "benares": "Varanasi",
    "allahabad": "Prayagraj",
}

KNOWN_CITIES: List[str] = [
    "Mumbai", "Delhi", "New Delhi", "Bengaluru", "Hyderabad", "Chennai", "Kolkata",
    "Pune", "Ahmedabad", "Jaipur", "Surat", "Lucknow", "Bhopal", "Patna",
    "Bhubaneswar", "Chandigarh", "Dehradun", "Gandhinagar", "Panaji", "Shimla",
    "Srinagar", "Raipur", "Ranchi", "Gangtok", "Shillong", "Thiruvananthapuram",
    "Puducherry", "Gurugram", "Noida", "Faridabad", "Ghaziabad", "Nagpur",
    "Indore", "Vadodara", "Visakhapatnam", "Coimbatore", "Madurai", "Kochi",
    "Kozhikode", "Thrissur", "Kanpur", "Prayagraj", "Varanasi", "Agra", "Meerut",
    "Ludhiana", "Amritsar", "Jalandhar", "Nashik", "Aurangabad", "Solapur",
    "Rajkot", "Jamshedpur", "Mysuru", "Mangalore", "Hubli", "Tiruchirappalli",
    "Salem", "Warangal", "Cuttack", "Gwalior", "Jabalpur", "Ujjain", "Guwahati",
    "Udaipur", "Jodhpur", "Rishikesh", "Haridwar", "Manali", "Darjeeling", "Siliguri",
]

_CITY_BY_LOWER = {c.lower(): c for c in KNOWN_CITIES}

# Longest names first so "new delhi" wins over "delhi"
_NAME_SCAN = sorted(list(_CITY_BY_LOWER) + list(LOCATION_ALIASES), key=len, reverse=True)
_NAME_PATTERN = re.compile(r"\b(" + "|".join(re.escape(n) for n in _NAME_SCAN) + r")\b", re.IGNORECASE)

# "... in Koramangala", "... near Andheri West"
_PLACE_PHRASE = re.compile(r"\b(?:in|at|near|around)\s+([a-z][a-z0-9 .,'-]{1,80})$", re.IGNORECASE)

# "open at night", "delivery at home", "in stock": time and manner words, not places
NON_PLACE_WORDS = frozenset({
    "night", "midnight", "noon", "morning", "evening", "afternoon", "late", "weekend", "weekends",
    "home", "work", "office", "once", "least", "all", "any", "anytime", "stock", "budget", "person",
    "breakfast", "lunch", "dinner", "time", "hours",
})


def detect_near_me(query: Optional[str]) -> bool:
    if not query or not isinstance(query, str):
        return False
    text = query.strip()
    return any(p.search(text) for p in _NEAR_ME_PATTERNS)


def normalize_location_name(name: Optional[str]) -> str:
    """'bangalore' -> 'Bengaluru', 'new delhi' -> 'New Delhi', else trimmed input."""
    if not name:
        return ""
    trimmed = " ".join(name.split()).strip(" ,.")
    lower = trimmed.lower()
    if lower in LOCATION_ALIASES:
        return LOCATION_ALIASES[lower]
    if lower in _CITY_BY_LOWER:
        return _CITY_BY_LOWER[lower]
    return trimmed


def extract_location(query: Optional[str]) -> Optional[str]:
    """
    Explicit place named in a search query, normalised. Near-me phrases are
    never returned as places.
    """
    if not query or not isinstance(query, str):
        return None
    text = " ".join(query.split()).strip(" ?!.")

    m = _PLACE_PHRASE.search(text)
    if m:
        candidate = m.group(1).strip(" ,.")
        words = [w.strip(",.'-").lower() for w in candidate.split()]
        words = [w for w in words if w not in ("the", "a", "an")]
        first_word = words[0] if words else ""
        if (
            first_word
            and first_word not in NON_PLACE_WORDS
            and not detect_near_me(f"{text[m.start():m.start(1)]}{candidate}")
        ):
            return normalize_location_name(candidate)

    m = _NAME_PATTERN.search(text)
    if m:
        return normalize_location_name(m.group(1))
    return None
