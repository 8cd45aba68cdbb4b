"""Text matching utilities for EmergencyClassifier.

Pure substring and regex helpers shared by the matchers, override rules and
aggregator. All functions are stateless with no I/O or external calls.
Callers pass text that is already lower-cased.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence


def count_terms(text: str, terms: Iterable[str]) -> int:
    """Count how many distinct terms occur as substrings of text.

    Args:
        text: Lower-cased text to search.
        terms: Candidate substrings.

    Returns:
        Number of terms found (each term counted at most once).
    """
    return sum(1 for term in terms if term in text)


def contains_any(text: str, terms: Iterable[str]) -> bool:
    """Return True if any term occurs as a substring of text."""
    return any(term in text for term in terms)


def matches(pattern: Optional[str], text: str) -> bool:
    """Return True if the regex pattern matches anywhere in text.

    An empty or None pattern never matches. Compiled patterns are cached by
    the re module, so repeated calls with the same table entry are cheap.
    """
    if not pattern:
        return False
    return re.search(pattern, text) is not None


def count_patterns(patterns: Iterable[str], text: str) -> int:
    """Count how many of the given regex patterns match text."""
    return sum(1 for pattern in patterns if matches(pattern, text))


def matches_in_either_order(first: str, second: str, text: str) -> bool:
    """Return True if text contains first…second or second…first.

    Args:
        first: Regex for the first vocabulary group.
        second: Regex for the second vocabulary group.
        text: Lower-cased text to search.
    """
    return matches(f"{first}.*{second}", text) or matches(f"{second}.*{first}", text)


def count_matching_names(names: Sequence[str], terms: Iterable[str]) -> int:
    """Count the names (tag or object names) containing any of the terms.

    Args:
        names: Lower-cased names, one per detected tag or object.
        terms: Candidate substrings.

    Returns:
        Number of names with at least one matching term.
    """
    term_list = list(terms)
    return sum(1 for name in names if contains_any(name, term_list))


def any_name_matches(names: Sequence[str], terms: Iterable[str]) -> bool:
    """Return True if any name contains any of the terms."""
    return count_matching_names(names, terms) > 0
