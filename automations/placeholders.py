"""
Placeholder parsing for automation templates.

A placeholder is a double-brace-delimited identifier made of letters, digits
and underscores, e.g. ``{{candidate_name}}``. Whitespace inside the braces is
not part of the grammar, so ``{{ candidate_name }}`` is plain text.
"""

import re
from typing import List, Optional

PLACEHOLDER_PATTERN = re.compile(r'\{\{([a-zA-Z0-9_]+)\}\}')
IDENTIFIER_PATTERN = re.compile(r'^[a-zA-Z0-9_]+$')


def is_identifier(name) -> bool:
    """Return True if ``name`` is a valid placeholder identifier."""
    return isinstance(name, str) and bool(IDENTIFIER_PATTERN.match(name))


def extract_variables(text: Optional[str]) -> List[str]:
    """
    Extract the unique placeholder identifiers from ``text``.

    Identifiers are returned in order of first occurrence. Empty or missing
    text yields an empty list.
    """
    if not text:
        return []
    seen = {}
    for match in PLACEHOLDER_PATTERN.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)


def extract_from_pair(subject: Optional[str], body: Optional[str]) -> List[str]:
    """Extract identifiers from a subject and a body, deduplicated across both."""
    seen = {}
    for name in extract_variables(subject) + extract_variables(body):
        seen.setdefault(name, None)
    return list(seen)
