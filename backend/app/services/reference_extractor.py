"""
Selah Backend — Bible Reference Extractor
==========================================

What:  Finds substrings shaped like Bible references ("John 3:16",
       "1 Corinthians 13:4-7", "psalm 23:1") in free text.
Who:   LivestreamService (auto-tagging notes), the /api/references/extract
       endpoint, and the AI annotator's post-processing.

Matching rules:
    - Book token: an optional leading digit, optional space, then letters.
      Case-insensitive; the book name is NOT checked against a canon list.
    - A chapter:verse pair is required; "John 3" alone does not match.
    - An optional "-N" verse range is captured but not validated
      ("John 3:16-2" is returned as-is).

Deduplication:
    Matches are compared on a canonical key (whitespace runs collapsed to one
    space, trimmed, lowercased). The first spelling seen is the one returned,
    so "John 3:16" and "john  3:16" yield a single "John 3:16".
"""

import re
from typing import List, Optional

REFERENCE_PATTERN = re.compile(r"\b(\d?\s?[A-Za-z]+)\s+(\d+):(\d+)(?:-(\d+))?\b")

_WHITESPACE = re.compile(r"\s+")


def canonical_key(reference: str) -> str:
    return _WHITESPACE.sub(" ", reference).strip().lower()


def extract_references(text: Optional[str]) -> List[str]:
    """
    Return distinct references in order of first appearance.

    Args:
        text: Free text (note content, transcript). None or "" gives [].

    Example:
        >>> extract_references("Read John 3:16 and john 3:16, then Ps 23:1-6")
        ['John 3:16', 'Ps 23:1-6']
    """
    if not text:
        return []

    seen = set()
    references: List[str] = []
    for match in REFERENCE_PATTERN.finditer(text):
        found = match.group(0).strip()
        key = canonical_key(found)
        if key in seen:
            continue
        seen.add(key)
        references.append(found)
    return references


def first_reference(text: Optional[str]) -> Optional[str]:
    """The first reference in `text`, or None. This is what gets attached to a note."""
    if not text:
        return None
    match = REFERENCE_PATTERN.search(text)
    return match.group(0).strip() if match else None
