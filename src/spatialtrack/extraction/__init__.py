"""Extraction layer.

Turns raw generated text into validated character records: locate the
embedded block, decode it leniently, validate each entry, collapse
duplicates, and strip the block from the visible text.
"""

from spatialtrack.extraction.decoder import decode_payload, repair_json
from spatialtrack.extraction.dedupe import dedupe_last_wins
from spatialtrack.extraction.sanitize import strip_match
from spatialtrack.extraction.scanner import TagMatch, find_canonical_match, iter_tag_matches
from spatialtrack.extraction.validate import ValidationResult, ValidationWarning, extract_characters, validate_characters

__all__ = [
    "TagMatch",
    "ValidationResult",
    "ValidationWarning",
    "decode_payload",
    "dedupe_last_wins",
    "extract_characters",
    "find_canonical_match",
    "iter_tag_matches",
    "repair_json",
    "strip_match",
    "validate_characters",
]
