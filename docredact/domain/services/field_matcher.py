"""
FieldMatcher domain service.

Pairs extracted fields with the configured data elements of a document type.
Each field tries the tiers in order (exact name, mapping table, alias, fuzzy
substring); the first hit wins. An element leaves the candidate pool once
matched, so no element is consumed twice in a pass. Elements left over become
``missing`` placeholders.

Iteration always follows input order so identical inputs give identical
results.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from docredact.domain.entities.data_element import ConfiguredDataElement
from docredact.domain.entities.extracted_field import ExtractedField
from docredact.domain.entities.match_result import MatchReport, MatchResult, MatchTier

logger = logging.getLogger(__name__)


# Known raw field codes mapped to the human names they usually correspond to.
FIELD_MAPPING_TABLE: Dict[str, Tuple[str, ...]] = {
    # Names
    "FIRST_NAME": ("First Name", "Given Name", "Prénom"),
    "GIVEN_NAME": ("First Name", "Given Name", "Prénom"),
    "LAST_NAME": ("Last Name", "Family Name", "Surname", "Nom"),
    "FAMILY_NAME": ("Last Name", "Family Name", "Surname", "Nom"),
    "MIDDLE_NAME": ("Middle Name",),
    "FULL_NAME": ("Full Name", "Name", "Complete Name"),

    # Date of birth
    "DATE_OF_BIRTH": ("Date of Birth", "DOB", "Birth Date"),
    "DOB": ("Date of Birth", "DOB", "Birth Date"),
    "BIRTH_DATE": ("Date of Birth", "DOB", "Birth Date"),
    "BIRTHDATE": ("Date of Birth", "DOB", "Birth Date"),

    # Document numbers
    "DOCUMENT_NUMBER": ("Passport Number", "Document Number", "Document ID"),
    "PASSPORT_NUMBER": ("Passport Number", "Document Number"),
    "ID_NUMBER": ("Passport Number", "Document Number", "ID Number"),

    # Issue / expiry
    "DATE_OF_ISSUE": ("Date of Issue", "Issue Date"),
    "ISSUE_DATE": ("Date of Issue", "Issue Date"),
    "DATE_OF_EXPIRY": ("Expiration Date", "Expiry Date"),
    "EXPIRY_DATE": ("Expiration Date", "Expiry Date"),
    "EXPIRATION_DATE": ("Expiration Date", "Expiry Date"),

    # Other
    "NATIONALITY": ("Nationality", "Citizenship"),
    "PLACE_OF_BIRTH": ("Place of Birth", "Birth Place"),
    "MRZ_CODE": ("MRZ Code", "Machine Readable Zone"),
    "ID_TYPE": ("ID Type", "Document Type"),
}

_WHITESPACE = re.compile(r"\s+")
_NOT_NAME_CHAR = re.compile(r"[^A-Z0-9_]")
_NOT_ALNUM = re.compile(r"[^A-Z0-9]")


def normalize_name(raw: Optional[str]) -> str:
    """
    Uppercase, turn whitespace runs into ``_`` and drop anything outside
    ``[A-Z0-9_]``.

    Examples:
        >>> normalize_name("Date of Birth")
        'DATE_OF_BIRTH'
        >>> normalize_name("date-of-birth:")
        'DATEOFBIRTH'
    """
    text = _WHITESPACE.sub("_", str(raw or "").strip().upper())
    return _NOT_NAME_CHAR.sub("", text)


def compact_name(raw: Optional[str]) -> str:
    """
    Uppercase and drop everything that is not a letter or digit.

    Examples:
        >>> compact_name("Date_of Birth")
        'DATEOFBIRTH'
    """
    return _NOT_ALNUM.sub("", str(raw or "").upper())


class FieldMatcher:
    """Deterministic tiered matcher between extracted fields and configured elements."""

    def __init__(self, mapping_table: Optional[Dict[str, Sequence[str]]] = None):
        self._mapping_table = dict(mapping_table if mapping_table is not None else FIELD_MAPPING_TABLE)

    def match(
        self,
        fields: Sequence[ExtractedField],
        elements: Sequence[ConfiguredDataElement],
    ) -> MatchReport:
        """
        Match every field against the pool of configured elements.

        Returns a report whose ``results`` hold one entry per input field, in
        input order, followed by one ``missing`` entry per element nothing
        consumed, in configured order.
        """
        pool: List[ConfiguredDataElement] = list(elements)
        results: List[MatchResult] = []

        for extracted in fields:
            element, tier = self.find_match(extracted.label, pool)
            if element is None:
                results.append(MatchResult(field=extracted, element=None, tier=MatchTier.NONE))
                continue
            pool.remove(element)
            results.append(MatchResult(field=extracted, element=element, tier=tier))
            logger.debug("Matched '%s' to '%s' via %s", extracted.label, element.name, tier.value)

        for element in pool:
            results.append(MatchResult.for_missing(element))

        matched = sum(1 for r in results if r.is_matched)
        logger.info(
            "Field matching: %d fields, %d matched, %d elements missing",
            len(fields), matched, len(pool),
        )
        return MatchReport(results=results, remaining_elements=pool)

    def find_match(
        self,
        label: str,
        pool: Sequence[ConfiguredDataElement],
    ) -> Tuple[Optional[ConfiguredDataElement], MatchTier]:
        """Try each tier in order against ``pool``; first hit wins."""
        normalized = normalize_name(label)
        if not normalized or not pool:
            return None, MatchTier.NONE

        element = self._match_exact(normalized, pool)
        if element is not None:
            return element, MatchTier.EXACT

        element = self._match_mapping_table(normalized, pool)
        if element is not None:
            return element, MatchTier.MAPPING_TABLE

        element = self._match_alias(normalized, pool)
        if element is not None:
            return element, MatchTier.ALIAS

        element = self._match_fuzzy(normalized, pool)
        if element is not None:
            return element, MatchTier.FUZZY

        return None, MatchTier.NONE

    def _match_exact(self, normalized: str, pool: Sequence[ConfiguredDataElement]) -> Optional[ConfiguredDataElement]:
        for element in pool:
            if normalize_name(element.name) == normalized:
                return element
        return None

    def _match_mapping_table(self, normalized: str, pool: Sequence[ConfiguredDataElement]) -> Optional[ConfiguredDataElement]:
        candidates = self._mapping_table.get(normalized)
        if not candidates:
            return None
        for candidate in candidates:
            wanted = candidate.casefold()
            for element in pool:
                if element.name.strip().casefold() == wanted:
                    return element
        return None

    def _match_alias(self, normalized: str, pool: Sequence[ConfiguredDataElement]) -> Optional[ConfiguredDataElement]:
        for element in pool:
            for alias in element.aliases:
                if normalize_name(alias) == normalized:
                    return element
        return None

    def _match_fuzzy(self, normalized: str, pool: Sequence[ConfiguredDataElement]) -> Optional[ConfiguredDataElement]:
        label = compact_name(normalized)
        if not label:
            return None
        for element in pool:
            name = compact_name(element.name)
            if not name:
                continue
            if name in label or label in name:
                return element
        return None

    def match_all(
        self,
        backend_fields: Sequence[ExtractedField],
        pattern_fields: Sequence[ExtractedField],
        elements: Sequence[ConfiguredDataElement],
    ) -> List[MatchResult]:
        """
        Two passes: backend fields take the full pool first, then pattern
        fields compete only for the elements left over.
        """
        backend_report = self.match(backend_fields, elements)
        pattern_report = self.match(pattern_fields, backend_report.remaining_elements)
        return combine_reports(backend_report, pattern_report)


def combine_reports(backend_report: MatchReport, pattern_report: MatchReport) -> List[MatchResult]:
    """Backend results without their placeholders, then the pattern pass in full."""
    return [m for m in backend_report.results if not m.missing] + list(pattern_report.results)
