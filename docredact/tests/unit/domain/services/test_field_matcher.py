"""
Unit tests for the FieldMatcher domain service
"""
from collections import Counter

import pytest

from docredact.domain.entities.data_element import ConfiguredDataElement
from docredact.domain.entities.extracted_field import ExtractedField, FieldSource
from docredact.domain.entities.match_result import MatchTier
from docredact.domain.services.field_matcher import FieldMatcher, compact_name, normalize_name
from docredact.tests.conftest import make_field


@pytest.fixture
def matcher():
    return FieldMatcher()


class TestNormalization:

    def test_normalize_name(self):
        assert normalize_name("Date of Birth") == "DATE_OF_BIRTH"
        assert normalize_name("  passport-no. ") == "PASSPORTNO"
        assert normalize_name(None) == ""

    def test_compact_name(self):
        assert compact_name("DATE_OF_BIRTH") == "DATEOFBIRTH"


class TestTiers:

    def test_exact_match(self, matcher, passport_elements):
        element, tier = matcher.find_match("date of birth", passport_elements)
        assert element.id == "el-dob"
        assert tier is MatchTier.EXACT

    def test_mapping_table_match(self, matcher, passport_elements):
        element, tier = matcher.find_match("GIVEN_NAME", passport_elements)
        assert element.id == "el-first"
        assert tier is MatchTier.MAPPING_TABLE

    def test_alias_match(self, matcher, passport_elements):
        element, tier = matcher.find_match("forename", passport_elements)
        assert element.id == "el-first"
        assert tier is MatchTier.ALIAS

    def test_fuzzy_match(self, matcher, passport_elements):
        element, tier = matcher.find_match("Holder Nationality (code)", passport_elements)
        assert element.id == "el-nationality"
        assert tier is MatchTier.FUZZY

    def test_exact_wins_over_later_tiers(self):
        elements = [
            ConfiguredDataElement(id="fuzzy", name="Birth"),
            ConfiguredDataElement(id="exact", name="DOB"),
        ]
        element, tier = FieldMatcher().find_match("DOB", elements)
        assert element.id == "exact"
        assert tier is MatchTier.EXACT

    def test_no_match(self, matcher, passport_elements):
        assert matcher.find_match("Favourite Colour", passport_elements) == (None, MatchTier.NONE)

    def test_empty_label_never_matches(self, matcher, passport_elements):
        assert matcher.find_match("!!!", passport_elements) == (None, MatchTier.NONE)


class TestMatchInvariants:

    def _fields(self):
        return [
            make_field("First Name", "Alice"),
            make_field("GIVEN_NAME", "Alicia"),
            make_field("FAMILY_NAME", "Example"),
            make_field("Favourite Colour", "Blue"),
            make_field("DOB", "01/02/1980"),
        ]

    def test_every_field_appears_exactly_once(self, matcher, passport_elements):
        fields = self._fields()
        report = matcher.match(fields, passport_elements)

        field_ids = [r.field.id for r in report.results if r.field is not None]
        assert field_ids == [f.id for f in fields]

    def test_no_element_matched_twice(self, matcher, passport_elements):
        report = matcher.match(self._fields(), passport_elements)
        counts = Counter(r.element.id for r in report.matched)
        assert all(count == 1 for count in counts.values())
        # "First Name" took el-first, so GIVEN_NAME finds nothing
        assert report.results[1].element is None

    def test_unconsumed_elements_become_missing_once(self, matcher, passport_elements):
        report = matcher.match(self._fields(), passport_elements)

        matched_ids = {r.element.id for r in report.matched}
        missing_ids = [r.element.id for r in report.missing]
        configured_ids = [e.id for e in passport_elements]

        assert sorted(matched_ids | set(missing_ids)) == sorted(configured_ids)
        assert len(missing_ids) == len(set(missing_ids))
        assert not matched_ids & set(missing_ids)
        assert missing_ids == [i for i in configured_ids if i not in matched_ids]
        for placeholder in report.missing:
            assert placeholder.text == ""
            assert placeholder.confidence == 0.0
            assert placeholder.is_configured
            assert placeholder.id == f"missing-{placeholder.element.id}"

    def test_unmatched_fields_are_kept(self, matcher, passport_elements):
        report = matcher.match(self._fields(), passport_elements)
        assert [r.field.label for r in report.unmatched] == ["GIVEN_NAME", "Favourite Colour"]

    def test_deterministic(self, matcher, passport_elements):
        fields = self._fields()
        first = matcher.match(fields, passport_elements)
        second = matcher.match(fields, passport_elements)
        summary = lambda report: [(r.id, r.element.id if r.element else None, r.tier) for r in report.results]
        assert summary(first) == summary(second)

    def test_no_elements_means_everything_unmatched(self, matcher):
        fields = self._fields()
        report = matcher.match(fields, [])
        assert len(report.results) == len(fields)
        assert not report.matched and not report.missing


class TestMatchAll:

    def test_pattern_fields_only_compete_for_leftovers(self, matcher, passport_elements):
        backend = [make_field("Passport Number", "X9999999")]
        patterns = [
            ExtractedField(id="pattern-passport-number-0-0", label="Passport Number", value="P1234567",
                           confidence=0.9, source=FieldSource.PATTERN),
            ExtractedField(id="pattern-date-of-birth-0-0", label="Date of Birth", value="01/02/1980",
                           confidence=0.85, source=FieldSource.PATTERN),
        ]

        results = matcher.match_all(backend, patterns, passport_elements)

        by_id = {r.id: r for r in results}
        assert by_id[backend[0].id].element.id == "el-passport"
        assert by_id["pattern-passport-number-0-0"].element is None
        assert by_id["pattern-date-of-birth-0-0"].element.id == "el-dob"
        missing = [r.element.id for r in results if r.missing]
        assert missing == ["el-first", "el-last", "el-nationality"]
