"""
Unit tests for ExtractedField and related entities
"""
import pytest

from docredact.domain.entities.data_element import ConfiguredDataElement, DataElementAction
from docredact.domain.entities.extracted_field import ExtractedField, FieldSource
from docredact.domain.entities.redaction import ManualRegion, RedactionSelection
from docredact.domain.value_objects.bounding_box import BoundingBox


class TestExtractedField:

    def test_raw_box_is_normalized_on_construction(self):
        field = ExtractedField(label="Name", value="Alice", bounding_box={"x": 0.1, "y": 0.2, "width": 0.3, "height": 0.1})
        assert field.bounding_box == BoundingBox(0.1, 0.2, 0.3, 0.1)

    def test_from_dict_accepts_aliases(self):
        field = ExtractedField.from_dict({
            "name": "Surname",
            "text": " Doe ",
            "confidence": 87,
            "pageIndex": 2,
            "bbox": {"Left": 0.5, "Top": 0.5, "Width": 0.1, "Height": 0.1},
        })
        assert field.label == "Surname"
        assert field.value == "Doe"
        assert field.confidence == pytest.approx(0.87)
        assert field.page_index == 2
        assert field.has_real_geometry()

    def test_pattern_fields_have_no_real_geometry(self):
        field = ExtractedField(
            label="Email", value="a@b.co", bounding_box=BoundingBox(0.7, 0.1, 0.25, 0.04), source=FieldSource.PATTERN,
        )
        assert not field.has_real_geometry()

    def test_missing_or_empty_box_has_no_geometry(self):
        assert not ExtractedField(label="A").has_real_geometry()
        assert not ExtractedField(label="A", bounding_box=BoundingBox(0.1, 0.1, 0.0, 0.2)).has_real_geometry()

    def test_relabel_keeps_first_original(self):
        field = ExtractedField(label="GIVEN_NAME", value="Alice")
        field.relabel("First Name")
        field.relabel("Forename")
        assert field.label == "Forename"
        assert field.original_label == "GIVEN_NAME"

    def test_relabel_rejects_empty(self):
        with pytest.raises(ValueError):
            ExtractedField(label="A").relabel("   ")

    def test_equality_by_id(self):
        assert ExtractedField(id="x", label="A") == ExtractedField(id="x", label="B")
        assert len({ExtractedField(id="x"), ExtractedField(id="x")}) == 1


class TestConfiguredDataElement:

    def test_action_parsing(self):
        element = ConfiguredDataElement.from_dict({"id": "e1", "name": "DOB", "action": "extract_and_redact"})
        assert element.action is DataElementAction.EXTRACT_AND_REDACT
        assert element.redacts

    def test_requires_id_and_name(self):
        with pytest.raises(ValueError):
            ConfiguredDataElement(id="", name="Name")
        with pytest.raises(ValueError):
            ConfiguredDataElement(id="e1", name=" ")


class TestRedactionSelection:

    def test_duplicate_ids_are_dropped_in_order(self):
        selection = RedactionSelection(field_ids=("b", "a", "b"))
        assert selection.field_ids == ("b", "a")

    def test_manual_region_requires_a_box(self):
        with pytest.raises(ValueError):
            ManualRegion(id="r1", label="sig", bounding_box={"nope": 1})

    def test_manual_region_from_dict(self):
        region = ManualRegion.from_dict({"id": "r1", "label": "sig", "boundingBox": {"x": 0, "y": 0, "width": 1, "height": 1}})
        assert region.bounding_box == BoundingBox(0, 0, 1, 1)
        assert region.page_index == 0
