from docredact.domain.entities.extracted_field import FieldSource
from docredact.infrastructure.vision.vision_response_parser import VisionResponseParser


def test_parses_both_box_shapes():
    payload = {
        "text": "Name: Alice\nDOB: 01/02/1980",
        "fields": [
            {"label": "Name", "value": "Alice", "confidence": 0.93,
             "boundingBox": {"Left": 0.1, "Top": 0.2, "Width": 0.3, "Height": 0.05}},
            {"label": "DOB", "value": "01/02/1980", "confidence": 71,
             "bbox": {"x": 0.4, "y": 0.5, "width": 0.2, "height": 0.04}},
        ],
        "pageCount": 1,
    }

    outcome = VisionResponseParser().parse_page(4, payload, method="vision-ocr")

    name, dob = outcome.fields
    assert (name.id, dob.id) == ("ocr-4-0", "ocr-4-1")
    assert name.bounding_box.left == 0.1
    assert dob.bounding_box.left == 0.4
    assert dob.bounding_box.height == 0.04
    assert name.source is FieldSource.OCR
    assert all(f.page_index == 4 for f in outcome.fields)
    assert outcome.method == "vision-ocr"


def test_confidence_is_quantized():
    payload = {"fields": [
        {"label": "A", "value": "a", "confidence": 0.93},
        {"label": "B", "value": "b", "confidence": "not a number"},
        {"label": "C", "value": "c", "confidence": 71},
    ]}

    outcome = VisionResponseParser().parse_page(0, payload, method="vision-ocr")

    assert [f.confidence for f in outcome.fields] == [1.0, 0.0, 0.8]


def test_text_is_rebuilt_from_fields_when_missing():
    payload = {"fields": [{"name": "Name", "text": "Alice"}, "junk", {"value": "orphan"}]}

    outcome = VisionResponseParser().parse_page(0, payload, method="vision-ocr", id_prefix="x")

    assert [f.label for f in outcome.fields] == ["Name", "Field 3"]
    assert outcome.text == "Name: Alice\nField 3: orphan"
    assert outcome.fields[1].id == "x-0-2"


def test_missing_or_bad_box_gives_no_geometry():
    payload = {"text": "t", "fields": [{"label": "A", "value": "a", "boundingBox": {"x": 0.1}}]}

    outcome = VisionResponseParser().parse_page(0, payload, method="vision-ocr")

    assert outcome.fields[0].bounding_box is None
    assert outcome.page_count == 1
