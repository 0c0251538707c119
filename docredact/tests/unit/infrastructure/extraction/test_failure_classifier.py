from docredact.domain.exceptions import (
    ExtractionFailureReason,
    ExtractionServiceError,
    ExtractionTierError,
    ServiceErrorKind,
    TierNotApplicableError,
)
from docredact.infrastructure.extraction.failure_classifier import classify_errors, classify_failure


def test_first_matching_reason_wins():
    # "encrypted" is checked before "corrupt"
    assert classify_failure(["corrupt xref", "Document is ENCRYPTED"]) is ExtractionFailureReason.ENCRYPTED


def test_password_means_encrypted():
    assert classify_failure(["a password is required"]) is ExtractionFailureReason.ENCRYPTED


def test_empty_messages_are_unknown():
    assert classify_failure([]) is ExtractionFailureReason.UNKNOWN


def test_service_kind_is_used_when_text_is_silent():
    errors = [
        ExtractionTierError("direct-parse", "no embedded text layer"),
        ExtractionServiceError("vision-ocr", ServiceErrorKind.UNSUPPORTED_FORMAT, "bad request"),
    ]
    assert classify_errors(errors) is ExtractionFailureReason.UNSUPPORTED_FORMAT


def test_text_takes_precedence_over_service_kind():
    errors = [
        ExtractionTierError("direct-parse", "damaged stream"),
        ExtractionServiceError("vision-ocr", ServiceErrorKind.UNSUPPORTED_FORMAT, "bad request"),
    ]
    assert classify_errors(errors) is ExtractionFailureReason.CORRUPTED


def test_declined_tiers_are_ignored():
    errors = [
        TierNotApplicableError("direct-parse", "not a pdf: image/jpeg input"),
        ExtractionServiceError("vision-ocr", ServiceErrorKind.RATE_LIMITED, "rate limited"),
    ]
    assert classify_errors(errors) is ExtractionFailureReason.UNKNOWN


def test_only_declined_tiers_is_unknown():
    errors = [TierNotApplicableError("layout-parse", "not a pdf: image/png input")]
    assert classify_errors(errors) is ExtractionFailureReason.UNKNOWN
