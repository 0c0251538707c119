"""Classify exhausted extraction chains into a fixed set of reasons."""
from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from docredact.domain.exceptions import (
    ExtractionFailureReason,
    ExtractionServiceError,
    ServiceErrorKind,
    TierNotApplicableError,
)

# Checked in order; the first reason with a matching substring wins.
REASON_SUBSTRINGS: Sequence[Tuple[ExtractionFailureReason, Tuple[str, ...]]] = (
    (ExtractionFailureReason.ENCRYPTED, ("encrypted", "password")),
    (ExtractionFailureReason.CORRUPTED, ("malformed", "invalid", "damaged", "corrupt", "broken")),
    (ExtractionFailureReason.UNSUPPORTED_FORMAT, ("unsupported", "cannot open", "filetype")),
)


def classify_failure(messages: Iterable[str]) -> ExtractionFailureReason:
    """
    Pick a reason from the tier failure texts.

    Examples:
        >>> classify_failure(["direct-parse: document is encrypted"])
        <ExtractionFailureReason.ENCRYPTED: 'encrypted'>
        >>> classify_failure(["vision-ocr: rate limited"])
        <ExtractionFailureReason.UNKNOWN: 'unknown'>
    """
    haystack = "\n".join(str(m) for m in messages).lower()
    for reason, needles in REASON_SUBSTRINGS:
        if any(needle in haystack for needle in needles):
            return reason
    return ExtractionFailureReason.UNKNOWN


def classify_errors(errors: Sequence[Exception]) -> ExtractionFailureReason:
    """
    Classify by message text, falling back to service error kinds.

    Tiers that declined the input type say nothing about the document
    itself and are left out.
    """
    errors = [e for e in errors if not isinstance(e, TierNotApplicableError)]
    reason = classify_failure(str(e) for e in errors)
    if reason is not ExtractionFailureReason.UNKNOWN:
        return reason
    if any(isinstance(e, ExtractionServiceError) and e.kind is ServiceErrorKind.UNSUPPORTED_FORMAT for e in errors):
        return ExtractionFailureReason.UNSUPPORTED_FORMAT
    return ExtractionFailureReason.UNKNOWN
