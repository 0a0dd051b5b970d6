"""
X12 835 Structural Validator.

Checks that text is well-formed X12 835: delimiters can be detected, the
required segments are present, the interchange header has its fixed
shape and every envelope (ISA/IEA, GS/GE, ST/SE) is balanced.

Problems are accumulated into a ValidationResult rather than raised.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import re
import logging

from src.services.edi.x12_base import (
    X12Segment,
    X12Tokenizer,
    detect_element_separator,
    detect_segment_terminator,
)

logger = logging.getLogger(__name__)


SEGMENT_ID_PATTERN = re.compile(r"^[A-Z0-9]{2,3}$")
REQUIRED_SEGMENTS = ("ISA", "GS", "ST", "BPR", "SE", "GE", "IEA")
MIN_SEGMENT_COUNT = len(REQUIRED_SEGMENTS)

# ISA is fixed width: 16 data elements, ~105 characters without terminator
ISA_ELEMENT_COUNT = 16
ISA_MIN_LENGTH = 100
ISA_MAX_LENGTH = 110

# Fragments longer than this with no element separator are free text
FREE_TEXT_LENGTH = 10
MAX_INVALID_SEGMENTS = 3

ENVELOPE_PAIRS = (("ST", "SE"), ("GS", "GE"), ("ISA", "IEA"))


@dataclass
class ValidationResult:
    """Outcome of validating X12 content."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.is_valid, "errors": list(self.errors)}


class X12835Validator:
    """
    Validator for X12 835 text.

    Usage:
        validator = X12835Validator()
        result = validator.validate(edi_content)
        if not result.is_valid:
            print(result.errors)
    """

    def validate(self, content: Optional[str]) -> ValidationResult:
        """
        Validate X12 835 content.

        Empty content, content without an ISA header, undetectable
        delimiters and too few segments stop validation early. All other
        checks run and accumulate their errors.
        """
        if not content or not content.strip():
            return self._result(["EDI content is empty"])

        if "ISA" not in content:
            return self._result(["Content does not appear to be EDI format - missing ISA segment"])

        errors: List[str] = []

        element_sep = detect_element_separator(content)
        segment_term = detect_segment_terminator(content)
        if element_sep is None:
            errors.append("Could not detect element delimiter (* or | expected)")
        if segment_term is None:
            errors.append("Could not detect segment terminator (~ expected)")
        if errors:
            return self._result(errors)

        tokenizer = X12Tokenizer(element_separator=element_sep, segment_terminator=segment_term)
        segments = tokenizer.tokenize(content)

        if len(segments) < MIN_SEGMENT_COUNT:
            return self._result(
                [f"EDI must have at least {MIN_SEGMENT_COUNT} segments, found only {len(segments)}"]
            )

        errors.extend(self._check_segment_ids(segments))
        errors.extend(self._check_required_segments(segments))
        errors.extend(self._check_isa(segments))
        errors.extend(self._check_order(segments))
        errors.extend(self._check_terminator_count(content, segments))
        errors.extend(self._check_segment_content(segments))
        errors.extend(self._check_envelopes(segments))
        errors.extend(self._check_transaction_type(segments))

        if errors:
            logger.debug(f"835 validation found {len(errors)} errors")
        return self._result(errors)

    def _result(self, errors: List[str]) -> ValidationResult:
        return ValidationResult(is_valid=not errors, errors=errors)

    def _check_segment_ids(self, segments: List[X12Segment]) -> List[str]:
        return [
            f'Invalid segment identifier: "{seg.segment_id}" - '
            "must be 2-3 uppercase alphanumeric characters"
            for seg in segments
            if not SEGMENT_ID_PATTERN.match(seg.segment_id)
        ]

    def _check_required_segments(self, segments: List[X12Segment]) -> List[str]:
        found = {seg.segment_id for seg in segments}
        return [
            f"Missing required segment: {required}"
            for required in REQUIRED_SEGMENTS
            if required not in found
        ]

    def _check_isa(self, segments: List[X12Segment]) -> List[str]:
        """Check the fixed-width shape of the first ISA header."""
        isa = next((seg for seg in segments if seg.segment_id == "ISA"), None)
        if isa is None:
            return []

        errors = []
        if len(isa.elements) < ISA_ELEMENT_COUNT:
            errors.append(
                f"ISA segment must have {ISA_ELEMENT_COUNT} data elements, "
                f"found only {len(isa.elements)}"
            )
        if not ISA_MIN_LENGTH <= len(isa.raw) <= ISA_MAX_LENGTH:
            errors.append(
                f"ISA segment has unusual length: {len(isa.raw)} characters (expected ~105)"
            )
        return errors

    def _check_order(self, segments: List[X12Segment]) -> List[str]:
        errors = []
        first_id = segments[0].segment_id
        if first_id != "ISA":
            errors.append(f'First segment must be ISA, found: "{first_id}"')
        last_id = segments[-1].segment_id
        if last_id != "IEA":
            errors.append(f'Last segment must be IEA, found: "{last_id}"')
        return errors

    def _check_terminator_count(self, content: str, segments: List[X12Segment]) -> List[str]:
        # A trailing terminator after the last segment is optional
        terminator_count = content.count("~")
        if terminator_count not in (len(segments), len(segments) + 1):
            return [
                f"Inconsistent segment terminators. Found {terminator_count} "
                f"terminators for {len(segments)} segments"
            ]
        return []

    def _check_segment_content(self, segments: List[X12Segment]) -> List[str]:
        """Flag segments without data elements and fragments of free text."""
        errors = []
        invalid_count = 0

        for index, seg in enumerate(segments, start=1):
            if seg.elements:
                continue

            invalid_count += 1
            errors.append(f'Segment {index} ("{seg.segment_id}") has no data elements')
            if len(seg.raw) > FREE_TEXT_LENGTH:
                errors.append(
                    f'Invalid content at position {index}: "{seg.raw[:30]}..." '
                    "does not appear to be a valid EDI segment"
                )

        if invalid_count > MAX_INVALID_SEGMENTS:
            errors.append(
                f"Too many invalid segments ({invalid_count}) - content may not be valid EDI"
            )
        return errors

    def _check_envelopes(self, segments: List[X12Segment]) -> List[str]:
        errors = []
        for header, trailer in ENVELOPE_PAIRS:
            header_count = sum(1 for seg in segments if seg.segment_id == header)
            trailer_count = sum(1 for seg in segments if seg.segment_id == trailer)
            if header_count != trailer_count:
                errors.append(
                    f"Mismatched {header} ({header_count}) and {trailer} ({trailer_count}) segments"
                )
        return errors

    def _check_transaction_type(self, segments: List[X12Segment]) -> List[str]:
        st = next((seg for seg in segments if seg.segment_id == "ST"), None)
        if st is None:
            return []
        transaction_type = st.get_element(0)
        if transaction_type != "835":
            return [f"Expected transaction type 835, found {transaction_type}"]
        return []


def validate(content: Optional[str]) -> ValidationResult:
    """Validate X12 835 text."""
    return X12835Validator().validate(content)
