"""
X12 EDI Base Tokenizer and Models.

Provides core X12 835 building blocks shared by the generator, validator
and summarizer:
- Segment model with positional and schema-named element access
- Delimiter and terminator detection
- Tokenizer for segment/element splitting
- Date, amount and control number formatting utilities
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union
from enum import Enum
from datetime import datetime, date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
import random
import re
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================


class TransactionType(str, Enum):
    """X12 transaction set types."""

    REMIT_835 = "835"  # Remittance Advice


# Human-readable segment names for segment listings.
SEGMENT_DESCRIPTIONS: Dict[str, str] = {
    "ISA": "Interchange Control Header",
    "GS": "Functional Group Header",
    "ST": "Transaction Set Header",
    "BPR": "Financial Information",
    "TRN": "Trace Number",
    "REF": "Reference Identification",
    "DTM": "Date/Time Reference",
    "N1": "Name",
    "N2": "Additional Name Information",
    "N3": "Address Information",
    "N4": "Geographic Location",
    "PER": "Administrative Communications Contact",
    "CLP": "Claim Payment Information",
    "NM1": "Individual or Organizational Name",
    "MIA": "Inpatient Adjudication Information",
    "MOA": "Outpatient Adjudication Information",
    "AMT": "Monetary Amount Information",
    "QTY": "Quantity Information",
    "SVC": "Service Payment Information",
    "CAS": "Claim Adjustment",
    "PLB": "Provider Level Adjustment",
    "SE": "Transaction Set Trailer",
    "GE": "Functional Group Trailer",
    "IEA": "Interchange Control Trailer",
    "CLM": "Claim Information",
    "HI": "Health Care Information Codes",
    "LX": "Service Line Number",
    "SV1": "Professional Service",
    "SV2": "Institutional Service",
    "PWK": "Paperwork",
    "CR1": "Ambulance Transport Information",
    "CR2": "Spinal Manipulation Service Information",
    "CRC": "Conditions Indicator",
    "DTP": "Date or Time or Period",
}

UNKNOWN_SEGMENT_DESCRIPTION = "Unknown Segment"


# Element names per segment kind, in element order (index 0 = XX01).
SEGMENT_SCHEMAS: Dict[str, Tuple[str, ...]] = {
    "ISA": (
        "authorization_qualifier",
        "authorization_information",
        "security_qualifier",
        "security_information",
        "sender_qualifier",
        "sender_id",
        "receiver_qualifier",
        "receiver_id",
        "date",
        "time",
        "repetition_separator",
        "version",
        "control_number",
        "acknowledgment_requested",
        "usage_indicator",
        "component_separator",
    ),
    "GS": (
        "functional_id",
        "sender_code",
        "receiver_code",
        "date",
        "time",
        "control_number",
        "responsible_agency",
        "version",
    ),
    "ST": ("transaction_set_id", "control_number", "implementation_reference"),
    "BPR": (
        "transaction_handling",
        "payment_amount",
        "credit_debit_flag",
        "payment_method",
        "payment_format",
        "payer_dfi_qualifier",
        "payer_dfi_id",
        "payer_account_qualifier",
        "payer_account_number",
        "originating_company_id",
        "originating_company_supplemental",
        "payee_dfi_qualifier",
        "payee_dfi_id",
        "payee_account_qualifier",
        "payee_account_number",
        "payment_date",
    ),
    "TRN": ("trace_type", "check_number", "originating_company_id"),
    "REF": ("qualifier", "value"),
    "DTM": ("qualifier", "date"),
    "N1": ("entity_code", "name", "id_qualifier", "id_code"),
    "N3": ("address_line1", "address_line2"),
    "N4": ("city", "state", "zip_code"),
    "NM1": (
        "entity_code",
        "entity_type",
        "last_name",
        "first_name",
        "middle_name",
        "prefix",
        "suffix",
        "id_qualifier",
        "id_code",
    ),
    "LX": ("line_number",),
    "CLP": (
        "claim_number",
        "claim_status",
        "charge_amount",
        "payment_amount",
        "patient_responsibility",
        "filing_indicator",
        "payer_claim_control_number",
        "facility_code",
        "frequency_code",
    ),
    "SVC": (
        "procedure",
        "charge_amount",
        "paid_amount",
        "revenue_code",
        "units",
    ),
    "CAS": ("group_code", "reason_code", "amount", "quantity"),
    "PLB": (
        "provider_id",
        "fiscal_period_date",
        "adjustment_identifier",
        "adjustment_amount",
    ),
    "SE": ("segment_count", "control_number"),
    "GE": ("transaction_count", "control_number"),
    "IEA": ("group_count", "control_number"),
}


# =============================================================================
# Exceptions
# =============================================================================


class X12ParseError(Exception):
    """Error during X12 parsing, with the offending segment when known."""

    def __init__(
        self,
        message: str,
        segment_id: Optional[str] = None,
        segment_position: Optional[int] = None,
        element_position: Optional[int] = None,
        raw_segment: Optional[str] = None,
    ):
        self.message = message
        self.segment_id = segment_id
        self.segment_position = segment_position
        self.element_position = element_position
        self.raw_segment = raw_segment
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.segment_id:
            parts.append(f"Segment: {self.segment_id}")
        if self.segment_position is not None:
            parts.append(f"Position: {self.segment_position}")
        if self.element_position is not None:
            parts.append(f"Element: {self.element_position}")
        return " | ".join(parts)


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class X12Segment:
    """
    Represents a single X12 segment.

    Example: CLP*CLAIM001*1*500.00*400.00*100.00*MB~
    - segment_id: CLP
    - elements: ['CLAIM001', '1', '500.00', '400.00', '100.00', 'MB']
    """

    segment_id: str
    elements: List[str] = field(default_factory=list)
    position: int = 0
    raw: str = ""

    def get_element(self, index: int, default: Optional[str] = "") -> Optional[str]:
        """Get element at index (0-based after segment ID)."""
        if 0 <= index < len(self.elements):
            return self.elements[index]
        return default

    def get_field(self, name: str, default: Optional[str] = "") -> Optional[str]:
        """
        Get element by its schema name.

        Elements past the end of the segment return default.

        Raises:
            KeyError: If the segment kind has no schema or no such element
        """
        schema = SEGMENT_SCHEMAS.get(self.segment_id)
        if schema is None:
            raise KeyError(f"No element schema for segment {self.segment_id}")
        try:
            index = schema.index(name)
        except ValueError:
            raise KeyError(f"Segment {self.segment_id} has no element named '{name}'") from None
        return self.get_element(index, default)

    @property
    def description(self) -> str:
        return SEGMENT_DESCRIPTIONS.get(self.segment_id, UNKNOWN_SEGMENT_DESCRIPTION)

    def render(self, element_separator: str = "*", segment_terminator: str = "~") -> str:
        """Render the segment as wire text including its terminator."""
        return element_separator.join([self.segment_id, *self.elements]) + segment_terminator

    def __str__(self) -> str:
        return "*".join([self.segment_id, *self.elements])


@dataclass(frozen=True)
class Delimiters:
    """Element separator and segment terminator pair used for encoding."""

    element: str = "*"
    terminator: str = "~"

    @classmethod
    def from_pair(cls, pair: Optional[str]) -> "Delimiters":
        """
        Build delimiters from a two-character string such as "*~".

        Each character falls back to its default independently.
        """
        pair = pair or ""
        element = pair[0] if len(pair) > 0 else cls.element
        terminator = pair[1] if len(pair) > 1 else cls.terminator
        return cls(element=element, terminator=terminator)


# =============================================================================
# Delimiter Detection
# =============================================================================


ISA_TERMINATOR_OFFSET = 105


def detect_element_separator(content: str) -> Optional[str]:
    """Detect element separator: '*' preferred, then '|'."""
    if "*" in content:
        return "*"
    if "|" in content:
        return "|"
    return None


def detect_segment_terminator(content: str, infer_from_isa: bool = False) -> Optional[str]:
    """
    Detect segment terminator.

    '~' wins whenever present. Without it, strict detection gives None;
    inferring detection reads the fixed-offset terminator of the ISA
    header and falls back to '~'.
    """
    if "~" in content:
        return "~"
    if not infer_from_isa:
        return None

    isa_start = content.find("ISA")
    if isa_start >= 0 and len(content) > isa_start + ISA_TERMINATOR_OFFSET:
        return content[isa_start + ISA_TERMINATOR_OFFSET]
    return "~"


# =============================================================================
# Tokenizer
# =============================================================================


class X12Tokenizer:
    """
    X12 EDI tokenizer.

    Splits raw X12 content into segments and elements. Delimiters are
    auto-detected from the content unless given explicitly. Tokenizing
    any string never raises: malformed input just produces malformed
    segments for the validator to report.
    """

    DEFAULT_ELEMENT_SEPARATOR = "*"
    DEFAULT_SEGMENT_TERMINATOR = "~"
    DEFAULT_COMPONENT_SEPARATOR = ":"

    def __init__(
        self,
        content: Optional[str] = None,
        element_separator: Optional[str] = None,
        segment_terminator: Optional[str] = None,
        component_separator: Optional[str] = None,
    ):
        self._content = content
        self.element_separator = element_separator or self.DEFAULT_ELEMENT_SEPARATOR
        self.segment_terminator = segment_terminator or self.DEFAULT_SEGMENT_TERMINATOR
        self.component_separator = component_separator or self.DEFAULT_COMPONENT_SEPARATOR
        self._explicit = element_separator is not None or segment_terminator is not None

        if content and not self._explicit:
            self.element_separator, self.segment_terminator = self.detect_delimiters(content)

    def detect_delimiters(self, content: str) -> Tuple[str, str]:
        """
        Detect element separator and segment terminator.

        Returns defaults for anything that cannot be detected.
        """
        element_sep = detect_element_separator(content) or self.DEFAULT_ELEMENT_SEPARATOR
        segment_term = detect_segment_terminator(content, infer_from_isa=True)
        return element_sep, segment_term

    def tokenize(self, content: Optional[str] = None, auto_detect: bool = True) -> List[X12Segment]:
        """
        Tokenize X12 content into segments.

        Args:
            content: Raw X12 EDI content (uses constructor content if not provided)
            auto_detect: Detect delimiters from the content

        Returns:
            List of X12Segment objects
        """
        if content is None:
            content = self._content
        if content is None:
            raise X12ParseError("No content provided to tokenize")

        if auto_detect and not self._explicit:
            self.element_separator, self.segment_terminator = self.detect_delimiters(content)

        segments = []
        for raw in content.split(self.segment_terminator):
            raw = raw.strip()
            if not raw:
                continue

            # Line breaks between segments are cosmetic
            raw = raw.replace("\n", "").replace("\r", "")

            elements = raw.split(self.element_separator)
            segments.append(
                X12Segment(
                    segment_id=elements[0].strip(),
                    elements=elements[1:],
                    position=len(segments),
                    raw=raw,
                )
            )

        logger.debug(f"Tokenized {len(segments)} segments")
        return segments


def tokenize(content: str) -> List[X12Segment]:
    """Tokenize raw X12 text with auto-detected delimiters."""
    return X12Tokenizer().tokenize(content)


# =============================================================================
# Utility Functions
# =============================================================================

# Leading decimal number, optionally signed and with an exponent
AMOUNT_PREFIX_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# Largest decimal exponent representable as a double
MAX_AMOUNT_EXPONENT = 308

# Digits needed to carry any accepted amount to the cent
AMOUNT_PRECISION = MAX_AMOUNT_EXPONENT + 3


DateInput = Union[date, datetime, str, None]
Clock = Callable[[], datetime]


def parse_x12_date(date_str: str) -> Optional[date]:
    """
    Parse X12 date format (CCYYMMDD or YYMMDD).

    Returns:
        Python date object or None
    """
    if not date_str:
        return None

    try:
        if len(date_str) == 8:
            return datetime.strptime(date_str, "%Y%m%d").date()
        elif len(date_str) == 6:
            # Assume 20xx for 2-digit year
            year = int(date_str[:2])
            if year < 50:
                year += 2000
            else:
                year += 1900
            return date(year, int(date_str[2:4]), int(date_str[4:6]))
    except ValueError:
        pass

    return None


def coerce_date(value: DateInput) -> Optional[date]:
    """
    Coerce form input into a date.

    Accepts date/datetime objects and YYYY-MM-DD, CCYYMMDD or MM/DD/YYYY
    strings. Anything else yields None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    for fmt in ("%Y-%m-%d", "%m/%d/%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    if len(text) == 8 and text.isdigit():
        return parse_x12_date(text)
    return None


def format_x12_date(d: date) -> str:
    """Format date as X12 CCYYMMDD."""
    return d.strftime("%Y%m%d")


def format_isa_date(d: date) -> str:
    """Format date as ISA YYMMDD."""
    return d.strftime("%y%m%d")


def format_x12_time(t: datetime) -> str:
    """Format time as X12 HHMM."""
    return t.strftime("%H%M")


def format_display_date(date_str: str) -> str:
    """Reformat CCYYMMDD as MM/DD/YYYY; other input is returned unchanged."""
    if not date_str or len(date_str) != 8:
        return date_str
    return f"{date_str[4:6]}/{date_str[6:8]}/{date_str[0:4]}"


def parse_x12_amount(amount: Union[str, int, float, Decimal, None]) -> Decimal:
    """
    Parse a monetary amount.

    Text is read up to its longest leading number, so "12abc" is 12.
    Blank, non-numeric or non-finite input is zero, as are magnitudes
    beyond the range of a double.
    """
    if amount is None or amount == "":
        return Decimal("0")
    if isinstance(amount, Decimal):
        value = amount
    else:
        match = AMOUNT_PREFIX_PATTERN.match(str(amount).strip())
        if match is None:
            return Decimal("0")
        try:
            value = Decimal(match.group(0))
        except InvalidOperation:
            # Exponent outside what Decimal can hold
            return Decimal("0")
    if not value.is_finite() or value.adjusted() > MAX_AMOUNT_EXPONENT:
        return Decimal("0")
    return value


def format_x12_amount(amount: Union[str, int, float, Decimal, None]) -> str:
    """Format amount for X12 (2 decimal places)."""
    value = parse_x12_amount(amount)
    with localcontext() as ctx:
        ctx.prec = AMOUNT_PRECISION
        value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if value.is_zero():
        return "0.00"
    return str(value)


def generate_control_number(length: int, rng: Optional[random.Random] = None) -> str:
    """Generate a zero-padded random decimal control number."""
    source = rng or random
    return str(source.randrange(10 ** length)).zfill(length)
