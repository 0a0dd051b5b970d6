"""
X12 835 Remittance Summarizer.

Rebuilds the claim/service/adjustment hierarchy of an 835 from its flat
segment stream and exposes it as a RemittanceSummary. The scan is a
single pass driven by an explicit state machine:

    NO_CLAIM --CLP--> IN_CLAIM --SVC--> IN_CLAIM_WITH_SERVICE
                ^________CLP_______________|

CAS segments attach to the open service line, else to the open claim,
and are dropped outside any claim.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
import logging

from src.services.edi.x12_base import X12Segment, format_display_date, tokenize
from src.services.edi.x12_835_validator import validate

logger = logging.getLogger(__name__)


# Claim status code (CLP02) descriptions
CLAIM_STATUS_DESCRIPTIONS: Dict[str, str] = {
    "1": "Processed as Primary",
    "2": "Processed as Secondary",
    "3": "Processed as Tertiary",
    "4": "Denied",
    "19": "Processed as Primary, Forwarded to Additional Payer(s)",
    "20": "Processed as Secondary, Forwarded to Additional Payer(s)",
    "21": "Processed as Tertiary, Forwarded to Additional Payer(s)",
    "22": "Reversal of Previous Payment",
    "23": "Not Our Claim, Forwarded to Additional Payer(s)",
}


def describe_claim_status(code: Optional[str]) -> Optional[str]:
    """Describe a claim status code; unknown codes are returned verbatim."""
    if code is None:
        return None
    return CLAIM_STATUS_DESCRIPTIONS.get(code, code)


# One-claim sample remittance used for demos
SAMPLE_835 = (
    "ISA*00*          *00*          *ZZ*SUBMITTERID    *ZZ*RECEIVERID     "
    "*241108*1430*U*00401*000000001*0*P*:~\n"
    "GS*HP*PAYERID*RECEIVERID*20241108*1430*1*X*005010X221A1~\n"
    "ST*835*0001*005010X221A1~\n"
    "BPR*I*1500.00*C*ACH*CCP*01*000000000*DA*0000000000*PAYERID**01*000000000*DA*0000000000*20241108~\n"
    "TRN*1*123456789012*1234567890~\n"
    "N1*PR*PAYER NAME*XX*PAYERID~\n"
    "N3*123 MAIN ST~\n"
    "N4*ANYTOWN*ST*12345~\n"
    "N1*PE*PROVIDER NAME*XX*1234567890~\n"
    "N3*123 MAIN ST~\n"
    "N4*ANYTOWN*ST*12345~\n"
    "CLP*CLM1731067437976*1*1500.00*1500.00*0.00*MB*1234567890*11*1~\n"
    "NM1*QC*1***~\n"
    "NM1*IL*1***~\n"
    "NM1*74*2***~\n"
    "NM1*82*2***~\n"
    "SVC*HC:99213*1500.00*1500.00**1~\n"
    "PLB*1234567890*20241108~\n"
    "SE*17*0001~\n"
    "GE*1*1~\n"
    "IEA*1*000000001~"
)


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class ClaimAdjustment:
    """CAS adjustment on a claim or service line."""

    group_code: Optional[str] = None
    reason_code: Optional[str] = None
    amount: Optional[str] = None
    quantity: Optional[str] = None


@dataclass
class ServiceSummary:
    """Service line (SVC) with its adjustments."""

    procedure_code: Optional[str] = None
    charged_amount: Optional[str] = None
    paid_amount: Optional[str] = None
    adjustments: List[ClaimAdjustment] = field(default_factory=list)


@dataclass
class ClaimSummary:
    """Claim (CLP) with its service lines, adjustments and remarks."""

    claim_number: Optional[str] = None
    icn: Optional[str] = None
    claim_status: Optional[str] = None
    charged_amount: Optional[str] = None
    paid_amount: Optional[str] = None
    patient_responsibility: Optional[str] = None
    service_date: Optional[str] = None
    services: List[ServiceSummary] = field(default_factory=list)
    adjustments: List[ClaimAdjustment] = field(default_factory=list)
    remark_codes: List[str] = field(default_factory=list)


@dataclass
class ProviderAdjustment:
    """Provider level adjustment (PLB)."""

    identifier: Optional[str] = None
    date: Optional[str] = None
    reason_code: Optional[str] = None
    amount: Optional[str] = None


@dataclass
class RemittanceSummary:
    """Human-oriented summary of an 835 remittance."""

    check_number: Optional[str] = None
    check_amount: Optional[str] = None
    check_date: Optional[str] = None
    payer_name: Optional[str] = None
    provider_name: Optional[str] = None
    claims: List[ClaimSummary] = field(default_factory=list)
    provider_adjustments: List[ProviderAdjustment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# Summarizer
# =============================================================================


class ScanState(str, Enum):
    """Position of the summarizer within the claim hierarchy."""

    NO_CLAIM = "no_claim"
    IN_CLAIM = "in_claim"
    IN_CLAIM_WITH_SERVICE = "in_claim_with_service"


class X12835Summarizer:
    """
    Summarizer for tokenized X12 835 segments.

    Usage:
        summarizer = X12835Summarizer()
        summary = summarizer.summarize(tokenize(edi_content))
        for claim in summary.claims:
            print(claim.claim_number, claim.paid_amount)
    """

    def __init__(self):
        self._reset()

    def _reset(self) -> None:
        self.state = ScanState.NO_CLAIM
        self.summary = RemittanceSummary()
        self.current_claim: Optional[ClaimSummary] = None
        self.current_service: Optional[ServiceSummary] = None

    def summarize(self, segments: List[X12Segment]) -> RemittanceSummary:
        """
        Summarize a segment stream.

        Never fails: unknown segments are ignored and missing elements
        are left as None.
        """
        self._reset()

        for seg in segments:
            seg_id = seg.segment_id

            if seg_id == "BPR":
                self._parse_bpr(seg)

            elif seg_id == "N1":
                self._parse_n1(seg)

            elif seg_id == "CLP":
                self._parse_clp(seg)

            elif seg_id == "DTM":
                self._parse_dtm(seg)

            elif seg_id == "SVC":
                self._parse_svc(seg)

            elif seg_id == "CAS":
                self._parse_cas(seg)

            elif seg_id == "REF":
                self._parse_ref(seg)

            elif seg_id == "PLB":
                self._parse_plb(seg)

        self._close_claim()

        summary = self.summary
        logger.debug(
            f"Summarized {len(segments)} segments into {len(summary.claims)} claims"
        )
        return summary

    # -------------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------------

    def _open_claim(self, claim: ClaimSummary) -> None:
        self._close_claim()
        self.current_claim = claim
        self.state = ScanState.IN_CLAIM

    def _open_service(self, service: ServiceSummary) -> None:
        self.current_claim.services.append(service)
        self.current_service = service
        self.state = ScanState.IN_CLAIM_WITH_SERVICE

    def _close_claim(self) -> None:
        if self.current_claim is not None:
            self.summary.claims.append(self.current_claim)
        self.current_claim = None
        self.current_service = None
        self.state = ScanState.NO_CLAIM

    # -------------------------------------------------------------------------
    # Segment handlers
    # -------------------------------------------------------------------------

    def _parse_bpr(self, seg: X12Segment) -> None:
        """Parse BPR - check amount, date and number."""
        self.summary.check_amount = seg.get_field("payment_amount", None)  # BPR02
        self.summary.check_date = seg.get_field("payment_date", None)  # BPR16
        self.summary.check_number = (
            seg.get_field("payer_dfi_id", None) or seg.get_field("payment_method", None)
        )

    def _parse_n1(self, seg: X12Segment) -> None:
        entity_code = seg.get_field("entity_code", None)
        if entity_code == "PR":
            self.summary.payer_name = seg.get_field("name", None)
        elif entity_code == "PE":
            self.summary.provider_name = seg.get_field("name", None)

    def _parse_clp(self, seg: X12Segment) -> None:
        """Parse CLP - starts a new claim."""
        self._open_claim(ClaimSummary(
            claim_number=seg.get_field("claim_number", None),
            claim_status=describe_claim_status(seg.get_field("claim_status", None)),
            charged_amount=seg.get_field("charge_amount", None),
            paid_amount=seg.get_field("payment_amount", None),
            patient_responsibility=seg.get_field("patient_responsibility", None),
            icn=seg.get_field("payer_claim_control_number", None),  # CLP07
        ))

    def _parse_dtm(self, seg: X12Segment) -> None:
        # Only the claim statement date (232) is summarized
        if self.state != ScanState.NO_CLAIM and seg.get_field("qualifier", None) == "232":
            self.current_claim.service_date = format_display_date(seg.get_field("date", None))

    def _parse_svc(self, seg: X12Segment) -> None:
        """Parse SVC - starts a service line on the open claim."""
        if self.state == ScanState.NO_CLAIM:
            return

        procedure = seg.get_field("procedure", None)
        if procedure and ":" in procedure:
            procedure = procedure.split(":")[1]

        self._open_service(ServiceSummary(
            procedure_code=procedure,
            charged_amount=seg.get_field("charge_amount", None),
            paid_amount=seg.get_field("paid_amount", None),
        ))

    def _parse_cas(self, seg: X12Segment) -> None:
        adjustment = ClaimAdjustment(
            group_code=seg.get_field("group_code", None),
            reason_code=seg.get_field("reason_code", None),
            amount=seg.get_field("amount", None),
            quantity=seg.get_field("quantity", None),
        )
        if self.state == ScanState.IN_CLAIM_WITH_SERVICE:
            self.current_service.adjustments.append(adjustment)
        elif self.state == ScanState.IN_CLAIM:
            self.current_claim.adjustments.append(adjustment)

    def _parse_ref(self, seg: X12Segment) -> None:
        if self.state != ScanState.NO_CLAIM and seg.get_field("qualifier", None) == "CAS":
            self.current_claim.remark_codes.append(seg.get_field("value", None))

    def _parse_plb(self, seg: X12Segment) -> None:
        """Parse PLB - only the first adjustment pair is summarized."""
        self.summary.provider_adjustments.append(ProviderAdjustment(
            identifier=seg.get_field("provider_id", None),
            date=format_display_date(seg.get_field("fiscal_period_date", None)),
            reason_code=seg.get_field("adjustment_identifier", None),
            amount=seg.get_field("adjustment_amount", None),
        ))


def summarize(segments: List[X12Segment]) -> RemittanceSummary:
    """Summarize tokenized 835 segments."""
    return X12835Summarizer().summarize(segments)


# =============================================================================
# Decode
# =============================================================================


@dataclass
class DecodeResult:
    """Validated segments and summary of decoded 835 text."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    segments: List[X12Segment] = field(default_factory=list)
    summary: Optional[RemittanceSummary] = None


def decode(content: str) -> DecodeResult:
    """
    Decode X12 835 text.

    The text is validated first; invalid text yields its errors with no
    segments and no summary.
    """
    validation = validate(content)
    if not validation.is_valid:
        return DecodeResult(is_valid=False, errors=list(validation.errors))

    segments = tokenize(content)
    return DecodeResult(is_valid=True, segments=segments, summary=summarize(segments))
