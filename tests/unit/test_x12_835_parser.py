"""
Unit Tests for X12 835 Summarization and Decoding.

Tests:
- Claim/service/adjustment hierarchy reconstruction
- Scan state transitions
- Decode (validate, tokenize, summarize)
"""

import pytest

from src.services.edi.x12_base import X12Segment, tokenize
from src.services.edi.x12_835_generator import encode
from src.services.edi.x12_835_parser import (
    CLAIM_STATUS_DESCRIPTIONS,
    SAMPLE_835,
    ScanState,
    X12835Summarizer,
    decode,
    describe_claim_status,
    summarize,
)
from src.services.edi.x12_835_validator import validate


CLAIM_WITH_SERVICE_ADJUSTMENT = "\n".join([
    "ST*835*0001*005010X221A1~",
    "BPR*I*350.00*C*ACH*CCP*01*000000000*DA*0000000000*PAYERID**01*111111111*DA*0000000000*20241109~",
    "N1*PR*ACME HEALTH PLAN*XX*ACME01~",
    "N1*PE*GOOD CLINIC*XX*1234567893~",
    "CLP*PCN1001*1*400.00*350.00*50.00*MB*9876543210*11*1~",
    "SVC*HC:99213*400.00*350.00**1~",
    "CAS*CO*45*50.00~",
    "SE*8*0001~",
])


def _seg(text):
    return tokenize(text + "~")[0]


# =============================================================================
# Summarizer Tests
# =============================================================================


@pytest.mark.unit
class TestX12835Summarizer:
    """Test remittance summarization."""

    def test_single_claim_service_adjustment(self):
        summary = summarize(tokenize(CLAIM_WITH_SERVICE_ADJUSTMENT))

        assert len(summary.claims) == 1
        claim = summary.claims[0]
        assert len(claim.services) == 1
        assert claim.adjustments == []

        service = claim.services[0]
        assert service.procedure_code == "99213"
        assert service.charged_amount == "400.00"
        assert service.paid_amount == "350.00"
        assert len(service.adjustments) == 1

        adjustment = service.adjustments[0]
        assert (adjustment.group_code, adjustment.reason_code, adjustment.amount) == ("CO", "45", "50.00")
        assert adjustment.quantity is None

    def test_check_fields(self):
        summary = summarize(tokenize(CLAIM_WITH_SERVICE_ADJUSTMENT))

        assert summary.check_amount == "350.00"
        assert summary.check_date == "20241109"
        assert summary.check_number == "000000000"
        assert summary.payer_name == "ACME HEALTH PLAN"
        assert summary.provider_name == "GOOD CLINIC"

    def test_check_number_falls_back_to_payment_method(self):
        summary = summarize([_seg("BPR*I*10.00*C*ACH*CCP*01**DA")])
        assert summary.check_number == "ACH"

    def test_claim_fields(self):
        claim = summarize(tokenize(CLAIM_WITH_SERVICE_ADJUSTMENT)).claims[0]

        assert claim.claim_number == "PCN1001"
        assert claim.claim_status == "Processed as Primary"
        assert claim.charged_amount == "400.00"
        assert claim.paid_amount == "350.00"
        assert claim.patient_responsibility == "50.00"
        assert claim.icn == "9876543210"

    def test_claim_level_adjustment_before_service(self):
        summary = summarize([
            _seg("CLP*A*1*100*90*10"),
            _seg("CAS*CO*45*10.00"),
            _seg("SVC*HC:99213*100*90"),
            _seg("CAS*PR*1*5.00*1"),
        ])
        claim = summary.claims[0]

        assert [a.reason_code for a in claim.adjustments] == ["45"]
        assert [a.reason_code for a in claim.services[0].adjustments] == ["1"]
        assert claim.services[0].adjustments[0].quantity == "1"

    def test_adjustment_outside_claim_dropped(self):
        summary = summarize([_seg("CAS*CO*45*10.00"), _seg("CLP*A*1")])
        assert summary.claims[0].adjustments == []

    def test_service_outside_claim_ignored(self):
        summary = summarize([_seg("SVC*HC:99213*100*90"), _seg("CAS*CO*45*1")])
        assert summary.claims == []

    def test_new_claim_closes_service(self):
        summary = summarize([
            _seg("CLP*A*1"),
            _seg("SVC*HC:1*1*1"),
            _seg("CLP*B*4"),
            _seg("CAS*OA*23*2.00"),
        ])

        assert [c.claim_number for c in summary.claims] == ["A", "B"]
        assert summary.claims[0].services[0].adjustments == []
        assert summary.claims[1].claim_status == "Denied"
        assert [a.group_code for a in summary.claims[1].adjustments] == ["OA"]

    def test_service_date_and_remarks(self):
        claim = summarize([
            _seg("CLP*A*22"),
            _seg("DTM*232*20241101"),
            _seg("DTM*472*20241102"),
            _seg("REF*CAS*N130"),
            _seg("REF*6R*1"),
        ]).claims[0]

        assert claim.service_date == "11/01/2024"
        assert claim.claim_status == "Reversal of Previous Payment"
        assert claim.remark_codes == ["N130"]

    def test_service_date_outside_claim_ignored(self):
        summary = summarize([_seg("DTM*232*20241101"), _seg("CLP*A*1")])
        assert summary.claims[0].service_date is None

    def test_procedure_code_without_composite(self):
        claim = summarize([_seg("CLP*A*1"), _seg("SVC*99213*10*10")]).claims[0]
        assert claim.services[0].procedure_code == "99213"

    def test_unknown_status_passed_through(self):
        claim = summarize([_seg("CLP*A*99")]).claims[0]
        assert claim.claim_status == "99"

    def test_provider_adjustment_first_pair(self):
        summary = summarize([_seg("PLB*1234567893*20241231*WO:REF1*25.00*L6:X*3.00")])

        assert len(summary.provider_adjustments) == 1
        plb = summary.provider_adjustments[0]
        assert plb.identifier == "1234567893"
        assert plb.date == "12/31/2024"
        assert plb.reason_code == "WO:REF1"
        assert plb.amount == "25.00"

    def test_unknown_segments_ignored(self):
        summary = summarize([_seg("ZZZ*1*2"), _seg("MOA***MA01"), _seg("CLP*A*1")])
        assert len(summary.claims) == 1

    def test_missing_elements_are_none(self):
        claim = summarize([_seg("CLP*A")]).claims[0]
        assert claim.claim_status is None
        assert claim.icn is None

    def test_empty_stream(self):
        summary = summarize([])
        assert summary.claims == []
        assert summary.check_amount is None

    def test_state_transitions(self):
        summarizer = X12835Summarizer()
        assert summarizer.state == ScanState.NO_CLAIM

        summarizer._parse_clp(_seg("CLP*A*1"))
        assert summarizer.state == ScanState.IN_CLAIM

        summarizer._parse_svc(_seg("SVC*HC:1*1*1"))
        assert summarizer.state == ScanState.IN_CLAIM_WITH_SERVICE

        summarizer._parse_clp(_seg("CLP*B*1"))
        assert summarizer.state == ScanState.IN_CLAIM
        assert [c.claim_number for c in summarizer.summary.claims] == ["A"]

    def test_summarizer_is_reusable(self):
        summarizer = X12835Summarizer()
        first = summarizer.summarize([_seg("CLP*A*1")])
        second = summarizer.summarize([_seg("CLP*B*1")])

        assert [c.claim_number for c in first.claims] == ["A"]
        assert [c.claim_number for c in second.claims] == ["B"]

    def test_to_dict(self):
        data = summarize(tokenize(CLAIM_WITH_SERVICE_ADJUSTMENT)).to_dict()

        assert data["check_amount"] == "350.00"
        assert data["claims"][0]["services"][0]["adjustments"][0]["reason_code"] == "45"
        assert data["provider_adjustments"] == []

    def test_status_table(self):
        assert len(CLAIM_STATUS_DESCRIPTIONS) == 9
        assert describe_claim_status("19") == "Processed as Primary, Forwarded to Additional Payer(s)"
        assert describe_claim_status("23") == "Not Our Claim, Forwarded to Additional Payer(s)"
        assert describe_claim_status(None) is None


# =============================================================================
# Sample and Round-trip Tests
# =============================================================================


@pytest.mark.unit
class TestSample835:
    """Test the bundled sample remittance."""

    def test_sample_validates(self):
        result = validate(SAMPLE_835)
        assert result.is_valid, result.errors

    def test_sample_summary(self):
        summary = summarize(tokenize(SAMPLE_835))

        assert summary.check_amount == "1500.00"
        assert summary.check_date == "20241108"
        assert summary.payer_name == "PAYER NAME"
        assert summary.provider_name == "PROVIDER NAME"
        assert len(summary.claims) == 1
        assert summary.claims[0].services[0].procedure_code == "99213"
        assert summary.provider_adjustments[0].date == "11/08/2024"

    def test_generated_remittance_summary(self, sample_remittance, edi_settings, fixed_clock):
        content = encode(sample_remittance, settings=edi_settings, clock=fixed_clock)
        summary = summarize(tokenize(content))

        assert summary.check_amount == "600.00"
        assert summary.check_date == "20241109"
        claim = summary.claims[0]
        assert claim.claim_number == "PCN1001"
        assert claim.service_date == "11/01/2024"
        assert [a.amount for a in claim.adjustments] == ["50.00"]
        assert [s.procedure_code for s in claim.services] == ["99213", "85025"]
        assert [a.amount for a in claim.services[0].adjustments] == ["50.00"]
        assert summary.provider_adjustments[0].reason_code == "WO:REF123"


# =============================================================================
# Decode Tests
# =============================================================================


@pytest.mark.unit
class TestDecode:
    """Test decoding of 835 text."""

    def test_decode_valid(self):
        result = decode(SAMPLE_835)

        assert result.is_valid is True
        assert result.errors == []
        assert len(result.segments) == 21
        assert isinstance(result.segments[0], X12Segment)
        assert result.summary.claims[0].claim_status == "Processed as Primary"

    def test_decode_invalid_has_no_summary(self):
        result = decode("not edi at all")

        assert result.is_valid is False
        assert result.errors == ["Content does not appear to be EDI format - missing ISA segment"]
        assert result.segments == []
        assert result.summary is None

    def test_decode_empty(self):
        result = decode("")
        assert result.errors == ["EDI content is empty"]
        assert result.summary is None
