"""
Pytest Configuration and Fixtures.
Shared test fixtures for all test modules.
"""

import random
import sys
from datetime import date, datetime
from pathlib import Path

import pytest

# Add project root to path for src.* imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.core.config import EDISettings  # noqa: E402
from src.services.edi.x12_835_generator import (  # noqa: E402
    AdjustmentInput,
    ClaimInput,
    PatientInfo,
    PayeeInfo,
    PayerInfo,
    ProviderAdjustmentInput,
    RemittanceModel,
    ServiceLineInput,
)

FIXED_NOW = datetime(2024, 11, 9, 12, 0, 0)


# Minimal valid 835: envelope, BPR and TRN only
VALID_835 = "\n".join([
    "ISA*00*          *00*          *ZZ*SUBMITTERID    *ZZ*RECEIVERID     *241109*1200*U*00401*000000001*0*P*:~",
    "GS*HP*PAYERID*RECEIVERID*20241109*1200*1*X*005010X221A1~",
    "ST*835*0001*005010X221A1~",
    "BPR*I*1000.00*C*ACH*CCP*01*000000000*DA*0000000000*PAYERID***01*000000000*DA*0000000000*20241109~",
    "TRN*1*123456789012*1234567890~",
    "SE*5*0001~",
    "GE*1*1~",
    "IEA*1*000000001~",
])


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed instant."""
    return lambda: FIXED_NOW


@pytest.fixture
def seeded_rng():
    """Deterministic random source for control numbers."""
    return random.Random(42)


@pytest.fixture
def edi_settings():
    """EDI settings with defaults, independent of the environment."""
    return EDISettings(_env_file=None)


@pytest.fixture
def valid_835():
    return VALID_835


@pytest.fixture
def sample_remittance():
    """Remittance with one claim, two service lines and a PLB."""
    return RemittanceModel(
        payer=PayerInfo(
            name="ACME HEALTH PLAN",
            payer_id="ACME01",
            address_line1="1 PAYER WAY",
            city="HARTFORD",
            state="CT",
            zip_code="06101",
        ),
        payee=PayeeInfo(
            name="GOOD CLINIC",
            npi="1234567893",
            address_line1="9 CLINIC RD",
            city="BOSTON",
            state="MA",
            zip_code="02110",
        ),
        patient=PatientInfo(first_name="JOHN", last_name="DOE", middle_name="Q"),
        claims=[
            ClaimInput(
                claim_number="PCN1001",
                total_charge="700.00",
                payment="600.00",
                adjustment="50.00",
                service_date=date(2024, 11, 1),
                claim_status="1",
                service_lines=[
                    ServiceLineInput(
                        procedure_code="99213",
                        charge_amount="400.00",
                        paid_amount="350.00",
                        units="1",
                        service_date=date(2024, 11, 1),
                        adjustments=[AdjustmentInput(adjustment_code="CO-45", amount="50.00")],
                    ),
                    ServiceLineInput(
                        procedure_code="85025",
                        charge_amount="300.00",
                        paid_amount="250.00",
                        units="2",
                    ),
                ],
            ),
        ],
        provider_adjustments=[
            ProviderAdjustmentInput(adjustment_code="WO", adjustment_id="REF123", amount="25.00"),
        ],
    )


@pytest.fixture
def sample_form():
    """Claim entry form payload as posted by the UI."""
    return {
        "delimiter": "*~",
        "insurance": {"payerId": "ACME01", "planName": "ACME HEALTH PLAN"},
        "provider": {
            "npi": "1234567893",
            "name": "GOOD CLINIC",
            "address": "9 CLINIC RD",
            "city": "BOSTON",
            "state": "MA",
            "zip": "02110",
        },
        "patient": {"firstName": "JOHN", "lastName": "DOE", "middleName": "", "dob": "1980-01-15"},
        "claims": [
            {
                "claimNumber": "PCN1001",
                "totalCharge": "700.00",
                "payment": "600.00",
                "adjustment": "50.00",
                "serviceDate": "2024-11-01",
                "claimStatus": "1",
                "serviceLines": [
                    {
                        "procedureCode": "99213",
                        "chargeAmount": "400.00",
                        "paidAmount": "350.00",
                        "units": 1,
                        "serviceDate": "2024-11-01",
                        "claimAdjustments": [
                            {"adjustmentCode": "CO-45", "adjustmentAmount": "50.00"},
                        ],
                    },
                ],
            },
        ],
        "plb": {"adjustments": []},
    }


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "api: mark test as an API test"
    )
