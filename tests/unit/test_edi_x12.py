"""
Unit Tests for X12 EDI Base Components.

Tests:
- Delimiter and terminator detection
- X12 tokenizer functionality
- Segment model element access
- Date, amount and control number utilities
"""

import pytest
import random
from decimal import Decimal
from datetime import date, datetime

from src.services.edi.x12_base import (
    Delimiters,
    SEGMENT_SCHEMAS,
    X12Segment,
    X12Tokenizer,
    X12ParseError,
    coerce_date,
    detect_element_separator,
    detect_segment_terminator,
    format_display_date,
    format_isa_date,
    format_x12_amount,
    format_x12_date,
    format_x12_time,
    generate_control_number,
    parse_x12_amount,
    parse_x12_date,
    tokenize,
)


ISA_PIPE = (
    "ISA|00|          |00|          |ZZ|SUBMITTERID    |ZZ|RECEIVERID     "
    "|241109|1200|U|00401|000000001|0|P|:"
)


# =============================================================================
# Delimiter Detection Tests
# =============================================================================


@pytest.mark.unit
class TestDelimiterDetection:
    """Test element separator and segment terminator detection."""

    def test_asterisk_preferred(self):
        assert detect_element_separator("ISA*00|01~") == "*"

    def test_pipe_fallback(self):
        assert detect_element_separator("ISA|00|01~") == "|"

    def test_undetectable_separator(self):
        assert detect_element_separator("ISA 00 01") is None

    def test_tilde_terminator(self):
        assert detect_segment_terminator("ISA*00~GS*HP~") == "~"

    def test_strict_terminator_missing(self):
        assert detect_segment_terminator("ISA*00\nGS*HP") is None

    def test_inferred_terminator_from_isa_offset(self):
        content = ISA_PIPE.replace("|", "*") + "\n" + "GS*HP*A*B\n"
        assert detect_segment_terminator(content, infer_from_isa=True) == "\n"

    def test_inferred_terminator_defaults_to_tilde(self):
        assert detect_segment_terminator("ISA*00*short", infer_from_isa=True) == "~"

    def test_delimiters_from_pair(self):
        assert Delimiters.from_pair("|~") == Delimiters(element="|", terminator="~")

    def test_delimiters_from_partial_pair(self):
        assert Delimiters.from_pair("|") == Delimiters(element="|", terminator="~")
        assert Delimiters.from_pair(None) == Delimiters()


# =============================================================================
# Tokenizer Tests
# =============================================================================


@pytest.mark.unit
class TestX12Tokenizer:
    """Test X12 tokenizer."""

    def test_tokenizer_initialization(self):
        """Test tokenizer initializes with defaults."""
        tokenizer = X12Tokenizer()
        assert tokenizer.element_separator == "*"
        assert tokenizer.segment_terminator == "~"
        assert tokenizer.component_separator == ":"

    def test_tokenizer_extracts_segments(self, valid_835):
        """Test tokenizer splits content into segments."""
        segments = X12Tokenizer(valid_835).tokenize()

        assert len(segments) == 8
        assert [s.segment_id for s in segments] == [
            "ISA", "GS", "ST", "BPR", "TRN", "SE", "GE", "IEA",
        ]
        assert [s.position for s in segments] == list(range(8))

    def test_segment_parsing(self, valid_835):
        """Test elements are split after the segment ID."""
        segments = tokenize(valid_835)
        st = segments[2]

        assert st.elements == ["835", "0001", "005010X221A1"]
        assert st.raw == "ST*835*0001*005010X221A1"

    def test_line_breaks_are_cosmetic(self, valid_835):
        single_line = valid_835.replace("\n", "")
        assert [s.elements for s in tokenize(single_line)] == [
            s.elements for s in tokenize(valid_835)
        ]

    def test_crlf_removed_inside_segment(self):
        segments = tokenize("ST*835\r\n*0001~SE*2*0001~")
        assert segments[0].elements == ["835", "0001"]

    def test_pipe_delimited_content(self):
        segments = tokenize(ISA_PIPE + "~GS|HP|A|B~")
        assert segments[0].segment_id == "ISA"
        assert len(segments[0].elements) == 16
        assert segments[1].elements == ["HP", "A", "B"]

    def test_terminator_inferred_from_isa(self):
        """Without '~', the character after the fixed-width ISA terminates segments."""
        isa = ISA_PIPE.replace("|", "*")
        segments = tokenize(isa + "!GS*HP*A*B!ST*835*0001!")
        assert [s.segment_id for s in segments] == ["ISA", "GS", "ST"]

    def test_explicit_separators_skip_detection(self):
        tokenizer = X12Tokenizer(element_separator="|", segment_terminator="~")
        segments = tokenizer.tokenize("A*B|C~")
        assert segments[0].segment_id == "A*B"
        assert segments[0].elements == ["C"]

    def test_garbage_never_raises(self):
        for content in ["", "   ", "~~~", "hello world", "*|:~\n\r", "ISA"]:
            assert isinstance(tokenize(content), list)

    def test_whitespace_fragments_dropped(self):
        assert tokenize("  ~ \n ~") == []

    def test_no_content_raises_error(self):
        """Test tokenizing without content is a programming error."""
        with pytest.raises(X12ParseError):
            X12Tokenizer().tokenize()


# =============================================================================
# Segment Model Tests
# =============================================================================


@pytest.mark.unit
class TestX12Segment:
    """Test segment element access."""

    def test_get_element_out_of_range(self):
        seg = X12Segment(segment_id="CLP", elements=["CLM1", "1"])
        assert seg.get_element(0) == "CLM1"
        assert seg.get_element(5) == ""
        assert seg.get_element(5, "N/A") == "N/A"
        assert seg.get_element(-1) == ""

    def test_get_field_by_schema_name(self):
        seg = X12Segment(segment_id="BPR", elements=["I", "600.00", "C"])
        assert seg.get_field("payment_amount") == "600.00"
        assert seg.get_field("payment_date") == ""

    def test_get_field_missing_element_default(self):
        seg = X12Segment(segment_id="CAS", elements=["CO", "45"])
        assert seg.get_field("amount", None) is None
        assert seg.get_field("reason_code", None) == "45"

    def test_bpr_payment_date_is_bpr16(self):
        assert SEGMENT_SCHEMAS["BPR"].index("payment_date") == 15

    def test_get_field_unknown_name_raises(self):
        seg = X12Segment(segment_id="CLP", elements=["CLM1"])
        with pytest.raises(KeyError):
            seg.get_field("no_such_field")

    def test_get_field_unknown_segment_raises(self):
        seg = X12Segment(segment_id="ZZZ", elements=["X"])
        with pytest.raises(KeyError):
            seg.get_field("anything")

    def test_description(self):
        assert X12Segment(segment_id="BPR").description == "Financial Information"
        assert X12Segment(segment_id="CLP").description == "Claim Payment Information"
        assert X12Segment(segment_id="XYZ").description == "Unknown Segment"

    def test_render(self):
        seg = X12Segment(segment_id="REF", elements=["6R", "1"])
        assert seg.render() == "REF*6R*1~"
        assert seg.render("|", "~") == "REF|6R|1~"
        assert str(seg) == "REF*6R*1"


# =============================================================================
# Utility Function Tests
# =============================================================================


@pytest.mark.unit
class TestX12Utilities:
    """Test X12 utility functions."""

    def test_parse_x12_date_ccyymmdd(self):
        assert parse_x12_date("20241109") == date(2024, 11, 9)

    def test_parse_x12_date_yymmdd(self):
        assert parse_x12_date("241109") == date(2024, 11, 9)
        assert parse_x12_date("991231") == date(1999, 12, 31)

    def test_parse_x12_date_invalid(self):
        assert parse_x12_date("") is None
        assert parse_x12_date("20241399") is None
        assert parse_x12_date("abc") is None

    def test_format_dates(self):
        assert format_x12_date(date(2024, 11, 9)) == "20241109"
        assert format_isa_date(date(2024, 11, 9)) == "241109"
        assert format_x12_time(datetime(2024, 11, 9, 8, 5)) == "0805"

    def test_format_display_date(self):
        assert format_display_date("20241101") == "11/01/2024"
        assert format_display_date("2024") == "2024"
        assert format_display_date("") == ""

    def test_coerce_date(self):
        assert coerce_date("2024-11-01") == date(2024, 11, 1)
        assert coerce_date("11/01/2024") == date(2024, 11, 1)
        assert coerce_date("20241101") == date(2024, 11, 1)
        assert coerce_date(datetime(2024, 11, 1, 9, 30)) == date(2024, 11, 1)
        assert coerce_date(date(2024, 11, 1)) == date(2024, 11, 1)
        assert coerce_date("") is None
        assert coerce_date(None) is None
        assert coerce_date("not a date") is None

    def test_parse_x12_amount(self):
        assert parse_x12_amount("100.50") == Decimal("100.50")
        assert parse_x12_amount(" 7 ") == Decimal("7")
        assert parse_x12_amount("") == Decimal("0")
        assert parse_x12_amount("abc") == Decimal("0")
        assert parse_x12_amount("NaN") == Decimal("0")
        assert parse_x12_amount(None) == Decimal("0")

    def test_parse_x12_amount_reads_leading_number(self):
        assert parse_x12_amount("12abc") == Decimal("12")
        assert parse_x12_amount("-3.5x") == Decimal("-3.5")
        assert parse_x12_amount("1e") == Decimal("1")
        assert parse_x12_amount(".25 USD") == Decimal("0.25")
        assert parse_x12_amount("1e+30") == Decimal("1e30")

    def test_parse_x12_amount_beyond_double_range(self):
        assert parse_x12_amount("1e308") == Decimal("1e308")
        assert parse_x12_amount("1e309") == Decimal("0")
        assert parse_x12_amount("-1e400") == Decimal("0")
        assert parse_x12_amount("1e99999999999999999999") == Decimal("0")

    def test_format_x12_amount(self):
        assert format_x12_amount("100") == "100.00"
        assert format_x12_amount("100.005") == "100.01"
        assert format_x12_amount(Decimal("12.344")) == "12.34"
        assert format_x12_amount(50) == "50.00"
        assert format_x12_amount("garbage") == "0.00"
        assert format_x12_amount("-0.001") == "0.00"
        assert format_x12_amount("-25") == "-25.00"

    def test_format_x12_amount_large_values(self):
        assert format_x12_amount("1e30") == "1" + "0" * 30 + ".00"
        assert format_x12_amount("1e300") == "1" + "0" * 300 + ".00"
        assert format_x12_amount("123456789012345678901234567.5") == (
            "123456789012345678901234567.50"
        )

    def test_generate_control_number_shape(self):
        for length in (4, 9, 10, 12):
            number = generate_control_number(length)
            assert len(number) == length
            assert number.isdigit()

    def test_generate_control_number_seeded(self):
        first = generate_control_number(9, random.Random(7))
        second = generate_control_number(9, random.Random(7))
        assert first == second


# =============================================================================
# Exception Tests
# =============================================================================


@pytest.mark.unit
class TestX12Errors:
    """Test X12 error formatting."""

    def test_parse_error_message(self):
        error = X12ParseError("Bad element", segment_id="CLP", segment_position=12)
        assert str(error) == "Bad element | Segment: CLP | Position: 12"
        assert error.segment_id == "CLP"

    def test_parse_error_element_position(self):
        error = X12ParseError("Bad amount", segment_id="BPR", element_position=2)
        assert str(error) == "Bad amount | Segment: BPR | Element: 2"
        assert error.message == "Bad amount"
