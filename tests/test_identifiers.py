"""
Tests for UPS identifier parsing and scan-code generation.
"""

import pytest

from ups_inventory.identifiers import (
    candidate_codes,
    code_matches_identifier,
    find_by_code,
    format_identifier,
    generate_code,
    is_legacy_format,
    is_numbered_format,
    is_valid_code,
    next_sequence,
    parse,
    parse_code,
    to_ups_batch,
)
from ups_inventory.reconciliation import reconcile_rows
from ups_inventory.schemas import IdentifierFormat, ParsedIdentifier

# =============================================================================
# parse
# =============================================================================


class TestParse:

    @pytest.mark.parametrize("product, batch", [(1, 20), (523, 20), (7, 100), (12, 3)])
    def test_numbered_product_then_batch(self, product, batch):
        parsed = parse(f"{product}/{batch}")
        assert parsed.format == IdentifierFormat.NUMBERED
        assert parsed.batch_number == str(batch)
        assert parsed.product_sequence == product

    def test_leading_zeros_belong_to_the_product(self):
        parsed = parse("001/20")
        assert parsed.product_sequence == 1
        assert parsed.batch_number == "20"
        assert parsed.raw == "001/20"

    @pytest.mark.parametrize("value", ["5-20", "5\\20", " 5 / 20 ", "5 -20"])
    def test_numbered_separators(self, value):
        parsed = parse(value)
        assert parsed.format == IdentifierFormat.NUMBERED
        assert (parsed.product_sequence, parsed.batch_number) == (5, "20")

    @pytest.mark.parametrize("value", ["15", "7", "19", "0042"])
    def test_bare_digits_are_legacy(self, value):
        parsed = parse(value)
        assert parsed.format == IdentifierFormat.LEGACY
        assert parsed.batch_number == value
        assert parsed.product_sequence is None

    def test_numeric_cells(self):
        assert parse(15).batch_number == "15"
        assert parse(15.0).batch_number == "15"
        assert parse(15.0).raw == "15"

    def test_empty_inputs_are_equal(self):
        expected = ParsedIdentifier(raw="", format=IdentifierFormat.LEGACY, batch_number="0")
        assert parse(None) == expected
        assert parse("") == expected
        assert parse("   ") == expected
        assert parse(float("nan")) == expected
        assert parse(None).product_sequence is None

    def test_fallback_keeps_digits(self):
        parsed = parse("UPS 19")
        assert parsed.format == IdentifierFormat.LEGACY
        assert parsed.batch_number == "19"
        assert parsed.raw == "UPS 19"

    def test_fallback_without_digits(self):
        assert parse("sin ups").batch_number == "0"

    def test_three_groups_is_not_numbered(self):
        parsed = parse("1/2/3")
        assert parsed.format == IdentifierFormat.LEGACY
        assert parsed.batch_number == "123"

    @pytest.mark.parametrize("value", [object(), [], {}, True, "💥", "--/--", "1/"])
    def test_never_raises(self, value):
        parsed = parse(value)
        assert parsed.format == IdentifierFormat.LEGACY
        assert parsed.batch_number.isdigit()

    def test_numbered_past_the_int_digit_limit_falls_back(self):
        parsed = parse("1" * 5000 + "/20")
        assert parsed.format == IdentifierFormat.LEGACY
        assert parsed.batch_number == "1" * 5000 + "20"

    def test_huge_int_cell(self):
        assert parse(10**5000).batch_number == "0"

    def test_only_ascii_digits_count(self):
        arabic_twenty = "٢٠"
        assert parse(arabic_twenty).batch_number == "0"
        assert parse(arabic_twenty).format == IdentifierFormat.LEGACY
        assert not is_legacy_format(arabic_twenty)
        assert not is_numbered_format("١/٢٠")
        assert parse("UPS ١٥ 19").batch_number == "19"

    def test_invariant_enforced_by_model(self):
        with pytest.raises(ValueError):
            ParsedIdentifier(raw="15", format=IdentifierFormat.LEGACY, batch_number="15", product_sequence=3)
        with pytest.raises(ValueError):
            ParsedIdentifier(raw="1/20", format=IdentifierFormat.NUMBERED, batch_number="20")


# =============================================================================
# Predicates and formatting
# =============================================================================


class TestFormatPredicates:

    def test_numbered(self):
        assert is_numbered_format("1/20")
        assert not is_legacy_format("1/20")

    def test_legacy(self):
        assert is_legacy_format("15")
        assert is_legacy_format(15)
        assert not is_numbered_format("15")

    @pytest.mark.parametrize("value", [None, "", "abc", "UPS 19"])
    def test_neither(self, value):
        assert not is_numbered_format(value)
        assert not is_legacy_format(value)

    @pytest.mark.parametrize("value", ["1/20", "15", "", None, "1-2", "x", 7, "3 \\ 4"])
    def test_mutually_exclusive(self, value):
        assert not (is_numbered_format(value) and is_legacy_format(value))

    @pytest.mark.parametrize("value", ["1/20", "15", "", "abc", "5-20"])
    def test_consistent_with_parse(self, value):
        assert is_numbered_format(value) == (parse(value).format == IdentifierFormat.NUMBERED)


class TestFormatIdentifier:

    def test_numbered_drops_padding(self):
        assert format_identifier(parse("001/20")) == "1/20"

    def test_numbered_normalizes_separator(self):
        assert format_identifier(parse("3-21")) == "3/21"

    def test_legacy(self):
        assert format_identifier(parse("15")) == "15"

    def test_empty(self):
        assert format_identifier(parse(None)) == "0"

    def test_to_ups_batch(self):
        assert to_ups_batch("1/20") == 20
        assert to_ups_batch("15") == 15
        assert to_ups_batch(None) == 0
        assert to_ups_batch("9" * 5000) == 0


# =============================================================================
# Code generation
# =============================================================================


class TestGenerateCode:

    def test_numbered_uses_embedded_product(self):
        assert generate_code(parse("1/20"), 99) == "0020-1"
        assert generate_code(parse("523/20"), 1) == "0020-523"

    def test_legacy_uses_import_sequence(self):
        assert generate_code(parse("15"), 42) == "D15-0042"
        assert generate_code(parse("15"), 12345) == "D15-12345"

    def test_empty_identifier(self):
        assert generate_code(parse(""), 1) == "D0-0001"

    def test_deterministic(self):
        parsed = parse("7")
        assert generate_code(parsed, 3) == generate_code(parsed, 3)

    def test_shapes_are_distinguishable(self):
        legacy = parse_code(generate_code(parse("20"), 1))
        numbered = parse_code(generate_code(parse("1/20"), 1))
        assert legacy.format == IdentifierFormat.LEGACY
        assert numbered.format == IdentifierFormat.NUMBERED
        assert legacy.batch_number == numbered.batch_number == "20"


class TestParseCode:

    def test_legacy(self):
        parsed = parse_code("D15-0042")
        assert parsed.format == IdentifierFormat.LEGACY
        assert parsed.batch_number == "15"
        assert parsed.number == 42

    def test_legacy_lowercase_prefix(self):
        assert parse_code("d15-0042").batch_number == "15"

    def test_numbered_strips_padding(self):
        parsed = parse_code("0020-7")
        assert parsed.format == IdentifierFormat.NUMBERED
        assert parsed.batch_number == "20"
        assert parsed.number == 7

    @pytest.mark.parametrize("value", ["1/20", "15", "523/20", "7"])
    def test_recovers_batch_of_generated_codes(self, value):
        parsed = parse(value)
        assert parse_code(generate_code(parsed, 5)).batch_number == parsed.batch_number

    @pytest.mark.parametrize("code", [None, "", "XYZ", "15", "D-1", "0020/7"])
    def test_unrecognised(self, code):
        assert parse_code(code) is None
        assert not is_valid_code(code)

    def test_non_ascii_digits_are_not_codes(self):
        assert parse_code("D٢٠-0001") is None
        assert parse_code("٠٠٢٠-1") is None

    def test_code_number_past_the_int_digit_limit(self):
        assert parse_code("D15-" + "1" * 5000) is None

    def test_next_sequence(self):
        assert next_sequence(["D15-0001", "D15-0007", "0020-30", "garbage"]) == 8
        assert next_sequence([]) == 1

    def test_code_matches_identifier(self):
        assert code_matches_identifier("0020-1", "001/20")
        assert not code_matches_identifier("0020-2", "1/20")
        assert code_matches_identifier("D15-0042", "15")
        assert not code_matches_identifier("D15-0042", "16")
        assert not code_matches_identifier("0020-1", "20")
        assert not code_matches_identifier("nonsense", "20")

    def test_candidate_codes(self):
        assert candidate_codes("20", 3) == ["0020-3", "D20-0003"]


class TestFindByCode:

    @pytest.fixture
    def records(self, make_row):
        rows = [make_row(ups="1/20", name="Blusa"), make_row(ups="15", name="Reloj")]
        return reconcile_rows(rows).records

    def test_exact(self, records):
        assert find_by_code(records, "0020-1").name == "Blusa"
        assert find_by_code(records, " D15-0001 ").name == "Reloj"

    def test_falls_back_to_other_shape(self, records):
        # a legacy-style label printed for an item of a numbered batch
        assert find_by_code(records, "D20-0001").name == "Blusa"
        assert find_by_code(records, "0015-1").name == "Reloj"

    def test_not_found(self, records):
        assert find_by_code(records, "D99-0001") is None
        assert find_by_code(records, "nope") is None
        assert find_by_code([], "0020-1") is None
