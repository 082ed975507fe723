import pytest

from ups_inventory.matching import KeyOccurrences, derive_key, normalize_field
from ups_inventory.schemas import IdentifierFormat


class TestNormalizeField:

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, ""),
            ("  Blusa Roja ", "blusa roja"),
            ("undefined", ""),
            ("NULL", ""),
            ("nullable", "nullable"),
            (32, "32"),
        ],
    )
    def test_values(self, value, expected):
        assert normalize_field(value) == expected

    def test_unicode_composition(self):
        assert normalize_field("Cafe\u0301") == normalize_field("Caf\u00e9") == "caf\u00e9"


class TestDeriveKey:

    @pytest.fixture
    def numbered(self, make_record):
        def _numbered(**overrides):
            fields = dict(
                format=IdentifierFormat.NUMBERED,
                batch_number="20",
                product_sequence=1,
                generated_code="0020-1",
            )
            fields.update(overrides)
            return make_record(**fields)

        return _numbered

    def test_numbered_key(self, numbered):
        assert derive_key(numbered()) == "20|1|blusa|bls"

    def test_numbered_key_ignores_descriptive_fields(self, numbered):
        assert derive_key(numbered(brand="Nike", color="Rojo")) == derive_key(numbered())

    def test_numbered_key_distinguishes_products(self, numbered):
        assert derive_key(numbered(product_sequence=2)) != derive_key(numbered())

    def test_legacy_key(self, make_record):
        record = make_record(brand="Nike", color="Rojo", size="M")
        assert derive_key(record) == "15|blusa|bls|nike|rojo|m"

    def test_legacy_key_with_missing_fields(self, make_record):
        assert derive_key(make_record()) == "15|blusa|bls|||"
        assert derive_key(make_record(brand="undefined")) == derive_key(make_record())

    def test_case_insensitive(self, make_record):
        assert derive_key(make_record(name="BLUSA ")) == derive_key(make_record(name="blusa"))

    def test_legacy_key_distinguishes_sizes(self, make_record):
        assert derive_key(make_record(size="S")) != derive_key(make_record(size="M"))


class TestKeyOccurrences:

    def test_register_returns_previous_count(self):
        occurrences = KeyOccurrences()
        assert occurrences.register("a") == 0
        assert occurrences.register("a") == 1
        assert occurrences.register("b") == 0
        assert occurrences.register("a") == 2

        assert occurrences.seen("a") == 3
        assert occurrences.seen("missing") == 0
        assert len(occurrences) == 2

    def test_duplicates(self):
        occurrences = KeyOccurrences()
        for key in ["a", "b", "a"]:
            occurrences.register(key)
        assert occurrences.duplicates() == {"a": 2}
