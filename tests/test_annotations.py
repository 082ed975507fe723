import pytest

from ups_inventory.annotations import (
    Attribution,
    extract_attribution,
    infer_status,
    quantity_breakdown,
)
from ups_inventory.schemas import ProductStatus

# =============================================================================
# infer_status
# =============================================================================


class TestInferStatus:

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Vendido a Juan", ProductStatus.SOLD),
            ("VENDIDAS", ProductStatus.SOLD),
            ("Donado a la escuela", ProductStatus.DONATED),
            ("Reservado para Ana", ProductStatus.RESERVED),
            ("En promoción", ProductStatus.PROMOTIONAL),
            ("promocion 2x1", ProductStatus.PROMOTIONAL),
            ("Revisar talla", ProductStatus.REVIEW),
            ("En revisión", ProductStatus.REVIEW),
            ("Vencido", ProductStatus.EXPIRED),
            ("caducada", ProductStatus.EXPIRED),
            ("Extraviado", ProductStatus.LOST),
            ("perdida en bodega", ProductStatus.LOST),
        ],
    )
    def test_keywords(self, text, expected):
        assert infer_status(text) == expected

    def test_first_rule_wins(self):
        assert infer_status("vendido, estaba reservado") == ProductStatus.SOLD
        assert infer_status("reservado, luego donado") == ProductStatus.DONATED

    @pytest.mark.parametrize("text", [None, "", "   ", "Nuevo con etiqueta"])
    def test_defaults_to_available(self, text):
        assert infer_status(text) == ProductStatus.AVAILABLE


# =============================================================================
# extract_attribution
# =============================================================================


class TestExtractAttribution:

    def test_sold_to(self):
        assert extract_attribution("Vendido a Juan") == Attribution(sold_to="Juan")

    def test_labelled_seller_and_client(self):
        result = extract_attribution("Vendedor: Ana, Cliente: Pedro")
        assert result.sold_by == "Ana"
        assert result.sold_to == "Pedro"

    def test_seller_clause_stops_at_buyer_clause(self):
        result = extract_attribution("Vendido por Luis a Carmen")
        assert result.sold_by == "Luis"
        assert result.sold_to == "Carmen"

    def test_seller_only(self):
        assert extract_attribution("Vendedora: Rosa") == Attribution(sold_by="Rosa")
        assert extract_attribution("Vendido por: Maria") == Attribution(sold_by="Maria")

    def test_multiword_names(self):
        result = extract_attribution("Vendedor: Ana María; Cliente: Pedro Pérez")
        assert result.sold_by == "Ana María"
        assert result.sold_to == "Pedro Pérez"

    @pytest.mark.parametrize("text", [None, "", "Sin comentarios", "Revisar"])
    def test_no_names(self, text):
        assert extract_attribution(text) == Attribution()


# =============================================================================
# quantity_breakdown
# =============================================================================


class TestQuantityBreakdown:

    @pytest.mark.parametrize(
        "status, bucket",
        [
            (ProductStatus.AVAILABLE, "available_qty"),
            (ProductStatus.RESERVED, "available_qty"),
            (ProductStatus.PROMOTIONAL, "available_qty"),
            (ProductStatus.SOLD, "sold_qty"),
            (ProductStatus.DONATED, "donated_qty"),
            (ProductStatus.LOST, "lost_qty"),
            (ProductStatus.EXPIRED, "expired_qty"),
        ],
    )
    def test_whole_quantity_goes_to_one_bucket(self, status, bucket):
        breakdown = quantity_breakdown(status, 3)
        assert breakdown[bucket] == 3
        assert sum(breakdown.values()) == 3

    def test_review_leaves_every_bucket_empty(self):
        breakdown = quantity_breakdown(ProductStatus.REVIEW, 4)
        assert set(breakdown.values()) == {0}
        assert len(breakdown) == 5
