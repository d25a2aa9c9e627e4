"""Tests for pricing API endpoints."""

from decimal import Decimal

from httpx import AsyncClient


class TestQuoteEndpoint:
    async def test_quote(self, client: AsyncClient) -> None:
        """Quotes an itemized price for a material/chip/quantity."""
        response = await client.post(
            "/pricing/quote",
            json={"material": "Metal", "nfc_type": "NTAG216", "quantity": 500},
        )

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["subtotal"]) == Decimal("9495.00")
        assert Decimal(data["discount"]) == Decimal("0.20")
        assert Decimal(data["discount_amount"]) == Decimal("1899.00")
        assert Decimal(data["total"]) == Decimal("7596.00")
        assert data["quantity"] == 500

    async def test_amounts_are_strings(self, client: AsyncClient) -> None:
        """Money never travels as a float."""
        response = await client.post(
            "/pricing/quote",
            json={"material": "PVC", "nfc_type": "NTAG213", "quantity": 3},
        )

        data = response.json()
        assert data["total"] == "29.97"

    async def test_unknown_material(self, client: AsyncClient) -> None:
        """Unsupported materials are a classified 400, not a zero surcharge."""
        response = await client.post(
            "/pricing/quote",
            json={"material": "Gold", "nfc_type": "NTAG213", "quantity": 1},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["outcome"] == "known_failure"
        assert data["failure"]["kind"] == "invalid_configuration"

    async def test_zero_quantity(self, client: AsyncClient) -> None:
        response = await client.post(
            "/pricing/quote",
            json={"material": "PVC", "nfc_type": "NTAG213", "quantity": 0},
        )

        assert response.status_code == 400
        assert response.json()["failure"]["kind"] == "invalid_quantity"

    async def test_missing_fields(self, client: AsyncClient) -> None:
        response = await client.post("/pricing/quote", json={"material": "PVC"})

        assert response.status_code == 422


class TestRulesEndpoint:
    async def test_rules(self, client: AsyncClient) -> None:
        """Exposes the full rules table."""
        response = await client.get("/pricing/rules")

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["base_price"]) == Decimal("9.99")
        assert set(data["materials"]) == {"PVC", "Metal", "Wood", "Premium Plastic"}
        assert Decimal(data["materials"]["Metal"]) == Decimal("5.00")
        assert Decimal(data["nfc_chips"]["NTAG216"]) == Decimal("4.00")
        assert [tier["min_quantity"] for tier in data["discount_tiers"]] == [1000, 500, 100]
