"""Pricing tests."""

from decimal import Decimal
from types import SimpleNamespace

import pytest
from lavajato.errors import ValidationError
from lavajato.models.vehicle import VehicleSize
from lavajato.services.pricing import calculate_price, price_services, size_multiplier


def _service(service_id, base, surcharge, name="Servico"):
    return SimpleNamespace(
        id=service_id, name=name, base_price=Decimal(base), size_surcharge=Decimal(surcharge)
    )


class TestSizeMultiplier:
    """Surcharge scaling by vehicle size."""

    def test_known_sizes(self):
        assert size_multiplier(VehicleSize.SMALL) == Decimal("0.5")
        assert size_multiplier(VehicleSize.MEDIUM) == Decimal("1.0")
        assert size_multiplier(VehicleSize.LARGE) == Decimal("1.5")

    def test_accepts_plain_strings(self):
        assert size_multiplier("large") == Decimal("1.5")
        assert size_multiplier("SMALL") == Decimal("0.5")

    @pytest.mark.parametrize("size", ["extra_large", "", None])
    def test_unrecognized_size_prices_as_medium(self, size):
        assert size_multiplier(size) == Decimal("1.0")

    def test_multiplier_law(self):
        service = _service("s1", "30.00", "10.00")
        prices = {size: price_services([service], size).final_price for size in VehicleSize}

        assert prices[VehicleSize.SMALL] == Decimal("35.00")
        assert prices[VehicleSize.MEDIUM] == Decimal("40.00")
        assert prices[VehicleSize.LARGE] == Decimal("45.00")
        assert prices[VehicleSize.MEDIUM] - prices[VehicleSize.SMALL] == Decimal("5.00")


class TestPriceServices:
    """Pure pricing over resolved services."""

    def test_small_single_service(self):
        breakdown = price_services([_service("s1", "25.00", "5.00")], VehicleSize.SMALL)

        assert breakdown.base_total == Decimal("25.00")
        assert breakdown.surcharge_total == Decimal("2.50")
        assert breakdown.final_price == Decimal("27.50")

    def test_medium_two_services(self):
        services = [_service("s1", "25.00", "5.00"), _service("s2", "45.00", "8.00")]

        breakdown = price_services(services, VehicleSize.MEDIUM)

        assert breakdown.final_price == Decimal("83.00")
        assert breakdown.service_ids == ["s1", "s2"]

    def test_additivity(self):
        a = _service("a", "19.90", "3.30")
        b = _service("b", "49.90", "7.70")

        for size in VehicleSize:
            combined = price_services([a, b], size).final_price
            separate = price_services([a], size).final_price + price_services([b], size).final_price
            assert combined == separate

    def test_deterministic(self):
        services = [_service("s1", "25.00", "5.00"), _service("s2", "45.00", "8.00")]

        first = price_services(services, "large")
        second = price_services(services, "large")

        assert first == second

    def test_empty_services_rejected(self):
        with pytest.raises(ValidationError, match="no services found"):
            price_services([], VehicleSize.MEDIUM)

    def test_to_dict_uses_floats(self):
        breakdown = price_services([_service("s1", "25.00", "5.00", name="Lavagem")], "small")

        assert breakdown.to_dict() == {
            "base_total": 25.0,
            "surcharge_total": 2.5,
            "final_price": 27.5,
            "services": [
                {"id": "s1", "name": "Lavagem", "base_price": 25.0, "size_surcharge": 5.0}
            ],
        }


class TestCalculatePrice:
    """Pricing through the catalog."""

    @pytest.mark.asyncio
    async def test_resolves_catalog_services(self, db_session, basic_wash, wax):
        breakdown = await calculate_price(db_session, "large", [wax.id])

        assert breakdown.final_price == Decimal("57.00")
        assert breakdown.service_ids == [wax.id]

    @pytest.mark.asyncio
    async def test_unknown_ids_are_dropped(self, db_session, basic_wash):
        breakdown = await calculate_price(
            db_session, VehicleSize.SMALL, ["does-not-exist", basic_wash.id]
        )

        assert breakdown.final_price == Decimal("27.50")
        assert breakdown.service_ids == [basic_wash.id]

    @pytest.mark.asyncio
    async def test_duplicate_ids_count_once(self, db_session, basic_wash):
        breakdown = await calculate_price(db_session, "medium", [basic_wash.id, basic_wash.id])

        assert breakdown.final_price == Decimal("30.00")

    @pytest.mark.asyncio
    async def test_no_resolvable_ids(self, db_session, basic_wash):
        with pytest.raises(ValidationError, match="no services found"):
            await calculate_price(db_session, "medium", ["nope", "also-nope"])

    @pytest.mark.asyncio
    async def test_empty_id_list(self, db_session):
        with pytest.raises(ValidationError, match="no services found"):
            await calculate_price(db_session, "medium", [])
