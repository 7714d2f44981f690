"""Tests for partially-known money and price guides."""

from decimal import Decimal

import pytest

from cardledger.models.money import (
    FullPriceGuide,
    Money,
    PriceGuide,
    combine,
    euros_to_cents,
    scale,
    sum_price_guides,
)


class TestMoney:
    def test_unknown_is_identity(self) -> None:
        """Combining with unknown returns the other operand."""
        assert combine(Money.unknown(), Money.known(5)) == Money.known(5)
        assert combine(Money.known(5), Money.unknown()) == Money.known(5)

    def test_unknown_plus_unknown_stays_unknown(self) -> None:
        assert combine(Money.unknown(), Money.unknown()) == Money.unknown()

    def test_known_values_add(self) -> None:
        assert Money.known(3) + Money.known(4) == Money.known(7)

    def test_combine_is_commutative_and_associative(self) -> None:
        a, b, c = Money.known(1), Money.unknown(), Money.known(10)

        assert combine(a, b) == combine(b, a)
        assert combine(combine(a, b), c) == combine(a, combine(b, c))

    def test_scale_known(self) -> None:
        assert scale(Money.known(100), 2) == Money.known(200)

    def test_scale_known_by_zero_is_known_zero(self) -> None:
        """Zero copies of a priced card is worth exactly zero, not unknown."""
        assert scale(Money.known(100), 0) == Money.known(0)

    def test_scale_unknown_stays_unknown(self) -> None:
        assert scale(Money.unknown(), 0) == Money.unknown()
        assert Money.unknown() * 3 == Money.unknown()

    def test_scale_rejects_negative_quantity(self) -> None:
        with pytest.raises(ValueError):
            Money.known(1).scale(-1)

    def test_negative_amount_rejected(self) -> None:
        with pytest.raises(ValueError):
            Money(-1)

    def test_from_euros(self) -> None:
        assert Money.from_euros(0.29) == Money.known(29)
        assert Money.from_euros(Decimal("12.345")) == Money.known(1235)
        assert Money.from_euros(None) == Money.unknown()

    def test_str(self) -> None:
        assert str(Money.known(1234)) == "12.34"
        assert str(Money.unknown()) == "unknown"


class TestEurosToCents:
    def test_rounds_half_up(self) -> None:
        assert euros_to_cents(Decimal("0.005")) == 1
        assert euros_to_cents(Decimal("0.004")) == 0

    def test_whole_euros(self) -> None:
        assert euros_to_cents(Decimal("12")) == 1200


class TestPriceGuide:
    def test_empty_is_all_unknown(self) -> None:
        guide = PriceGuide.empty()
        assert all(cents is None for cents in guide.to_cents().values())

    def test_combine_is_field_wise(self) -> None:
        a = PriceGuide.from_cents(low=100, trend=50)
        b = PriceGuide.from_cents(low=20, avg=7)

        total = a.combine(b)

        assert total.low == Money.known(120)
        assert total.avg == Money.known(7)
        assert total.trend == Money.known(50)
        assert total.avg30 == Money.unknown()

    def test_empty_is_identity(self) -> None:
        guide = PriceGuide.from_cents(low=1, avg=2, trend=3, avg1=4, avg7=5, avg30=6)
        assert guide + PriceGuide.empty() == guide
        assert PriceGuide.empty() + guide == guide

    def test_scale_is_field_wise(self) -> None:
        guide = PriceGuide.from_cents(low=100, avg=None)

        scaled = guide * 3

        assert scaled.low == Money.known(300)
        assert scaled.avg == Money.unknown()

    def test_from_euros(self) -> None:
        guide = PriceGuide.from_euros(low=0.02, trend=1.5)
        assert guide.to_cents() == {
            "low": 2,
            "avg": None,
            "trend": 150,
            "avg1": None,
            "avg7": None,
            "avg30": None,
        }

    def test_sum_price_guides(self) -> None:
        guides = [PriceGuide.from_cents(low=1), PriceGuide.from_cents(low=2, avg=5)]

        total = sum_price_guides(guides)

        assert total.low == Money.known(3)
        assert total.avg == Money.known(5)

    def test_sum_of_nothing_is_empty(self) -> None:
        assert sum_price_guides([]) == PriceGuide.empty()


class TestFullPriceGuide:
    def test_for_card_selects_sub_guide(self) -> None:
        normal = PriceGuide.from_cents(low=10)
        foil = PriceGuide.from_cents(low=99)
        full = FullPriceGuide(product_id=1, normal=normal, foil=foil)

        assert full.for_card(foil=False) is normal
        assert full.for_card(foil=True) is foil
