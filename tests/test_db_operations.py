"""Tests for database CRUD operations."""

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.operations import (
    get_card,
    get_cards_without_cardmarket_id,
    get_distinct_users,
    get_or_create_card,
    get_owned_cards,
    get_price_dates,
    get_price_guide,
    get_set_name,
    get_valuation_keys,
    get_valuations,
    insert_valuation,
    replace_owned_cards,
    save_price_guides,
    save_set_name,
    set_cardmarket_id,
)
from cardledger.models.card import LanguageCode
from cardledger.models.money import FullPriceGuide, Money, PriceGuide

DAY_1 = date(2025, 12, 25)
DAY_2 = date(2025, 12, 26)


def full_guide(product_id: int, low: int | None = 1, low_foil: int | None = None):
    return FullPriceGuide(
        product_id=product_id,
        normal=PriceGuide.from_cents(low=low, trend=5),
        foil=PriceGuide.from_cents(low=low_foil),
    )


class TestSetNameOperations:
    async def test_save_and_get(self, session: AsyncSession) -> None:
        await save_set_name(session, "FDN", "Foundations")

        set_name = await get_set_name(session, "FDN")

        assert set_name is not None
        assert set_name.name == "Foundations"

    async def test_save_updates_existing(self, session: AsyncSession) -> None:
        await save_set_name(session, "FDN", "Old")
        await save_set_name(session, "FDN", "Foundations")

        assert (await get_set_name(session, "FDN")).name == "Foundations"

    async def test_unknown_set(self, session: AsyncSession) -> None:
        assert await get_set_name(session, "XXX") is None


class TestCardCatalogOperations:
    async def test_get_or_create_registers_set(self, session: AsyncSession, make_card) -> None:
        db_card, created = await get_or_create_card(session, make_card(scryfall_id="sf-1"))

        assert created is True
        assert db_card.id is not None
        assert (await get_set_name(session, "FDN")).name == "Foundations"

    async def test_get_or_create_reuses_printing(self, session: AsyncSession, make_card) -> None:
        first, _ = await get_or_create_card(session, make_card())
        second, created = await get_or_create_card(session, make_card(scryfall_id="sf-1"))

        assert created is False
        assert second.id == first.id
        assert second.scryfall_id == "sf-1"

    async def test_foil_is_a_distinct_printing(self, session: AsyncSession, make_card) -> None:
        normal, _ = await get_or_create_card(session, make_card())
        foil, created = await get_or_create_card(session, make_card(foil=True))

        assert created is True
        assert foil.id != normal.id

    async def test_set_cardmarket_id(self, session: AsyncSession, make_card) -> None:
        card = make_card(scryfall_id="sf-1")
        await get_or_create_card(session, card)

        assert await set_cardmarket_id(session, card.id, 777) is True
        assert (await get_card(session, card.id)).cardmarket_id == 777

    async def test_set_cardmarket_id_unknown_card(self, session: AsyncSession, make_card) -> None:
        assert await set_cardmarket_id(session, make_card().id, 1) is False

    async def test_cards_without_cardmarket_id(self, session: AsyncSession, make_card) -> None:
        await get_or_create_card(session, make_card(name="Needs id", scryfall_id="sf-1"))
        await get_or_create_card(
            session,
            make_card(name="Has id", collector_number="2", scryfall_id="sf-2", cardmarket_id=5),
        )
        await get_or_create_card(session, make_card(name="No scryfall", collector_number="3"))

        cards = await get_cards_without_cardmarket_id(session)

        assert [card.name for card in cards] == ["Needs id"]


class TestOwnershipOperations:
    async def test_replace_and_get(self, session: AsyncSession, make_card) -> None:
        cards = [
            make_card(quantity=3, purchase_price=8, language=LanguageCode.FR),
            make_card(name="Sheoldred", set_code="DMU", set_name="Dominaria United", foil=True),
        ]

        count = await replace_owned_cards(session, "u1", cards)
        await session.commit()

        assert count == 2
        assert await get_owned_cards(session, "u1") == cards

    async def test_replace_removes_previous_cards(self, session: AsyncSession, make_card) -> None:
        await replace_owned_cards(session, "u1", [make_card(name="Old", collector_number="1")])
        await replace_owned_cards(session, "u1", [make_card(name="New", collector_number="2")])
        await session.commit()

        owned = await get_owned_cards(session, "u1")

        assert [card.name for card in owned] == ["New"]

    async def test_replace_keeps_other_users(self, session: AsyncSession, make_card) -> None:
        await replace_owned_cards(session, "u1", [make_card()])
        await replace_owned_cards(session, "u2", [make_card(quantity=4)])
        await replace_owned_cards(session, "u1", [])
        await session.commit()

        assert await get_owned_cards(session, "u1") == []
        assert (await get_owned_cards(session, "u2"))[0].quantity == 4

    async def test_duplicate_printing_last_line_wins(
        self, session: AsyncSession, make_card
    ) -> None:
        await replace_owned_cards(session, "u1", [make_card(quantity=1), make_card(quantity=5)])
        await session.commit()

        owned = await get_owned_cards(session, "u1")

        assert len(owned) == 1
        assert owned[0].quantity == 5

    async def test_owned_cards_carry_cardmarket_id(self, session: AsyncSession, make_card) -> None:
        card = make_card(scryfall_id="sf-1")
        await replace_owned_cards(session, "u1", [card])
        await set_cardmarket_id(session, card.id, 777)
        await session.commit()

        assert (await get_owned_cards(session, "u1"))[0].cardmarket_id == 777

    async def test_distinct_users(self, session: AsyncSession, make_card) -> None:
        await replace_owned_cards(session, "u2", [make_card()])
        await replace_owned_cards(session, "u1", [make_card(), make_card(foil=True)])
        await replace_owned_cards(session, "u3", [])
        await session.commit()

        assert await get_distinct_users(session) == ["u1", "u2"]


class TestPriceOperations:
    async def test_save_and_lookup(self, session: AsyncSession) -> None:
        count = await save_price_guides(session, DAY_1, [full_guide(1, low_foil=9), full_guide(2)])
        await session.commit()

        guide = await get_price_guide(session, 1, DAY_1)

        assert count == 2
        assert guide == full_guide(1, low_foil=9)
        assert guide.foil.low == Money.known(9)
        assert guide.foil.avg == Money.unknown()

    async def test_lookup_missing(self, session: AsyncSession) -> None:
        await save_price_guides(session, DAY_1, [full_guide(1)])

        assert await get_price_guide(session, 1, DAY_2) is None
        assert await get_price_guide(session, 2, DAY_1) is None

    async def test_save_overwrites_same_date(self, session: AsyncSession) -> None:
        await save_price_guides(session, DAY_1, [full_guide(1, low=1)])
        await session.commit()
        await save_price_guides(session, DAY_1, [full_guide(1, low=50)])
        await session.commit()
        session.expire_all()

        guide = await get_price_guide(session, 1, DAY_1)

        assert guide.normal.low == Money.known(50)

    async def test_save_in_chunks(self, session: AsyncSession) -> None:
        guides = [full_guide(product_id) for product_id in range(1, 8)]

        count = await save_price_guides(session, DAY_1, guides, chunk_size=3)
        await session.commit()

        assert count == 7
        assert await get_price_guide(session, 7, DAY_1) is not None

    async def test_distinct_dates(self, session: AsyncSession) -> None:
        await save_price_guides(session, DAY_2, [full_guide(1), full_guide(2)])
        await save_price_guides(session, DAY_1, [full_guide(1)])
        await session.commit()

        assert await get_price_dates(session) == [DAY_1, DAY_2]


class TestValuationOperations:
    async def test_insert_and_list(self, session: AsyncSession) -> None:
        total = PriceGuide.from_cents(low=200, trend=None)
        await insert_valuation(session, DAY_2, "u1", total)
        await insert_valuation(session, DAY_1, "u1", PriceGuide.empty())
        await insert_valuation(session, DAY_1, "u2", PriceGuide.empty())
        await session.commit()

        snapshots = await get_valuations(session, "u1")

        assert [snapshot.date for snapshot in snapshots] == [DAY_1, DAY_2]
        assert snapshots[1].total == total
        assert await get_valuation_keys(session) == {(DAY_1, "u1"), (DAY_2, "u1"), (DAY_1, "u2")}

    async def test_duplicate_rejected(self, session: AsyncSession) -> None:
        await insert_valuation(session, DAY_1, "u1", PriceGuide.empty())
        await session.commit()
        session.expunge_all()

        with pytest.raises(IntegrityError):
            await insert_valuation(session, DAY_1, "u1", PriceGuide.from_cents(low=1))
