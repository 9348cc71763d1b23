from decimal import Decimal

from marketplace.schemas.entities import MediaEntity, VariantEntity
from marketplace.services.aggregate_calculator import calculate_aggregates, pick_main_media


def test_aggregates_over_active_variants_only():
    variants = [
        VariantEntity(price=Decimal("10"), stock_quantity=2),
        VariantEntity(price=Decimal("25.50"), stock_quantity=3),
        VariantEntity(price=Decimal("1"), stock_quantity=100, is_active=False),
    ]

    aggregates = calculate_aggregates(variants)

    assert aggregates.min_price == Decimal("10")
    assert aggregates.max_price == Decimal("25.50")
    assert aggregates.total_stock == 5


def test_no_active_variant_gives_empty_aggregates():
    aggregates = calculate_aggregates([VariantEntity(price=Decimal("5"), stock_quantity=4, is_active=False)])

    assert aggregates.min_price is None
    assert aggregates.max_price is None
    assert aggregates.total_stock == 0
    assert aggregates.main_media_public_id is None


def test_empty_variant_list():
    aggregates = calculate_aggregates([])

    assert aggregates.min_price is None
    assert aggregates.total_stock == 0


def test_main_media_prefers_flagged_media():
    variants = [
        VariantEntity(media=[MediaEntity(media_public_id="a", display_order=0)]),
        VariantEntity(media=[MediaEntity(media_public_id="b", display_order=1, is_main=True)]),
    ]

    assert pick_main_media(variants) == "b"


def test_main_media_falls_back_to_first_media():
    variants = [
        VariantEntity(media=[MediaEntity(media_public_id="late", display_order=4)]),
        VariantEntity(media=[MediaEntity(media_public_id="early", display_order=1)]),
    ]

    assert pick_main_media(variants) == "early"


def test_inactive_variant_media_is_ignored():
    variants = [
        VariantEntity(is_active=False, media=[MediaEntity(media_public_id="hidden", is_main=True)]),
        VariantEntity(media=[MediaEntity(media_public_id="shown", display_order=3)]),
    ]

    assert calculate_aggregates(variants).main_media_public_id == "shown"
