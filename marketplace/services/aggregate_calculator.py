from typing import Optional, Sequence

from marketplace.schemas.entities import ProductAggregates, VariantEntity


def calculate_aggregates(variants: Sequence[VariantEntity]) -> ProductAggregates:
    """Recompute the product-level price range, stock and main media.

    Only active variants count, for price bounds and for stock alike. With no
    active variant the price bounds are None and the stock is 0.
    """
    active = [variant for variant in variants if variant.is_active]
    if not active:
        return ProductAggregates(min_price=None, max_price=None, total_stock=0, main_media_public_id=None)

    prices = [variant.price for variant in active]
    return ProductAggregates(
        min_price=min(prices),
        max_price=max(prices),
        total_stock=sum(variant.stock_quantity for variant in active),
        main_media_public_id=pick_main_media(active)
    )


def pick_main_media(variants: Sequence[VariantEntity]) -> Optional[str]:
    """Main media of the product: first main-flagged media by display order, else first media"""
    media = sorted(
        (item for variant in variants for item in variant.media),
        key=lambda item: item.display_order
    )
    for item in media:
        if item.is_main:
            return item.media_public_id
    return media[0].media_public_id if media else None
