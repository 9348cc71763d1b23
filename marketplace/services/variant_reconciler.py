from decimal import Decimal
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Sequence

from marketplace.core.config import settings
from marketplace.schemas.entities import VariantEntity
from marketplace.services.combination_generator import VariantCombination


class ReconciliationPlan(NamedTuple):
    to_keep: List[VariantEntity]
    to_create: List[VariantEntity]
    to_remove: List[VariantEntity]
    # kept and created variants, in combination order
    final: List[VariantEntity]


def reconcile_variants(
    existing: Sequence[VariantEntity],
    combinations: Sequence[VariantCombination],
    default_price: Optional[Decimal] = None,
    default_stock: Optional[int] = None
) -> ReconciliationPlan:
    """Diff the existing variants against a freshly generated combination set.

    Variants are matched on their combination key (the set of value ids). A
    matching variant is kept untouched; a combination without a variant gets a
    new one with default price and stock and no media; a variant whose key is
    no longer generated is removed. When two existing variants share a key the
    first one wins and the other is removed.
    """
    if default_price is None:
        default_price = settings.DEFAULT_VARIANT_PRICE
    if default_stock is None:
        default_stock = settings.DEFAULT_VARIANT_STOCK

    by_key: Dict[FrozenSet[str], VariantEntity] = {}
    to_remove: List[VariantEntity] = []
    wanted = {combination.key for combination in combinations}

    for variant in existing:
        key = variant.key
        if key not in wanted or key in by_key:
            to_remove.append(variant)
        else:
            by_key[key] = variant

    to_keep: List[VariantEntity] = []
    to_create: List[VariantEntity] = []
    final: List[VariantEntity] = []

    for combination in combinations:
        variant = by_key.get(combination.key)
        if variant is not None:
            to_keep.append(variant)
        else:
            variant = VariantEntity(
                price=default_price,
                stock_quantity=default_stock,
                is_active=True,
                value_ids=combination.value_ids,
                media=[]
            )
            to_create.append(variant)
        final.append(variant)

    return ReconciliationPlan(to_keep=to_keep, to_create=to_create, to_remove=to_remove, final=final)
