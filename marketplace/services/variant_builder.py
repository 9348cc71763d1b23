"""Variant regeneration shared by product creation and attribute mutations.

``regenerate_variants`` runs the pipeline on a product snapshot whose
attributes were already changed in memory: generate the combinations,
reconcile them with the current variants, apply caller supplied variant
definitions to the created ones, refresh names and SKUs and recompute the
aggregates. The outcome is recorded in the given ``ChangeSet``.
"""

import logging
from typing import Dict, FrozenSet, List, Sequence, Tuple

from marketplace.core.exceptions import ConflictError
from marketplace.schemas.entities import ChangeSet, ProductSnapshot, VariantEntity
from marketplace.schemas.variant import VariantDefinition
from marketplace.services.aggregate_calculator import calculate_aggregates
from marketplace.services.combination_generator import generate_combinations
from marketplace.services.mappers import media_from_create
from marketplace.services.validation import Rule, find_duplicates, normalize, sku_collisions, validate
from marketplace.services.variant_labels import (
    build_variant_name,
    combination_label,
    ensure_single_main_media,
    generate_sku,
)
from marketplace.services.variant_reconciler import ReconciliationPlan, reconcile_variants

logger = logging.getLogger(__name__)

NO_ACTIVE_VARIANT = "At least one active variant must remain for the product."


def ensure_active_variant(variants: Sequence[VariantEntity]) -> None:
    if not any(variant.is_active for variant in variants):
        raise ConflictError(NO_ACTIVE_VARIANT)


def resolve_definitions(
    product: ProductSnapshot,
    definitions: Sequence[VariantDefinition]
) -> Tuple[Dict[FrozenSet[str], VariantDefinition], List[Rule]]:
    """Match each definition's attribute selections to a combination key.

    Names and values are matched case-insensitively. Returns the resolved
    definitions by key and one rule per definition reporting its problems.
    """
    attributes_by_name = {normalize(attribute.name): attribute for attribute in product.attributes}
    resolved: Dict[FrozenSet[str], VariantDefinition] = {}
    rules: List[Rule] = []

    for position, definition in enumerate(definitions, start=1):
        problems: List[str] = []
        selected = set()
        value_ids = []
        for selection in definition.attribute_selections:
            attribute = attributes_by_name.get(normalize(selection.attribute_name))
            if attribute is None:
                problems.append(f"unknown attribute '{selection.attribute_name}'")
                continue
            if attribute.id in selected:
                problems.append(f"attribute '{attribute.name}' is selected more than once")
                continue
            selected.add(attribute.id)
            value = next(
                (value for value in attribute.values if normalize(value.value) == normalize(selection.value)),
                None
            )
            if value is None:
                problems.append(f"unknown value '{selection.value}' for attribute '{attribute.name}'")
                continue
            value_ids.append(value.id)

        missing = [
            attribute.name
            for attribute in sorted(product.attributes, key=lambda a: a.display_order)
            if attribute.id not in selected
        ]
        if missing:
            problems.append(f"no value selected for {', '.join(missing)}")

        key = frozenset(value_ids)
        if not problems and key in resolved:
            problems.append(f"combination '{combination_label(product, key)}' is already defined")
        if not problems:
            resolved[key] = definition

        rules.append(Rule(
            "variant_definition_resolves",
            lambda problems=problems: not problems,
            f"Variant definition {position}: {'; '.join(problems)}."
        ))

    return resolved, rules


def apply_definitions(
    product: ProductSnapshot,
    plan: ReconciliationPlan,
    definitions: Sequence[VariantDefinition],
    require_coverage: bool = False
) -> None:
    """Copy definitions onto the created variants of ``plan``.

    Definitions may only target created combinations. With
    ``require_coverage`` every created combination needs a definition.
    Raises ValidationError listing every problem; nothing is applied then.
    """
    resolved, rules = resolve_definitions(product, definitions)
    created = {variant.key: variant for variant in plan.to_create}
    kept = {variant.key for variant in plan.to_keep}

    targeting_kept = [combination_label(product, key) for key in resolved if key in kept]
    unmatched = [combination_label(product, key) for key in resolved if key not in kept and key not in created]
    uncovered = [combination_label(product, key) for key in created if key not in resolved]
    skus = [definition.sku.strip() for definition in definitions if definition.sku]
    duplicate_skus = find_duplicates(skus, key=normalize)
    clashing_skus = sku_collisions(skus, [variant.sku for variant in plan.to_keep])

    rules.extend([
        Rule(
            "definitions_target_new_combinations",
            lambda: not targeting_kept,
            f"Variant definitions target existing variants: {', '.join(targeting_kept)}."
        ),
        Rule(
            "definitions_match_combinations",
            lambda: not unmatched,
            f"Variant definitions do not match any generated combination: {', '.join(unmatched)}."
        ),
        Rule(
            "definitions_cover_combinations",
            lambda: not (require_coverage and uncovered),
            f"Variant definitions are required for combinations: {', '.join(uncovered)}."
        ),
        Rule(
            "definition_skus_unique",
            lambda: not duplicate_skus,
            f"Duplicate SKUs in variant definitions: {', '.join(duplicate_skus)}."
        ),
        Rule(
            "definition_skus_available",
            lambda: not clashing_skus,
            f"SKU(s) already used by another variant of this product: {', '.join(clashing_skus)}."
        ),
    ])
    validate(rules)

    for key, definition in resolved.items():
        variant = created[key]
        variant.sku = definition.sku.strip() if definition.sku else None
        variant.price = definition.price
        variant.stock_quantity = definition.stock_quantity
        variant.is_active = definition.is_active
        variant.media = ensure_single_main_media(media_from_create(media) for media in definition.media)


def finalize_variants(product: ProductSnapshot, plan: ReconciliationPlan) -> List[VariantEntity]:
    """Refresh display names and fill missing SKUs of the final variants.

    Returns the kept variants whose name or SKU changed.
    """
    taken = {variant.sku.upper() for variant in plan.final if variant.sku}
    kept_ids = {variant.id for variant in plan.to_keep}
    changed = []
    for variant in plan.final:
        name = build_variant_name(product, variant)
        dirty = name != variant.name
        variant.name = name
        if not variant.sku:
            variant.sku = generate_sku(product, variant, taken)
            dirty = True
        if dirty and variant.id in kept_ids:
            changed.append(variant)
    return changed


def regenerate_variants(
    product: ProductSnapshot,
    change_set: ChangeSet,
    definitions: Sequence[VariantDefinition] = (),
    require_coverage: bool = False
) -> ReconciliationPlan:
    """Regenerate the variants of ``product`` after an in-memory attribute change.

    The snapshot is updated to its post-mutation state. Raises ConflictError
    when the combination space changed and no active variant would remain.
    """
    combination_set = generate_combinations(product.attributes)
    plan = reconcile_variants(product.variants, combination_set.combinations)
    apply_definitions(product, plan, definitions, require_coverage)

    if plan.to_create or plan.to_remove:
        ensure_active_variant(plan.final)

    renamed = finalize_variants(product, plan)
    product.variants = plan.final
    product.aggregates = calculate_aggregates(plan.final)

    change_set.variants_to_create = plan.to_create
    change_set.variants_to_update = renamed
    change_set.variant_ids_to_delete = [variant.id for variant in plan.to_remove]
    change_set.aggregates = product.aggregates

    logger.info(
        "Regenerated variants of product %s: %d kept, %d created, %d removed",
        product.id, len(plan.to_keep), len(plan.to_create), len(plan.to_remove)
    )
    return plan
