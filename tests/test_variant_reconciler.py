from decimal import Decimal

from marketplace.schemas.entities import AttributeEntity, AttributeValueEntity, MediaEntity, VariantEntity
from marketplace.services.combination_generator import generate_combinations
from marketplace.services.variant_reconciler import reconcile_variants


def attribute(name, values, display_order=0):
    return AttributeEntity(
        name=name,
        display_order=display_order,
        values=[AttributeValueEntity(value=value, display_order=i) for i, value in enumerate(values)]
    )


def variants_for(combinations, price=Decimal("10")):
    return [
        VariantEntity(sku=f"SKU-{i}", price=price, stock_quantity=5, value_ids=combination.value_ids)
        for i, combination in enumerate(combinations)
    ]


def test_unchanged_combinations_keep_every_variant():
    attributes = [attribute("Color", ["Red", "Blue"]), attribute("Size", ["S", "M"], 1)]
    combinations = generate_combinations(attributes).combinations
    existing = variants_for(combinations)

    plan = reconcile_variants(existing, combinations)

    assert plan.to_keep == existing
    assert plan.to_create == []
    assert plan.to_remove == []
    assert plan.final == existing


def test_removed_value_removes_its_variants():
    color = attribute("Color", ["Red", "Blue"])
    size = attribute("Size", ["S", "M"], 1)
    existing = variants_for(generate_combinations([color, size]).combinations)
    red = color.values[0]

    color.values = color.values[1:]
    plan = reconcile_variants(existing, generate_combinations([color, size]).combinations)

    assert all(red.id in variant.value_ids for variant in plan.to_remove)
    assert len(plan.to_remove) == 2
    assert [variant.sku for variant in plan.to_keep] == ["SKU-2", "SKU-3"]
    assert plan.to_create == []


def test_added_value_creates_defaults_and_preserves_existing():
    color = attribute("Color", ["Red", "Blue"])
    size = attribute("Size", ["S", "M"], 1)
    existing = variants_for(generate_combinations([color, size]).combinations)
    existing[0].media = [MediaEntity(media_public_id="img-1", is_main=True)]

    color.values.append(AttributeValueEntity(value="Green", display_order=2))
    plan = reconcile_variants(existing, generate_combinations([color, size]).combinations)

    assert len(plan.to_keep) == 4
    assert plan.to_keep[0].id == existing[0].id
    assert plan.to_keep[0].media[0].media_public_id == "img-1"
    assert len(plan.to_create) == 2
    for variant in plan.to_create:
        assert variant.price == Decimal("0")
        assert variant.stock_quantity == 0
        assert variant.is_active is True
        assert variant.media == []
        assert variant.sku is None
    assert plan.to_remove == []


def test_final_follows_combination_order():
    color = attribute("Color", ["Red", "Blue"])
    size = attribute("Size", ["S", "M"], 1)
    combinations = generate_combinations([color, size]).combinations
    existing = list(reversed(variants_for(combinations[:2])))

    plan = reconcile_variants(existing, combinations)

    assert [variant.key for variant in plan.final] == [combination.key for combination in combinations]


def test_new_attribute_replaces_every_variant():
    color = attribute("Color", ["Red", "Blue"])
    existing = variants_for(generate_combinations([color]).combinations)

    material = attribute("Material", ["Cotton"], 1)
    plan = reconcile_variants(existing, generate_combinations([color, material]).combinations)

    assert plan.to_keep == []
    assert plan.to_remove == existing
    assert len(plan.to_create) == 2


def test_duplicate_key_keeps_first_variant():
    color = attribute("Color", ["Red"])
    combinations = generate_combinations([color]).combinations
    first = VariantEntity(sku="A", value_ids=combinations[0].value_ids)
    second = VariantEntity(sku="B", value_ids=combinations[0].value_ids)

    plan = reconcile_variants([first, second], combinations)

    assert plan.to_keep == [first]
    assert plan.to_remove == [second]


def test_explicit_defaults_override_settings():
    color = attribute("Color", ["Red"])
    plan = reconcile_variants([], generate_combinations([color]).combinations, Decimal("9.99"), 3)

    assert plan.to_create[0].price == Decimal("9.99")
    assert plan.to_create[0].stock_quantity == 3


def test_no_combinations_removes_everything():
    color = attribute("Color", ["Red"])
    existing = variants_for(generate_combinations([color]).combinations)

    plan = reconcile_variants(existing, [])

    assert plan.final == []
    assert plan.to_remove == existing
