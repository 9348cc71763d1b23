from marketplace.schemas.entities import AttributeEntity, AttributeValueEntity, VariantEntity
from marketplace.services.combination_generator import (
    AttributeValueSet,
    generate_combinations,
    sort_by_combination,
)


def make_attribute(name, values, display_order=0):
    return AttributeEntity(
        name=name,
        display_order=display_order,
        values=[AttributeValueEntity(value=value, display_order=i) for i, value in enumerate(values)]
    )


def test_cartesian_product_last_attribute_varies_fastest():
    color = make_attribute("Color", ["Red", "Blue"], display_order=0)
    size = make_attribute("Size", ["S", "M"], display_order=1)

    result = generate_combinations([color, size])

    assert [c.label() for c in result.combinations] == ["Red / S", "Red / M", "Blue / S", "Blue / M"]
    assert result.empty_attributes == []


def test_attributes_and_values_follow_display_order():
    size = make_attribute("Size", ["S", "M"], display_order=2)
    color = make_attribute("Color", ["Red", "Blue"], display_order=1)
    color.values[0].display_order = 5  # Red after Blue

    result = generate_combinations([size, color])

    assert [c.label() for c in result.combinations] == ["Blue / S", "Blue / M", "Red / S", "Red / M"]


def test_equal_display_orders_keep_input_order():
    first = make_attribute("Material", ["Cotton"], display_order=0)
    second = make_attribute("Fit", ["Slim", "Loose"], display_order=0)
    for value in second.values:
        value.display_order = 0

    result = generate_combinations([first, second])

    assert [c.label() for c in result.combinations] == ["Cotton / Slim", "Cotton / Loose"]


def test_generation_is_deterministic():
    attributes = [make_attribute("Color", ["Red", "Blue", "Green"]), make_attribute("Size", ["S", "M"], 1)]

    assert generate_combinations(attributes).keys == generate_combinations(attributes).keys


def test_combination_count_is_product_of_value_counts():
    attributes = [
        make_attribute("Color", ["Red", "Blue", "Green"], 0),
        make_attribute("Size", ["S", "M"], 1),
        make_attribute("Material", ["Cotton", "Wool"], 2),
    ]

    result = generate_combinations(attributes)

    assert len(result.combinations) == 12
    assert len(set(result.keys)) == 12
    assert all(len(combination.values) == 3 for combination in result.combinations)


def test_attribute_without_values_yields_nothing_and_is_reported():
    color = make_attribute("Color", ["Red", "Blue"])
    size = make_attribute("Size", [], display_order=1)

    result = generate_combinations([color, size])

    assert result.combinations == []
    assert [attribute.name for attribute in result.empty_attributes] == ["Size"]


def test_no_attributes_yields_no_combinations():
    result = generate_combinations([])

    assert result.combinations == []
    assert result.empty_attributes == []


def test_combination_key_ignores_order():
    color = make_attribute("Color", ["Red"])
    size = make_attribute("Size", ["S"], 1)

    combination = generate_combinations([color, size]).combinations[0]

    assert combination.key == frozenset([size.values[0].id, color.values[0].id])


def test_value_set_sorts_values():
    attribute = make_attribute("Size", ["S", "M", "L"])
    attribute.values[0].display_order = 9

    value_set = AttributeValueSet.from_attribute(attribute)

    assert [value.value for value in value_set.values] == ["M", "L", "S"]
    assert not value_set.is_empty


def test_sort_by_combination_puts_unmatched_last():
    color = make_attribute("Color", ["Red", "Blue"])
    red, blue = color.values
    stray = VariantEntity(value_ids=["gone"])
    variants = [VariantEntity(value_ids=[blue.id]), stray, VariantEntity(value_ids=[red.id])]

    ordered = sort_by_combination(variants, [color])

    assert [variant.value_ids for variant in ordered] == [[red.id], [blue.id], ["gone"]]
