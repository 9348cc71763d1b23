"""Cartesian product of a product's attribute values.

Attributes are walked in display order and values in display order within
each attribute, with the last attribute varying fastest, so identical input
always yields the identical sequence.
"""

import itertools
import logging
from typing import FrozenSet, List, NamedTuple, Sequence, Tuple

from marketplace.schemas.entities import AttributeEntity, AttributeValueEntity, VariantEntity

logger = logging.getLogger(__name__)


class AttributeValueSet(NamedTuple):
    """The ordered selectable values of one attribute"""
    attribute: AttributeEntity
    values: Tuple[AttributeValueEntity, ...]

    @classmethod
    def from_attribute(cls, attribute: AttributeEntity) -> "AttributeValueSet":
        # sorted() is stable: equal display orders keep their input order
        ordered = sorted(attribute.values, key=lambda v: v.display_order)
        return cls(attribute=attribute, values=tuple(ordered))

    @property
    def is_empty(self) -> bool:
        return not self.values


class VariantCombination(NamedTuple):
    """One value per attribute, in attribute order"""
    values: Tuple[AttributeValueEntity, ...]

    @property
    def key(self) -> FrozenSet[str]:
        return frozenset(value.id for value in self.values)

    @property
    def value_ids(self) -> List[str]:
        return [value.id for value in self.values]

    def label(self) -> str:
        return " / ".join(value.value for value in self.values)


class CombinationSet(NamedTuple):
    combinations: List[VariantCombination]
    empty_attributes: List[AttributeEntity]

    @property
    def keys(self) -> List[FrozenSet[str]]:
        return [combination.key for combination in self.combinations]


def order_attributes(attributes: Sequence[AttributeEntity]) -> List[AttributeValueSet]:
    ordered = sorted(attributes, key=lambda a: a.display_order)
    return [AttributeValueSet.from_attribute(attribute) for attribute in ordered]


def generate_combinations(attributes: Sequence[AttributeEntity]) -> CombinationSet:
    """Produce every combination of one value per attribute.

    An attribute without values makes the product empty; such attributes are
    reported in ``empty_attributes`` rather than skipped. No attributes at all
    also yields no combinations, since a variant needs a complete key.
    """
    value_sets = order_attributes(attributes)
    empty = [value_set.attribute for value_set in value_sets if value_set.is_empty]

    if not value_sets or empty:
        if empty:
            logger.warning(
                "Attributes without values produce no combinations: %s",
                ", ".join(attribute.name for attribute in empty)
            )
        return CombinationSet(combinations=[], empty_attributes=empty)

    combinations = [
        VariantCombination(values=tuple(values))
        for values in itertools.product(*(value_set.values for value_set in value_sets))
    ]
    return CombinationSet(combinations=combinations, empty_attributes=[])


def sort_by_combination(variants: Sequence[VariantEntity], attributes: Sequence[AttributeEntity]) -> List[VariantEntity]:
    """Order variants like the combinations they stand for; unmatched variants go last"""
    rank = {key: position for position, key in enumerate(generate_combinations(attributes).keys)}
    return sorted(variants, key=lambda variant: rank.get(variant.key, len(rank)))
