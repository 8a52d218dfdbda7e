"""
Catalog compatibility rules.

Catalog entries store the ids they fit as a list; an empty list means the
entry fits everything. ``compatibility_from_ids`` turns that storage
convention into an explicit ``Wildcard`` or ``RestrictedTo`` value.
"""

from dataclasses import dataclass
from typing import Iterable, Union


@dataclass(frozen=True)
class Wildcard:
    """Compatible with every id."""

    def allows(self, target_id: str) -> bool:
        return True


@dataclass(frozen=True)
class RestrictedTo:
    """Compatible only with the listed ids."""

    ids: frozenset[str]

    def allows(self, target_id: str) -> bool:
        return target_id in self.ids


Compatibility = Union[Wildcard, RestrictedTo]

WILDCARD = Wildcard()


def compatibility_from_ids(ids: Iterable[str]) -> Compatibility:
    """Build the compatibility rule for a stored id list."""
    restricted = frozenset(ids)
    if not restricted:
        return WILDCARD
    return RestrictedTo(restricted)


def fits_model(entry, model_id: str) -> bool:
    """Check a trim, fuel type, color, transmission or accessory against a model."""
    return compatibility_from_ids(entry.compatible_models).allows(model_id)


def fits_model_and_trim(accessory, model_id: str, trim_id: str) -> bool:
    """Accessories must fit both the model and the trim."""
    return fits_model(accessory, model_id) and compatibility_from_ids(
        accessory.compatible_trims
    ).allows(trim_id)
