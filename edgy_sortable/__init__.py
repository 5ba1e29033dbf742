__version__ = "0.1.0"

from .exceptions import RelationshipKeyError, SortableException
from .fields import SortedManyToMany, SortedManyToManyField
from .models import SortableModel
from .protocols import PositionColumnSource
from .relationships import (
    HasManyThrough,
    SortedHasManyThrough,
    SortedManyRelation,
    apply_position_ordering,
    has_many_through,
    has_many_through_sorted,
)
from .settings import OrderPolicy, SortableSettings

__all__ = [
    "HasManyThrough",
    "OrderPolicy",
    "PositionColumnSource",
    "RelationshipKeyError",
    "SortableException",
    "SortableModel",
    "SortableSettings",
    "SortedHasManyThrough",
    "SortedManyRelation",
    "SortedManyToMany",
    "SortedManyToManyField",
    "apply_position_ordering",
    "has_many_through",
    "has_many_through_sorted",
]
