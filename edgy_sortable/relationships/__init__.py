from .has_many_through import HasManyThrough, has_many_through
from .many import SortedManyRelation
from .sorted import SortedHasManyThrough, apply_position_ordering, has_many_through_sorted

__all__ = [
    "HasManyThrough",
    "SortedHasManyThrough",
    "SortedManyRelation",
    "apply_position_ordering",
    "has_many_through",
    "has_many_through_sorted",
]
