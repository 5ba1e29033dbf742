from __future__ import annotations

from collections.abc import Generator
from typing import TYPE_CHECKING, Any

from loguru import logger

from edgy_sortable.relationships.utils import (
    check_local_key,
    detect_foreign_key,
    get_foreign_key,
)

if TYPE_CHECKING:
    from edgy import QuerySet
    from edgy.core.db.models.types import BaseModelType


class HasManyThrough:
    """
    Gives access to the rows of a target model reachable from a "far parent"
    instance through an intermediate model.

    The chain consists of two foreign keys: the intermediate (`through`) model
    points to the far parent with `first_key` and the target model points to the
    intermediate model with `second_key`. The relation only configures the given
    queryset, it never executes it. Accessing any queryset attribute on the
    relation returns it from a fresh copy of the configured queryset.
    """

    def __init__(
        self,
        queryset: QuerySet,
        far_parent: BaseModelType,
        through: type[BaseModelType],
        first_key: str = "",
        second_key: str = "",
        local_key: str = "",
        second_local_key: str = "",
    ) -> None:
        """
        Initializes a HasManyThrough instance.

        Args:
            queryset (QuerySet): A fresh queryset of the target model.
            far_parent (BaseModelType): The instance owning the relation.
            through (type[BaseModelType]): The intermediate model class.
            first_key (str): The foreign key on `through` pointing to the far
                             parent's model. Detected when empty.
            second_key (str): The foreign key on the target model pointing to
                              `through`. Detected when empty.
            local_key (str): The column of the far parent referenced by
                             `first_key`. All columns referenced by
                             `first_key` are matched when empty.
            second_local_key (str): The column of `through` referenced by
                                    `second_key`. Only validated.

        Raises:
            RelationshipKeyError: If the keys do not form a valid join chain.
        """
        self.far_parent = far_parent
        self.through = through
        self.to: type[BaseModelType] = queryset.model_class
        far_model = type(far_parent).get_real_class()

        self.first_key = first_key or detect_foreign_key(through, far_model)
        self.second_key = second_key or detect_foreign_key(self.to, through)
        self.local_key = local_key
        self.second_local_key = second_local_key

        self.first_fk = first_fk = get_foreign_key(through, self.first_key, far_model)
        second_fk = get_foreign_key(self.to, self.second_key, through)
        if local_key:
            check_local_key(first_fk, local_key)
        if second_local_key:
            check_local_key(second_fk, second_local_key)

        self.queryset = self.add_constraints(queryset)
        logger.debug(
            f"Built has-many-through '{type(far_parent).__name__}' -> "
            f"'{through.__name__}' -> '{self.to.__name__}' "
            f"on '{self.second_key}__{self.first_key}'."
        )

    @property
    def through_path(self) -> str:
        """
        The path from the target model to the through model.
        """
        return self.second_key

    def add_constraints(self, queryset: QuerySet) -> QuerySet:
        """
        Restricts `queryset` to the target rows reachable from the far parent.

        The far parent is matched column by column, so foreign keys with
        `related_fields` or composite keys are handled like plain ones.
        """
        columns = [self.local_key] if self.local_key else list(self.first_fk.related_columns)
        prefix = f"{self.second_key}__{self.first_key}"
        return queryset.filter(
            **{f"{prefix}__{column}": getattr(self.far_parent, column) for column in columns}
        )

    def get_queryset(self) -> QuerySet:
        """
        Returns a fresh copy of the configured queryset.
        """
        return self.queryset.all()

    def all(self, clear_cache: bool = False) -> QuerySet:
        return self.get_queryset()

    def __getattr__(self, item: str) -> Any:
        # Only reached for names not set in __init__, so the queryset exists.
        if item.startswith("__") or item == "queryset":
            raise AttributeError(item)
        return getattr(self.get_queryset(), item)

    def __await__(self) -> Generator[Any, None, list[Any]]:
        return self.get_queryset().__await__()

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self}>"

    def __str__(self) -> str:
        return f"{self.through.__name__}"


def has_many_through(
    far_parent: BaseModelType,
    to: type[BaseModelType],
    through: type[BaseModelType],
    **keys: str,
) -> HasManyThrough:
    """
    Builds a `HasManyThrough` from the default queryset of `to`.

    Example:

        class Country(edgy.Model):
            def posts(self) -> HasManyThrough:
                return has_many_through(self, Post, User)
    """
    return HasManyThrough(to.query.all(), far_parent, through, **keys)
