from __future__ import annotations

from collections.abc import Generator
from typing import TYPE_CHECKING, Any

from loguru import logger

from edgy_sortable.relationships.has_many_through import HasManyThrough
from edgy_sortable.settings import OrderPolicy, get_sortable_setting

if TYPE_CHECKING:
    from edgy import QuerySet
    from edgy.core.db.models.types import BaseModelType

    from edgy_sortable.protocols import PositionColumnSource


def apply_position_ordering(
    queryset: QuerySet, path: str, policy: OrderPolicy | str | None = None
) -> QuerySet:
    """
    Adds an ascending order clause on `path` to `queryset`.

    With `OrderPolicy.APPEND` the clause goes after the clauses already present,
    nothing is deduplicated. With `OrderPolicy.REPLACE` it becomes the only one.

    Args:
        queryset (QuerySet): The queryset to order.
        path (str): The field path of the position column.
        policy (OrderPolicy | str | None): The policy to apply. Read from the
            settings when `None`.

    Returns:
        QuerySet: A new queryset carrying the ordering.
    """
    if policy is None:
        policy = get_sortable_setting("sortable_order_policy")
    policy = OrderPolicy(policy)
    if policy is OrderPolicy.REPLACE:
        return queryset.order_by(path)
    return queryset.order_by(*queryset._order_by, path)


class SortedHasManyThrough:
    """
    A has-many-through relation whose results are always ordered ascending by
    the position column of the intermediate model.

    The standard join chain is built by the owned `HasManyThrough` relation;
    afterwards the position clause is applied to its queryset. The through model
    must implement `PositionColumnSource`.
    """

    def __init__(
        self,
        queryset: QuerySet,
        far_parent: BaseModelType,
        through: type[PositionColumnSource],
        first_key: str = "",
        second_key: str = "",
        local_key: str = "",
        second_local_key: str = "",
        order_policy: OrderPolicy | str | None = None,
    ) -> None:
        self.relation = HasManyThrough(
            queryset,
            far_parent,
            through,  # type: ignore[arg-type]
            first_key=first_key,
            second_key=second_key,
            local_key=local_key,
            second_local_key=second_local_key,
        )
        self.position_column: str = through.get_position_column_name()
        self.relation.queryset = apply_position_ordering(
            self.relation.queryset, self.position_path, order_policy
        )
        logger.debug(
            f"Ordering '{self.relation.to.__name__}' by '{self.position_path}'."
        )

    @property
    def position_path(self) -> str:
        """
        The path from the target model to the position column of the through model.
        """
        return f"{self.relation.through_path}__{self.position_column}"

    @property
    def through(self) -> type[BaseModelType]:
        return self.relation.through

    @property
    def to(self) -> type[BaseModelType]:
        return self.relation.to

    def get_queryset(self) -> QuerySet:
        return self.relation.get_queryset()

    def all(self, clear_cache: bool = False) -> QuerySet:
        return self.relation.get_queryset()

    def __getattr__(self, item: str) -> Any:
        if item.startswith("__") or item == "relation":
            raise AttributeError(item)
        return getattr(self.relation, item)

    def __await__(self) -> Generator[Any, None, list[Any]]:
        return self.relation.__await__()

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.relation}>"


def has_many_through_sorted(
    far_parent: BaseModelType,
    to: type[BaseModelType],
    through: type[PositionColumnSource],
    **kwargs: Any,
) -> SortedHasManyThrough:
    """
    Builds a `SortedHasManyThrough` from the default queryset of `to`.

    Example:

        class Owner(edgy.Model):
            def items(self) -> SortedHasManyThrough:
                return has_many_through_sorted(self, Item, Middle)
    """
    return SortedHasManyThrough(to.query.all(), far_parent, through, **kwargs)
