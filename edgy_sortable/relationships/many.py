from __future__ import annotations

from typing import TYPE_CHECKING, Any

from edgy.core.db.relationships.relation import ManyRelation
from edgy.exceptions import RelationshipIncompatible

from edgy_sortable.relationships.sorted import apply_position_ordering
from edgy_sortable.relationships.utils import get_next_position
from edgy_sortable.settings import OrderPolicy, get_sortable_setting

if TYPE_CHECKING:
    from edgy import QuerySet
    from edgy.core.db.models.types import BaseModelType


class SortedManyRelation(ManyRelation):
    """
    A many-to-many relation ordered by the position column of its `through`
    model.

    Besides ordering the related instances, children added through `add`,
    `create` or staging receive the next free position of the owning instance
    unless they already carry one.
    """

    def __init__(self, *, order_policy: OrderPolicy | str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.order_policy = order_policy

    @property
    def position_column(self) -> str:
        return self.through.get_position_column_name()

    @property
    def position_path(self) -> str:
        """
        The path of the position column as seen by the relation's queryset.

        With an embedded through model the queryset paths are relative to the
        target model and the through columns live under the embedding prefix.
        """
        if self.embed_through:
            return f"{self.embed_through}__{self.position_column}"
        return self.position_column

    def get_queryset(self) -> QuerySet:
        queryset = super().get_queryset()
        return apply_position_ordering(queryset, self.position_path, self.order_policy)

    async def get_next_position(self) -> int:
        """
        Returns the position following the last child of the owning instance.
        """
        assert self.instance, "instance not initialized"
        queryset = (
            self.through.meta.managers["query_related"]
            .get_queryset()
            .filter(**{self.from_foreign_key: self.instance})
        )
        return await get_next_position(
            queryset, self.position_column, get_sortable_setting("sortable_start_position")
        )

    async def add(self, child: BaseModelType) -> BaseModelType | None:
        if not isinstance(
            child,
            self.to | self.to.proxy_model | self.through | self.through.proxy_model | dict,
        ):
            raise RelationshipIncompatible(
                f"The child is not from the types '{self.to.__name__}', '{self.through.__name__}'."
            )
        child = self.expand_relationship(child)
        if child.__dict__.get(self.position_column) is None:
            setattr(child, self.position_column, await self.get_next_position())
        return await super().add(child)
