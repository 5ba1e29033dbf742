from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, ClassVar, Literal

import edgy
from loguru import logger

from edgy_sortable.relationships.utils import get_highest_position, get_next_position
from edgy_sortable.settings import get_sortable_setting

if TYPE_CHECKING:
    from edgy import QuerySet


class SortableModel(edgy.Model):
    """
    Base for models whose rows carry an explicit position.

    It implements `PositionColumnSource`, so subclasses can be used as the
    intermediate model of `SortedHasManyThrough` and, declared abstract, as the
    `through` model of `SortedManyToMany`.
    The position field itself is declared by the subclass; its name is taken
    from `position_column_name` or, when unset, from the
    `sortable_position_column` setting. The field should be nullable so that
    rows saved without a position get the next free one assigned.

    Positions are counted separately for every combination of the fields named
    in `position_scope`.

    Looking up the next position and saving the row are separate statements.
    Concurrent writers in the same scope can receive the same position; use
    `set_new_order` to renumber or guard the scope with a unique constraint.

    Example:

        class Membership(SortableModel):
            position_scope = ("team",)

            team = edgy.ForeignKey(Team)
            position = edgy.IntegerField(null=True)

            class Meta:
                registry = models
    """

    position_column_name: ClassVar[str | None] = None
    # Not atomic with the insert, see the class docstring.
    position_scope: ClassVar[tuple[str, ...]] = ()

    class Meta:
        abstract = True

    @classmethod
    def get_position_column_name(cls) -> str:
        return cls.position_column_name or get_sortable_setting("sortable_position_column")

    @classmethod
    def ordered(cls, direction: Literal["asc", "desc"] = "asc") -> QuerySet:
        """
        Returns a queryset of all rows ordered by position.
        """
        column = cls.get_position_column_name()
        if direction == "desc":
            column = f"-{column}"
        return cls.query.order_by(column)

    def get_position_scope(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.position_scope}

    @classmethod
    async def get_highest_position(cls, **scope: Any) -> Any:
        """
        Returns the highest position within `scope` or `None` if there is none.
        """
        return await get_highest_position(
            cls.query.filter(**scope), cls.get_position_column_name()
        )

    @classmethod
    async def get_next_position(cls, **scope: Any) -> int:
        return await get_next_position(
            cls.query.filter(**scope),
            cls.get_position_column_name(),
            get_sortable_setting("sortable_start_position"),
        )

    @classmethod
    async def set_new_order(cls, ids: Iterable[Any], start_position: int | None = None) -> None:
        """
        Assigns consecutive positions to the rows with the given primary keys,
        following the order of `ids`.

        Rows not listed keep their position. The updates run in one transaction.

        Args:
            ids (Iterable[Any]): Primary keys in their new order.
            start_position (int | None): The position of the first row. Defaults
                to the `sortable_start_position` setting.
        """
        if start_position is None:
            start_position = get_sortable_setting("sortable_start_position")
        column = cls.get_position_column_name()
        ids = list(ids)
        async with cls.query.transaction():
            for position, pk in enumerate(ids, start=start_position):
                await cls.query.filter(pk=pk).update(**{column: position})
        logger.info(f"Reordered {len(ids)} rows of '{cls.__name__}' starting at {start_position}.")

    async def move_to_start(self) -> None:
        """
        Moves the instance in front of all other rows of its scope.
        """
        cls = type(self)
        others = await cls.ordered().filter(**self.get_position_scope()).exclude(pk=self.pk)
        start_position = get_sortable_setting("sortable_start_position")
        await cls.set_new_order([self.pk, *(other.pk for other in others)], start_position)
        setattr(self, self.get_position_column_name(), start_position)

    async def move_to_end(self) -> None:
        """
        Moves the instance behind all other rows of its scope.
        """
        cls = type(self)
        column = self.get_position_column_name()
        position = await get_next_position(
            cls.query.filter(**self.get_position_scope()).exclude(pk=self.pk),
            column,
            get_sortable_setting("sortable_start_position"),
        )
        await cls.query.filter(pk=self.pk).update(**{column: position})
        setattr(self, column, position)

    async def real_save(
        self,
        force_insert: bool = False,
        values: dict[str, Any] | set[str] | None = None,
    ) -> SortableModel:
        """
        Saves the instance, assigning the next free position of its scope when
        the position column is empty.
        """
        column = self.get_position_column_name()
        if self.__dict__.get(column) is None:
            position = await self.get_next_position(**self.get_position_scope())
            setattr(self, column, position)
            if isinstance(values, dict):
                values = {**values, column: position}
            elif isinstance(values, set):
                values = {*values, column}
        return await super().real_save(force_insert=force_insert, values=values)
