from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from edgy.core.db.constants import NEW_M2M_NAMING, OLD_M2M_NAMING
from edgy.core.db.fields.many_to_many import BaseManyToManyForeignKeyField, ManyToManyField
from edgy.exceptions import FieldDefinitionError

from edgy_sortable.protocols import PositionColumnSource
from edgy_sortable.relationships.many import SortedManyRelation
from edgy_sortable.settings import OrderPolicy

if TYPE_CHECKING:
    from edgy import Model
    from edgy.core.db.fields.types import BaseFieldType
    from edgy.core.db.models.types import BaseModelType
    from edgy.protocols.many_relationship import ManyRelationProtocol


class BaseSortedManyToManyField(BaseManyToManyForeignKeyField):
    """
    Many-to-many field whose forward relation is a `SortedManyRelation`.

    The reverse relation, from the target back to the owner, is not ordered.
    """

    def __init__(self, *, order_policy: OrderPolicy | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.order_policy = order_policy

    def get_relation(self, **kwargs: Any) -> ManyRelationProtocol:
        assert not isinstance(self.through, str), "through not initialized yet"
        if not isinstance(self.through, PositionColumnSource):
            raise FieldDefinitionError(
                f'"through" model {self.through.__name__} of {self.owner.__name__}.{self.name} '
                "must implement get_position_column_name()."
            )
        return SortedManyRelation(
            through=self.through,
            to=self.target,
            from_foreign_key=self.from_foreign_key,
            to_foreign_key=self.to_foreign_key,
            embed_through=self.embed_through,
            order_policy=self.order_policy,
            **kwargs,
        )


class SortedManyToManyField(ManyToManyField):
    """
    A factory for many-to-many fields ordered by the position column of their
    `through` model.

    The `through` model is mandatory and must implement `PositionColumnSource`.
    Usually it is an abstract `SortableModel` subclass holding only the position
    column, from which edgy generates the concrete through model.
    """

    field_bases: tuple = (BaseSortedManyToManyField,)

    def __new__(  # type: ignore
        cls,
        to: BaseModelType | type[Model] | str,
        *,
        through: str | type[BaseModelType] | type[Model] = "",
        through_tablename: str | type[OLD_M2M_NAMING] | type[NEW_M2M_NAMING] = NEW_M2M_NAMING,
        embed_through: str | Literal[False] = "",
        order_policy: OrderPolicy | str | None = None,
        **kwargs: Any,
    ) -> BaseFieldType:
        """
        Creates a new `SortedManyToManyField` instance.

        Args:
            to (Union[BaseModelType, type[Model], str]): The target model class or its string name.
            through (str | type[BaseModelType] | type[Model]): The intermediate model
                carrying the position column.
            through_tablename (str | type[OLD_M2M_NAMING] | type[NEW_M2M_NAMING]):
                The table name used when `through` is abstract.
            embed_through (str): Embedding prefix of the `through` model. `False`
                is not supported.
            order_policy (OrderPolicy | str | None): How the position ordering is
                combined with an existing one. Read from the settings when `None`.
            **kwargs (Any): Additional keyword arguments for `ManyToManyField`.
        """
        return super().__new__(
            cls,
            to,
            through=through,
            through_tablename=through_tablename,
            embed_through=embed_through,
            order_policy=order_policy,
            **kwargs,
        )

    @classmethod
    def validate(cls, kwargs: dict[str, Any]) -> None:
        super().validate(kwargs)
        if not kwargs.get("through"):
            raise FieldDefinitionError('"through" is required for SortedManyToMany.')
        if kwargs.get("embed_through") is False:
            raise FieldDefinitionError('"embed_through" cannot be False for SortedManyToMany.')
        order_policy = kwargs.get("order_policy")
        if order_policy is not None:
            try:
                kwargs["order_policy"] = OrderPolicy(order_policy)
            except ValueError:
                raise FieldDefinitionError(
                    f'"order_policy" must be one of {[policy.value for policy in OrderPolicy]}.'
                ) from None


SortedManyToMany = SortedManyToManyField
