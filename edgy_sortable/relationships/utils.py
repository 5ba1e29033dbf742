from __future__ import annotations

from typing import TYPE_CHECKING, Any

from edgy_sortable.exceptions import RelationshipKeyError

if TYPE_CHECKING:  # pragma: no cover
    from edgy import QuerySet
    from edgy.core.db.fields.types import BaseFieldType
    from edgy.core.db.models.types import BaseModelType


def get_foreign_key(
    model_class: type[BaseModelType], name: str, target: type[BaseModelType]
) -> BaseFieldType:
    """
    Returns the foreign key field `name` of `model_class` and checks that it
    points to `target`.

    Args:
        model_class (type["BaseModelType"]): The model declaring the foreign key.
        name (str): The field name of the foreign key.
        target (type["BaseModelType"]): The model the foreign key must reference.

    Raises:
        RelationshipKeyError: If the field is missing, is no foreign key or
                              references another model.
    """
    field = model_class.meta.fields.get(name)
    if field is None:
        raise RelationshipKeyError(
            detail=f"'{model_class.__name__}' has no field named '{name}'."
        )
    if name not in model_class.meta.foreign_key_fields:
        raise RelationshipKeyError(
            detail=f"'{model_class.__name__}.{name}' is not a foreign key."
        )
    if field.target.get_real_class() is not target.get_real_class():
        raise RelationshipKeyError(
            detail=f"'{model_class.__name__}.{name}' points to '{field.target.__name__}', "
            f"expected '{target.__name__}'."
        )
    return field


def detect_foreign_key(model_class: type[BaseModelType], target: type[BaseModelType]) -> str:
    """
    Finds the name of the single foreign key of `model_class` pointing to `target`.

    Raises:
        RelationshipKeyError: If there is no such foreign key or more than one.
    """
    candidate = None
    for field_name in model_class.meta.foreign_key_fields:
        field = model_class.meta.fields[field_name]
        if field.target.get_real_class() is target.get_real_class():
            if candidate:
                raise RelationshipKeyError(
                    detail=f"'{model_class.__name__}' has multiple foreign keys to "
                    f"'{target.__name__}', specify the key explicitly."
                )
            candidate = field_name
    if not candidate:
        raise RelationshipKeyError(
            detail=f"'{model_class.__name__}' has no foreign key to '{target.__name__}'."
        )
    return candidate


def check_local_key(field: BaseFieldType, local_key: str) -> None:
    """
    Checks that `local_key` is one of the columns referenced by the foreign key `field`.
    """
    if local_key not in field.related_columns:
        raise RelationshipKeyError(
            detail=f"'{field.owner.__name__}.{field.name}' does not reference "
            f"'{field.target.__name__}.{local_key}'."
        )


async def get_highest_position(queryset: QuerySet, column: str) -> Any:
    """
    Returns the highest non-null value of `column` within `queryset` or `None`
    when no row carries a position yet.
    """
    last = (
        await queryset.filter(**{f"{column}__isnull": False}).order_by(f"-{column}").first()
    )
    if last is None:
        return None
    return getattr(last, column)


async def get_next_position(queryset: QuerySet, column: str, start: int) -> int:
    """
    Returns the position following the highest one within `queryset`, or
    `start` for an empty queryset.
    """
    highest = await get_highest_position(queryset, column)
    if highest is None:
        return start
    return int(highest) + 1
