from typing import Protocol, runtime_checkable


@runtime_checkable
class PositionColumnSource(Protocol):
    """
    Defines the capability an intermediate ("through") model must offer to be
    used with a sorted relation.

    The sorted relations ask the through model for the name of the column which
    stores the explicit ordering of its rows and append an ascending order clause
    on it. The column must exist on the through table and hold ordinal values.
    The `@runtime_checkable` decorator allows for runtime checks using
    `isinstance()` on both model classes and instances.
    """

    @classmethod
    def get_position_column_name(cls) -> str:
        """
        Returns the name of the position column of the through model.
        """
        ...
