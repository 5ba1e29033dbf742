from __future__ import annotations

from enum import Enum
from functools import cached_property
from typing import Any

from pydantic_settings import SettingsConfigDict

from edgy.conf.global_settings import EdgySettings


class OrderPolicy(str, Enum):
    """
    How a sorted relation combines its position ordering with an ordering
    already present on the queryset it receives.
    """

    APPEND = "append"
    """
    The position clause is added after the existing clauses, which keep
    their precedence.
    """
    REPLACE = "replace"
    """
    Existing clauses are dropped and only the position clause is applied.
    """


class SortableSettings(EdgySettings):
    """
    Configuration settings for the sortable relations.

    This class extends `EdgySettings`, so it is activated the same way as any
    other Edgy settings class: by pointing `EDGY_SETTINGS_MODULE` to it or to a
    subclass of it. When plain `EdgySettings` are active, the defaults declared
    here are used.
    """

    model_config = SettingsConfigDict(extra="allow", ignored_types=(cached_property,))
    sortable_position_column: str = "position"
    """
    The default name of the position column of a `SortableModel`.

    Models can override it with the `position_column_name` class variable.
    Defaults to "position".
    """
    sortable_order_policy: OrderPolicy = OrderPolicy.APPEND
    """
    The default `OrderPolicy` of sorted relations.

    Defaults to `OrderPolicy.APPEND`.
    """
    sortable_start_position: int = 1
    """
    The first position handed out by automatic positioning and by
    `SortableModel.set_new_order`.

    Defaults to 1.
    """


def get_sortable_setting(name: str) -> Any:
    """
    Reads a sortable setting from the active Edgy settings, falling back to the
    default declared on `SortableSettings`.
    """
    from edgy.conf import settings

    try:
        return getattr(settings, name)
    except AttributeError:
        return SortableSettings.model_fields[name].default
