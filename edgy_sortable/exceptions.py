from edgy.exceptions import EdgyException


class SortableException(EdgyException):
    """
    Base exception class for all errors raised by the sortable relations.

    Database and query errors are never wrapped into it; they propagate from
    edgy and the database driver unchanged.
    """


class RelationshipKeyError(SortableException):
    """
    Exception raised when the keys given to a has-many-through relation do not
    describe a valid join chain.

    This covers unknown field names, fields which are not foreign keys, foreign
    keys pointing to an unexpected model and local keys which are not referenced
    by the corresponding foreign key.
    """
