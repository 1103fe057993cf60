"""
Entity boundary for the convertx normalizer.

This module is the only place that looks at SQLAlchemy instance state. It
decides which mapped attributes of an entity were actually loaded and marks
the rest with the NOT_LOADED sentinel, so the normalizer never needs to
inspect type names or touch lazy loaders.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import inspect
from sqlalchemy.orm import ColumnProperty, RelationshipProperty
from sqlalchemy.orm.state import InstanceState


class NotLoaded:
    """
    Placeholder for a mapped attribute that is absent from an entity's loaded state.

    There is exactly one instance, NOT_LOADED. It is falsy and copies to itself.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<NOT_LOADED>"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (NotLoaded, ())


NOT_LOADED = NotLoaded()


def _instance_state(value: Any) -> Optional[InstanceState]:
    state = inspect(value, raiseerr=False)
    if isinstance(state, InstanceState):
        return state
    return None


def is_entity(value: Any) -> bool:
    """
    Check whether a value is an instance of a SQLAlchemy-mapped class.

    Mapped classes themselves, result rows and plain objects are not entities.
    """
    return _instance_state(value) is not None


def entity_fields(entity: Any) -> Dict[str, Any]:
    """
    Read the mapped attributes of an entity without triggering any loads.

    Args:
        entity: A mapped instance (see is_entity)

    Returns:
        New dict of attribute key to loaded value, in mapper order. Column and
        relationship attributes missing from the instance's state dict map to
        NOT_LOADED. That includes deferred columns and attributes expired by
        Session.commit()/expire(); refresh the entity first to read them.

    Raises:
        TypeError: If the value is not a mapped instance
    """
    state = _instance_state(entity)
    if state is None:
        raise TypeError(f"{type(entity).__name__} is not a mapped entity")

    loaded = state.dict
    fields = {}
    for prop in state.mapper.attrs:
        if not isinstance(prop, (ColumnProperty, RelationshipProperty)):
            continue
        fields[prop.key] = loaded[prop.key] if prop.key in loaded else NOT_LOADED
    return fields


def entity_identity(entity: Any) -> Optional[List[Any]]:
    """Primary key values of a persistent entity, or None while it is transient/pending."""
    state = _instance_state(entity)
    if state is None or state.identity is None:
        return None
    return list(state.identity)


def entity_name(entity: Any) -> str:
    """Class name of an entity, used in back-references and log messages."""
    return type(entity).__name__


def is_orm_collection(value: Any) -> bool:
    """
    Check whether a value is a collection installed by SQLAlchemy on an entity.

    Relationship collections (lists, sets and keyed dicts such as
    attribute_keyed_dict) carry a collection adapter; plain containers do not.
    """
    return getattr(value, "_sa_adapter", None) is not None
