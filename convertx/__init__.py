"""
convertx: turn SQLAlchemy/SQLModel entity graphs into plain nested data.

Only loaded attributes survive; instance state and unloaded associations are
dropped, and the result is built from dicts, lists and untouched scalars.
"""

from .config import load_config, get_default_config
from .entities import (
    NOT_LOADED,
    NotLoaded,
    is_entity,
    is_orm_collection,
    entity_fields,
    entity_identity,
    entity_name
)
from .errors import ConvertxError, CycleDetectedError
from .logging_config import setup_logging
from .normalizer import GraphNormalizer, get_default_normalizer, normalize, map_from_struct

__all__ = [
    'GraphNormalizer',
    'normalize',
    'map_from_struct',
    'get_default_normalizer',
    'NOT_LOADED',
    'NotLoaded',
    'is_entity',
    'entity_fields',
    'entity_identity',
    'entity_name',
    'is_orm_collection',
    'ConvertxError',
    'CycleDetectedError',
    'load_config',
    'get_default_config',
    'setup_logging'
]
