"""
Recursive normalizer turning ORM entity graphs into plain nested data.

Every node is classified as an entity, a mapping, a sequence or a scalar.
Entities lose their instance state and every attribute that was never
loaded; mappings and sequences are rebuilt; scalars (including Decimal,
datetime and non-table models) are returned as the same object.
"""

import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Dict, Optional, Set

from .config import CYCLE_POLICIES, load_config
from .entities import NotLoaded, entity_fields, entity_identity, entity_name, is_entity, is_orm_collection
from .errors import CycleDetectedError

logger = logging.getLogger(__name__)

SEQUENCE_TYPES = (list, tuple, set, frozenset)


def _is_row(value: Any) -> bool:
    # SQLAlchemy Row objects and namedtuples
    return hasattr(value, '_asdict') and callable(value._asdict)


class GraphNormalizer:
    """
    Converts entities, rows, mappings and sequences into dicts and lists.

    Instances hold only their configuration, so one normalizer can be shared
    between threads. The set of entities currently being expanded lives on the
    stack of a single normalize() call.

    Args:
        cycle_policy: What to do when a loaded association leads back to an
            entity that is still being expanded:
            'reference' returns {'$ref': <class name>, 'identity': <pk list>},
            'error' raises CycleDetectedError,
            'ignore' recurses without a guard.
    """

    def __init__(self, cycle_policy: str = 'reference'):
        if cycle_policy not in CYCLE_POLICIES:
            raise ValueError(
                f"Invalid cycle_policy '{cycle_policy}'. Expected one of: {', '.join(CYCLE_POLICIES)}"
            )
        self.cycle_policy = cycle_policy

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> 'GraphNormalizer':
        """Build a normalizer from the 'normalizer' section of a config dict (defaults to load_config())."""
        if config is None:
            config = load_config()
        section = config.get('normalizer') or {}
        return cls(cycle_policy=section.get('cycle_policy', 'reference'))

    def normalize(self, value: Any) -> Any:
        """
        Convert a value reachable from a materialized ORM graph into plain data.

        Args:
            value: An entity, row, mapping, sequence, scalar or None

        Returns:
            A dict, list or the unchanged scalar

        Only attributes present in an entity's state are kept. Right after
        Session.commit() every column is expired, so the entity normalizes to
        an empty dict until it is refreshed or reloaded.
        """
        return self._normalize(value, set())

    def _normalize(self, value: Any, path: Set[int]) -> Any:
        if is_entity(value):
            return self._normalize_entity(value, path)
        if isinstance(value, Mapping):
            return self._normalize_mapping(value, path)
        if _is_row(value):
            return self._normalize_mapping(value._asdict(), path)
        if isinstance(value, SEQUENCE_TYPES):
            return [self._normalize(item, path) for item in value]
        return value

    def _normalize_entity(self, entity: Any, path: Set[int]) -> Any:
        if self.cycle_policy == 'ignore':
            return self._normalize_mapping(self._loaded_fields(entity), path)

        marker = id(entity)
        if marker in path:
            return self._back_reference(entity)

        path.add(marker)
        try:
            return self._normalize_mapping(self._loaded_fields(entity), path)
        finally:
            path.discard(marker)

    def _loaded_fields(self, entity: Any) -> Dict[str, Any]:
        fields = entity_fields(entity)
        loaded = {key: value for key, value in fields.items() if not isinstance(value, NotLoaded)}
        if len(loaded) != len(fields):
            logger.debug(
                "Dropped unloaded attributes %s from %s",
                sorted(set(fields) - set(loaded)),
                entity_name(entity)
            )
        return loaded

    def _normalize_mapping(self, mapping: Mapping, path: Set[int]) -> Dict[Any, Any]:
        result = {}
        for key, value in mapping.items():
            # First value seen for a key wins
            if key in result:
                continue
            result[key] = self._normalize_field(value, path)
        return result

    def _normalize_field(self, value: Any, path: Set[int]) -> Any:
        # Nested plain mappings (e.g. JSON columns) are kept as they are
        if is_entity(value):
            return self._normalize_entity(value, path)
        if isinstance(value, Mapping) and is_orm_collection(value):
            # Keyed relationship collections hold entities, unlike JSON columns
            return {key: self._normalize(item, path) for key, item in value.items()}
        if _is_row(value):
            return self._normalize_mapping(value._asdict(), path)
        if isinstance(value, SEQUENCE_TYPES):
            return [self._normalize(item, path) for item in value]
        return value

    def _back_reference(self, entity: Any) -> Dict[str, Any]:
        name = entity_name(entity)
        identity = entity_identity(entity)
        if self.cycle_policy == 'error':
            raise CycleDetectedError(name, identity)
        logger.warning(f"Cycle detected at {name} {identity}, emitting a back-reference")
        return {'$ref': name, 'identity': identity}


@lru_cache(maxsize=None)
def get_default_normalizer() -> GraphNormalizer:
    """Normalizer configured from ~/.convertx/config/config.yaml, built once per process."""
    return GraphNormalizer.from_config()


def normalize(value: Any) -> Any:
    """Normalize a value with the default normalizer. See GraphNormalizer.normalize."""
    return get_default_normalizer().normalize(value)


map_from_struct = normalize
