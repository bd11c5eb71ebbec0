"""MongoDB index management.

Indexes are declared by the repositories and created at app startup.
An existing index that clashes with a declaration (same name, or same
keys under another name or with other options) is dropped and rebuilt.
"""

from logging import getLogger

from pymongo.errors import OperationFailure

logger = getLogger(__name__)

# IndexOptionsConflict, IndexKeySpecsConflict
INDEX_CONFLICT_CODES = (85, 86)


def create_index_safe(collection, keys: list, name: str, **kwargs) -> bool:
    """Create an index, replacing a conflicting one if needed.

    Returns False when the conflict could not be traced to an existing index.
    Other storage errors propagate.
    """
    try:
        collection.create_index(keys, name=name, **kwargs)
        return True
    except OperationFailure as e:
        if e.code not in INDEX_CONFLICT_CODES:
            raise
        return _replace_conflicting(collection, keys, name, **kwargs)


def _replace_conflicting(collection, keys: list, name: str, **kwargs) -> bool:
    wanted = dict(keys)
    conflicting = [
        idx_name
        for idx_name, info in collection.index_information().items()
        if idx_name != '_id_' and (idx_name == name or dict(info.get('key', [])) == wanted)
    ]
    if not conflicting:
        logger.error("Index conflict with no matching index", extra={"index": name})
        return False

    for idx_name in conflicting:
        logger.warning("Dropping conflicting index", extra={"index": idx_name})
        collection.drop_index(idx_name)
    collection.create_index(keys, name=name, **kwargs)
    logger.info("Recreated index", extra={"index": name})
    return True


def ensure_all_indexes(db) -> bool:
    """Ensure indexes for all collections. Called at app startup."""
    from adapter.mongodb.user_repository import MongoUserRepository

    return MongoUserRepository(db).ensure_indexes()
