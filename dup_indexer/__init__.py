"""
Deduplicating value indexer.

Interns values into a compact, first-seen-ordered store and hands out dense
integer identifiers. Key strategies decide how values are looked up without
copying their content.
"""

from loguru import logger

from .errors import ConsumedIndexerError  # noqa: F401
from .indexer import DupIndexer, IndexerView  # noqa: F401
from .keys import (  # noqa: F401
    ARRAY_KEYS,
    IDENTITY_KEYS,
    ArrayKey,
    ArrayKeys,
    IdentityKeys,
    KeyStrategy,
    ShallowKeys,
    is_trivially_copyable,
    key_strategy_for,
)
from .store import DEFAULT_SLAB_SIZE, SlabStore  # noqa: F401

logger.disable(__name__)
