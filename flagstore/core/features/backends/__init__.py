"""
Feature adapter implementations.
"""

from .memory import MemoryFeatureAdapter
from .redis import FEATURES_KEY, RedisFeatureAdapter

__all__ = [
    "FEATURES_KEY",
    "MemoryFeatureAdapter",
    "RedisFeatureAdapter",
]
