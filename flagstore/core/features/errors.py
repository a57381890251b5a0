"""
Feature store errors.

Backend client errors (connection refused, timeouts) are never wrapped here;
they propagate to the caller unchanged.
"""

from typing import Any


class FeatureStoreError(Exception):
    """Base class for errors raised by feature adapters."""


class UnsupportedDataTypeError(FeatureStoreError, TypeError):
    """A gate declares a data type the adapter cannot store."""

    def __init__(self, data_type: Any):
        self.data_type = data_type
        super().__init__(f"{data_type} is not supported by this adapter")


class InvalidGateValueError(FeatureStoreError, ValueError):
    """A gate key or set member cannot be encoded into a document field."""
