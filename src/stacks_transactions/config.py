"""
Codec configuration.

Decode limits are an explicit options object rather than module globals so
that a caller accepting untrusted bytes can tighten them per call.
"""

from __future__ import annotations
from pydantic import BaseModel, Field

from .enums import MAX_U32


class CodecLimits(BaseModel):
    """
    Bounds applied while decoding Clarity values.

    max_depth caps recursion (and therefore stack use) independently of the
    input; max_collection_length caps declared list/tuple sizes.
    """
    max_depth: int = Field(
        default=16, ge=1, le=64,
        alias="maxDepth",
        description="Maximum nesting depth of composite values",
    )
    max_collection_length: int = Field(
        default=1_048_576, ge=0, le=MAX_U32,
        alias="maxCollectionLength",
        description="Maximum declared element count of a list or tuple",
    )

    model_config = {"populate_by_name": True, "extra": "forbid", "frozen": True}


DEFAULT_LIMITS = CodecLimits()


__all__ = ["CodecLimits", "DEFAULT_LIMITS"]
