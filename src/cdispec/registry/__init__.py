"""Persistence adapters for spec documents.

FileSpecRegistry writes specs atomically into directories on disk;
MemorySpecRegistry keeps them in memory so SpecDocument can be unit-tested
without touching the filesystem.
"""

from .spec_db import (
    FileSpecRegistry,
    MemorySpecRegistry,
    RegistryFactory,
    SpecRegistry,
    decode_spec,
    encode_spec,
    open_registry,
)

__all__ = [
    "FileSpecRegistry",
    "MemorySpecRegistry",
    "RegistryFactory",
    "SpecRegistry",
    "decode_spec",
    "encode_spec",
    "open_registry",
]
