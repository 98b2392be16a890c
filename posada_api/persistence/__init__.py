"""
Data persistence module for the market data API.

This module provides the key-value blob stores used by the response caches
and the price history, including atomic file replacement and recovery from
corrupted files.
"""

from .blob_store import BlobStore, FileBlobStore, MemoryBlobStore
from .json_store import JsonStore

__all__ = ['BlobStore', 'FileBlobStore', 'MemoryBlobStore', 'JsonStore']
