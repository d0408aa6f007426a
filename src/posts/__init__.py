"""Posts Package.

Blog-style post operations. The API wires PostService to a
NullKeyValueStore, so posts are validated and shaped but never retained.
"""
from .service import PostService

__all__ = ["PostService"]
