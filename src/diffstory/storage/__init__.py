"""Review persistence."""

from diffstory.storage.paths import canonicalize, hash_directory
from diffstory.storage.store import ReviewStore, default_store_dir, load_review_file

__all__ = [
    "ReviewStore",
    "canonicalize",
    "default_store_dir",
    "hash_directory",
    "load_review_file",
]
