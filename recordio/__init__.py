"""Record-oriented file input: listing, reading, merging and reducing records, and a hashed file store."""

__version__ = "0.1.1"
__all__ = ["fileinfo", "reader", "sources", "merge", "datastore", "cli"]