"""Metadata, namespace and storage-backend interfaces for a file store."""

__version__ = "2.0.0"