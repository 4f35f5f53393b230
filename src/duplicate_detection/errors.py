from __future__ import annotations


class DuplicateDetectionError(Exception):
    """Base class for errors raised by duplicate_detection."""


class CustomerStoreError(DuplicateDetectionError):
    """The customer datastore could not answer a candidate query."""
