"""
Exceptions raised by the DropCharge services.

The metadata extractor itself never raises; these cover the pipeline
around it (input validation and persistence).
"""


class DropChargeError(Exception):
    """Base class for DropCharge errors."""


class InvalidProductInput(DropChargeError):
    """The submitted Amazon link / affiliate key cannot be used."""


class InvalidSubscriberInput(DropChargeError):
    """The submitted email address cannot be used."""


class StorageError(DropChargeError):
    """Supabase is unavailable or rejected a query."""


class ProductStoreError(StorageError):
    """The product store is unavailable or rejected a query."""


class SubscriberStoreError(StorageError):
    """The subscriber / click tables are unavailable or rejected a query."""
