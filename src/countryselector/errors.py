"""Error taxonomy for the country/subdivision load pipeline."""

from __future__ import annotations


class SelectorError(Exception):
    """Base class for country selector failures."""


class ConfigurationError(SelectorError):
    """A configured resource or setting is missing or invalid.

    Raised synchronously at the point of use. Resource locations are part of
    deployment, so callers should treat this as a startup failure.
    """


class TransferError(SelectorError):
    """Reading or decoding a resource failed part-way through the stream."""

    def __init__(self, resource_id: str, message: str) -> None:
        super().__init__(f"{resource_id}: {message}")
        self.resource_id = resource_id
