"""
Exception types raised by the corpus, preprocessing and DFM layers.

The lookup errors subclass KeyError and the configuration error subclasses
ValueError, so callers that already catch the built-in types keep working.
"""

from __future__ import annotations


class NlpPrimerError(Exception):
    """Base class for all errors raised by nlp_primer."""


class DuplicateId(NlpPrimerError, KeyError):
    """A document with the same identifier already exists in the corpus."""


class NotFound(NlpPrimerError, KeyError):
    """A document identifier, metadata key or group key does not exist."""


class InvalidConfiguration(NlpPrimerError, ValueError):
    """An option, option combination, resource identifier or input is invalid."""
