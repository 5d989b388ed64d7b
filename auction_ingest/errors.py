# auction_ingest/errors.py
"""Exceptions raised across the ingestion pipeline."""


class IngestError(Exception):
    """Base class for ingestion failures."""


class SourceUnavailable(IngestError):
    """The listing API could not be reached or answered with an HTTP error."""


class MalformedResponse(IngestError):
    """The listing API answered, but the envelope is unusable."""


class TransientGeocodeError(IngestError):
    """Server error or timeout from the geocoder; worth another attempt."""
