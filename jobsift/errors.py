"""
Exception hierarchy for jobsift.

Three families:
- ConfigurationError: bad inputs detected before or at the start of a stage
- DataIntegrityError: scraped data does not fit the field schema
- CollaboratorError: the crawler or the tagging service failed
"""

from __future__ import annotations


class JobsiftError(Exception):
    """Base class for all jobsift errors."""


# ----------------------------- Configuration -----------------------------

class ConfigurationError(JobsiftError):
    """Invalid configuration, fatal to the stage that detected it."""


class EmptyFieldSchemaError(ConfigurationError):
    def __init__(self, message: str = "field schema does not have any fields"):
        super().__init__(message)


class EmptyKeywordSetError(ConfigurationError):
    def __init__(self, message: str = "keyword list is empty"):
        super().__init__(message)


class InvalidKeywordError(ConfigurationError):
    """A keyword could not be compiled as a pattern."""

    def __init__(self, keyword: str, reason: str):
        self.keyword = keyword
        self.reason = reason
        super().__init__(f"invalid keyword pattern {keyword!r}: {reason}")


# ----------------------------- Data integrity -----------------------------

class DataIntegrityError(JobsiftError):
    """Scraped data does not match the field schema's assumptions."""


class EmptyInputError(DataIntegrityError):
    def __init__(self, message: str = "scraped record information is empty"):
        super().__init__(message)


class UnbalancedFieldsError(DataIntegrityError):
    """Two fields captured a different number of fragments."""

    def __init__(self, field_a: str, len_a: int, field_b: str, len_b: int):
        self.field_a = field_a
        self.len_a = len_a
        self.field_b = field_b
        self.len_b = len_b
        super().__init__(
            f"scraped record information incomplete: "
            f"key: {field_a}, size: {len_a}, key: {field_b}, size: {len_b}"
        )


class AccumulatorSealedError(DataIntegrityError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"accumulator is sealed, cannot append to {field!r}")


# ----------------------------- Collaborators -----------------------------

class CollaboratorError(JobsiftError):
    """An external collaborator (crawler, tagging service) failed."""


class FetchError(CollaboratorError):
    def __init__(self, url: str, reason: str, status: int = 0):
        self.url = url
        self.reason = reason
        self.status = status
        super().__init__(f"failed to fetch {url}: {reason}")


class CrawlError(CollaboratorError):
    """A match callback failed while the document was being traversed."""


class CrawlTimeoutError(CollaboratorError):
    def __init__(self, timeout_s: float, pending: int):
        self.timeout_s = timeout_s
        self.pending = pending
        super().__init__(f"extraction did not complete within {timeout_s}s ({pending} callbacks pending)")


class TaggingError(CollaboratorError):
    """The tagging service could not produce a tag set."""
