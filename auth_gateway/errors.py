"""
Errors raised while seeding the OIDC client registry.
Messages name client ids and fields only; secrets never appear in them.
"""


class SeedError(Exception):
    """Base class for failures reported by the readiness gate."""

    retryable = True


class ConfigurationError(SeedError):
    """Client descriptor configuration is missing or malformed. Not retried within a process."""

    retryable = False


class StoreError(SeedError):
    """The client registry store could not be reached or rejected the write (timeout, connection)."""

    retryable = True


class GateConcurrencyViolation(RuntimeError):
    """Two seeding operations ran at once. Indicates a bug in the gate, not a runtime condition."""
