class ScorecardError(Exception):
    """Base class for errors raised by the scorecard services."""


class NotFoundError(ScorecardError):
    pass


class ValidationFailed(ScorecardError):
    pass


class LockUnavailable(ScorecardError):
    """Another rollup or replication holds the organization lock."""
