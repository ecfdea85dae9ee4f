"""Errors raised by routing source clients."""


class RoutingError(Exception):
    """Base class for routing source errors."""


class RoutingSourceUnavailable(RoutingError):
    """The routing source failed or returned a response that cannot be used.

    Covers transport errors, timeouts, non-success HTTP statuses and
    malformed payloads. Not retried: without candidates there is nothing to
    score.
    """
