"""Exceptions raised by fastlegend's service collaborators."""


class FastLegendError(Exception):
    """Base exception for fastlegend."""

    pass


class ServiceError(FastLegendError):
    """Raised when a remote service call fails."""

    pass


class LeaderboardServiceError(ServiceError):
    """Raised when the leaderboard cannot be fetched or its payload is malformed."""

    pass


class RegistrationError(ServiceError):
    """Raised when a user registration is not accepted."""

    pass


class DuplicateRegistrationError(RegistrationError):
    """Raised when the mobile number is already registered (HTTP 409)."""

    pass
