"""
errors.py - Exceptions shared by steam_totp and time_sync
"""


class SteamTotpError(Exception):
    """Base class for everything raised by this project."""


class InvalidSecretError(SteamTotpError, ValueError):
    """A shared/identity secret could not be turned into an HMAC key."""


class TimeQueryError(SteamTotpError):
    """QueryTime request failed (DNS, connect, timeout, HTTP status)."""


class MalformedResponseError(TimeQueryError):
    """QueryTime answered, but without a usable server_time."""
