"""
steam_totp.py - Steam Guard code generation

Generates the 5-character Steam Guard login codes, the confirmation keys the
mobile app signs trade/market confirmations with, and the android device id
the mobile app registers under.

Usage:
    from steam_totp import generate_auth_code, generate_confirmation_key

    code = generate_auth_code(shared_secret)
    key = generate_confirmation_key(identity_secret, get_time(), "conf")

Where the secrets come from:
    - Steam Desktop Authenticator (Windows): maFiles/*.maFile
    - steamguard-cli (Linux): ~/.config/steamguard-cli/maFiles/*.maFile

If the local clock drifts, measure the offset with time_sync.query_time_offset()
and pass it as time_offset.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import re
import struct
import time as _time

from errors import InvalidSecretError


# search, not fullmatch: any run of 40 hex chars marks the whole secret as hex,
# including a base64 secret that happens to contain one.
HEX_SECRET_RE = re.compile(r"[0-9a-f]{40}", re.IGNORECASE)
DEVICE_ID_RE = re.compile(r"^([0-9a-f]{8})([0-9a-f]{4})([0-9a-f]{4})([0-9a-f]{4})([0-9a-f]{12}).*$")


# =========================
# Secret / buffer helpers
# =========================

def _b64_key(secret: str) -> bytes:
    # Node's base64 decoder also takes url-safe chars and missing padding
    secret = secret.strip().replace("-", "+").replace("_", "/")
    padded = secret + "=" * (-len(secret) % 4)
    try:
        return base64.b64decode(padded)
    except (binascii.Error, ValueError) as e:
        raise InvalidSecretError(f"Secret is not valid base64: {e}") from e


def _check_key(key: bytes) -> bytes:
    if not key:
        raise InvalidSecretError("Secret decodes to an empty key")
    return key


def decode_secret(secret: str | bytes) -> bytes:
    """
    Turn a shared_secret into raw HMAC key bytes.

    A string containing 40 contiguous hex chars is hex, anything else is
    base64 (url-safe chars and missing padding accepted). Bytes are used as
    the key unchanged.

    The hex check only looks for a 40-char run, so a string that has one
    but also holds non-hex chars is rejected with InvalidSecretError rather
    than half-decoded.
    """
    if isinstance(secret, (bytes, bytearray)):
        return _check_key(bytes(secret))
    if not isinstance(secret, str):
        raise InvalidSecretError(f"Secret must be str or bytes, not {type(secret).__name__}")

    if HEX_SECRET_RE.search(secret):
        try:
            return _check_key(binascii.unhexlify(secret.strip()))
        except (binascii.Error, ValueError) as e:
            raise InvalidSecretError(f"Secret looks like hex but does not decode: {e}") from e

    return _check_key(_b64_key(secret))


def _decode_identity_secret(identity_secret: str | bytes) -> bytes:
    # identity_secret is always base64, no hex sniffing
    if isinstance(identity_secret, (bytes, bytearray)):
        return _check_key(bytes(identity_secret))
    if not isinstance(identity_secret, str):
        raise InvalidSecretError(f"Identity secret must be str or bytes, not {type(identity_secret).__name__}")
    return _check_key(_b64_key(identity_secret))


def _pack_time(value: int) -> bytes:
    # 8 bytes big-endian; upper 32 bits are zero for any 32-bit counter
    return struct.pack(">Q", value)


# =========================
# Authenticator
# =========================

class SteamAuthenticator:
    DIGITS = 5
    PERIOD = 30
    ALPHABET = "23456789BCDFGHJKMNPQRTVWXY"
    MAX_TAG_LEN = 32

    def get_time(self, time_offset: int | None = 0) -> int:
        """Current unix time in seconds, shifted by time_offset."""
        return int(_time.time()) + (time_offset or 0)

    def seconds_remaining(self, time_offset: int | None = 0) -> int:
        """Seconds until the current code rolls over (1..PERIOD)."""
        return self.PERIOD - (self.get_time(time_offset) % self.PERIOD)

    def generate_auth_code(
        self,
        secret: str | bytes,
        time_offset: int | None = 0,
        timestamp: int | None = None,
    ) -> str:
        """
        Generate a Steam-style 2FA login code from the shared_secret.

        timestamp pins the clock (unix seconds); otherwise the local clock is
        used. time_offset is added in both cases.
        """
        key = decode_secret(secret)

        if timestamp is None:
            now = self.get_time(time_offset)
        else:
            now = int(timestamp) + (time_offset or 0)

        msg = _pack_time(now // self.PERIOD)
        digest = hmac.new(key, msg, hashlib.sha1).digest()

        # Dynamic truncation
        start = digest[19] & 0x0F
        code_int = struct.unpack(">I", digest[start:start + 4])[0] & 0x7FFFFFFF

        # Least significant symbol first, not reversed
        code_chars = []
        for _ in range(self.DIGITS):
            code_chars.append(self.ALPHABET[code_int % len(self.ALPHABET)])
            code_int //= len(self.ALPHABET)

        return "".join(code_chars)

    def generate_confirmation_key(
        self,
        identity_secret: str | bytes,
        time: int,
        tag: str | None = "",
    ) -> str:
        """
        Sign (time, tag) with the identity_secret for a mobile confirmation
        request. Tag is e.g. "conf", "details", "allow", "cancel"; only its
        first 32 chars are signed.
        """
        msg = _pack_time(int(time))
        if tag:
            # room for min(len, 32) bytes, multi-byte chars don't get more
            tag_len = min(len(tag), self.MAX_TAG_LEN)
            msg += tag[:tag_len].encode("utf-8")[:tag_len]

        key = _decode_identity_secret(identity_secret)
        digest = hmac.new(key, msg, hashlib.sha1).digest()
        return base64.b64encode(digest).decode("ascii")

    def get_device_id(self, steamid: str | int) -> str:
        """android:<uuid-shaped sha1 of the SteamID64>. Deterministic."""
        hexdigest = hashlib.sha1(str(steamid).encode("utf-8")).hexdigest()
        return "android:" + DEVICE_ID_RE.sub(r"\1-\2-\3-\4-\5", hexdigest)


authenticator = SteamAuthenticator()

get_time = authenticator.get_time
seconds_remaining = authenticator.seconds_remaining
generate_auth_code = authenticator.generate_auth_code
generate_confirmation_key = authenticator.generate_confirmation_key
get_device_id = authenticator.get_device_id
