"""Error types raised by the option-chain engine.

Malformed individual numeric fields are not errors: they degrade to
defaults during normalization. Only structurally unusable payloads and
contract violations by the caller raise.
"""

from __future__ import annotations


class DataError(ValueError):
    """Raw payload is missing something the engine cannot do without.

    Raised when no usable strike rows exist, or when no positive
    underlying price can be derived. The whole fetch cycle is aborted;
    no partial snapshot is produced.
    """


class ConfigError(ValueError):
    """Caller supplied an invalid configuration value.

    Examples: a window size below 3, a non-positive lot size override,
    an unknown exchange name.
    """
