"""Utility helpers for reading upstream JSON records."""


def read_field(obj, key, default=None):
    """Read a field from a decoded JSON record without trusting its shape.

    Upstream payloads occasionally return ``null`` or a list where an object
    is expected; those yield ``default`` instead of raising.

    Args:
        obj: Decoded JSON value, normally a ``dict``.
        key: Key to read.
        default: Value returned when the key is absent or ``obj`` is not a
            mapping. A present key holding ``None`` also yields ``default``.
    """
    if not isinstance(obj, dict):
        return default
    value = obj.get(key)
    if value is None:
        return default
    return value
