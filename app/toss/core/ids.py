"""Identifier generation for tossed objects.

Identifiers are random version-4 UUIDs in their canonical
8-4-4-4-12 hexadecimal form. They key ledger rows and prefix the
names of objects inside the holding area.
"""

import os
import re
import uuid

_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)


def new_id() -> str:
    """Generate a new unique identifier.

    Draws 16 bytes from the operating system's CSPRNG. ``os.urandom``
    raises rather than returning weak bytes when no random source is
    available, and that error is propagated to the caller.

    Returns:
        Lowercase version-4 UUID string, e.g. '3f2b...-....-4...-....-............'.
    """
    return str(uuid.UUID(bytes=os.urandom(16), version=4))


def is_valid_id(value: str) -> bool:
    """Check whether a string has the shape of a generated identifier.

    Args:
        value: Candidate identifier.

    Returns:
        True if the value is a lowercase version-4 UUID string.
    """
    return bool(_ID_PATTERN.match(value))
