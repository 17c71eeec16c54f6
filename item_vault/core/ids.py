"""Identifier generation for new records."""

import uuid


# PUBLIC_INTERFACE
def generate_id() -> str:
    """Return a new random identifier in the canonical 8-4-4-4-12 form.

    The value is a version 4 UUID: the version nibble is always ``4`` and the
    variant nibble is one of ``8``, ``9``, ``a`` or ``b``.
    """
    return str(uuid.uuid4())
