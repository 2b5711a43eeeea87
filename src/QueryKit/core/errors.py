"""Error types raised by the query builders."""

from __future__ import annotations


class ValidationError(ValueError):
    """A builder received input that cannot form a valid query.

    Raised synchronously by setters with constrained arguments (``limit``,
    ``offset``, ``size``, ``from_``, required names) and by ``build()`` when a
    required part is missing. Treat it as a programming error, not a
    transient condition.
    """
