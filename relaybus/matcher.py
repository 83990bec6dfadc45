"""Glob-style matching of event names against wildcard patterns.

Only ``*`` is special: it matches any run of characters, including the
empty one.  Every other character (``?``, ``[``, ``.``) is literal, which
is why :mod:`fnmatch` is not used here.  Matching is case-sensitive and
anchored at both ends.
"""

import re
from functools import lru_cache

from relaybus.utils import WILDCARD


@lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern[str]:
    body = ".*".join(re.escape(part) for part in pattern.split(WILDCARD))
    return re.compile(rf"{body}\Z", re.DOTALL)


def matches(pattern: str, name: str) -> bool:
    """Return True when *name* matches *pattern* as a whole.

    Args:
        pattern: Event name, optionally containing ``*`` wildcards.
        name: Concrete event name.

    Returns:
        Whether the pattern matches the entire name.

    Example:
        >>> matches("order.*", "order.created")
        True
        >>> matches("order.*", "orders.created")
        False
    """
    if pattern == name:
        return True
    return _compile(pattern).match(name) is not None
