"""
Label canonicalization — selector mapping → order-independent identity.

Two selectors are the same selector when they carry the same set of
non-empty ``key=value`` pairs, whatever order the API returned them in.
"""

from __future__ import annotations

from collections.abc import Mapping


def canonicalize(labels: Mapping[str, str] | None) -> str:
    """Return the canonical identity of a label mapping.

    Pairs with an empty key or an empty value are dropped. The rest
    are rendered ``key=value``, ordered by key (plain code-point
    comparison, never locale-aware), and joined with ``,``.

    An empty string means "no selector" and must never be registered.

        >>> canonicalize({"tier": "web", "app": "shop"})
        'app=shop,tier=web'
        >>> canonicalize({"a": "", "": "b"})
        ''
    """
    if not labels:
        return ""
    pairs = sorted((k, v) for k, v in labels.items() if k and v)
    return ",".join(f"{k}={v}" for k, v in pairs)
