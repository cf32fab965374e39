"""URL slug generation for catalogue records."""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_SLUG_SHAPE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slugify(text):
    """Lower-case ``text`` and collapse every run of other characters into one hyphen.

    >>> slugify("  Wireless Mouse (2.4 GHz)  ")
    'wireless-mouse-2-4-ghz'
    """
    return _NON_ALNUM.sub("-", (text or "").lower()).strip("-")


def is_url_safe(slug):
    return bool(slug) and bool(_SLUG_SHAPE.match(slug))
