"""Link and image destination escaping.

:func:`escape_url` parses a URL reference and serialises it back in its
canonical form, so that characters PukiWiki would otherwise misread (spaces,
non-ASCII text) are percent-encoded.  Strings that do not parse as a URL are
returned unchanged.
"""

from __future__ import annotations

import re
from urllib.parse import quote, unquote, urlsplit, urlunsplit

_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_HOST_RE = re.compile(r"^(?:\[[0-9A-Fa-f:.]*(?:%25[^\]]*)?\]|[^\[\] <>\"{}|\\^`]*)(?::[0-9]*)?$")

# Characters that may appear unescaped in an already-encoded path / fragment
_PATH_VALID = frozenset("!$&'()*+,;=:@[]/%-._~")
_FRAGMENT_VALID = _PATH_VALID | frozenset("?")

# ``quote`` never escapes ASCII letters, digits and "_.-~"
_PATH_SAFE = "$&+,/:;=@"
_FRAGMENT_SAFE = "$&+,/:;=?@!()*"


class _ParseError(ValueError):
    pass


def _check_escapes(text: str) -> str:
    if _BAD_ESCAPE_RE.search(text):
        raise _ParseError(f"invalid URL escape in {text!r}")
    return text


def _escape_component(text: str, allowed: frozenset[str], safe: str) -> str:
    _check_escapes(text)
    if all(ch.isascii() and (ch.isalnum() or ch in allowed) for ch in text):
        return text
    return quote(unquote(text), safe=safe)


def _parse(raw: str) -> str:
    if _CONTROL_RE.search(raw):
        raise _ParseError("control character in URL")
    if raw.startswith(":"):
        raise _ParseError("missing protocol scheme")

    try:
        parts = urlsplit(raw)
        parts.port  # validates the port number
    except ValueError as exc:
        raise _ParseError(str(exc)) from exc

    scheme, netloc, path, query, fragment = parts
    if netloc and not _HOST_RE.match(_check_escapes(netloc).rpartition("@")[2]):
        raise _ParseError(f"invalid host in {netloc!r}")
    if not scheme and ":" in path.partition("/")[0]:
        raise _ParseError("first path segment in URL cannot contain colon")

    if fragment:
        fragment = _escape_component(fragment, _FRAGMENT_VALID, _FRAGMENT_SAFE)

    if scheme and not netloc and path and not path.startswith("/"):
        # Opaque reference such as ``mailto:user@example.com``
        _check_escapes(path)
        opaque = f"{scheme}:{path}"
        if query:
            opaque += "?" + query
        if fragment:
            opaque += "#" + fragment
        return opaque

    path = _escape_component(path, _PATH_VALID, _PATH_SAFE)
    return urlunsplit((scheme, netloc, path, query, fragment))


def escape_url(raw: str) -> str:
    """Return the canonical serialisation of *raw*, or *raw* itself if it is not a URL.

    Examples::

        >>> escape_url("http://example.com/a b")
        'http://example.com/a%20b'
        >>> escape_url("HTTP://example.com/%7Euser")
        'http://example.com/%7Euser'
    """
    try:
        return _parse(raw)
    except _ParseError:
        return raw
