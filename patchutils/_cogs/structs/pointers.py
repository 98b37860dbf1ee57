"""
JSON Pointer (RFC 6901) reference tokens, as used in the JSON Patch paths.

A pointer is a ``/``-separated sequence of tokens. Literal ``~`` and ``/``
inside a token must be escaped as ``~0`` and ``~1`` respectively. The order
of substitutions matters: ``~`` is escaped first when escaping, and unescaped
last when unescaping -- otherwise ``~1`` in the original text would turn into
``/`` on the way back.

See https://datatracker.ietf.org/doc/html/rfc6901#section-3 for more details.

Typical usage is for label & annotation keys, which often contain slashes::

    path = f"/metadata/annotations/{escape('example.com/owner')}"
    # -> "/metadata/annotations/example.com~1owner"
"""


def escape(token: str) -> str:
    """ Escape a raw key so that it can be used as a single pointer token. """
    return token.replace('~', '~0').replace('/', '~1')


def unescape(token: str) -> str:
    """ Restore the raw key from a pointer token; the reverse of :func:`escape`. """
    return token.replace('~1', '/').replace('~0', '~')


def join(*tokens: str) -> str:
    """
    Build an absolute pointer from the raw (not yet escaped) tokens.

    No tokens means the whole document, i.e. an empty pointer.
    """
    return ''.join(f'/{escape(token)}' for token in tokens)


def split(pointer: str) -> list[str]:
    """
    Parse an absolute pointer into the raw (unescaped) tokens; the reverse of :func:`join`.
    """
    if not pointer:
        return []
    if not pointer.startswith('/'):
        raise ValueError(f"A JSON Pointer must start with a slash: {pointer!r}")
    return [unescape(token) for token in pointer[1:].split('/')]
