"""Request-target helpers for mount-path matching.

A request target is either origin-form (``/admin/users?page=2``) or
absolute-form (``http://example.com/admin/users?page=2``). Mount-path
matching and trimming only ever touch the *path* of the target, so the
scheme+host prefix of an absolute-form target ("protohost") is split off
first and glued back on verbatim after every rewrite.

Examples::

    >>> get_protohost("/admin?x=1")
    >>> get_protohost("http://example.com/admin?x=1")
    'http://example.com'
    >>> get_pathname("http://example.com/admin?x=1", "http://example.com")
    '/admin'
"""

# Characters allowed to follow a matched mount prefix
_BOUNDARY = frozenset("/.")


def get_protohost(url: str) -> str | None:
    """Return the scheme+host prefix of an absolute-form target.

    Returns ``None`` for origin-form targets (leading ``/``), empty
    targets, and anything without ``://`` before the query string.
    """
    if not url or url[0] == "/":
        return None

    search_index = url.find("?")
    path_length = search_index if search_index != -1 else len(url)
    fqdn_index = url[:path_length].find("://")
    if fqdn_index == -1:
        return None

    path_index = url.find("/", fqdn_index + 3)
    if path_index == -1 or path_index > path_length:
        # Absolute-form target with an empty path: "http://host?x=1"
        return url[:path_length]
    return url[:path_index]


def get_pathname(url: str, protohost: str | None = None) -> str:
    """Return the path component of *url*, without query or fragment.

    Empty paths read as ``/``.
    """
    rest = url[len(protohost) :] if protohost else url
    for sep in ("?", "#"):
        index = rest.find(sep)
        if index != -1:
            rest = rest[:index]
    return rest or "/"


def matches_prefix(pathname: str, prefix: str) -> bool:
    """Whether *pathname* sits under the mount *prefix*.

    The comparison is case-insensitive, and the prefix must end on a
    segment boundary: the next character is absent, ``/``, or ``.``.
    ``/adm`` matches ``/adm``, ``/adm/x`` and ``/adm.json`` but not
    ``/administration``. The empty prefix (root mount) matches anything.
    """
    if pathname[: len(prefix)].lower() != prefix.lower():
        return False
    if len(pathname) == len(prefix):
        return True
    return pathname[len(prefix)] in _BOUNDARY


def trim_prefix(url: str, prefix: str, protohost: str | None = None) -> str:
    """Remove the mount *prefix* from the path of *url*.

    The protohost and the query string survive untouched. When the
    remainder is an origin-form target that lost its leading slash
    (``/adm.json`` trimmed by ``/adm``), one is put back.
    """
    host = protohost or ""
    trimmed = host + url[len(host) + len(prefix) :]
    if not host and not trimmed.startswith("/"):
        trimmed = "/" + trimmed
    return trimmed


def join_mount_paths(parent: str | None, path: str) -> str:
    """Compose an absolute mount path from a parent's and a child's."""
    if not parent or parent == "/":
        return path
    if path == "/":
        return parent
    return parent.rstrip("/") + path
