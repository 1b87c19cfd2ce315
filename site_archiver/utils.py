# File: site_archiver/utils.py
"""site_archiver.utils: URL canonicalisation used for dedup keys and scope checks."""

from __future__ import annotations

import re
from typing import Sequence
from urllib.parse import urlsplit, urlunsplit

__all__: Sequence[str] = (
    "normalize_url",
    "is_same_origin",
    "path_segments",
)

# urllib accepts almost anything, so strings a strict URL parser would
# reject are detected up front.
_UNPARSEABLE_RE = re.compile(r"[\s\x00-\x1f\x7f]")


def path_segments(path: str) -> list[str]:
    """Split a URL path on ``/`` and drop empty segments."""
    return [segment for segment in path.split("/") if segment]


def normalize_url(url: str) -> str:
    """Return the canonical form of *url*.

    * scheme and host are lower-cased;
    * a leading path segment equal to the host (``/example.com/foo``) is removed;
    * empty path segments are collapsed, the path always starts with ``/``
      and never ends with one unless it is the root;
    * the fragment is dropped, the query is kept verbatim.

    Input that cannot be parsed as a URL is returned unchanged.
    """
    if _UNPARSEABLE_RE.search(url):
        return url
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return url

    scheme = parts.scheme.lower()
    netloc = parts.netloc
    if host:
        userinfo, at, hostport = netloc.rpartition("@")
        netloc = userinfo + at + hostport.lower()

    segments = path_segments(parts.path)
    # every leading copy of the host goes
    while host and segments and segments[0].lower() == host:
        segments = segments[1:]
    path = "/" + "/".join(segments)

    return urlunsplit((scheme, netloc, path, parts.query, ""))


def is_same_origin(url: str, base_url: str) -> bool:
    """True when the normalized *url* starts with the normalized *base_url*."""
    return normalize_url(url).startswith(normalize_url(base_url))
