"""Referrer URL -> site origin normalization.

A site origin is the aggregation key for all counters. Pages that share a host
and a first path segment roll up into the same site, so that
``https://user.github.io/project/docs/intro`` and ``https://user.github.io/project``
are counted together while ``https://user.github.io/other`` is a separate site.
"""

from urllib.parse import urlsplit

DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
    "ftp": 21,
}


class InvalidUrl(ValueError):
    pass


FORBIDDEN_HOST_CHARS = frozenset("<>\"\\^|{}%")


def _canonical_host(host: str) -> str:
    if any(ch.isspace() or ch in FORBIDDEN_HOST_CHARS for ch in host):
        raise InvalidUrl(f"Referrer host contains forbidden characters: {host!r}")
    if host.isascii():
        return host
    try:
        return host.encode("idna").decode("ascii")
    except UnicodeError as exc:
        raise InvalidUrl(f"Referrer host is not a valid domain name: {exc}") from exc


def _origin(scheme: str, host: str, port: int | None) -> str:
    if ":" in host:
        host = f"[{host}]"
    if port is None or DEFAULT_PORTS.get(scheme) == port:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def normalize_site_origin(referrer: str | None) -> str:
    """Return the canonical site origin for ``referrer``.

    ``scheme://host[:port]`` when the URL has no path, otherwise
    ``scheme://host[:port]/<first path segment>``. Query string, fragment,
    credentials and deeper path segments are discarded and the result never
    ends with a slash.

    Raises ``InvalidUrl`` for empty input or anything that is not an absolute
    URL with a scheme and a host.
    """
    text = (referrer or "").strip()
    if not text:
        raise InvalidUrl("Referrer is empty.")

    try:
        parts = urlsplit(text)
        if parts.scheme.lower() in DEFAULT_PORTS and "\\" in text:
            # Browsers read backslashes as path separators in web URLs.
            parts = urlsplit(text.replace("\\", "/"))
        port = parts.port
    except ValueError as exc:
        raise InvalidUrl(f"Referrer is not a valid URL: {exc}") from exc

    scheme = parts.scheme.lower()
    host = parts.hostname
    if not scheme or not host:
        raise InvalidUrl("Referrer must be an absolute URL with a scheme and host.")

    origin = _origin(scheme, _canonical_host(host), port)
    segments = [segment for segment in parts.path.split("/") if segment]
    if not segments:
        return origin
    return f"{origin}/{segments[0]}"
