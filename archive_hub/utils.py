import hashlib
from urllib.parse import parse_qsl, urlencode, urlparse

TRACKING_PARAMS = frozenset({
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "gclid",
    "dclid",
    "fbclid",
    "msclkid",
    "yclid",
})

DEFAULT_PORTS = {"http": ":80", "https": ":443"}


def is_valid_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def _canonical_netloc(scheme: str, netloc: str) -> str:
    userinfo, at, hostport = netloc.rpartition("@")
    hostport = hostport.lower()
    port = DEFAULT_PORTS.get(scheme)
    if port and hostport.endswith(port):
        hostport = hostport[: -len(port)]
    return userinfo + at + hostport


def normalize_url(raw_url: str) -> str:
    """Canonicalize a URL so the same content maps to one hash.

    Lowercases scheme and host, drops the default port, turns an empty path
    into ``/`` and strips tracking query parameters. Best effort: anything
    that does not parse as an http(s) URL comes back untouched and is left
    for the browser to reject.
    """
    if not is_valid_url(raw_url):
        return raw_url

    parsed = urlparse(raw_url)
    scheme = parsed.scheme.lower()
    params = parse_qsl(parsed.query, keep_blank_values=True)
    kept = [(k, v) for k, v in params if k not in TRACKING_PARAMS]
    return parsed._replace(
        scheme=scheme,
        netloc=_canonical_netloc(scheme, parsed.netloc),
        path=parsed.path or "/",
        query=urlencode(kept),
    ).geturl()


def content_hash(normalized_url: str) -> str:
    return hashlib.sha1(normalized_url.encode("utf-8")).hexdigest()
