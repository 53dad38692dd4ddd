"""
URL helpers.

All visited-set comparisons go through normalize_url so that trailing
slashes, query parameter order, default ports and fragments never make
the same page look new.
"""

from typing import Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

DEFAULT_PORTS = {"http": 80, "https": 443}

# Links to binary/document files are never crawled
DOCUMENT_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png", ".gif", ".zip")

SKIPPED_SCHEMES = ("mailto:", "javascript:", "tel:", "data:")


def ensure_scheme(url: str) -> str:
    url = url.strip()
    if not url.lower().startswith(("http://", "https://")):
        url = f"https://{url.lstrip('/')}"
    return url


def normalize_url(url: str) -> str:
    """
    Canonicalize a URL.

    - scheme and host lowercased, https assumed when missing
    - default ports dropped, unparseable ports dropped
    - fragment dropped
    - trailing slash stripped (the root path stays "/")
    - query parameters sorted

    A URL that cannot be split at all is returned with only its scheme
    ensured.

    normalize_url(normalize_url(u)) == normalize_url(u)
    """
    url = ensure_scheme(url)
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    scheme = parts.scheme.lower()

    host = (parts.hostname or "").lower()
    try:
        port = parts.port
    except ValueError:
        port = None

    if ":" in host:
        host = f"[{host}]"
    netloc = host
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        netloc = f"{host}:{port}"

    path = parts.path.rstrip("/") or "/"

    query = ""
    if parts.query:
        params = sorted(parse_qsl(parts.query, keep_blank_values=True))
        query = urlencode(params)

    return urlunsplit((scheme, netloc, path, query, ""))


def get_host(url: str) -> str:
    try:
        return (urlsplit(ensure_scheme(url)).hostname or "").lower()
    except ValueError:
        return ""


def strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def is_same_domain(url: str, domain_or_url: str) -> bool:
    """True if url lives on the same host, ignoring a www. prefix."""
    host = strip_www(get_host(url))
    other = strip_www(get_host(domain_or_url))
    return bool(host) and host == other


def is_document_url(url: str) -> bool:
    try:
        path = urlsplit(url).path.lower()
    except ValueError:
        return False
    return path.endswith(DOCUMENT_EXTENSIONS)


def resolve_link(base_url: str, href: str) -> Optional[str]:
    """Resolve an anchor href against its page; None for non-http or malformed links."""
    href = (href or "").strip()
    if not href or href.startswith("#") or href.lower().startswith(SKIPPED_SCHEMES):
        return None

    try:
        absolute = urljoin(base_url, href)
        parts = urlsplit(absolute)
        parts.port  # raises on an out-of-range port
    except ValueError:
        return None

    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return None
    return absolute


def extract_brand_name(url: str) -> str:
    """
    Derive a brand name from a site URL.

    "https://www.acmecorp.com" -> "Acmecorp"
    """
    host = strip_www(get_host(url))
    label = host.split(".")[0] if host else ""
    return label[:1].upper() + label[1:]


def brand_domain_form(brand: str) -> str:
    """Brand name as it appears in a domain: lowercased, no spaces."""
    return "".join(brand.lower().split())
