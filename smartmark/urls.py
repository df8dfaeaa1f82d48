import re
from urllib.parse import SplitResult, urlsplit

from .exceptions import InvalidUrlError

HTTP_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
DEFAULT_SCHEME = "https://"

# characters a host can never contain once userinfo and port are split off
FORBIDDEN_HOST_CHARS = set("<>\\^|`{}\"%")


def parse_absolute_url(url: str) -> SplitResult | None:
    """
    Parse `url` as an absolute URL.

    - A scheme and a non-empty host are required (so "http://" is rejected)
    - The host may not contain whitespace or forbidden characters
    - A port, when present, must be numeric and in range
    Returns the split result, or None if the string is not an absolute URL.
    """
    if not isinstance(url, str):
        return None
    try:
        parsed = urlsplit(url)
        parsed.port
    except ValueError:
        return None

    if not parsed.scheme or not parsed.netloc:
        return None

    host = parsed.hostname or ""
    if not host:
        return None
    if any(ch.isspace() or ch in FORBIDDEN_HOST_CHARS for ch in host):
        return None
    return parsed


def normalize_url(raw: str) -> str:
    """
    Normalize user-entered text into an absolute URL:
    - Trim surrounding whitespace
    - Empty input is returned unchanged (a missing field, not a bad URL)
    - Prepend https:// unless an http(s) scheme is already present
    - Raise InvalidUrlError if the result does not parse as an absolute URL
    Nothing else is rewritten: trailing slashes, query and fragment are kept.
    """
    url = (raw or "").strip()
    if not url:
        return url

    if not HTTP_SCHEME_RE.match(url):
        url = f"{DEFAULT_SCHEME}{url}"

    if parse_absolute_url(url) is None:
        raise InvalidUrlError(raw)
    return url
