"""
Archive Entry Naming

Handles:
- Sanitizing user-supplied text into filesystem-safe names
- Inferring an image extension from content-type or URL suffix
- Resolving name collisions within a single archive build
"""

import re
from typing import Optional, Set, Tuple

DEFAULT_NAME = "file"
DEFAULT_EXTENSION = ".jpg"

# Characters rejected by common file systems (path separators, wildcards,
# quotes, control characters)
_ILLEGAL_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')
_WHITESPACE_RUN = re.compile(r"\s+")
_TRAILING_EXTENSION = re.compile(r"\.[^.]+$")

# Ordered: the first substring found in the content-type wins
_CONTENT_TYPE_EXTENSIONS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("png",), ".png"),
    (("jpeg", "jpg"), ".jpg"),
    (("gif",), ".gif"),
    (("bmp",), ".bmp"),
    (("webp",), ".webp"),
    (("svg",), ".svg"),
    (("avif",), ".avif"),
    (("tiff",), ".tiff"),
)

_URL_EXTENSION = re.compile(
    r"\.(png|jpg|jpeg|gif|bmp|webp|svg|avif|tiff)$",
    re.IGNORECASE,
)


def sanitize_filename(text: Optional[str]) -> str:
    """
    Turn arbitrary text into a filesystem-safe base name.

    Each illegal character becomes an underscore, whitespace runs collapse
    to a single space and the result is trimmed. Empty input yields "file".
    """
    cleaned = _ILLEGAL_CHARS.sub("_", str(text or DEFAULT_NAME))
    cleaned = _WHITESPACE_RUN.sub(" ", cleaned).strip()
    return cleaned or DEFAULT_NAME


def has_extension(name: str) -> bool:
    """True when the name ends in a dot followed by non-dot characters."""
    return bool(_TRAILING_EXTENSION.search(name))


def strip_extension(name: str) -> str:
    """Remove a trailing extension, if any."""
    return _TRAILING_EXTENSION.sub("", name)


def infer_extension(content_type: Optional[str], url: Optional[str]) -> str:
    """
    Decide a file extension (with leading dot) for a fetched image.

    Precedence:
        1. Known image subtype found in the content-type
        2. Recognized suffix on the URL path, query string removed
        3. ".jpg"

    Args:
        content_type: Response content-type header, may be empty
        url: Original source URL

    Returns:
        Extension such as ".png"
    """
    ct = (content_type or "").lower()
    for needles, extension in _CONTENT_TYPE_EXTENSIONS:
        if any(needle in ct for needle in needles):
            return extension

    path = str(url or "").split("?", 1)[0]
    match = _URL_EXTENSION.search(path)
    if match:
        return match.group(0).lower()

    return DEFAULT_EXTENSION


def _split_name(name: str) -> Tuple[str, str]:
    dot = name.rfind(".")
    if dot > 0:
        return name[:dot], name[dot:]
    return name, ""


class NamingContext:
    """
    Names already assigned within one archive build.

    Comparison is case-insensitive. A fresh context is created for every
    build and passed explicitly; it is never shared between requests.
    """

    def __init__(self):
        self._used: Set[str] = set()

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._used

    def __len__(self) -> int:
        return len(self._used)

    def claim(self, candidate: str) -> str:
        """
        Return a collision-free variant of candidate and record it.

        Collisions get "_2", "_3", ... appended to the base name; the
        extension is preserved.
        """
        base, extension = _split_name(candidate)

        name = f"{base}{extension}"
        counter = 2
        while name in self:
            name = f"{base}_{counter}{extension}"
            counter += 1

        self._used.add(name.lower())
        return name
