"""Path separator normalization.

Converts Windows backslash paths to forward-slash paths so repeated
normalization and cache lookups stay consistent:

    foo\\bar\\ -> foo/bar
    C:\\       -> C:/

Extended-length paths (\\\\?\\...) and paths containing non-ASCII
characters are returned untouched.
"""

from __future__ import annotations

import re

from floe_sass.errors import InvalidPathError

EXTENDED_PATH_REGEX = re.compile(r"^\\\\\?\\")
NON_ASCII_REGEX = re.compile(r"[^\x00-\x80]+")
SLASH_REGEX = re.compile(r"\\")


def normalize_path(path: str) -> str:
    """Normalize path separators to forward slashes.

    A trailing slash is removed unless it marks a root: a bare "/" or a
    drive root such as "C:/".

    Args:
        path: Path to normalize.

    Returns:
        The normalized path.

    Raises:
        InvalidPathError: If path is not a string.

    Example:
        >>> normalize_path("C:\\\\foo\\\\bar\\\\")
        'C:/foo/bar'
        >>> normalize_path("C:\\\\")
        'C:/'
    """
    if not isinstance(path, str):
        raise InvalidPathError(path)

    path = path.strip()
    if EXTENDED_PATH_REGEX.search(path) or NON_ASCII_REGEX.search(path):
        return path

    path = SLASH_REGEX.sub("/", path)

    if path.endswith("/"):
        colon_index = path.find(":")
        if colon_index > -1:
            if colon_index < len(path) - 2:
                path = path[:-1]
        elif len(path) > 1:
            path = path[:-1]

    return path
