"""
Path normalization for storage paths.

A canonical path is relative, uses ``/`` as separator, has no leading or
trailing separator, no ``.``/``..`` segments and no control characters.
The empty string is the root.
"""
import unicodedata

from filestorage.storage.exceptions import CorruptedPathDetected, PathTraversalDetected


def _has_funky_whitespace(path: str) -> bool:
    # Unicode "other" categories: Cc, Cf, Cs, Co, Cn
    return any(unicodedata.category(char).startswith("C") for char in path)


def normalize_path(path: str) -> str:
    """
    Convert a user-supplied path into a canonical relative path.

    Args:
        path: Raw path, e.g. "/something/deep/../../dirname"

    Returns:
        Canonical path, e.g. "dirname"

    Raises:
        CorruptedPathDetected: If the path contains control characters
        PathTraversalDetected: If resolving ".." would escape the root

    Examples:
        >>> normalize_path("./dir/../././")
        ''
        >>> normalize_path("00004869/files/other/10-75..stl")
        '00004869/files/other/10-75..stl'
    """
    if _has_funky_whitespace(path):
        raise CorruptedPathDetected.unexpected_whitespace(path)

    parts: list[str] = []

    for segment in path.split("/"):
        if segment in ("", "."):
            continue

        if segment == "..":
            if not parts:
                raise PathTraversalDetected.for_path(path)
            parts.pop()
        else:
            parts.append(segment)

    return "/".join(parts)


class PathNormalizer:
    """Injectable normalizer used by the FileStorage façade."""

    def normalize_path(self, path: str) -> str:
        return normalize_path(path)
