"""
Root prefix handling for adapters.

Adapters map canonical paths into their own namespace (a directory on disk,
a key prefix in a bucket) before calling the backend, and map backend paths
back by stripping the same prefix.
"""
import posixpath
from typing import Callable

PathJoiner = Callable[..., str]


class PathPrefixer:
    """
    Join and strip a configured root prefix.

    The separator and join function are injectable so the same shape serves
    POSIX disk paths and flat object-store keys.

    Args:
        prefix: Root prefix, with or without trailing separator
        separator: Separator of the target namespace
        joiner: Function joining path segments in the target namespace
    """

    def __init__(
        self,
        prefix: str = "",
        separator: str = "/",
        joiner: PathJoiner = posixpath.join,
    ):
        self.separator = separator
        self._join = joiner
        self.prefix = ""
        if prefix:
            self.prefix = prefix.rstrip(separator) + separator

    def prefix_file_path(self, path: str) -> str:
        if not self.prefix:
            return path
        return self._join(self.prefix, path.lstrip(self.separator))

    def prefix_directory_path(self, path: str) -> str:
        joined = self.prefix_file_path(path) if self.prefix else path
        joined = joined.rstrip(self.separator)
        return joined + self.separator

    def strip_file_path(self, path: str) -> str:
        if self.prefix and path.startswith(self.prefix):
            return path[len(self.prefix):]
        if self.prefix and path == self.prefix.rstrip(self.separator):
            return ""
        return path

    def strip_directory_path(self, path: str) -> str:
        return self.strip_file_path(path).rstrip(self.separator)
