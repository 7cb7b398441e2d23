"""
Visibility handling.

Visibility is a backend-mapped permission tag. Backends translate it to
whatever they support (unix permission bits, object ACLs, ...). Backends
without any permission concept are configured on the façade with a
``VisibilityFallback`` instead.
"""
from typing import Literal

from pydantic import BaseModel, ConfigDict


class Visibility:
    PUBLIC = "public"
    PRIVATE = "private"
    UNKNOWN = "unknown"


class VisibilityFallback(BaseModel):
    """
    Policy used instead of calling the adapter for visibility operations.

    Args:
        strategy: "ignore" returns ``staged_result`` from ``visibility()`` and
            turns ``change_visibility()`` into a no-op; "error" raises
        staged_result: Value reported by ``visibility()`` when ignoring
        error_message: Reason used when raising
    """

    model_config = ConfigDict(frozen=True)

    strategy: Literal["ignore", "error"] = "ignore"
    staged_result: str = Visibility.UNKNOWN
    error_message: str = "Visibility is not supported by this storage backend"


class UnixVisibilityConversion:
    """
    Portable mapping between visibility and unix permission bits.

    Any permission other than the configured private mode maps back to
    public.
    """

    def __init__(
        self,
        file_public: int = 0o644,
        file_private: int = 0o600,
        directory_public: int = 0o755,
        directory_private: int = 0o700,
        default_directory_visibility: str = Visibility.PUBLIC,
    ):
        self.file_public = file_public
        self.file_private = file_private
        self.directory_public = directory_public
        self.directory_private = directory_private
        self.default_directory_visibility = default_directory_visibility

    @property
    def default_directory_permissions(self) -> int:
        return self.visibility_to_directory_permissions(self.default_directory_visibility)

    def visibility_to_file_permissions(self, visibility: str) -> int:
        if visibility == Visibility.PUBLIC:
            return self.file_public
        if visibility == Visibility.PRIVATE:
            return self.file_private
        raise ValueError(f"Unsupported visibility was provided: {visibility}")

    def visibility_to_directory_permissions(self, visibility: str) -> int:
        if visibility == Visibility.PUBLIC:
            return self.directory_public
        if visibility == Visibility.PRIVATE:
            return self.directory_private
        raise ValueError(f"Unsupported visibility was provided: {visibility}")

    def file_permissions_to_visibility(self, permissions: int) -> str:
        if permissions == self.file_private:
            return Visibility.PRIVATE
        return Visibility.PUBLIC

    def directory_permissions_to_visibility(self, permissions: int) -> str:
        if permissions == self.directory_private:
            return Visibility.PRIVATE
        return Visibility.PUBLIC
