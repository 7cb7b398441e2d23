from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from filestorage.schemas.options import (
    ChecksumOptions,
    CopyFileOptions,
    ListOptions,
    MimeTypeOptions,
    MiscellaneousOptions,
    MoveFileOptions,
    PublicUrlOptions,
    VisibilityOptions,
    WriteOptions,
)
from filestorage.visibility import VisibilityFallback


class ConfigurationOptions(BaseModel):
    """
    Configuration held by a FileStorage instance for its whole lifetime.

    Per-category bags hold defaults merged under the call-site options of
    the matching operations. ``defaults`` sits below the write, copy, move
    and directory-creation categories.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    defaults: VisibilityOptions = Field(default_factory=VisibilityOptions)
    writes: WriteOptions = Field(default_factory=WriteOptions)
    moves: MoveFileOptions = Field(default_factory=MoveFileOptions)
    copies: CopyFileOptions = Field(default_factory=CopyFileOptions)
    visibility: MiscellaneousOptions = Field(default_factory=MiscellaneousOptions)
    public_urls: PublicUrlOptions = Field(default_factory=PublicUrlOptions)
    temporary_urls: dict[str, Any] = Field(default_factory=dict)
    checksums: ChecksumOptions = Field(default_factory=ChecksumOptions)
    mime_types: MimeTypeOptions = Field(default_factory=MimeTypeOptions)
    list: ListOptions = Field(default_factory=ListOptions)
    # milliseconds, applied to every operation unless overridden
    timeout: float | None = None
    visibility_handling: VisibilityFallback | None = None
    # PreparedUploadStrategy
    prepared_upload_strategy: Any = None
