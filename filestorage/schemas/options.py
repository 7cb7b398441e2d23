"""
Option bags for storage operations.

Each bag has a small set of recognized fields. Unknown keys are accepted,
kept in ``model_extra`` and forwarded to the adapter untouched.
"""
from typing import Annotated, Any, Literal, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from filestorage.utils.abort import AbortSignal
from filestorage.utils.datetime import ExpiresAt

OptionsT = TypeVar("OptionsT", bound="MiscellaneousOptions")


class MiscellaneousOptions(BaseModel):
    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    abort_signal: AbortSignal | None = None
    # milliseconds
    timeout: Annotated[float, Field(gt=0)] | None = None


class VisibilityOptions(MiscellaneousOptions):
    visibility: str | None = None
    directory_visibility: str | None = None


class WriteOptions(VisibilityOptions):
    mime_type: str | None = None
    size: int | None = Field(default=None, ge=0)
    cache_control: str | None = None


class CreateDirectoryOptions(MiscellaneousOptions):
    directory_visibility: str | None = None


class CopyFileOptions(VisibilityOptions):
    retain_visibility: bool | None = None


class MoveFileOptions(VisibilityOptions):
    retain_visibility: bool | None = None


class PublicUrlOptions(MiscellaneousOptions):
    pass


class TemporaryUrlOptions(MiscellaneousOptions):
    expires_at: ExpiresAt


class ChecksumOptions(MiscellaneousOptions):
    algo: str | None = None
    encoding: Literal["hex", "base64"] | None = None


class MimeTypeOptions(MiscellaneousOptions):
    disallow_fallback: bool | None = None
    fallback_method: Literal["contents", "path"] | None = None


class ListOptions(MiscellaneousOptions):
    deep: bool | None = None


class UploadRequestOptions(MiscellaneousOptions):
    expires_at: ExpiresAt
    content_type: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)


OptionsInput = BaseModel | Mapping[str, Any] | None


def option_values(options: OptionsInput) -> dict[str, Any]:
    """
    Return the explicitly provided, non-None values of an option bag.

    ``None`` never overrides: a key set to None is treated as not provided.
    """
    if options is None:
        return {}

    if isinstance(options, BaseModel):
        values = {name: getattr(options, name) for name in options.model_fields_set}
        values.update(options.model_extra or {})
    else:
        values = dict(options)

    return {key: value for key, value in values.items() if value is not None}


def merge_options(options_class: type[OptionsT], *layers: OptionsInput) -> OptionsT:
    """
    Merge option layers, later layers winning.

    Args:
        options_class: Options model to build
        layers: Lowest precedence first, e.g. (shared defaults, category
            defaults, call-site options)

    Returns:
        A new options instance

    Examples:
        >>> merge_options(WriteOptions, {"visibility": "private"}, {"visibility": None}).visibility
        'private'
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update(option_values(layer))
    return options_class(**merged)
