from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field


class CommonStatInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    last_modified_ms: int | None = None
    visibility: str | None = None


class FileInfo(CommonStatInfo):
    type: Literal["file"] = "file"
    size: int | None = Field(default=None, ge=0)
    mime_type: str | None = None

    @computed_field
    @property
    def is_file(self) -> bool:
        return True

    @computed_field
    @property
    def is_directory(self) -> bool:
        return False


class DirectoryInfo(CommonStatInfo):
    type: Literal["directory"] = "directory"

    @computed_field
    @property
    def is_file(self) -> bool:
        return False

    @computed_field
    @property
    def is_directory(self) -> bool:
        return True


StatEntry = Annotated[Union[FileInfo, DirectoryInfo], Field(discriminator="type")]


def is_file(entry: FileInfo | DirectoryInfo) -> bool:
    return entry.type == "file"


def is_directory(entry: FileInfo | DirectoryInfo) -> bool:
    return entry.type == "directory"
