from pydantic import BaseModel, Field


class UploadRequest(BaseModel):
    """Descriptor a client uses to upload directly to the backend."""

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
