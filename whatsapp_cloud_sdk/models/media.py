from pydantic import BaseModel, Field


class UploadMediaResponse(BaseModel):
    """Response of POST /{phone-number-id}/media."""
    id: str


class RetrieveMediaUrlResponse(BaseModel):
    """Response of GET /{media-id}."""
    messaging_product: str
    url: str
    mime_type: str
    sha256: str
    file_size: int = Field(..., ge=0)
    id: str
