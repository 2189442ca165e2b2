"""Image search and upload schemas."""
from typing import Optional, List, Union
from pydantic import BaseModel


class ExternalImage(BaseModel):
    """Image normalized from an external search provider."""
    id: Union[str, int]
    url: Optional[str] = None
    thumbnail: Optional[str] = None
    description: Optional[str] = None
    photographer: Optional[str] = None
    source: str


class ImageSearchResult(BaseModel):
    images: List[ExternalImage] = []
    total: int = 0
    total_pages: int = 0
    current_page: int = 1


class UploadResponse(BaseModel):
    urls: List[str]


class DeleteUploadResponse(BaseModel):
    deleted: bool
