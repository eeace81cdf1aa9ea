from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel


class BrandRequest(BaseModel):
    """Body of POST /brand. Missing fields stay None and fail downstream."""

    image: Optional[str] = None
    email: Optional[str] = None

    @property
    def source_key(self) -> Optional[str]:
        return self.image

    @property
    def requester_email(self) -> Optional[str]:
        return self.email


class PresignRequest(BaseModel):
    filename: Optional[str] = None


@dataclass
class ExtractedImage:
    filename: str
    content: bytes


@dataclass
class ImageResult:
    original_url: str
    processed_url: str


@dataclass
class BrandOutcome:
    results: List[ImageResult] = field(default_factory=list)
    email: Optional[str] = None
    package_key: str = ""
    package_url: str = ""
