from pydantic import BaseModel
from typing import List, Optional

# Request bodies keep their fields optional so a missing value is reported as
# a 400 {"error": ...} by the handler instead of a schema error.

class ImageUrlRequest(BaseModel):
    imageUrl: Optional[str] = None

class TextRequest(BaseModel):
    text: Optional[str] = None

class DescriptionResponse(BaseModel):
    description: str

class EmbeddingResponse(BaseModel):
    embedding: List[float]

class ImageEmbeddingResponse(BaseModel):
    embedding: List[float]
    generatedDescription: str

class ErrorResponse(BaseModel):
    error: str
