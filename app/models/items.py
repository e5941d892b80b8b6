from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

class FoundItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    description: str = ""
    embedding: Optional[List[float]] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")

class LostAlert(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email: Optional[str] = None
    description: str = ""
    embedding: Optional[List[float]] = None

class MatchResult(BaseModel):
    # exists only within one evaluation pass
    alert: LostAlert
    found_item: FoundItem
    score: float

class NotificationRequest(BaseModel):
    recipient: str
    subject: str
    body: str  # html
