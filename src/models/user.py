"""
User-related Pydantic models
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class UserDocument(BaseModel):
    """Stored shape of a user; password_hash is never exposed"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    username: str
    messages: List[str] = Field(default_factory=list)


class UserCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id", min_length=1)
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


def serialize_user(document: Dict[str, Any]) -> Dict[str, Any]:
    """Render a stored user document as an API response"""
    return UserDocument.model_validate(document).model_dump(by_alias=True)
