"""
Message-related Pydantic models
"""

from typing import Any, Dict, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class AuthorReference(BaseModel):
    """A user object sent in place of an author id; only _id is used"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")


class MessageDocument(BaseModel):
    """Stored shape of a message"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    title: str
    body: str
    author: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class MessageCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id", min_length=1)
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    author: Optional[Union[str, AuthorReference]] = None

    def author_id(self) -> Optional[str]:
        """Author resolved to a user identifier"""
        if isinstance(self.author, AuthorReference):
            return self.author.id
        return self.author


class MessageUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    body: Optional[str] = Field(None, min_length=1)


def serialize_message(document: Dict[str, Any]) -> Dict[str, Any]:
    """Render a stored message document as an API response"""
    return MessageDocument.model_validate(document).to_response()
