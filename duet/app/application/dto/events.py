from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserOnlineInput(BaseModel):
    username: str = Field(min_length=1, max_length=32)


class SendContentInput(BaseModel):
    sender: str = Field(min_length=1, max_length=32)
    receiver: str = Field(min_length=1, max_length=32)
    content: str = Field(min_length=1, max_length=5000)


class SendLetterInput(SendContentInput):
    title: Optional[str] = Field(default=None, max_length=200)


class TypingInput(BaseModel):
    receiver: str = Field(min_length=1, max_length=32)


class MarkReadInput(BaseModel):
    sender: str = Field(min_length=1, max_length=32)


class FeedPostedInput(BaseModel):
    """Public-feed notification; whatever the client sends is echoed back."""

    model_config = ConfigDict(extra="allow")

    def echo(self) -> dict[str, Any]:
        return dict(self.model_extra or {})
