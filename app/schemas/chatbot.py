from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    # Extra fields such as a client-sent userId are dropped; the owner comes from the token
    model_config = ConfigDict(extra="ignore")

    messages: List[ChatMessage] = Field(..., min_length=1)


class ChatResponse(BaseModel):
    message: str


class ChatError(BaseModel):
    error: str
