from pydantic import BaseModel, Field
from typing import List, Literal, Optional

ChatRole = Literal["system", "user", "assistant"]
ChatType = Literal["simple", "web", "doc"]


class ChatMessageIn(BaseModel):
    role: ChatRole
    content: str


class PromptGPTRequest(BaseModel):
    """Chat request sent by the browser client for every user turn."""
    id: str = Field(..., description="Chat thread id")
    messages: List[ChatMessageIn]
    chat_type: ChatType = "simple"
    chat_api_model: str = "GPT-4"
    chat_doc: str = Field("all", description="Department scope for document chat, or 'all'")


class NewThreadRequest(BaseModel):
    name: str = "New chat"
    chat_type: ChatType = "simple"
    chat_api_model: str = "GPT-4"
    chat_doc: str = "all"


class ThreadResponse(BaseModel):
    id: str
    name: str
    chat_type: str
    chat_api_model: str
    chat_doc: str
    created_at: str


class MessageResponse(BaseModel):
    id: str
    role: str
    content: str
    context: Optional[str] = None
    created_at: str
