from pydantic import BaseModel
from typing import List, Literal

class PaperContext(BaseModel):
    title: str | None = None
    subject: str | None = None
    board: str | None = None
    class_level: str | int | None = None
    year: str | int | None = None
    exam_type: str | None = None
    description: str | None = None

class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str

class ChatRequest(BaseModel):
    message: str | None = None
    paperContext: PaperContext | None = None
    conversationHistory: List[ChatMessage] = []

class ChatResponse(BaseModel):
    message: str
