import logging

import httpx

from core.config import settings
from core.errors import InvalidRequest, ServiceNotConfigured, UpstreamServiceError
from schemas.chat_schema import ChatRequest, PaperContext

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I'm sorry, I couldn't generate a response."

BASE_SYSTEM_PROMPT = """You are an intelligent study assistant for QPaperHub, an educational platform for question papers. Your role is to:

1. Help students understand difficult concepts and topics
2. Explain solutions and approaches to problems
3. Provide study tips and exam preparation strategies
4. Answer questions about academic subjects
5. Clarify doubts about question paper topics

Be friendly, encouraging, and educational. Give clear, concise explanations. When explaining concepts, use examples where helpful. If asked about something outside academics, politely redirect to educational topics."""


def build_system_prompt(paper: PaperContext | None) -> str:
    if paper is None:
        return BASE_SYSTEM_PROMPT

    lines = [
        "The student is currently viewing a question paper with the following details:",
        f"- Title: {paper.title}",
        f"- Subject: {paper.subject}",
        f"- Board: {paper.board}",
        f"- Class: {paper.class_level}",
        f"- Year: {paper.year}",
        f"- Exam Type: {paper.exam_type}",
    ]
    if paper.description:
        lines.append(f"- Description: {paper.description}")

    return (
        BASE_SYSTEM_PROMPT
        + "\n\n"
        + "\n".join(lines)
        + "\n\nWhen answering questions, you can reference this paper's context. "
        "If the student asks about topics from this paper, provide relevant explanations and study tips."
    )


def build_messages(request: ChatRequest) -> list[dict]:
    messages = [{"role": "system", "content": build_system_prompt(request.paperContext)}]
    messages.extend(m.model_dump() for m in request.conversationHistory)
    messages.append({"role": "user", "content": request.message})
    return messages


class ChatGateway:
    """Client for an OpenAI-compatible chat completion endpoint."""

    def __init__(
        self,
        url: str,
        api_key: str | None,
        model: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.transport = transport

    async def complete(self, messages: list[dict]) -> str:
        """
        Sends the conversation and returns the assistant's reply text.

        :raises ServiceNotConfigured: If no API key is set.
        :raises UpstreamServiceError: On transport failure or a non-2xx answer.
        """
        if not self.api_key:
            logger.error("AI gateway API key is not configured")
            raise ServiceNotConfigured()

        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"AI Gateway unreachable: {e}")
            raise UpstreamServiceError() from e

        if not response.is_success:
            logger.error(f"AI Gateway error ({response.status_code}): {response.text}")
            raise UpstreamServiceError()

        try:
            data = response.json()
            choices = data.get("choices") or []
            if not choices:
                return FALLBACK_REPLY
            content = (choices[0].get("message") or {}).get("content")
        except (ValueError, AttributeError, TypeError) as e:
            logger.error(f"AI Gateway returned an unreadable reply: {e}")
            raise UpstreamServiceError() from e

        return content or FALLBACK_REPLY


def get_chat_gateway() -> ChatGateway:
    """FastAPI dependency built from settings."""
    return ChatGateway(
        url=settings.AI_GATEWAY_URL,
        api_key=settings.AI_GATEWAY_API_KEY,
        model=settings.AI_MODEL,
        max_tokens=settings.AI_MAX_TOKENS,
        temperature=settings.AI_TEMPERATURE,
        timeout=settings.AI_TIMEOUT_SECONDS,
    )


async def answer_question(request: ChatRequest, gateway: ChatGateway) -> str:
    if not request.message or not request.message.strip():
        raise InvalidRequest("Message is required")

    return await gateway.complete(build_messages(request))
