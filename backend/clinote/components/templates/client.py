"""OpenAI-compatible template generator.

Sends the plain text of a source note to a chat completions endpoint with a
system prompt describing the requested template's sections, and returns the
generated text.

API Reference:
- POST {base_url}/chat/completions
- Response: {"choices": [{"message": {"content": "..."}}]}

Failures are raised as GenerationError:
- connection errors and timeouts -> network
- 429 / 402 -> quota
- other HTTP errors -> service
- unparseable or empty body -> malformed_response
"""

import httpx

from clinote.components.templates.catalog import TemplateType, get_template
from clinote.components.workspace.errors import GenerationError, GenerationErrorKind
from clinote.settings import settings
from clinote.utils.logging import get_logger

logger = get_logger(__name__)

QUOTA_STATUS_CODES = (402, 429)

BASE_PROMPT = """You are a professional medical note writer. Analyze the patient notes and create a well-formatted {template} note.
Format your response with clear sections and structure.
Present each section header on its own line with a colon at the end.
Do not provide any additional explanations, comments, or analysis outside the template itself.
Use only information present in the patient notes."""


def build_system_prompt(template_type: TemplateType | str) -> str:
    """Build the system prompt listing the template's sections in order.

    Args:
        template_type: Template to generate

    Returns:
        Prompt text for the system message
    """
    template = get_template(template_type)
    lines = [
        BASE_PROMPT.format(template=template.type.value),
        f"The {template.type.value} note must have these specific sections:",
    ]
    lines.extend(f"{section.name}: {section.description}" for section in template.sections)
    return "\n".join(lines)


class OpenAITemplateGenerator:
    """Template generator backed by an OpenAI-compatible chat completions API.

    Typical usage:
        generator = OpenAITemplateGenerator(api_key="sk-...")
        text = await generator.generate_template(note_text, TemplateType.SOAP)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.openai_model
        self.timeout = timeout or settings.generation_timeout
        self._transport = transport

        if not self.api_key:
            logger.warning("OpenAI API key not configured; generation requests will fail")

    def _get_headers(self) -> dict:
        """Get request headers with the API key."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _build_payload(self, plain_text: str, template_type: TemplateType) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": build_system_prompt(template_type)},
                {"role": "user", "content": plain_text},
            ],
            "temperature": 0,
            "max_tokens": 2000,
            "presence_penalty": 0.1,
            "frequency_penalty": 0.2,
        }

    async def generate_template(self, plain_text: str, template_type: TemplateType) -> str:
        """Generate a structured note from plain text.

        Args:
            plain_text: Plain text of the source note
            template_type: Template to produce

        Returns:
            Generated note text

        Raises:
            GenerationError: Classified failure
        """
        if not self.api_key:
            raise GenerationError(GenerationErrorKind.service, "OpenAI API key not configured")

        template_type = TemplateType(template_type)
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=self._build_payload(plain_text, template_type),
                    headers=self._get_headers(),
                )
        except httpx.TimeoutException as e:
            raise GenerationError(GenerationErrorKind.network, f"Request timed out: {e}") from e
        except httpx.TransportError as e:
            raise GenerationError(GenerationErrorKind.network, f"Connection failed: {e}") from e

        if resp.status_code in QUOTA_STATUS_CODES:
            raise GenerationError(GenerationErrorKind.quota, f"HTTP {resp.status_code}: {_error_message(resp)}")
        if resp.is_error:
            raise GenerationError(GenerationErrorKind.service, f"HTTP {resp.status_code}: {_error_message(resp)}")

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GenerationError(GenerationErrorKind.malformed_response, f"Unexpected response body: {e}") from e

        if not isinstance(content, str) or not content.strip():
            raise GenerationError(GenerationErrorKind.malformed_response, "Response contained no content")

        logger.info(f"Generated {template_type.value} template ({len(content)} chars, model={self.model})")
        return content


def _error_message(resp: httpx.Response) -> str:
    """Best-effort error message from an error response body."""
    try:
        return resp.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return resp.text[:200] or "Unknown error"
