"""Mock template generator for running without a language model.

Follows the same interface as OpenAITemplateGenerator, so the two can be
switched with CLINOTE_GENERATOR_TYPE. The output has one "Section: ..." line
per template section: the first section holds the source text with its
whitespace collapsed, and every other section reads "Not documented".
Results are deterministic for tests and offline use.
"""

import asyncio

from clinote.components.templates.catalog import TemplateType, get_template
from clinote.components.workspace.errors import GenerationError
from clinote.utils.logging import get_logger

logger = get_logger(__name__)


class MockTemplateGenerator:
    """Deterministic generator producing "Section: ..." text."""

    def __init__(self, delay: float = 0.0, fail_with: GenerationError | None = None):
        """
        Args:
            delay: Seconds to sleep before answering
            fail_with: Error to raise instead of answering
        """
        self.delay = delay
        self.fail_with = fail_with
        self.calls: list[tuple[str, TemplateType]] = []

    async def generate_template(self, plain_text: str, template_type: TemplateType) -> str:
        template_type = TemplateType(template_type)
        self.calls.append((plain_text, template_type))

        if self.delay > 0:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with

        template = get_template(template_type)
        summary = " ".join(plain_text.split())
        lines = [f"{template.sections[0].name}: {summary}"]
        lines.extend(f"{section.name}: Not documented" for section in template.sections[1:])

        logger.debug(f"Mock generated {template_type.value} template ({len(template.sections)} sections)")
        return "\n".join(lines)
