"""Template generator provider.

Selects the generator implementation from settings.generator_type:
- "mock": MockTemplateGenerator (default, no network)
- "openai": OpenAITemplateGenerator

Usage:
    from clinote.components.templates.provider import get_template_generator

    generator = get_template_generator()
    text = await generator.generate_template(note_text, TemplateType.SOAP)
"""

from clinote.components.workspace.ports import GeneratorPort
from clinote.settings import settings
from clinote.utils.logging import get_logger

logger = get_logger(__name__)

# Singleton generator instance
_template_generator: GeneratorPort | None = None
_generator_type: str | None = None


def get_template_generator() -> GeneratorPort:
    """Get the configured template generator.

    Raises:
        ValueError: If settings.generator_type is not a known generator
    """
    global _template_generator, _generator_type

    if _template_generator is not None:
        return _template_generator

    generator_type = settings.generator_type.lower()
    if generator_type == "mock":
        from clinote.components.templates.mock import MockTemplateGenerator

        _template_generator = MockTemplateGenerator()
        logger.info("TemplateGenerator: Using mock generator (offline)")
    elif generator_type == "openai":
        from clinote.components.templates.client import OpenAITemplateGenerator

        _template_generator = OpenAITemplateGenerator()
        logger.info(f"TemplateGenerator: Using OpenAI generator (model={settings.openai_model})")
    else:
        raise ValueError(f"Unknown generator type: {settings.generator_type}")

    _generator_type = generator_type
    return _template_generator


def get_generator_type() -> str:
    """Get the current generator type ('mock' or 'openai')."""
    if _generator_type is None:
        get_template_generator()
    return _generator_type or "unknown"


def reset_template_generator() -> None:
    """Reset the generator singleton (for testing)."""
    global _template_generator, _generator_type
    _template_generator = None
    _generator_type = None
