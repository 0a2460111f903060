"""Clinical Note Templates.

Components:
- catalog.py: TemplateType, Template, TemplateSection and the standard catalog
- generation.py: TemplateGenerationCoordinator (confirmation-gated state machine)
- client.py: OpenAITemplateGenerator (httpx, chat completions)
- mock.py: MockTemplateGenerator (offline, deterministic)
- provider.py: get_template_generator() selected by settings.generator_type

Only the catalog is re-exported here; the coordinator depends on the
workspace package, which itself depends on the catalog.
"""

from clinote.components.templates.catalog import (
    TEMPLATES,
    Template,
    TemplateSection,
    TemplateType,
    get_template,
)

__all__ = [
    "TEMPLATES",
    "Template",
    "TemplateSection",
    "TemplateType",
    "get_template",
]
