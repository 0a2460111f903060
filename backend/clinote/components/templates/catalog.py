"""Clinical note template catalog.

Defines the fixed set of template types and the ordered sections each one
produces:
- TemplateType: enumerated template formats (SOAP, DAP, ...)
- TemplateSection / Template: section metadata
- TEMPLATES: the standard catalog
"""

from enum import Enum

from pydantic import BaseModel, Field


class TemplateType(str, Enum):
    """Structured clinical note formats."""

    SOAP = "SOAP"
    PIRP = "PIRP"
    DAP = "DAP"
    PIE = "PIE"
    SIRP = "SIRP"
    GIRP = "GIRP"


class TemplateSection(BaseModel):
    """A section within a template."""

    id: str
    name: str
    description: str
    keyPhrases: list[str] = Field(default_factory=list)


class Template(BaseModel):
    """A clinical note template."""

    type: TemplateType
    sections: list[TemplateSection]

    @property
    def section_names(self) -> list[str]:
        return [s.name for s in self.sections]


def _section(id: str, name: str, description: str, *key_phrases: str) -> TemplateSection:
    return TemplateSection(id=id, name=name, description=description, keyPhrases=list(key_phrases))


TEMPLATES: dict[TemplateType, Template] = {
    TemplateType.SOAP: Template(
        type=TemplateType.SOAP,
        sections=[
            _section("subjective", "Subjective", "Patient's reported symptoms, concerns and history"),
            _section("objective", "Objective", "Clinician observations and measurements"),
            _section("assessment", "Assessment", "Professional analysis and interpretation"),
            _section("plan", "Plan", "Treatment plan and next steps"),
        ],
    ),
    TemplateType.PIRP: Template(
        type=TemplateType.PIRP,
        sections=[
            _section("problem", "Problem", "Presenting problem as heard and observed"),
            _section("intervention", "Intervention", "Therapeutic methods used in session"),
            _section("response", "Response", "Patient's reaction to the interventions"),
            _section("plan", "Plan", "Future treatment direction"),
        ],
    ),
    TemplateType.DAP: Template(
        type=TemplateType.DAP,
        sections=[
            _section("data", "Data", "Relevant information heard and observed"),
            _section("assessment", "Assessment", "Clinician interpretation of the data"),
            _section("plan", "Plan", "Plan for future treatment and therapy"),
        ],
    ),
    TemplateType.PIE: Template(
        type=TemplateType.PIE,
        sections=[
            _section("problem", "Problem", "The problem being addressed"),
            _section("intervention", "Intervention", "Therapeutic interventions and techniques"),
            _section("evaluation", "Evaluation", "Effectiveness of the interventions"),
        ],
    ),
    TemplateType.SIRP: Template(
        type=TemplateType.SIRP,
        sections=[
            _section("situation", "Situation", "The current situation and context"),
            _section("intervention", "Intervention", "The intervention provided"),
            _section("response", "Response", "Client's response to the intervention"),
            _section("plan", "Plan", "Future plan of action"),
        ],
    ),
    TemplateType.GIRP: Template(
        type=TemplateType.GIRP,
        sections=[
            _section("goal", "Goal", "The treatment goal"),
            _section("intervention", "Intervention", "The intervention provided"),
            _section("response", "Response", "Client's response to the intervention"),
            _section("plan", "Plan", "Ongoing plan and next steps"),
        ],
    ),
}


def get_template(template_type: TemplateType | str) -> Template:
    """Look up a template by type (accepts the enum or its string value)."""
    return TEMPLATES[TemplateType(template_type)]

