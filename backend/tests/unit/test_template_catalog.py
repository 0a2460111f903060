"""Tests for the template catalog."""

import pytest

from clinote.components.templates import TEMPLATES, TemplateType, get_template


class TestTemplateCatalog:
    """Catalog contents."""

    def test_every_type_has_a_template(self):
        assert set(TEMPLATES) == set(TemplateType)

    @pytest.mark.parametrize(
        "template_type, sections",
        [
            ("SOAP", ["Subjective", "Objective", "Assessment", "Plan"]),
            ("PIRP", ["Problem", "Intervention", "Response", "Plan"]),
            ("DAP", ["Data", "Assessment", "Plan"]),
            ("PIE", ["Problem", "Intervention", "Evaluation"]),
            ("SIRP", ["Situation", "Intervention", "Response", "Plan"]),
            ("GIRP", ["Goal", "Intervention", "Response", "Plan"]),
        ],
    )
    def test_section_order(self, template_type, sections):
        """Sections are listed in their documented order."""
        assert get_template(template_type).section_names == sections

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            get_template("BIRP")
