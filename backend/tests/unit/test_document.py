"""Tests for the structured document transform."""

from clinote.utils import create_empty_document, document_to_plain_text, text_to_document
from clinote.utils.id_generator import generate_id, imported_note_id


class TestTextToDocument:
    """text_to_document()."""

    def test_empty_text(self):
        """Empty text becomes a single empty paragraph."""
        assert text_to_document("") == create_empty_document()
        assert document_to_plain_text(create_empty_document()) == ""

    def test_section_labels_become_headings(self):
        """"Section: text" lines split into a heading and a paragraph."""
        doc = text_to_document("Subjective: Poor sleep\nPlan:")

        assert doc == [
            {"type": "heading", "level": 2, "children": [{"text": "Subjective"}]},
            {"type": "paragraph", "children": [{"text": "Poor sleep"}]},
            {"type": "heading", "level": 2, "children": [{"text": "Plan"}]},
        ]

    def test_unknown_labels_stay_paragraphs(self):
        """Only known section names are promoted to headings."""
        doc = text_to_document("BP: 120/80")

        assert doc == [{"type": "paragraph", "children": [{"text": "BP: 120/80"}]}]

    def test_markdown_forms(self):
        """Headings, list items and bold lines are recognized."""
        doc = text_to_document("## History\r\n- item one\n**Important**")

        assert [node["type"] for node in doc] == ["heading", "list-item", "paragraph"]
        assert doc[2]["children"][0]["bold"] is True

    def test_plain_text_projection(self):
        """Plain text is one line per block, without markup."""
        text = "Patient reports poor sleep.\n- snoring\nAssessment: insomnia"

        assert document_to_plain_text(text_to_document(text)) == (
            "Patient reports poor sleep.\nsnoring\nAssessment\ninsomnia"
        )

    def test_plain_text_of_odd_values(self):
        """None and raw strings are accepted as content."""
        assert document_to_plain_text(None) == ""
        assert document_to_plain_text("raw") == "raw"
        assert document_to_plain_text([{"type": "image"}]) == ""


class TestIds:
    """Id helpers."""

    def test_generate_id_prefix_and_uniqueness(self):
        ids = {generate_id("note") for _ in range(100)}

        assert len(ids) == 100
        assert all(i.startswith("note_") for i in ids)

    def test_imported_note_id(self):
        """Imported notes derive their id from the file id."""
        assert imported_note_id("abc123") == "note-abc123"
