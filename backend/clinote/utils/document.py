"""Structured document transform.

The editor stores note content as a list of block nodes::

    [
        {"type": "heading", "level": 2, "children": [{"text": "Plan"}]},
        {"type": "paragraph", "children": [{"text": "Follow up in 2 weeks"}]},
    ]

The workspace treats this value as opaque; these helpers are the only place
that looks inside it.
"""

import re
from typing import Any

DocumentValue = list[dict[str, Any]]

# Section labels produced by the template generator ("Plan: ...")
SECTION_HEADINGS = (
    "Subjective",
    "Objective",
    "Assessment",
    "Plan",
    "Problem",
    "Intervention",
    "Response",
    "Data",
    "Evaluation",
    "Situation",
    "Goal",
)

_SECTION_RE = re.compile(rf"^({'|'.join(SECTION_HEADINGS)}):\s*(.*)$")


def create_empty_document() -> DocumentValue:
    """Document with a single empty paragraph."""
    return [_paragraph("")]


def text_to_document(text: str) -> DocumentValue:
    """Convert plain or lightly formatted text to a document value.

    Recognized line forms:
    - ``## Heading``: level-2 heading
    - ``Section: rest``: heading for known template sections, rest as paragraph
    - ``- item``: list item
    - ``**bold**``: bold paragraph
    """
    if not text:
        return create_empty_document()

    nodes: DocumentValue = []
    for line in text.replace("\r\n", "\n").split("\n"):
        if line.startswith("## "):
            nodes.append(_heading(line[3:]))
            continue

        section = _SECTION_RE.match(line)
        if section:
            nodes.append(_heading(section.group(1)))
            if section.group(2):
                nodes.append(_paragraph(section.group(2)))
            continue

        if line.startswith("- "):
            nodes.append({"type": "list-item", "children": [{"text": line[2:]}]})
        elif line.startswith("**") and line.endswith("**") and len(line) > 4:
            nodes.append({"type": "paragraph", "children": [{"text": line[2:-2], "bold": True}]})
        else:
            nodes.append(_paragraph(line))

    return nodes


def document_to_plain_text(document: Any) -> str:
    """Plain-text projection: one line per top-level block."""
    if document is None:
        return ""
    if isinstance(document, str):
        return document
    return "\n".join(_node_text(node) for node in document)


def _node_text(node: Any) -> str:
    if isinstance(node, dict):
        if isinstance(node.get("text"), str):
            return node["text"]
        children = node.get("children")
        if isinstance(children, list):
            return "".join(_node_text(child) for child in children)
    return ""


def _paragraph(text: str) -> dict[str, Any]:
    return {"type": "paragraph", "children": [{"text": text}]}


def _heading(text: str) -> dict[str, Any]:
    return {"type": "heading", "level": 2, "children": [{"text": text}]}
