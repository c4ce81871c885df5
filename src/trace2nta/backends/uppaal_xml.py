"""
UPPAAL XML generator for NTA models.

Converts an NTA object into the flat-1.1 XML format loaded by UPPAAL.

The document has three parts:
    - HEADER: XML prolog, DOCTYPE and the global declarations
    - TEMPLATES: one <template> block per template, in model order
    - FOOTER: the <system> block instantiating one process per template

Known limitation:
    An edge only gets an assignment label when it carries exactly one
    update. Edges with several updates lose them in the output; the
    traverser is expected to chain single-update edges instead.
"""

import itertools
import logging
from typing import List, Optional
from xml.sax.saxutils import escape

from trace2nta.errors import ModelError
from trace2nta.expressions import Declaration, Expression
from trace2nta.model import NTA, Edge, Location, Template

logger = logging.getLogger(__name__)

XML_PROLOG = '<?xml version="1.0" encoding="utf-8"?>'
DOCTYPE = (
    "<!DOCTYPE nta PUBLIC '-//Uppaal Team//DTD Flat System 1.1//EN' "
    "'http://www.it.uu.se/research/group/darts/uppaal/flat-1_1.dtd'>"
)
PROCESS_PREFIX = "Process"


def _escape_text(s: str) -> str:
    """Escape element content (&, <, >)."""
    return escape(s)


def _escape_attr(s: str) -> str:
    """Escape a double-quoted attribute value."""
    return escape(s, {'"': "&quot;"})


def _declaration_block(declarations: List[Declaration]) -> List[str]:
    """Render declarations one per entry, blank-line separated."""
    if not declarations:
        return ["<declaration></declaration>"]
    body = "\n\n".join(_escape_text(d.exp) for d in declarations)
    return ["<declaration>", body, "</declaration>"]


def _location_lines(location: Location) -> List[str]:
    name = _escape_attr(location.name)
    lines = [
        f'<location id="{name}">',
        f"<name>{_escape_text(location.name)}</name>",
    ]
    if location.comment is not None:
        lines.append(f'<label kind="comments">{_escape_text(location.comment)}</label>')
    lines.append("</location>")
    return lines


def _label(expression: Expression) -> str:
    return f'<label kind="{expression.kind.value}">{_escape_text(expression.exp)}</label>'


def _transition_lines(template: Template, edge: Edge) -> List[str]:
    source = template.location_name(edge.source)
    target = template.location_name(edge.target)
    if source is None or target is None:
        raise ModelError(f"Edge {edge.id} in template '{template.name}' is not connected")
    lines = [
        "<transition>",
        f'<source ref="{_escape_attr(source)}"/>',
        f'<target ref="{_escape_attr(target)}"/>',
    ]
    if edge.guard is not None:
        lines.append(_label(edge.guard))
    if len(edge.updates) == 1:
        lines.append(_label(edge.updates[0]))
    elif len(edge.updates) > 1:
        logger.warning(
            "Edge %s -> %s in template %r has %d updates; no assignment label emitted",
            source, target, template.name, len(edge.updates),
        )
    lines.append("</transition>")
    return lines


def create_header(nta: NTA) -> str:
    """
    Create the beginning of the document, up to the global declarations.

    Args:
        nta: Model whose global declarations are emitted

    Returns:
        Header text, newline terminated
    """
    lines = [XML_PROLOG, DOCTYPE, "<nta>"]
    lines.extend(_declaration_block(nta.global_declarations))
    return "\n".join(lines) + "\n"


def create_template(template: Template) -> str:
    """
    Render one template block.

    Raises:
        ModelError: If the template has no initial location or an edge
            is not connected
    """
    init = template.location_name(template.init)
    if init is None:
        raise ModelError(f"Template '{template.name}' has no initial location")

    lines = ["<template>", f"<name>{_escape_text(template.name)}</name>"]
    lines.extend(_declaration_block(template.declarations))

    for location in template.locations.values():
        lines.extend(_location_lines(location))

    lines.append(f'<init ref="{_escape_attr(init)}"/>')

    for edge in template.edges.values():
        lines.extend(_transition_lines(template, edge))

    lines.append("</template>")
    return "\n".join(lines) + "\n"


def create_templates(nta: NTA) -> str:
    return "".join(create_template(t) for t in nta.templates.values())


def create_footer(nta: NTA) -> str:
    """
    Create the system block and close the document.

    Every template is instantiated once as Process1, Process2, ... in
    model order. Numbering restarts at 1 on every call.
    """
    counter = itertools.count(1)
    processes = [
        (f"{PROCESS_PREFIX}{next(counter)}", template.name)
        for template in nta.templates.values()
    ]

    lines = ["<system>"]
    lines.extend(_escape_text(d.exp) for d in nta.system_declarations)
    for process, template_name in processes:
        lines.append(f"{process} =  {_escape_text(template_name)}();")
    lines.append("system ")
    lines.append(", ".join(process for process, _ in processes) + ";")
    lines.append("</system>")
    lines.append("</nta>")
    return "\n".join(lines) + "\n"


def generate_xml(nta: NTA) -> str:
    """
    Generate the UPPAAL XML document for a model.

    Args:
        nta: Model to serialize

    Returns:
        String containing the whole XML document

    Raises:
        ModelError: If a template has no initial location or an edge
            references a location outside its template
    """
    problems = nta.validate()
    if problems:
        raise ModelError("Cannot serialize model: " + "; ".join(problems))
    return create_header(nta) + create_templates(nta) + create_footer(nta)


def save_xml_file(nta: NTA, filepath: str) -> Optional[str]:
    """
    Generate XML and save it to a file.

    Args:
        nta: Model to serialize
        filepath: Output path; ".xml" is appended when missing

    Returns:
        The written path, or None if the file could not be written
    """
    if not filepath.endswith(".xml"):
        filepath = filepath + ".xml"
    document = generate_xml(nta)
    try:
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(document)
    except OSError as e:
        logger.error("An error has occurred while creating the XML file %s: %s", filepath, e)
        return None
    logger.info("Wrote UPPAAL model to %s", filepath)
    return filepath


__all__ = [
    "create_header",
    "create_template",
    "create_templates",
    "create_footer",
    "generate_xml",
    "save_xml_file",
]
