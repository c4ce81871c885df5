"""
Statement traverser (Statement Trace → NTA).

Walks an ordered statement trace and drives the BuildContext so the
automaton reproduces the sequence of the trace.

Trace file format (YAML, or JSON since JSON is valid YAML):
    name: Counter
    statements:
      - kind: declaration
        scope: global
        expression: int x = 0;
      - kind: test
        expression: x < 5
      - kind: assignment
        expression: x := x + 1
        comment: increment

Statements are already classified; expressions stay opaque text.

Mapping:
    - declaration → local (default), global or system declaration
    - assignment → one location plus one edge carrying the update;
      several expressions become a chain of single-update edges
    - test → no location; the guard goes on the edge to the next location,
      consecutive tests are conjoined with &&
"""

import logging
import os
import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import yaml

from trace2nta.builder import BuildContext, LocationHandle, TemplateHandle
from trace2nta.config import TransformConfig
from trace2nta.errors import TraceError
from trace2nta.model import NTA

logger = logging.getLogger(__name__)


class StatementKind(Enum):
    DECLARATION = "declaration"
    ASSIGNMENT = "assignment"
    TEST = "test"


class DeclarationScope(Enum):
    LOCAL = "local"
    GLOBAL = "global"
    SYSTEM = "system"


@dataclass
class Statement:
    """
    One classified statement of the trace.

    Properties:
        kind: What the statement contributes to the automaton
        expressions: Opaque expression texts, in order
        comment: Optional comment for the location the statement creates
        scope: Where a declaration goes (ignored for other kinds)
    """

    kind: StatementKind
    expressions: List[str] = field(default_factory=list)
    comment: Optional[str] = None
    scope: DeclarationScope = DeclarationScope.LOCAL


@dataclass
class Trace:
    name: str
    statements: List[Statement] = field(default_factory=list)


def _conjoin(guards: List[str]) -> str:
    if len(guards) == 1:
        return guards[0]
    return " && ".join(f"({g})" for g in guards)


class ModelTraverser:
    """Drives a BuildContext from a statement sequence."""

    def __init__(self, context: BuildContext, config: Optional[TransformConfig] = None):
        self.context = context
        self.config = config or TransformConfig()

    def traverse(self, statements: List[Statement], name: str) -> NTA:
        """
        Build a validated single-template NTA from `statements`.

        Args:
            statements: Trace in execution order
            name: Name of the automaton, and of the template unless
                the config names it

        Returns:
            The context's validated model
        """
        ctx = self.context
        ctx.new_automaton(name)
        template = ctx.new_template(self.config.template_name or name)
        current = ctx.new_location(self.config.initial_prefix, template)
        ctx.set_initial_location(current, template)

        pending_guards: List[str] = []
        for statement in statements:
            if statement.kind is StatementKind.DECLARATION:
                self._declare(template, statement)
            elif statement.kind is StatementKind.TEST:
                pending_guards.extend(statement.expressions)
            elif statement.kind is StatementKind.ASSIGNMENT:
                for index, update in enumerate(statement.expressions):
                    current = self._step(
                        template,
                        current,
                        guard=_conjoin(pending_guards) if pending_guards else None,
                        update=update,
                        comment=statement.comment if index == 0 else None,
                    )
                    pending_guards = []

        if pending_guards:
            # a trailing test still needs an edge to hang its guard on
            current = self._step(template, current, guard=_conjoin(pending_guards))

        logger.info(
            "Traversed %d statements into %d locations",
            len(statements), ctx.nta.location_count,
        )
        return ctx.finalize_model()

    def _declare(self, template: TemplateHandle, statement: Statement) -> None:
        for expression in statement.expressions:
            if statement.scope is DeclarationScope.GLOBAL:
                self.context.add_global_declaration(expression)
            elif statement.scope is DeclarationScope.SYSTEM:
                self.context.add_system_declaration(expression)
            else:
                self.context.add_local_declaration(template, expression)

    def _step(
        self,
        template: TemplateHandle,
        current: LocationHandle,
        guard: Optional[str] = None,
        update: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> LocationHandle:
        """Add one location and the edge reaching it from `current`."""
        ctx = self.context
        location = ctx.new_location(self.config.location_prefix, template)
        edge = ctx.new_edge(template)
        ctx.set_edge_source(edge, current)
        ctx.set_edge_target(edge, location)
        if guard is not None:
            ctx.set_edge_guard(edge, guard)
        if update is not None:
            ctx.set_edge_update(edge, update)
        if comment:
            ctx.set_location_comment(location, comment)
        return location


# =============================================================================
# TRACE LOADING
# =============================================================================

def _parse_enum(enum_type, value: Any, row_num: int):
    try:
        return enum_type(str(value).strip().lower())
    except ValueError:
        allowed = [e.value for e in enum_type]
        raise TraceError(f"Statement {row_num}: unknown {enum_type.__name__} {value!r}, expected one of {allowed}")


def _statement_from_dict(d: Dict[str, Any], row_num: int) -> Optional[Statement]:
    if not isinstance(d, dict):
        raise TraceError(f"Statement {row_num}: expected a mapping, got {type(d).__name__}")
    if "kind" not in d:
        raise TraceError(f"Statement {row_num}: missing 'kind'")

    kind = _parse_enum(StatementKind, d["kind"], row_num)
    scope = _parse_enum(DeclarationScope, d.get("scope", "local"), row_num)

    if "expressions" in d:
        raw = d["expressions"]
        if not isinstance(raw, list):
            raise TraceError(f"Statement {row_num}: 'expressions' must be a list")
    elif "expression" in d:
        raw = [d["expression"]]
    else:
        raise TraceError(f"Statement {row_num}: missing 'expression' or 'expressions'")

    expressions = []
    for expr in raw:
        text = "" if expr is None else str(expr).strip()
        if not text:
            warnings.warn(f"Empty expression in statement {row_num} skipped", UserWarning)
            continue
        expressions.append(text)
    if not expressions:
        return None

    comment = d.get("comment")
    if comment is not None:
        comment = str(comment)

    return Statement(kind=kind, expressions=expressions, comment=comment, scope=scope)


def load_trace_string(content: str, name: Optional[str] = None) -> Trace:
    """
    Parse trace YAML into a Trace.

    Args:
        content: YAML or JSON text
        name: Fallback name when the document has none

    Raises:
        TraceError: If the document is malformed
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise TraceError(f"Invalid trace document: {e}")

    if isinstance(data, list):
        data = {"statements": data}
    if not isinstance(data, dict):
        raise TraceError("Trace must be a mapping with a 'statements' list")

    raw_statements = data.get("statements") or []
    if not isinstance(raw_statements, list):
        raise TraceError("'statements' must be a list")

    statements = []
    for row_num, raw in enumerate(raw_statements, start=1):
        statement = _statement_from_dict(raw, row_num)
        if statement is not None:
            statements.append(statement)

    return Trace(name=str(data.get("name") or name or "Trace"), statements=statements)


def load_trace_file(filepath: str, name: Optional[str] = None) -> Trace:
    """
    Load a trace file; the name defaults to the file name without extension.

    Raises:
        TraceError: If the file is missing, unreadable or malformed
    """
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError:
        raise TraceError(f"Trace file not found: {filepath}")
    except (OSError, UnicodeDecodeError) as e:
        raise TraceError(f"Cannot read trace file {filepath}: {e}") from e

    if name is None:
        name = os.path.splitext(os.path.basename(filepath))[0]
    return load_trace_string(content, name=name)


__all__ = [
    "StatementKind",
    "DeclarationScope",
    "Statement",
    "Trace",
    "ModelTraverser",
    "load_trace_string",
    "load_trace_file",
]
