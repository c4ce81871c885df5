"""
Automaton Builder.

The BuildContext owns one NTA and grows it through commands:
templates, locations and edges are created here, never directly.

Every command mutates the context's model in place. The handles it
returns are references into that one model and become stale after
reset() or new_automaton().

Location naming:
    name = prefix + "_" + N, or "Location_" + N for an empty prefix,
    where N counts every location created so far in the whole model
    (not per template).
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from .errors import ModelError, RunInProgressError
from .expressions import Declaration, Guard, Update
from .model import NTA, Edge, Location, Template

logger = logging.getLogger(__name__)

DEFAULT_LOCATION_PREFIX = "Location"


@dataclass(frozen=True)
class TemplateHandle:
    id: int


@dataclass(frozen=True)
class LocationHandle:
    id: int
    template_id: int


@dataclass(frozen=True)
class EdgeHandle:
    id: int
    template_id: int


class BuildContext:
    """
    Explicit build context for one transformation run.

    Create one per run (or reuse it after reset()). At most one run may
    build on a context at a time; use running() to claim it.
    """

    def __init__(self) -> None:
        self.run_lock = threading.Lock()
        self._reset_state(NTA())

    def _reset_state(self, nta: NTA) -> None:
        self._nta = nta
        self._next_template_id = 0
        self._next_edge_id = 0

    @property
    def nta(self) -> NTA:
        return self._nta

    # =========================================================================
    # MODEL LIFECYCLE
    # =========================================================================

    def new_automaton(self, name: str) -> NTA:
        """Discard the current model and start an empty one called `name`."""
        logger.debug("New automaton %r", name)
        self._reset_state(NTA(name=name))
        return self._nta

    def reset(self) -> None:
        """Return the context to the state of a freshly constructed one."""
        logger.debug("Resetting build context")
        self._reset_state(NTA())

    def finalize_model(self) -> NTA:
        """
        Check that every template is ready for serialization.

        Locations and edges are attached to their template as they are
        created, so this only validates references. Calling it twice is
        harmless.

        Raises:
            ModelError: If a template has no initial location or an edge
                has a missing or foreign endpoint
        """
        problems = self._nta.validate()
        if problems:
            raise ModelError("Model is not complete: " + "; ".join(problems))
        logger.debug(
            "Finalized %r: %d templates, %d locations",
            self._nta.name, len(self._nta.templates), self._nta.location_count,
        )
        return self._nta

    @contextmanager
    def running(self) -> Iterator["BuildContext"]:
        """
        Claim the context for one run.

        Raises:
            RunInProgressError: If another run holds the context
        """
        if not self.run_lock.acquire(blocking=False):
            raise RunInProgressError("Build context is already in use by another run")
        try:
            yield self
        finally:
            self.run_lock.release()

    # =========================================================================
    # DECLARATIONS
    # =========================================================================

    def add_global_declaration(self, expression: str) -> None:
        self._nta.global_declarations.append(Declaration(expression))

    def add_system_declaration(self, expression: str) -> None:
        self._nta.system_declarations.append(Declaration(expression))

    def add_local_declaration(self, template: TemplateHandle, expression: str) -> None:
        self._template(template).declarations.append(Declaration(expression))

    # =========================================================================
    # TEMPLATES AND LOCATIONS
    # =========================================================================

    def new_template(self, name: str) -> TemplateHandle:
        template = Template(id=self._next_template_id, name=name)
        self._next_template_id += 1
        self._nta.templates[template.id] = template
        logger.debug("New template %r (id %d)", name, template.id)
        return TemplateHandle(template.id)

    def new_location(self, prefix: str, template: TemplateHandle) -> LocationHandle:
        """
        Create a location in `template` with a generated, model-unique name.

        Args:
            prefix: Name prefix; empty means "Location"
            template: Owning template

        Returns:
            Handle of the new location
        """
        owner = self._template(template)
        number = self._nta.location_count
        name = f"{prefix or DEFAULT_LOCATION_PREFIX}_{number}"
        location = Location(id=number, template_id=owner.id, name=name)
        owner.locations[location.id] = location
        self._nta.location_count += 1
        logger.debug("New location %s in template %r", name, owner.name)
        return LocationHandle(location.id, owner.id)

    def set_initial_location(self, location: LocationHandle, template: TemplateHandle) -> None:
        """Make `location` the initial one of `template`, replacing any previous one."""
        owner = self._template(template)
        self._location(location, owner)
        owner.init = location.id

    def set_location_comment(self, location: Optional[LocationHandle], comment: str) -> bool:
        if location is None:
            return False
        target = self._location(location, self._template(TemplateHandle(location.template_id)))
        target.comment = comment
        return True

    # =========================================================================
    # EDGES
    # =========================================================================

    def new_edge(self, template: TemplateHandle) -> EdgeHandle:
        owner = self._template(template)
        edge = Edge(id=self._next_edge_id, template_id=owner.id)
        self._next_edge_id += 1
        owner.edges[edge.id] = edge
        return EdgeHandle(edge.id, owner.id)

    def set_edge_source(self, edge: Optional[EdgeHandle], location: Optional[LocationHandle]) -> bool:
        """
        Set the source location of an edge.

        Returns:
            False without touching the model if either handle is absent
        """
        target = self._edge(edge)
        if target is None or location is None:
            return False
        self._check_same_template(target, location)
        target.source = location.id
        return True

    def set_edge_target(self, edge: Optional[EdgeHandle], location: Optional[LocationHandle]) -> bool:
        """
        Set the target location of an edge.

        Returns:
            False without touching the model if either handle is absent
        """
        target = self._edge(edge)
        if target is None or location is None:
            return False
        self._check_same_template(target, location)
        target.target = location.id
        return True

    def set_edge_guard(self, edge: Optional[EdgeHandle], expression: str) -> bool:
        """Replace the guard of an edge. Returns False if the edge is absent."""
        target = self._edge(edge)
        if target is None:
            return False
        target.guard = Guard(expression)
        return True

    def set_edge_update(self, edge: Optional[EdgeHandle], expression: str) -> bool:
        """Append an update to an edge. Returns False if the edge is absent."""
        target = self._edge(edge)
        if target is None:
            return False
        target.updates.append(Update(expression))
        return True

    # =========================================================================
    # HANDLE RESOLUTION
    # =========================================================================

    def _template(self, handle: TemplateHandle) -> Template:
        template = self._nta.get_template(handle.id if handle is not None else None)
        if template is None:
            raise ModelError(f"Unknown template handle: {handle}")
        return template

    def _location(self, handle: LocationHandle, owner: Template) -> Location:
        if handle.template_id != owner.id:
            raise ModelError(
                f"Location {handle.id} belongs to template {handle.template_id}, "
                f"not to '{owner.name}'"
            )
        location = owner.get_location(handle.id)
        if location is None:
            raise ModelError(f"Unknown location handle: {handle}")
        return location

    def _edge(self, handle: Optional[EdgeHandle]) -> Optional[Edge]:
        if handle is None:
            logger.debug("Ignoring edge operation on an absent edge")
            return None
        template = self._nta.get_template(handle.template_id)
        edge = template.get_edge(handle.id) if template is not None else None
        if edge is None:
            logger.debug("Ignoring edge operation on stale handle %s", handle)
        return edge

    def _check_same_template(self, edge: Edge, location: LocationHandle) -> None:
        owner = self._template(TemplateHandle(edge.template_id))
        self._location(location, owner)


@contextmanager
def build_context() -> Iterator[BuildContext]:
    """Provide a BuildContext that is reset when the block exits."""
    context = BuildContext()
    try:
        yield context
    finally:
        context.reset()
