"""
Core Automaton Model Objects

Defines the in-memory network of timed automata (NTA):
    - Locations (states of one automaton)
    - Edges (guarded, update-bearing transitions)
    - Templates (one named automaton each)
    - NTA (root container with the declarations)

ARCHITECTURAL RULE:
    Cross-references are integer identifiers looked up in the owning
    collection, never object positions:
        - Edge.source / Edge.target are location ids
        - Template.init is a location id
        - Location.template_id / Edge.template_id name the owner

    Objects are created through the BuildContext, which hands out ids.
    Nothing is ever removed; the model only grows until reset.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .expressions import Declaration, Guard, Update


@dataclass
class Location:
    """
    A state of a template's automaton.

    Properties:
        id: Stable identifier, unique across the whole NTA
        template_id: Identifier of the owning template
        name: Generated name (e.g. "Location_0", "Init_0")
        comment: Optional free text, rendered as a comments label
    """

    id: int
    template_id: int
    name: str
    comment: Optional[str] = None


@dataclass
class Edge:
    """
    Directed transition between two locations of the same template.

    Properties:
        id: Stable identifier, unique across the whole NTA
        template_id: Identifier of the owning template
        source: Location id, None until set
        target: Location id, None until set
        guard: At most one guard expression
        updates: Update expressions in insertion order

    IMPORTANT:
        Any number of updates is accepted here, but only an edge with
        exactly one update gets an assignment label when serialized.
    """

    id: int
    template_id: int
    source: Optional[int] = None
    target: Optional[int] = None
    guard: Optional[Guard] = None
    updates: List[Update] = field(default_factory=list)


@dataclass
class Template:
    """
    One automaton definition within the NTA.

    Properties:
        id: Stable identifier
        name: Template name, also used for process instantiation.
            Uniqueness is the caller's responsibility.
        declarations: Local declarations in insertion order
        locations: Locations keyed by id, in creation order
        edges: Edges keyed by id, in creation order
        init: Id of the initial location, None until set
    """

    id: int
    name: str
    declarations: List[Declaration] = field(default_factory=list)
    locations: Dict[int, Location] = field(default_factory=dict)
    edges: Dict[int, Edge] = field(default_factory=dict)
    init: Optional[int] = None

    def get_location(self, location_id: Optional[int]) -> Optional[Location]:
        """Return the location with this id, or None if it is not owned here."""
        if location_id is None:
            return None
        return self.locations.get(location_id)

    def get_edge(self, edge_id: Optional[int]) -> Optional[Edge]:
        """Return the edge with this id, or None if it is not owned here."""
        if edge_id is None:
            return None
        return self.edges.get(edge_id)

    def location_name(self, location_id: Optional[int]) -> Optional[str]:
        """Return the name of a location owned here, or None."""
        location = self.get_location(location_id)
        return location.name if location is not None else None

    @property
    def initial_location(self) -> Optional[Location]:
        return self.get_location(self.init)


@dataclass
class NTA:
    """
    Root container: the network of timed automata.

    Everything the serializer emits MUST be derivable from this object.

    Properties:
        name: Model name
        global_declarations: Model-wide declarations, insertion order
        system_declarations: Extra lines of the system block
        templates: Templates keyed by id, in creation order
        location_count: Locations created so far across all templates,
            drives location naming

    INVARIANTS:
        - Edge endpoints are locations of the edge's own template
        - A template's init is one of its own locations
        - Global, system and local declarations are never merged
    """

    name: str = ""
    global_declarations: List[Declaration] = field(default_factory=list)
    system_declarations: List[Declaration] = field(default_factory=list)
    templates: Dict[int, Template] = field(default_factory=dict)
    location_count: int = 0

    def get_template(self, template_id: Optional[int]) -> Optional[Template]:
        """
        Retrieve a template by id.

        Args:
            template_id: Template identifier

        Returns:
            Template object or None if not found
        """
        if template_id is None:
            return None
        return self.templates.get(template_id)

    def get_template_by_name(self, name: str) -> Optional[Template]:
        """
        Retrieve the first template with the given name.

        Returns:
            Template object or None if not found
        """
        for template in self.templates.values():
            if template.name == name:
                return template
        return None

    def get_location(self, location_id: Optional[int]) -> Optional[Location]:
        """Find a location in any template."""
        for template in self.templates.values():
            location = template.get_location(location_id)
            if location is not None:
                return location
        return None

    def get_edge(self, edge_id: Optional[int]) -> Optional[Edge]:
        """Find an edge in any template."""
        for template in self.templates.values():
            edge = template.get_edge(edge_id)
            if edge is not None:
                return edge
        return None

    def validate(self) -> List[str]:
        """
        Check the reference invariants of every template.

        Returns:
            Human-readable problem descriptions, empty when the model
            can be serialized.
        """
        problems: List[str] = []
        for template in self.templates.values():
            if template.init is None:
                problems.append(f"Template '{template.name}' has no initial location")
            elif template.init not in template.locations:
                problems.append(
                    f"Template '{template.name}' initial location {template.init} "
                    f"is not one of its locations"
                )
            for edge in template.edges.values():
                for end, location_id in (("source", edge.source), ("target", edge.target)):
                    if location_id is None:
                        problems.append(
                            f"Edge {edge.id} in template '{template.name}' has no {end}"
                        )
                    elif location_id not in template.locations:
                        problems.append(
                            f"Edge {edge.id} in template '{template.name}' has {end} "
                            f"{location_id} outside the template"
                        )
        return problems
