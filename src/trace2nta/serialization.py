"""
Serialization helpers for NTA objects (model dump).

Dumps the in-memory automaton to plain dicts, JSON or YAML so a run can
be inspected after the fact, and reads such a dump back. Locations and
edges keep their ids. This is not the UPPAAL format; see
trace2nta.backends.uppaal_xml for that.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

from trace2nta.model import NTA, Template, Location, Edge
from trace2nta.expressions import Declaration, Guard, Update

logger = logging.getLogger(__name__)


def location_to_dict(loc: Location) -> Dict[str, Any]:
    return {"id": loc.id, "name": loc.name, "comment": loc.comment}


def location_from_dict(d: Dict[str, Any], template_id: int) -> Location:
    return Location(id=d["id"], template_id=template_id, name=d["name"], comment=d.get("comment"))


def edge_to_dict(e: Edge) -> Dict[str, Any]:
    return {
        "id": e.id,
        "source": e.source,
        "target": e.target,
        "guard": e.guard.exp if e.guard is not None else None,
        "updates": [u.exp for u in e.updates],
    }


def edge_from_dict(d: Dict[str, Any], template_id: int) -> Edge:
    guard = d.get("guard")
    return Edge(
        id=d["id"],
        template_id=template_id,
        source=d.get("source"),
        target=d.get("target"),
        guard=Guard(guard) if guard is not None else None,
        updates=[Update(u) for u in d.get("updates", [])],
    )


def template_to_dict(t: Template) -> Dict[str, Any]:
    return {
        "id": t.id,
        "name": t.name,
        "declarations": [d.exp for d in t.declarations],
        "locations": [location_to_dict(loc) for loc in t.locations.values()],
        "edges": [edge_to_dict(e) for e in t.edges.values()],
        "init": t.init,
    }


def template_from_dict(d: Dict[str, Any]) -> Template:
    t = Template(id=d["id"], name=d["name"], init=d.get("init"))
    t.declarations = [Declaration(x) for x in d.get("declarations", [])]
    for loc in d.get("locations", []):
        location = location_from_dict(loc, t.id)
        t.locations[location.id] = location
    for e in d.get("edges", []):
        edge = edge_from_dict(e, t.id)
        t.edges[edge.id] = edge
    return t


def nta_to_dict(n: NTA) -> Dict[str, Any]:
    return {
        "name": n.name,
        "global_declarations": [d.exp for d in n.global_declarations],
        "system_declarations": [d.exp for d in n.system_declarations],
        "templates": [template_to_dict(t) for t in n.templates.values()],
        "location_count": n.location_count,
    }


def nta_from_dict(d: Dict[str, Any]) -> NTA:
    n = NTA(name=d.get("name", ""))
    n.global_declarations = [Declaration(x) for x in d.get("global_declarations", [])]
    n.system_declarations = [Declaration(x) for x in d.get("system_declarations", [])]
    for t in d.get("templates", []):
        template = template_from_dict(t)
        n.templates[template.id] = template
    n.location_count = d.get(
        "location_count",
        sum(len(t.locations) for t in n.templates.values()),
    )
    return n


def nta_to_json(n: NTA) -> str:
    return json.dumps(nta_to_dict(n), sort_keys=True)


def nta_from_json(s: str) -> NTA:
    d = json.loads(s)
    return nta_from_dict(d)


def nta_to_yaml(n: NTA) -> str:
    return yaml.safe_dump(nta_to_dict(n), sort_keys=False)


def nta_from_yaml(s: str) -> NTA:
    d = yaml.safe_load(s)
    return nta_from_dict(d)


def save_model_dump(n: NTA, filename: str) -> Optional[str]:
    """
    Save the model as YAML next to `filename`, as "<base>.model.yaml".

    Returns:
        The written path, or None if the file could not be written
    """
    path = os.path.splitext(filename)[0] + ".model.yaml"
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(nta_to_yaml(n))
    except OSError as e:
        logger.error("An error has occurred while creating the model file %s: %s", path, e)
        return None
    logger.info("Wrote model dump to %s", path)
    return path
