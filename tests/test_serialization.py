"""
Tests for the model dump (JSON/YAML) of NTA objects.

These tests ensure lossless JSON/YAML round-trip using the explicit
serialization functions in `trace2nta.serialization`.
"""

import os

import yaml

from trace2nta.builder import BuildContext
from trace2nta.serialization import (
    nta_to_dict,
    nta_from_dict,
    nta_to_json,
    nta_from_json,
    nta_to_yaml,
    nta_from_yaml,
    save_model_dump,
)


def build_sample_nta():
    ctx = BuildContext()
    ctx.new_automaton("Serialization Test")
    ctx.add_global_declaration("int x = 0;")
    ctx.add_system_declaration("const int N = 1;")
    t = ctx.new_template("Worker")
    ctx.add_local_declaration(t, "clock c;")
    init = ctx.new_location("Init", t)
    ctx.set_initial_location(init, t)
    done = ctx.new_location("", t)
    ctx.set_location_comment(done, "done")
    edge = ctx.new_edge(t)
    ctx.set_edge_source(edge, init)
    ctx.set_edge_target(edge, done)
    ctx.set_edge_guard(edge, "c > 2")
    ctx.set_edge_update(edge, "x := x + 1")
    return ctx.finalize_model()


def test_dict_shape():
    d = nta_to_dict(build_sample_nta())
    assert d["name"] == "Serialization Test"
    assert d["global_declarations"] == ["int x = 0;"]
    template = d["templates"][0]
    assert [loc["name"] for loc in template["locations"]] == ["Init_0", "Location_1"]
    assert template["edges"][0] == {
        "id": 0,
        "source": 0,
        "target": 1,
        "guard": "c > 2",
        "updates": ["x := x + 1"],
    }
    assert template["init"] == 0


def test_json_roundtrip():
    nta = build_sample_nta()
    before = nta_to_dict(nta)
    restored = nta_from_json(nta_to_json(nta))
    assert nta_to_dict(restored) == before
    assert restored.validate() == []


def test_yaml_roundtrip():
    nta = build_sample_nta()
    before = nta_to_dict(nta)
    restored = nta_from_yaml(nta_to_yaml(nta))
    assert nta_to_dict(restored) == before
    assert restored.get_template_by_name("Worker").initial_location.name == "Init_0"


def test_location_count_defaults_to_location_total():
    d = nta_to_dict(build_sample_nta())
    del d["location_count"]
    assert nta_from_dict(d).location_count == 2


def test_save_model_dump_replaces_extension(tmp_path):
    nta = build_sample_nta()
    path = save_model_dump(nta, str(tmp_path / "model.xml"))
    assert path == str(tmp_path / "model.model.yaml")
    assert os.path.exists(path)
    with open(path, encoding="utf-8") as f:
        assert yaml.safe_load(f)["name"] == "Serialization Test"


def test_save_model_dump_write_failure(tmp_path):
    nta = build_sample_nta()
    assert save_model_dump(nta, str(tmp_path / "absent" / "model.xml")) is None
