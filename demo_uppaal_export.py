#!/usr/bin/env python3
"""
Demo: Build a small timed automaton and export it for UPPAAL.

Drives the traverser with an in-memory trace, prints the XML and saves
both the XML and the YAML model dump.
"""

from trace2nta.backends import generate_xml, save_xml_file
from trace2nta.builder import BuildContext
from trace2nta.serialization import save_model_dump
from trace2nta.traverser import DeclarationScope, ModelTraverser, Statement, StatementKind


def build_counter_trace():
    return [
        Statement(StatementKind.DECLARATION, ["int x = 0;"], scope=DeclarationScope.GLOBAL),
        Statement(StatementKind.DECLARATION, ["clock c;"]),
        Statement(StatementKind.TEST, ["x < 5"]),
        Statement(StatementKind.ASSIGNMENT, ["x := x + 1"], comment="increment"),
        Statement(StatementKind.ASSIGNMENT, ["x := x * 2", "c := 0"], comment="double and reset"),
        Statement(StatementKind.TEST, ["x > 4"]),
    ]


def main():
    context = BuildContext()
    nta = ModelTraverser(context).traverse(build_counter_trace(), "Counter")

    print("=" * 80)
    print("UPPAAL EXPORT DEMO")
    print("=" * 80)
    print(generate_xml(nta))

    filename = save_xml_file(nta, "counter")
    print(f"Saved to: {filename}")
    print(f"Model dump: {save_model_dump(nta, filename)}")

    print("\n" + "=" * 80)
    print("To check the model:")
    print("  verifyta counter.xml")
    print("=" * 80)


if __name__ == "__main__":
    main()
