"""
trace2nta: statement traces to UPPAAL timed automata.

Layers:
    - expressions / model: the in-memory network of timed automata
    - builder: BuildContext, the only way the model grows
    - traverser: drives the builder from a classified statement trace
    - backends.uppaal_xml: renders the model in the UPPAAL XML format
    - serialization: YAML/JSON dump of the model for inspection

The model knows nothing about the XML format, and the backend never
mutates the model.
"""

__version__ = "0.1.0"
