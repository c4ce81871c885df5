"""Backends for NTA output generation (UPPAAL XML)."""

from .uppaal_xml import generate_xml, save_xml_file

__all__ = ["generate_xml", "save_xml_file"]
