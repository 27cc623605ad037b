"""Loading, merging and template evaluation for configcrunch documents."""

from configcrunch.engine.loader import load_multiple_yml, load_yaml_document
from configcrunch.engine.subdocs import test_subdoc_specs

__all__ = [
    "load_multiple_yml",
    "load_yaml_document",
    "test_subdoc_specs",
]
