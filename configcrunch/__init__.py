"""
configcrunch - Typed YAML configuration documents.

This package provides:
- Document types with pydantic schemas and nested sub-documents
- Inheritance between documents through $ref references and lookup paths
- Removal of inherited values with $remove markers
- Jinja2 templates inside values, with Python helper functions
"""

__version__ = "1.0.0"

from configcrunch.constants import REF, REMOVE, REMOVE_FROM_LIST_PREFIX, FORCE_STRING
from configcrunch.errors import (
    ConfigcrunchError,
    ReferencedDocumentNotFound,
    CircularDependencyError,
    VariableProcessingError,
    InvalidDocumentError,
    InvalidHeaderError,
    InvalidRemoveError,
)
from configcrunch.models import YamlConfigDocument, DocReference, variable_helper
from configcrunch.engine import load_multiple_yml, test_subdoc_specs

__all__ = [
    "__version__",
    # Markers
    "REF",
    "REMOVE",
    "REMOVE_FROM_LIST_PREFIX",
    "FORCE_STRING",
    # Errors
    "ConfigcrunchError",
    "ReferencedDocumentNotFound",
    "CircularDependencyError",
    "VariableProcessingError",
    "InvalidDocumentError",
    "InvalidHeaderError",
    "InvalidRemoveError",
    # Documents
    "YamlConfigDocument",
    "DocReference",
    "variable_helper",
    # Loading
    "load_multiple_yml",
    "test_subdoc_specs",
]
