"""Document models for configcrunch."""

from configcrunch.models.document import YamlConfigDocument, variable_helper
from configcrunch.models.reference import DocReference

__all__ = [
    "YamlConfigDocument",
    "variable_helper",
    "DocReference",
]
