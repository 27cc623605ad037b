"""
Exceptions raised while loading, merging, rendering and validating documents.

Schema validation failures are not wrapped: they surface as
``pydantic.ValidationError``.
"""


class ConfigcrunchError(Exception):
    """Base class of all configcrunch errors."""


class ReferencedDocumentNotFound(ConfigcrunchError):
    """A ``$ref`` target was not found in any lookup path."""


class CircularDependencyError(ConfigcrunchError):
    """A chain of ``$ref`` references loads the same file twice."""


class VariableProcessingError(ConfigcrunchError):
    """A template inside a document could not be evaluated."""


class InvalidDocumentError(ConfigcrunchError):
    """A document has an invalid shape or was modified after being frozen."""


class InvalidHeaderError(ConfigcrunchError):
    """A YAML file does not start with the header its document type expects."""


class InvalidRemoveError(ConfigcrunchError):
    """A ``$remove`` marker was used somewhere it has no meaning."""
