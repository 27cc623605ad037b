"""
DocReference - Schema annotation for sub-documents.

Used inside pydantic schemas to declare that a field holds a document of a
given type, which is validated against its own schema:

    class ProjectSchema(BaseModel):
        app: Annotated[Any, DocReference(App)]
        services: Dict[str, Annotated[Any, DocReference(Service)]] = {}
"""

from typing import Any, Type

from pydantic import ValidationError
from pydantic_core import core_schema


class DocReference:
    """Validates that a value is a document of ``referenced_type``."""

    def __init__(self, referenced_type: Type):
        self.referenced_type = referenced_type

    def validate(self, value: Any) -> Any:
        if not isinstance(value, self.referenced_type):
            raise ValueError(
                f"Expected a {self.referenced_type.__name__} document, got {type(value).__name__}"
            )
        try:
            value.validate()
        except ValidationError as e:
            raise ValueError(f"Invalid {value.error_str()}: {e}") from e
        return value

    def __get_pydantic_core_schema__(self, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(self.validate)

    def __repr__(self) -> str:
        return f"DocReference({self.referenced_type.__name__})"
