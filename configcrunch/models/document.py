"""
YamlConfigDocument - Base class of all configuration document types.

A document type declares the header of its YAML files, the pydantic schema
it is validated against and where its sub-documents live. Loading happens
in three steps that callers run in order:

    doc = Project.from_yaml("project.yml")
    doc.resolve_and_merge_references(["/path/to/repo"])
    doc.process_vars()
    doc.validate()
"""

from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Type

from configcrunch.errors import InvalidDocumentError

_HELPER_MARKER = "_configcrunch_variable_helper"


def variable_helper(func: Callable) -> Callable:
    """Mark a document method as callable from templates."""
    setattr(func, _HELPER_MARKER, True)
    return func


class YamlConfigDocument:
    """
    A configuration document loaded from YAML.

    Behaves like a mapping of its top-level keys. Values at sub-document
    positions are instances of the declared sub-document types.
    """

    def __init__(
        self,
        document: Mapping,
        path: Optional[str] = None,
        parent: Optional["YamlConfigDocument"] = None,
        already_loaded_docs: Optional[List[str]] = None,
        set_parent_to_self: bool = False,
        absolute_paths: Optional[List[str]] = None,
    ):
        """
        Initialize the document.

        Args:
            document: Content of the document, without the header
            path: File the document was loaded from
            parent: Document containing this one
            already_loaded_docs: Files on the current $ref chain
            set_parent_to_self: Make ``parent()`` return this document
            absolute_paths: Files that contributed to this document
        """
        from configcrunch.engine import subdocs

        if not isinstance(document, Mapping):
            raise InvalidDocumentError(
                f"{self.__class__.__name__}<{path or '?'}>: document must be a mapping, "
                f"got {type(document).__name__}"
            )
        self.path = path
        self.parent_doc = self if set_parent_to_self else parent
        default_paths = [path] if path else []
        self.already_loaded_docs: List[str] = list(
            already_loaded_docs if already_loaded_docs is not None else default_paths
        )
        self.absolute_paths: List[str] = list(
            absolute_paths if absolute_paths is not None else default_paths
        )
        self.frozen = False
        self._doc: Dict[Any, Any] = dict(self._initialize_data_before_merge(dict(document)))
        subdocs.wrap_subdocuments(self)

    # ------------------------------------------------------------------
    # Declarations for subclasses
    # ------------------------------------------------------------------

    @classmethod
    def header(cls) -> str:
        """Root key of YAML files containing this document type."""
        raise NotImplementedError(f"{cls.__name__} must define header()")

    @classmethod
    def schema(cls):
        """The pydantic model this document type is validated against."""
        raise NotImplementedError(f"{cls.__name__} must define schema()")

    @classmethod
    def subdocuments(cls) -> List[Tuple[str, Type["YamlConfigDocument"]]]:
        """Sub-document specs as ``(path, type)`` pairs."""
        return []

    def _initialize_data_before_merge(self, data: Dict[Any, Any]) -> Dict[Any, Any]:
        return data

    def _initialize_data_after_merge(self) -> None:
        pass

    def _initialize_data_after_variables(self) -> None:
        pass

    def _initialize_data_after_freeze(self) -> None:
        pass

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_yaml(cls, path_to_yaml: str) -> "YamlConfigDocument":
        """
        Load a document of this type from a YAML file.

        Raises:
            InvalidHeaderError: If the file does not have this type's header
            InvalidDocumentError: If the file is not valid YAML or not a mapping
        """
        from configcrunch.engine import loader

        return loader.load_yaml_document(cls, path_to_yaml)

    @classmethod
    def from_dict(cls, data: Mapping) -> "YamlConfigDocument":
        """Create a document of this type from a mapping without a header."""
        return cls(data)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def resolve_and_merge_references(self, lookup_paths: List[str]) -> "YamlConfigDocument":
        """
        Resolve ``$ref`` references of this document and its sub-documents.

        Args:
            lookup_paths: Directories searched for referenced documents, in
                increasing order of priority

        Returns:
            This document
        """
        from configcrunch.engine import loader

        self._check_not_frozen()
        loader.resolve_references(self, [str(p) for p in lookup_paths])
        return self

    def process_vars(self) -> "YamlConfigDocument":
        """Evaluate all templates in this document and its sub-documents."""
        from configcrunch.engine import variables

        self._check_not_frozen()
        variables.process_variables(self)
        return self

    def validate(self) -> bool:
        """
        Validate the document against its schema.

        Returns:
            True if the document is valid

        Raises:
            pydantic.ValidationError: If the document does not match the schema
        """
        self.schema().model_validate(dict(self._doc))
        return True

    def freeze(self) -> None:
        """Make this document and all sub-documents immutable."""
        from configcrunch.engine import subdocs

        if self.frozen:
            return
        for subdoc in subdocs.iter_subdocuments(self):
            subdoc.freeze()
        self._doc = _freeze_value(self._doc, self.error_str())
        self.frozen = True
        self._initialize_data_after_freeze()

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    @variable_helper
    def parent(self) -> Optional["YamlConfigDocument"]:
        """The document containing this one."""
        return self.parent_doc

    def bound_variable_helpers(self) -> Dict[str, Callable]:
        """All variable helpers of this document, bound to it."""
        helpers: Dict[str, Callable] = {}
        for name in _helper_names(type(self)):
            helpers[name] = getattr(self, name)
        return helpers

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------

    @property
    def doc(self) -> Dict[Any, Any]:
        return self._doc

    @doc.setter
    def doc(self, value: Dict[Any, Any]) -> None:
        self._check_not_frozen()
        self._doc = value

    def internal_access(self) -> Dict[Any, Any]:
        return self._doc

    def internal_get(self, key: Any) -> Any:
        return self._doc[key]

    def internal_set(self, key: Any, value: Any) -> None:
        self._check_not_frozen()
        self._doc[key] = value

    def internal_contains(self, key: Any) -> bool:
        return key in self._doc

    def internal_delete(self, key: Any) -> None:
        self._check_not_frozen()
        del self._doc[key]

    def __getitem__(self, key: Any) -> Any:
        return self.internal_get(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.internal_set(key, value)

    def __delitem__(self, key: Any) -> None:
        self.internal_delete(key)

    def __contains__(self, key: Any) -> bool:
        return self.internal_contains(key)

    def __len__(self) -> int:
        return len(self._doc)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._doc)

    def get(self, key: Any, default: Any = None) -> Any:
        return self._doc.get(key, default)

    def keys(self):
        return self._doc.keys()

    def values(self):
        return self._doc.values()

    def items(self):
        return self._doc.items()

    def to_dict(self) -> Dict[Any, Any]:
        """Plain copy of the document with sub-documents expanded."""
        return _plain(self._doc)

    # ------------------------------------------------------------------
    # Misc
    # ------------------------------------------------------------------

    def error_str(self) -> str:
        """Short description of this document and its parents for error messages."""
        name = f"{self.__class__.__name__}<{self.path or '?'}>"
        if self.parent_doc is not None and self.parent_doc is not self:
            return f"{self.parent_doc.error_str()} -> {name}"
        return name

    def _check_not_frozen(self) -> None:
        if self.frozen:
            raise InvalidDocumentError(f"{self.error_str()} is frozen and can not be modified")

    def __str__(self) -> str:
        return self.error_str()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._doc!r})"

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        from configcrunch.models.reference import DocReference

        return DocReference(cls).__get_pydantic_core_schema__(source_type, handler)


def _helper_names(doc_type: type) -> List[str]:
    names = []
    for name in dir(doc_type):
        attr = getattr(doc_type, name, None)
        if callable(attr) and getattr(attr, _HELPER_MARKER, False):
            names.append(name)
    return names


def _plain(value: Any) -> Any:
    if isinstance(value, YamlConfigDocument):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


class FrozenDict(dict):
    """Read-only dict used for the content of frozen documents."""

    def __init__(self, data: Mapping, owner: str):
        super().__init__(data)
        self.owner = owner

    def _blocked(self, *args, **kwargs):
        raise InvalidDocumentError(f"{self.owner} is frozen and can not be modified")

    __setitem__ = __delitem__ = __ior__ = _blocked
    clear = pop = popitem = setdefault = update = _blocked

    def __reduce__(self):
        return dict, (dict(self),)


class FrozenList(list):
    """Read-only list used inside frozen documents."""

    def __init__(self, items: List[Any], owner: str):
        super().__init__(items)
        self.owner = owner

    def _blocked(self, *args, **kwargs):
        raise InvalidDocumentError(f"{self.owner} is frozen and can not be modified")

    __setitem__ = __delitem__ = __iadd__ = __imul__ = _blocked
    append = extend = insert = pop = remove = clear = sort = reverse = _blocked

    def __reduce__(self):
        return list, (list(self),)


def _freeze_value(value: Any, owner: str) -> Any:
    if isinstance(value, YamlConfigDocument):
        return value
    if isinstance(value, Mapping):
        return FrozenDict({k: _freeze_value(v, owner) for k, v in value.items()}, owner)
    if isinstance(value, list):
        return FrozenList([_freeze_value(v, owner) for v in value], owner)
    return value
