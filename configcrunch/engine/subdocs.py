"""
Sub-document specs.

A spec path is a ``/`` separated list of keys. A segment ending in ``[]``
stands for every value of the mapping (or every item of the list) stored
under that key, for example ``services[]`` or ``app/commands[]``.
"""

from typing import Any, Iterator, List, Mapping, MutableMapping, Tuple, Type, Union

from configcrunch.constants import REMOVE
from configcrunch.errors import ConfigcrunchError
from configcrunch.models.document import YamlConfigDocument

ITERATE_SUFFIX = "[]"

Segment = Tuple[str, bool]
Slot = Tuple[Union[MutableMapping, list], Any]


def parse_spec(spec: str) -> List[Segment]:
    """
    Split a sub-document spec path into ``(key, iterate)`` segments.

    Raises:
        ConfigcrunchError: If the path is empty or has an empty segment.
    """
    if not isinstance(spec, str) or spec.strip("/") == "":
        raise ConfigcrunchError(f"Invalid sub-document spec: {spec!r}")

    segments: List[Segment] = []
    for raw in spec.split("/"):
        iterate = raw.endswith(ITERATE_SUFFIX)
        key = raw[:-len(ITERATE_SUFFIX)] if iterate else raw
        if key == "" or "[" in key or "]" in key:
            raise ConfigcrunchError(
                f"Invalid segment {raw!r} in sub-document spec {spec!r}"
            )
        segments.append((key, iterate))
    return segments


def iter_slots(data: Any, segments: List[Segment]) -> Iterator[Slot]:
    """Yield every ``(container, key)`` position a spec path points to."""
    if not segments or not isinstance(data, MutableMapping):
        return
    (key, iterate), rest = segments[0], segments[1:]
    if key not in data:
        return

    if not iterate:
        if rest:
            yield from iter_slots(_content(data[key]), rest)
        else:
            yield data, key
        return

    children = data[key]
    if isinstance(children, MutableMapping):
        child_keys = list(children.keys())
    elif isinstance(children, list):
        child_keys = list(range(len(children)))
    else:
        return
    for child_key in child_keys:
        if rest:
            yield from iter_slots(_content(children[child_key]), rest)
        else:
            yield children, child_key


def _content(value: Any) -> Any:
    if isinstance(value, YamlConfigDocument):
        return value.doc
    return value


def wrap_subdocuments(document: YamlConfigDocument) -> None:
    """
    Turn mappings at sub-document positions into document instances and
    (re)attach existing sub-documents to ``document``.
    """
    for spec, doc_type in document.subdocuments():
        for container, key in iter_slots(document.doc, parse_spec(spec)):
            value = container[key]
            if isinstance(value, YamlConfigDocument):
                value.parent_doc = document
                wrap_subdocuments(value)
            elif isinstance(value, Mapping):
                container[key] = doc_type(
                    dict(value),
                    path=document.path,
                    parent=document,
                    already_loaded_docs=list(document.already_loaded_docs),
                    absolute_paths=list(document.absolute_paths),
                )


def iter_subdocuments(document: YamlConfigDocument) -> Iterator[YamlConfigDocument]:
    """Yield the direct sub-documents of ``document``."""
    for spec, _doc_type in document.subdocuments():
        for container, key in iter_slots(document.doc, parse_spec(spec)):
            value = container[key]
            if isinstance(value, YamlConfigDocument):
                yield value


def test_subdoc_specs(document: YamlConfigDocument) -> bool:
    """
    Check the sub-document specs of a document and of every declared
    sub-document type, and that values at those positions have the
    declared types.

    Args:
        document: The document to check

    Returns:
        True if everything is consistent

    Raises:
        ConfigcrunchError: On the first problem found
    """
    _check_spec_types(type(document), [])
    _check_instances(document)
    return True


def _check_spec_types(doc_type: Type[YamlConfigDocument], seen: List[type]) -> None:
    if doc_type in seen:
        return
    seen.append(doc_type)
    specs = doc_type.subdocuments()
    if not isinstance(specs, (list, tuple)):
        raise ConfigcrunchError(f"{doc_type.__name__}.subdocuments() must return a list")
    for entry in specs:
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise ConfigcrunchError(
                f"{doc_type.__name__}: sub-document specs must be (path, type) pairs, got {entry!r}"
            )
        spec, sub_type = entry
        parse_spec(spec)
        if not (isinstance(sub_type, type) and issubclass(sub_type, YamlConfigDocument)):
            raise ConfigcrunchError(
                f"{doc_type.__name__}: sub-document type for {spec!r} is not a YamlConfigDocument"
            )
        _check_spec_types(sub_type, seen)


def _check_instances(document: YamlConfigDocument) -> None:
    for spec, doc_type in document.subdocuments():
        for container, key in iter_slots(document.doc, parse_spec(spec)):
            value = container[key]
            if isinstance(value, str) and value == REMOVE:
                continue
            if not isinstance(value, doc_type):
                raise ConfigcrunchError(
                    f"{document.error_str()}: value at {spec!r} ({key!r}) should be a "
                    f"{doc_type.__name__}, got {type(value).__name__}"
                )
            _check_instances(value)
