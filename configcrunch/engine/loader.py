"""
Loader - Reads YAML documents and resolves ``$ref`` references.

Referenced documents are looked up as ``<lookup path>/<ref><extension>`` in
every lookup path. When a reference is found in several lookup paths, all
matches are merged, later lookup paths overriding earlier ones. The
referencing document is then merged on top of the result.
"""

import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Type

import yaml

from configcrunch.config import config
from configcrunch.constants import REF
from configcrunch.engine import merger, subdocs
from configcrunch.errors import (
    CircularDependencyError,
    ConfigcrunchError,
    InvalidDocumentError,
    InvalidHeaderError,
    ReferencedDocumentNotFound,
)
from configcrunch.models.document import YamlConfigDocument

logger = logging.getLogger(__name__)


def read_yaml(path: str) -> Dict[Any, Any]:
    """
    Read a YAML file that must contain a mapping.

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidDocumentError: If the file is not valid YAML or not a mapping
    """
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise InvalidDocumentError(f"Invalid YAML in {path}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise InvalidDocumentError(f"Document must contain a YAML mapping: {path}")
    return dict(payload)


def extract_body(doc_type: Type[YamlConfigDocument], data: Mapping, path: str) -> Dict[Any, Any]:
    """
    Return the content under the header of ``doc_type``.

    Raises:
        InvalidHeaderError: If the header is missing or other root keys exist
    """
    header = doc_type.header()
    if header not in data or len(data) != 1:
        raise InvalidHeaderError(
            f"The document {path} does not have a valid header. "
            f"Expected a single root key '{header}', found: {', '.join(str(k) for k in data) or 'nothing'}"
        )
    body = data[header]
    if body is None:
        return {}
    if not isinstance(body, Mapping):
        raise InvalidDocumentError(
            f"The content of '{header}' in {path} must be a mapping, got {type(body).__name__}"
        )
    return dict(body)


def load_yaml_document(
    doc_type: Type[YamlConfigDocument],
    path: str,
    parent: Optional[YamlConfigDocument] = None,
    already_loaded_docs: Optional[List[str]] = None,
) -> YamlConfigDocument:
    """
    Load a single document of ``doc_type`` from a YAML file.

    Args:
        doc_type: Document class to instantiate
        path: Path of the YAML file
        parent: Parent document of the new document
        already_loaded_docs: Files on the current $ref chain

    Returns:
        The unresolved document
    """
    absolute = os.path.abspath(path)
    logger.debug("Loading %s from %s", doc_type.__name__, absolute)
    body = extract_body(doc_type, read_yaml(absolute), absolute)
    return doc_type(
        body,
        path=absolute,
        parent=parent,
        already_loaded_docs=already_loaded_docs if already_loaded_docs is not None else [absolute],
        absolute_paths=[absolute],
    )


def load_multiple_yml(doc_type: Type[YamlConfigDocument], *paths: str) -> YamlConfigDocument:
    """
    Load several YAML files of the same type and merge them into one document.

    Later files override earlier ones. References are not resolved.

    Args:
        doc_type: Document class to instantiate
        *paths: YAML files, lowest priority first

    Returns:
        The merged, unresolved document
    """
    if not paths:
        raise ConfigcrunchError("load_multiple_yml needs at least one path")

    absolute_paths = [os.path.abspath(p) for p in paths]
    merged: Dict[Any, Any] = {}
    for path in absolute_paths:
        logger.debug("Loading %s from %s", doc_type.__name__, path)
        merged = merger.merge_dicts(merged, extract_body(doc_type, read_yaml(path), path))

    return doc_type(
        merged,
        path=absolute_paths[0],
        already_loaded_docs=absolute_paths,
        absolute_paths=absolute_paths,
    )


def find_referenced_files(ref: str, lookup_paths: List[str]) -> List[str]:
    """Return every existing file ``ref`` points to, in lookup path order."""
    relative = ref.lstrip("/") + config.yaml_extension
    found: List[str] = []
    for lookup_path in lookup_paths:
        candidate = os.path.abspath(os.path.join(lookup_path, relative))
        if os.path.isfile(candidate) and candidate not in found:
            found.append(candidate)
    return found


def resolve_references(document: YamlConfigDocument, lookup_paths: List[str]) -> None:
    """
    Resolve all references of ``document`` and its sub-documents, strip
    ``$remove`` markers and run the after-merge hooks.
    """
    _merge_references(document, lookup_paths)
    _finalize(document)


def _merge_references(document: YamlConfigDocument, lookup_paths: List[str]) -> None:
    if REF in document.doc:
        ref = document.doc[REF]
        if not isinstance(ref, str):
            raise InvalidDocumentError(
                f"{document.error_str()}: '{REF}' must be a string, got {type(ref).__name__}"
            )

        candidates = find_referenced_files(ref, lookup_paths)
        if not candidates:
            raise ReferencedDocumentNotFound(
                f"Document referenced by {document.error_str()} with path {ref!r} "
                f"was not found in any of the lookup paths: {', '.join(lookup_paths) or 'none'}"
            )

        base: Optional[YamlConfigDocument] = None
        for candidate in candidates:
            if candidate in document.already_loaded_docs:
                raise CircularDependencyError(
                    f"Circular dependency detected while resolving {ref!r} from {document.error_str()}. "
                    f"Chain: {' -> '.join(document.already_loaded_docs + [candidate])}"
                )
            referenced = load_yaml_document(
                type(document),
                candidate,
                parent=document.parent_doc,
                already_loaded_docs=document.already_loaded_docs + [candidate],
            )
            _merge_references(referenced, lookup_paths)
            base = referenced if base is None else merger.merge_values(base, referenced)

        own = {k: v for k, v in document.doc.items() if k != REF}
        document.doc = merger.merge_dicts(base.doc, own)
        document.absolute_paths = merger.join_paths(base.absolute_paths, document.absolute_paths)
        logger.debug("Merged %s into %s", ref, document.error_str())
        subdocs.wrap_subdocuments(document)

    for subdoc in list(subdocs.iter_subdocuments(document)):
        _merge_references(subdoc, lookup_paths)


def _finalize(document: YamlConfigDocument) -> None:
    for subdoc in list(subdocs.iter_subdocuments(document)):
        _finalize(subdoc)
    document.doc = merger.strip_removes(document.doc)
    document._initialize_data_after_merge()
