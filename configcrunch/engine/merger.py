"""
Merger - Combines documents along ``$ref`` chains and applies ``$remove``.

Merging keeps ``$remove`` markers in the result so that references resolved
later (deeper in a sub-document, for example) still see them. They are
removed by :func:`strip_removes` once a document is fully resolved.
"""

import logging
from typing import Any, Dict, List, Mapping

from configcrunch.constants import REMOVE, REMOVE_FROM_LIST_PREFIX
from configcrunch.errors import InvalidRemoveError
from configcrunch.models.document import YamlConfigDocument

logger = logging.getLogger(__name__)


def merge_values(base: Any, overlay: Any) -> Any:
    """
    Merge ``overlay`` on top of ``base``.

    Args:
        base: Value from the referenced (lower priority) document
        overlay: Value from the referencing (higher priority) document

    Returns:
        The merged value. Containers of ``base`` are never mutated.
    """
    if isinstance(overlay, str) and overlay == REMOVE:
        return REMOVE

    if isinstance(base, YamlConfigDocument) and isinstance(overlay, YamlConfigDocument):
        overlay.doc = merge_dicts(base.doc, overlay.doc)
        overlay.absolute_paths = join_paths(base.absolute_paths, overlay.absolute_paths)
        return overlay

    if isinstance(base, Mapping) and isinstance(overlay, Mapping):
        return merge_dicts(base, overlay)

    if isinstance(base, list) and isinstance(overlay, list):
        return list(base) + list(overlay)

    return overlay


def merge_dicts(base: Mapping, overlay: Mapping) -> Dict[Any, Any]:
    """Merge two mappings key by key, ``overlay`` winning."""
    merged: Dict[Any, Any] = dict(base)
    for key, overlay_value in overlay.items():
        if key in merged:
            merged[key] = merge_values(merged[key], overlay_value)
        else:
            merged[key] = overlay_value
    return merged


def strip_removes(value: Any, path: str = "") -> Any:
    """
    Remove all ``$remove`` markers left after merging.

    Keys whose value is ``$remove`` are dropped. In lists, ``$remove::X``
    drops every earlier entry equal to ``X`` and then itself. Sub-documents
    are left alone, they strip their own content when they are resolved.

    Raises:
        InvalidRemoveError: For a plain ``$remove`` list entry or an empty
            ``$remove::`` entry.
    """
    if isinstance(value, YamlConfigDocument):
        return value

    if isinstance(value, Mapping):
        result: Dict[Any, Any] = {}
        for key, item in value.items():
            if isinstance(item, str) and item == REMOVE:
                continue
            result[key] = strip_removes(item, f"{path}.{key}" if path else str(key))
        return result

    if isinstance(value, list):
        items: List[Any] = []
        for index, item in enumerate(value):
            item_path = f"{path}[{index}]"
            if isinstance(item, str):
                if item == REMOVE:
                    raise InvalidRemoveError(
                        f"'{REMOVE}' can not be used as a list entry (at {item_path}). "
                        f"Use '{REMOVE_FROM_LIST_PREFIX}<value>' to remove entries from lists."
                    )
                if item.startswith(REMOVE_FROM_LIST_PREFIX):
                    target = item[len(REMOVE_FROM_LIST_PREFIX):]
                    if target == "":
                        raise InvalidRemoveError(
                            f"'{REMOVE_FROM_LIST_PREFIX}' needs a value to remove (at {item_path})."
                        )
                    before = len(items)
                    items = [i for i in items if not _matches(i, target)]
                    logger.debug("Removed %d entries equal to %r at %s", before - len(items), target, path)
                    continue
            items.append(strip_removes(item, item_path))
        return items

    return value


def _matches(item: Any, target: str) -> bool:
    if isinstance(item, (Mapping, list, YamlConfigDocument)):
        return False
    if isinstance(item, bool):
        return str(item).lower() == target.lower()
    return item == target or str(item) == target


def join_paths(base: List[str], overlay: List[str]) -> List[str]:
    joined = list(base)
    for path in overlay:
        if path not in joined:
            joined.append(path)
    return joined
