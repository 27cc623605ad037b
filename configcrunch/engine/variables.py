"""
Variables - Evaluates Jinja2 templates inside documents.

Every string value containing ``{`` is rendered with the document it
belongs to as context: its top-level keys are template variables and its
variable helpers are callable. Rendered text is converted back to bool, int
or float when it looks like one, unless the ``str`` filter was applied.

Templates may refer to values that are templates themselves, so documents
are processed in passes until nothing changes.
"""

import logging
import re
from typing import Any, Dict, Tuple

from jinja2 import StrictUndefined
from jinja2.sandbox import SandboxedEnvironment

from configcrunch.config import config
from configcrunch.constants import FORCE_STRING
from configcrunch.engine import subdocs
from configcrunch.errors import VariableProcessingError
from configcrunch.models.document import YamlConfigDocument

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"^[-+]?\d+$")
_FLOAT_RE = re.compile(r"^[-+]?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$")


class DocumentEnvironment(SandboxedEnvironment):
    """
    Sandboxed Jinja2 environment that resolves attribute access on documents
    to document keys and variable helpers only. Everything else goes through
    the sandbox, so templates can not reach Python internals.
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, YamlConfigDocument):
            return self._document_lookup(obj, attribute)
        return super().getattr(obj, attribute)

    def getitem(self, obj: Any, argument: Any) -> Any:
        if isinstance(obj, YamlConfigDocument):
            return self._document_lookup(obj, argument)
        return super().getitem(obj, argument)

    def _document_lookup(self, document: YamlConfigDocument, name: Any) -> Any:
        if document.internal_contains(name):
            return document.internal_get(name)
        helper = document.bound_variable_helpers().get(name)
        if helper is not None:
            return helper
        return self.undefined(obj=document, name=name)


def str_filter(value: Any) -> str:
    """Keep the rendered value a string."""
    return f"{FORCE_STRING}{value}"


def create_environment() -> DocumentEnvironment:
    env = DocumentEnvironment(
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["str"] = str_filter
    return env


def convert_rendered(text: str) -> Any:
    """Convert rendered template output to a typed value."""
    if FORCE_STRING in text:
        return text.replace(FORCE_STRING, "")
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return text


def build_context(document: YamlConfigDocument) -> Dict[str, Any]:
    """Template context for values of ``document``. Keys win over helpers."""
    context: Dict[str, Any] = dict(document.bound_variable_helpers())
    for key, value in document.internal_access().items():
        if isinstance(key, str):
            context[key] = value
    return context


def render_string(
    env: DocumentEnvironment, document: YamlConfigDocument, template: str, path: str = ""
) -> Any:
    """
    Render one template string in the context of ``document``.

    Raises:
        VariableProcessingError: If rendering fails for any reason
    """
    if "{" not in template:
        return template
    try:
        rendered = env.from_string(template).render(build_context(document))
    except Exception as e:
        raise VariableProcessingError(
            f"Error processing a variable for document {document.error_str()} at '{path}': "
            f"{type(e).__name__}: {e}. Template: {template!r}"
        ) from e
    return convert_rendered(rendered)


def process_variables(document: YamlConfigDocument) -> None:
    """
    Evaluate all templates of ``document`` and its sub-documents, then run
    the after-variables hooks.

    Raises:
        VariableProcessingError: If a template fails, or values keep changing
            after ``config.max_variable_passes`` passes
    """
    env = create_environment()
    passes = config.max_variable_passes
    for pass_number in range(1, passes + 1):
        changed = _process_document(env, document)
        logger.debug("Variable pass %d on %s: %s", pass_number, document.error_str(),
                     "changed" if changed else "stable")
        if not changed:
            break
    else:
        raise VariableProcessingError(
            f"Variables of {document.error_str()} did not settle after {passes} passes. "
            f"Templates probably reference each other in a cycle."
        )
    _after_variables(document)


def _process_document(env: DocumentEnvironment, document: YamlConfigDocument) -> bool:
    changed = False
    data = document.internal_access()
    for key in list(data.keys()):
        value, value_changed = _process_value(env, document, data[key], str(key))
        if value_changed:
            data[key] = value
            changed = True
    return changed


def _process_value(
    env: DocumentEnvironment, document: YamlConfigDocument, value: Any, path: str
) -> Tuple[Any, bool]:
    if isinstance(value, YamlConfigDocument):
        return value, _process_document(env, value)

    if isinstance(value, str):
        rendered = render_string(env, document, value, path)
        return rendered, _differs(value, rendered)

    if isinstance(value, dict):
        changed = False
        for key in list(value.keys()):
            new, item_changed = _process_value(env, document, value[key], f"{path}.{key}")
            if item_changed:
                value[key] = new
                changed = True
        return value, changed

    if isinstance(value, list):
        changed = False
        for index, item in enumerate(value):
            new, item_changed = _process_value(env, document, item, f"{path}[{index}]")
            if item_changed:
                value[index] = new
                changed = True
        return value, changed

    return value, False


def _differs(old: str, new: Any) -> bool:
    return not isinstance(new, str) or new != old


def _after_variables(document: YamlConfigDocument) -> None:
    for subdoc in list(subdocs.iter_subdocuments(document)):
        _after_variables(subdoc)
    document._initialize_data_after_variables()
