"""
configcrunch CLI - Load, merge and validate configuration documents.

Commands:
- load: Resolve a document and print the result
- check: Resolve and validate a document, print a summary
"""

import importlib
import json
import logging
import os
import sys
from typing import List, Optional, Tuple, Type

import click
import yaml
from pydantic import ValidationError

from configcrunch import __version__
from configcrunch.config import config
from configcrunch.engine.loader import load_multiple_yml
from configcrunch.errors import ConfigcrunchError
from configcrunch.models.document import YamlConfigDocument


def import_document_type(spec: str) -> Type[YamlConfigDocument]:
    """
    Import a document class from a ``module:ClassName`` string.

    The current working directory is importable, like with ``python -m``.

    Raises:
        ValueError: If the spec is malformed or does not name a document class
    """
    module_name, sep, class_name = spec.partition(":")
    if not sep or not module_name or not class_name:
        raise ValueError(f"Invalid document class: {spec}. Expected: module:ClassName")
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    importlib.invalidate_caches()
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Can not import module {module_name}: {e}") from e
    doc_type = getattr(module, class_name, None)
    if not (isinstance(doc_type, type) and issubclass(doc_type, YamlConfigDocument)):
        raise ValueError(f"{spec} is not a YamlConfigDocument class")
    return doc_type


def build_document(
    doc_type: Type[YamlConfigDocument],
    files: Tuple[str, ...],
    lookup_paths: List[str],
    process_vars: bool = True,
    validate: bool = True,
) -> YamlConfigDocument:
    """Run the full loading pipeline for the given files."""
    if len(files) == 1:
        document = doc_type.from_yaml(files[0])
    else:
        document = load_multiple_yml(doc_type, *files)
    document.resolve_and_merge_references(lookup_paths)
    if process_vars:
        document.process_vars()
    if validate:
        document.validate()
    return document


def _lookup_paths(given: Tuple[str, ...]) -> List[str]:
    if given:
        return list(given)
    return [str(p) for p in config.lookup_paths]


def _load_or_exit(
    doc_class: str,
    files: Tuple[str, ...],
    lookup_path: Tuple[str, ...],
    process_vars: bool = True,
    validate: bool = True,
) -> YamlConfigDocument:
    try:
        doc_type = import_document_type(doc_class)
    except ValueError as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(2)

    try:
        return build_document(doc_type, files, _lookup_paths(lookup_path), process_vars, validate)
    except (ConfigcrunchError, ValidationError) as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(1)
    except NotImplementedError as e:
        click.echo(f"✗ Error: {doc_class} is incomplete: {e}", err=True)
        sys.exit(2)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """configcrunch - typed YAML configuration documents"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument('doc_class')
@click.argument('files', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option('--lookup-path', '-l', multiple=True, type=click.Path(file_okay=False),
              help='Directory searched for $ref targets (repeatable)')
@click.option('--format', 'output_format', type=click.Choice(['yaml', 'json']), default='yaml',
              help='Output format')
@click.option('--no-vars', is_flag=True, help='Do not evaluate templates')
@click.option('--no-validate', is_flag=True, help='Do not validate against the schema')
def load(doc_class: str, files: Tuple[str, ...], lookup_path: Tuple[str, ...],
         output_format: str, no_vars: bool, no_validate: bool):
    """
    Load FILES as DOC_CLASS and print the resolved document.

    DOC_CLASS: Document class as module:ClassName

    Several FILES are merged in order, later files overriding earlier ones.
    """
    document = _load_or_exit(doc_class, files, lookup_path, not no_vars, not no_validate)
    output = {document.header(): document.to_dict()}

    if output_format == 'json':
        click.echo(json.dumps(output, indent=2, ensure_ascii=False, default=str))
    else:
        click.echo(yaml.safe_dump(output, sort_keys=False, allow_unicode=True), nl=False)


@cli.command()
@click.argument('doc_class')
@click.argument('files', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option('--lookup-path', '-l', multiple=True, type=click.Path(file_okay=False),
              help='Directory searched for $ref targets (repeatable)')
def check(doc_class: str, files: Tuple[str, ...], lookup_path: Tuple[str, ...]):
    """
    Check that FILES load and validate as DOC_CLASS.

    DOC_CLASS: Document class as module:ClassName
    """
    document = _load_or_exit(doc_class, files, lookup_path)
    click.echo(f"✓ {document.error_str()} is valid")
    click.echo(f"  Files: {len(document.absolute_paths)}")
    for path in document.absolute_paths:
        click.echo(f"    - {path}")


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    cli(argv)


if __name__ == '__main__':
    main()
