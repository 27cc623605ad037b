#!/usr/bin/env python3
"""
Dev Version - Rewrite the package version for builds that are not releases.

Tagged builds keep the version in configcrunch/__init__.py as it is. All other
builds get ``<version>.dev0+<short sha>`` so their wheels never collide with
a release on the package index.

Usage:
    python scripts/dev_version.py 3f2a9c81d0e4b7 [--file configcrunch/__init__.py]
"""

import argparse
import re
import sys
from pathlib import Path

VERSION_RE = re.compile(
    r"""__version__\s*=\s*(['"])(?P<base>.*?)(?P<suffix>\.rc.*|\.a.*|\.post.*)?\1"""
)
SHA_LENGTH = 8
DEFAULT_FILE = Path(__file__).resolve().parent.parent / "configcrunch" / "__init__.py"


def dev_version(base: str, sha: str) -> str:
    """Build the dev version string for a base version and a commit sha."""
    return f"{base}.dev0+{sha[:SHA_LENGTH]}"


def rewrite_version(text: str, sha: str) -> str:
    """
    Replace the ``__version__`` assignment in ``text`` with a dev version.

    Any ``.rc``, ``.a`` or ``.post`` suffix of the current version is dropped.

    Raises:
        ValueError: If no ``__version__`` assignment is found or sha is empty
    """
    if not sha:
        raise ValueError("A commit sha is required")

    def replace(match):
        quote = match.group(1)
        return f"__version__ = {quote}{dev_version(match.group('base'), sha)}{quote}"

    new_text, count = VERSION_RE.subn(replace, text, count=1)
    if count == 0:
        raise ValueError("No __version__ assignment found")
    return new_text


def read_version(text: str) -> str:
    """Return the full version string assigned to ``__version__``."""
    match = VERSION_RE.search(text)
    if match is None:
        raise ValueError("No __version__ assignment found")
    return match.group("base") + (match.group("suffix") or "")


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Rewrite the package version to a dev version for non-tag builds",
    )
    parser.add_argument("sha", help="Commit sha of the build")
    parser.add_argument("--file", type=Path, default=DEFAULT_FILE,
                        help="File containing __version__ (default: configcrunch/__init__.py)")
    args = parser.parse_args(argv)

    try:
        with open(args.file, "r", encoding="utf-8") as f:
            text = f.read()
        new_text = rewrite_version(text, args.sha)
    except (OSError, ValueError) as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    with open(args.file, "w", encoding="utf-8") as f:
        f.write(new_text)
    print(read_version(new_text))


if __name__ == '__main__':
    main()
