"""Resolve the download URL declared in a local cask descriptor."""

import sys
from pathlib import Path

from caskfetch.errors import ResolutionError
from caskfetch.resolver import resolve_descriptor

descriptor = Path(sys.argv[1]).read_text()

try:
    resolved = resolve_descriptor(descriptor)
except ResolutionError as e:
    print(f"Could not resolve: {e}")
    sys.exit(1)

print(f"{resolved.name} {resolved.version} -> {resolved.url}")
