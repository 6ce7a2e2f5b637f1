"""Search the cask index and resolve the first hit."""

from pathlib import Path

from caskfetch.caskfetch import CaskFetch
from caskfetch.errors import ResolutionError

caskfetch = CaskFetch(root_dir=Path.home() / ".caskfetch")

results = caskfetch.search("firefox")
for result in results:
    print(f"  {result.name}: {result.description}")

if results:
    resolved = caskfetch.resolve_download(results[0])
    if isinstance(resolved, ResolutionError):
        print(f"Could not resolve: {resolved}")
    else:
        print(f"Download {resolved.name} from {resolved.url}")
