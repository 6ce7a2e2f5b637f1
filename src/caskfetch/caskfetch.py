from __future__ import annotations

from pathlib import Path

from py_app_dev.core.logging import logger

from caskfetch.domain import CaskIndexEntry, CaskSearchResult, DescriptorLocation, ResolvedDownload, Settings
from caskfetch.downloader import DownloadResult, get_cached_or_download
from caskfetch.errors import ResolutionError
from caskfetch.index import CaskIndexClient, search_index_entries
from caskfetch.progress import ProgressCallback
from caskfetch.resolver import resolve_descriptor, resolve_index_entry

Selection = CaskSearchResult | DescriptorLocation


class CaskFetch:
    """Search the cask index and resolve download URLs for selected casks."""

    def __init__(
        self,
        root_dir: Path,
        settings: Settings | None = None,
        client: CaskIndexClient | None = None,
        progress_callback: ProgressCallback | None = None,
        use_cache: bool = True,
    ) -> None:
        """
        Initialize Caskfetch with a root directory.

        Args:
            root_dir: Root directory for Caskfetch (download cache).
            settings: Endpoints and transport options. Defaults are used when omitted.
            client: Index client; one is created from *settings* when omitted.
            progress_callback: Optional callback for download progress.
            use_cache: Reuse verified files from the download cache.

        """
        self.root_dir = root_dir
        self.cache_dir = root_dir / "cache"
        self.settings = settings or Settings()
        self.client = client or CaskIndexClient(self.settings)
        self.progress_callback = progress_callback
        self.use_cache = use_cache
        self._index: list[CaskIndexEntry] | None = None

    def _load_index(self, update: bool) -> list[CaskIndexEntry]:
        if self._index is None or update:
            self._index = self.client.fetch_search_index()
        return self._index

    def search(self, query: str, update: bool = False) -> list[CaskSearchResult]:
        """
        Search the JSON cask index.

        Args:
            query: Search term.
            update: If True, download the index again even if it was already loaded.

        Returns:
            Matching casks sorted by name.

        Raises:
            IndexUnavailableError: If the index cannot be fetched or decoded.

        """
        results = search_index_entries(self._load_index(update), query)
        logger.info(f"Found {len(results)} casks matching '{query}'")
        return results

    def search_descriptors(self, query: str) -> list[DescriptorLocation]:
        """
        Search descriptor files through code search.

        Raises:
            IndexUnavailableError: If the search request fails.

        """
        return self.client.search_by_name(query)

    def find(self, name: str, descriptors: bool = False) -> Selection | None:
        """
        Return the search hit whose token or name equals *name* (case-insensitive).

        Args:
            name: Cask token or display name.
            descriptors: Look the cask up through code search instead of the JSON index.

        """
        wanted = name.lower()
        if descriptors:
            return next((hit for hit in self.search_descriptors(name) if hit.name.lower() == wanted), None)
        for entry in self._load_index(update=False):
            if wanted == entry.token.lower() or wanted in (variant.lower() for variant in entry.name):
                return CaskSearchResult.from_index_entry(entry)
        return None

    def resolve_download(self, selection: Selection) -> ResolvedDownload | ResolutionError:
        """
        Resolve the download URL of a search hit.

        Resolution failures are returned rather than raised.

        Raises:
            IndexUnavailableError: If the descriptor of a code-search hit cannot be fetched.

        """
        try:
            if isinstance(selection, DescriptorLocation):
                resolved = resolve_descriptor(self.client.fetch_descriptor(selection.url))
            else:
                resolved = resolve_index_entry(selection)
        except ResolutionError as e:
            logger.warning(f"Could not resolve download for '{selection.name}': {e}")
            return e
        logger.info(f"Resolved '{selection.name}' to {resolved.url}")
        return resolved

    def download(self, resolved: ResolvedDownload) -> DownloadResult:
        """
        Download a resolved cask into the cache.

        Raises:
            DownloadError: On network failures.
            HashMismatchError: If the cask declares a checksum and the file does not match it.

        """
        return get_cached_or_download(
            resolved.url,
            resolved.sha256,
            self.cache_dir,
            name=resolved.name,
            progress_callback=self.progress_callback,
            use_cache=self.use_cache,
            timeout=self.settings.timeout,
        )
