"""Cached downloads of resolved cask URLs with optional SHA256 verification."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit
from urllib.request import url2pathname

import requests
from py_app_dev.core.logging import logger

from caskfetch.progress import ProgressCallback

_CHUNK_SIZE = 8192
_DOWNLOAD_TIMEOUT = 60
_SHA256_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


class DownloadError(Exception):
    """Raised when a file download fails."""


class HashMismatchError(Exception):
    """Raised when a file's SHA256 hash does not match the expected value."""


def is_checksum(value: str | None) -> bool:
    """Check whether *value* is a SHA256 hex digest (casks may declare ``:no_check``)."""
    return bool(value) and _SHA256_PATTERN.match(value or "") is not None


def download_file(
    url: str,
    dest: Path,
    name: str = "",
    progress_callback: ProgressCallback | None = None,
    timeout: int = _DOWNLOAD_TIMEOUT,
) -> Path:
    """
    Download the file at *url* to *dest*.

    Args:
        url: URL to download from.
        dest: Local file path to write to.
        name: Cask name passed to the progress callback.
        progress_callback: Optional callback invoked on each chunk.
        timeout: Request timeout in seconds.

    Returns:
        The *dest* path.

    Raises:
        DownloadError: On HTTP or network failures.

    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    if url.startswith("file://"):
        _copy_local_file(Path(url2pathname(url[7:])), dest, name, progress_callback)
        return dest
    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            content_length = response.headers.get("Content-Length")
            total: int | None = int(content_length) if content_length else None
            downloaded = 0
            with dest.open("wb") as fh:
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    fh.write(chunk)
                    downloaded += len(chunk)
                    if progress_callback:
                        progress_callback(name, downloaded, total)
    except requests.RequestException as exc:
        raise DownloadError(f"Failed to download {url}: {exc}") from exc
    return dest


def _copy_local_file(src: Path, dest: Path, name: str, progress_callback: ProgressCallback | None) -> None:
    try:
        file_size = src.stat().st_size
        downloaded = 0
        with src.open("rb") as src_fh, dest.open("wb") as dst_fh:
            while chunk := src_fh.read(_CHUNK_SIZE):
                dst_fh.write(chunk)
                downloaded += len(chunk)
                if progress_callback:
                    progress_callback(name, downloaded, file_size)
    except OSError as exc:
        raise DownloadError(f"Failed to copy {src}: {exc}") from exc


def verify_sha256(file_path: Path, expected_hash: str) -> None:
    """
    Verify *file_path* matches *expected_hash*.

    Raises:
        HashMismatchError: When the computed hash differs from *expected_hash*.

    """
    sha256 = hashlib.sha256()
    with file_path.open("rb") as fh:
        while chunk := fh.read(_CHUNK_SIZE):
            sha256.update(chunk)
    actual = sha256.hexdigest()
    if actual != expected_hash.lower():
        raise HashMismatchError(f"SHA256 mismatch for {file_path.name}: expected {expected_hash}, got {actual}")


def cache_path_for(url: str, cache_dir: Path) -> Path:
    """Derive a deterministic cache file path from a URL."""
    filename = Path(urlsplit(url).path.rstrip("/")).name or "download"
    url_hash = hashlib.sha256(url.encode()).hexdigest()[:8]
    return cache_dir / f"{url_hash}_{filename}"


@dataclass
class DownloadResult:
    """Result of a download operation with cache status."""

    path: Path
    downloaded: bool
    verified: bool


def get_cached_or_download(
    url: str,
    sha256: str | None,
    cache_dir: Path,
    name: str = "",
    progress_callback: ProgressCallback | None = None,
    use_cache: bool = True,
    timeout: int = _DOWNLOAD_TIMEOUT,
) -> DownloadResult:
    """
    Return a cached copy of the file, downloading if necessary.

    Files are only verified when *sha256* is a hex digest. A cached file
    with the wrong hash is deleted and downloaded again. Unverifiable
    cached files are always downloaded again.

    Args:
        url: Resolved download URL.
        sha256: Expected SHA256 hex digest, or anything else to skip verification.
        cache_dir: Directory used for caching downloaded files.
        name: Cask name passed to the progress callback.
        progress_callback: Optional callback invoked during download.
        use_cache: If False, skip the cache and always download.
        timeout: Request timeout in seconds.

    """
    cached = cache_path_for(url, cache_dir)
    verify = is_checksum(sha256)
    if use_cache and verify and cached.exists():
        try:
            verify_sha256(cached, sha256)  # type: ignore[arg-type]
            logger.info(f"Cache hit: {cached}")
            return DownloadResult(path=cached, downloaded=False, verified=True)
        except HashMismatchError:
            logger.warning(f"Corrupt cache entry {cached}, re-downloading")
            cached.unlink()
    if not verify:
        logger.warning(f"No checksum for {name or url}, download will not be verified")
    cache_dir.mkdir(parents=True, exist_ok=True)
    download_file(url, cached, name=name, progress_callback=progress_callback, timeout=timeout)
    if verify:
        verify_sha256(cached, sha256)  # type: ignore[arg-type]
    return DownloadResult(path=cached, downloaded=True, verified=verify)
