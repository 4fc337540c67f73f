"""
Template library: reference portraits keyed by character id.

A ``TemplateLibrary`` is built once from an asset source and never mutated
afterwards. ``TemplateCache`` holds the current library and replaces it
wholesale on rebuild or invalidation, so concurrent readers always see a
fully populated library.
"""

import asyncio
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import aiohttp

from ..capture.decode import decode_image
from ..core.constants import TEMPLATE_PATH_PATTERN
from ..core.types import ImageBuffer, PerceptualHash
from ..match.phash import perceptual_hash
from ..utils.error_handler import (
    ConfigurationError,
    ErrorContext,
    TemplateUnavailableError,
    handle_error,
    safe_execute,
)
from ..utils.log import LoggerMixin, get_logger
from ..utils.validation import validate_character_id, validate_directory_path, validate_url

logger = get_logger(__name__)


class TemplateLibrary:
    """Immutable mapping of character id to portrait, with precomputed hashes."""

    def __init__(self, templates: Optional[Mapping[str, ImageBuffer]] = None):
        templates = dict(templates or {})
        self._ids: Tuple[str, ...] = tuple(sorted(templates))
        self._templates = MappingProxyType(templates)
        self._hashes = MappingProxyType({cid: perceptual_hash(img) for cid, img in templates.items()})

    @classmethod
    def empty(cls) -> "TemplateLibrary":
        return cls()

    @property
    def ids(self) -> Tuple[str, ...]:
        """Character ids in canonical (lexically sorted) order."""
        return self._ids

    @property
    def hashes(self) -> Mapping[str, PerceptualHash]:
        return self._hashes

    def get(self, character_id: str) -> Optional[ImageBuffer]:
        return self._templates.get(character_id)

    def items(self) -> Iterator[Tuple[str, ImageBuffer]]:
        for cid in self._ids:
            yield cid, self._templates[cid]

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, character_id: object) -> bool:
        return character_id in self._templates

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __repr__(self) -> str:
        return f"TemplateLibrary({len(self)} templates)"


class AssetSource:
    """Where template portraits come from."""

    async def fetch(self, character_id: str) -> bytes:
        """Return the encoded portrait, or raise ``TemplateUnavailableError``."""
        raise NotImplementedError

    @staticmethod
    def asset_path(character_id: str) -> str:
        return TEMPLATE_PATH_PATTERN.format(character_id=validate_character_id(character_id))


class DirectoryAssetSource(AssetSource):
    """Portraits stored as ``<root>/portraits/<id>.png``."""

    def __init__(self, root: Union[str, Path]):
        self.root = validate_directory_path(root)

    def available_ids(self) -> List[str]:
        portrait_dir = self.root / Path(TEMPLATE_PATH_PATTERN).parent
        if not portrait_dir.is_dir():
            return []
        return sorted(p.stem for p in portrait_dir.glob("*.png"))

    async def fetch(self, character_id: str) -> bytes:
        path = self.root / self.asset_path(character_id)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise TemplateUnavailableError(
                f"Template not readable for {character_id}",
                details={"path": str(path), "error": str(e)}
            )


class HttpAssetSource(AssetSource):
    """Portraits served as ``<base_url>/portraits/<id>.png``.

    A single failed request makes that template unavailable; there is no retry.
    """

    def __init__(self, base_url: str, timeout_s: float = 10.0):
        self.base_url = validate_url(base_url)
        self.timeout = aiohttp.ClientTimeout(total=timeout_s)
        self.session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self.session

    async def close(self) -> None:
        if self.session is not None and not self.session.closed:
            await self.session.close()

    async def __aenter__(self) -> "HttpAssetSource":
        await self._ensure_session()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def fetch(self, character_id: str) -> bytes:
        url = f"{self.base_url}/{self.asset_path(character_id)}"
        session = await self._ensure_session()
        try:
            async with session.get(url) as response:
                if response.status != 200:
                    raise TemplateUnavailableError(
                        f"Template request for {character_id} returned {response.status}",
                        details={"url": url, "status": response.status}
                    )
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TemplateUnavailableError(
                f"Template request for {character_id} failed",
                details={"url": url, "error": str(e) or type(e).__name__}
            )


async def build_library(
    character_ids: Iterable[str],
    source: AssetSource,
    concurrency: int = 8,
) -> TemplateLibrary:
    """Fetch and decode every template; unavailable ids are logged and left out."""
    semaphore = asyncio.Semaphore(concurrency)
    unique_ids = list(dict.fromkeys(character_ids))

    async def load_one(character_id: str) -> Tuple[str, Optional[ImageBuffer]]:
        context = ErrorContext(
            operation="template load",
            module=__name__,
            function="build_library",
            input_data={"character_id": character_id},
        )
        async with semaphore:
            try:
                payload = await source.fetch(character_id)
            except (TemplateUnavailableError, ConfigurationError) as e:
                return handle_error(e, context, logger, reraise=False, default_return=(character_id, None))
        image = await asyncio.to_thread(safe_execute, decode_image, payload, context=context, logger=logger)
        return character_id, image

    results = await asyncio.gather(*(load_one(cid) for cid in unique_ids))
    templates: Dict[str, ImageBuffer] = {cid: image for cid, image in results if image is not None}

    logger.info(
        "Template library built",
        requested=len(unique_ids),
        loaded=len(templates),
        missing=sorted(cid for cid, image in results if image is None),
    )
    # template hashing runs in a worker thread
    return await asyncio.to_thread(TemplateLibrary, templates)


def load_directory_library(root: Union[str, Path], character_ids: Optional[Iterable[str]] = None) -> TemplateLibrary:
    """Synchronously build a library from a local asset directory.

    Without explicit ids, every ``portraits/*.png`` present is loaded.
    """
    source = DirectoryAssetSource(root)
    ids = list(character_ids) if character_ids is not None else source.available_ids()
    return asyncio.run(build_library(ids, source))


class TemplateCache(LoggerMixin):
    """Holds the current template library and swaps it atomically."""

    def __init__(self, library: Optional[TemplateLibrary] = None):
        self._lock = threading.Lock()
        self._library = library if library is not None else TemplateLibrary.empty()
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def get(self) -> TemplateLibrary:
        """Snapshot of the current library; safe to use for a whole batch."""
        return self._library

    def swap(self, library: TemplateLibrary) -> TemplateLibrary:
        """Install a new library and return the previous one."""
        with self._lock:
            previous = self._library
            self._library = library
            self._generation += 1
            generation = self._generation

        self.logger.info(
            "Template library swapped",
            generation=generation,
            templates=len(library),
            previous_templates=len(previous),
        )
        return previous

    def invalidate(self) -> TemplateLibrary:
        return self.swap(TemplateLibrary.empty())

    async def rebuild(self, character_ids: Iterable[str], source: AssetSource) -> TemplateLibrary:
        """Build a fresh library off to the side, then swap it in."""
        context = self.log_start("Template rebuild")
        library = await build_library(character_ids, source)
        self.swap(library)
        self.log_success(context, templates=len(library))
        return library


# Global singleton
template_cache = TemplateCache()
