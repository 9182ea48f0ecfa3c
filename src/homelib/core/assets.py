# ABOUTME: Moves cover images across the archive/store boundary.
# ABOUTME: Resolves covers for export, copies archive covers in on import, and deletes unused ones.

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path

from homelib.metadata.types import CatalogRecord

logger = logging.getLogger(__name__)


class AssetError(Exception):
    """Raised when a referenced cover image is missing or unusable."""


class AssetRelocator:
    """Translates cover references between the store and archives.

    In the store a cover is a filesystem path (relative paths are taken
    relative to covers_dir). In an archive it is a path relative to the
    unpacked archive root, normally "assets/<filename>".
    """

    def __init__(self, covers_dir: Path) -> None:
        self._covers_dir = covers_dir

    @property
    def covers_dir(self) -> Path:
        return self._covers_dir

    def _store_path(self, reference: str) -> Path:
        path = Path(reference).expanduser()
        return path if path.is_absolute() else self._covers_dir / path

    def resolve_export_asset(self, record: CatalogRecord) -> Path | None:
        """Return the existing cover file for record, or None.

        A reference to a file that no longer exists is logged and dropped;
        the record still exports, just without a cover.
        """
        if not record.cover_image_path:
            return None
        path = self._store_path(record.cover_image_path)
        if not path.is_file():
            logger.warning(
                "Cover image for '%s' not found, exporting without it: %s",
                record.title,
                path,
            )
            return None
        return path.resolve()

    def _locate_archive_asset(self, reference: str, asset_root: Path) -> Path:
        root = asset_root.resolve()
        candidate = (root / reference).resolve()
        if not candidate.is_relative_to(root):
            raise AssetError(f"cover reference escapes the archive: {reference}")
        if not candidate.is_file():
            raise AssetError(f"cover image not found in archive: {reference}")
        return candidate

    def import_asset(self, record: CatalogRecord, asset_root: Path | None) -> None:
        """Copy record's archive cover into covers_dir and point the record at the copy.

        The copy keeps the original filename and replaces any file of the same
        name. If the reference can't be resolved inside asset_root (or there
        is no asset_root, as with a plain-text manifest), the reference is
        cleared and the book imports without a cover.

        Raises:
            OSError: If the covers directory or the copy cannot be written.
        """
        reference = record.cover_image_path
        if not reference:
            record.cover_image_path = None
            return
        if asset_root is None:
            logger.warning(
                "No images available for '%s', dropping cover %s", record.title, reference,
            )
            record.cover_image_path = None
            return

        try:
            source = self._locate_archive_asset(reference, asset_root)
        except AssetError as exc:
            logger.warning("'%s' imports without a cover: %s", record.title, exc)
            record.cover_image_path = None
            return

        self._covers_dir.mkdir(parents=True, exist_ok=True)
        target = self._covers_dir / source.name
        shutil.copyfile(source, target)
        record.cover_image_path = str(target.resolve())
        logger.info("Imported cover image %s", source.name)

    def discard_cover(
        self,
        reference: str | None,
        keep: Path | None = None,
        in_use: Iterable[str | None] = (),
    ) -> bool:
        """Delete a stored cover file, but only if it lives in covers_dir.

        A reference resolving to `keep`, or to the same file as any reference
        in `in_use` (the covers of books still in the catalog), is left alone.

        Returns True if a file was removed.
        """
        if not reference:
            return False
        path = self._store_path(reference).resolve()
        if keep is not None and path == keep.resolve():
            return False
        shared = {self._store_path(other).resolve() for other in in_use if other}
        if path in shared:
            logger.info("Keeping cover image %s, another book still uses it", path)
            return False
        if not path.is_relative_to(self._covers_dir.resolve()) or not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as exc:
            logger.error("Failed to delete cover image %s: %s", path, exc)
            return False
        logger.info("Deleted cover image %s", path)
        return True

    def store_cover(self, source: Path, book_id: int) -> Path:
        """Copy a user-supplied image into covers_dir as <book_id><suffix>.

        Raises:
            AssetError: If source is not an existing file.
        """
        if not source.is_file():
            raise AssetError(f"Image file does not exist: {source}")
        self._covers_dir.mkdir(parents=True, exist_ok=True)
        target = self._covers_dir / f"{book_id}{source.suffix.lower() or '.jpg'}"
        shutil.copyfile(source, target)
        logger.info("Stored cover image %s", target)
        return target.resolve()
