# ABOUTME: Import/export orchestration for homelib archives.
# ABOUTME: Drives the codec, reconciler, and asset relocator, and reports per-record outcomes.

import logging
import tempfile
import zipfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from homelib.core.archive import read_archive, write_archive
from homelib.core.assets import AssetRelocator
from homelib.core.reconciler import DuplicateReconciler, DuplicateSkip
from homelib.core.store import RecordStore
from homelib.db.catalog import StoreError

logger = logging.getLogger(__name__)

# Called after each record with (records processed, total records).
ProgressFn = Callable[[int, int], None]


@dataclass
class ExportResult:
    """Summary of an export operation."""

    path: Path
    books: int = 0
    assets: int = 0
    missing_covers: list[str] = field(default_factory=list)


@dataclass
class ImportResult:
    """Summary of an import operation."""

    added: int = 0
    skipped: int = 0
    errors: int = 0
    skip_details: list[DuplicateSkip] = field(default_factory=list)
    error_details: list[tuple[str, str]] = field(default_factory=list)

    def add_error(self, title: str, message: str) -> None:
        self.errors += 1
        self.error_details.append((title, message))


def archive_destination(dest: Path) -> Path:
    """Archives are always zips: a .json destination becomes .zip."""
    if dest.suffix.lower() == ".json":
        return dest.with_suffix(".zip")
    return dest


def export_library(
    store: RecordStore,
    relocator: AssetRelocator,
    dest: Path,
) -> ExportResult:
    """Export the whole catalog, with cover images, to one archive file.

    Export is all-or-nothing. A cover file that has gone missing is not a
    failure: that book is exported without a cover and listed in
    missing_covers.

    Raises:
        StoreError: If the catalog cannot be read or the archive cannot be written.
    """
    dest = archive_destination(dest)
    logger.info("Exporting library to %s", dest)

    records = store.list_all()

    entries = []
    missing: list[str] = []
    for record in records:
        asset = relocator.resolve_export_asset(record)
        if asset is None and record.cover_image_path:
            missing.append(record.title)
        entries.append((record, asset))

    try:
        written = write_archive(dest, entries)
    except (OSError, zipfile.LargeZipFile) as exc:
        raise StoreError(f"Failed to write archive {dest}: {exc}") from exc

    return ExportResult(
        path=written.path,
        books=written.books,
        assets=len(written.assets),
        missing_covers=missing + written.dropped_covers,
    )


def _discard_orphan(store: RecordStore, relocator: AssetRelocator, reference: str) -> None:
    """Remove a cover copied for a record that was never saved."""
    try:
        in_use = [r.cover_image_path for r in store.list_all()]
    except StoreError as exc:
        logger.warning("Keeping cover %s, catalog unavailable: %s", reference, exc)
        return
    relocator.discard_cover(reference, in_use=in_use)


def import_library(
    source: Path,
    store: RecordStore,
    relocator: AssetRelocator,
    *,
    on_progress: ProgressFn | None = None,
) -> ImportResult:
    """Import an archive into the catalog.

    The archive is unpacked into a temporary directory that is removed on
    every exit path. Each record is then handled on its own: duplicates of
    books already in the catalog are skipped with a reason, new books get
    their cover copied into the covers directory and are saved under a fresh
    id. A failure on one record is recorded in the result and the batch
    moves on; a cover already copied for that record is removed again
    unless a saved book uses the same file.

    Raises:
        FormatError: If the archive itself is unreadable. Nothing is written.
        StoreError: If the catalog snapshot for duplicate detection cannot be read.
    """
    logger.info("Importing library from %s", source)
    result = ImportResult()

    with tempfile.TemporaryDirectory(prefix="homelib_import_") as workdir:
        manifest = read_archive(source, Path(workdir))
        for rejected in manifest.rejected:
            result.add_error(rejected.title or "unknown", str(rejected))

        reconciler = DuplicateReconciler(store.list_all())
        total = len(manifest.records)

        for done, record in enumerate(manifest.records, start=1):
            duplicate = reconciler.classify(record)
            if duplicate is not None:
                result.skipped += 1
                result.skip_details.append(duplicate)
                logger.info("Skipping duplicate book: %s - %s", record.title, duplicate.reason)
            else:
                copied = None
                try:
                    relocator.import_asset(record, manifest.asset_root)
                    copied = record.cover_image_path
                    record.id = None
                    store.save(record)
                except Exception as exc:
                    result.add_error(record.title, str(exc))
                    logger.error("Failed to import book '%s': %s", record.title, exc)
                    if copied:
                        _discard_orphan(store, relocator, copied)
                else:
                    result.added += 1
                    logger.info("Imported book: %s", record.title)

            if on_progress is not None:
                on_progress(done, total)

    logger.info(
        "Import completed: %d added, %d duplicates skipped, %d errors",
        result.added,
        result.skipped,
        result.errors,
    )
    return result
