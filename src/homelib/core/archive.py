# ABOUTME: Archive codec: writes the catalog to a single-file zip and reads it back.
# ABOUTME: Owns the manifest text format, its escaping rules, and a permissive scanner.

import logging
import re
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path, PurePosixPath

from homelib.metadata.types import MAX_RATING, MIN_RATING, CatalogRecord

logger = logging.getLogger(__name__)

MANIFEST_NAME = "library.json"
ASSETS_DIR = "assets"
FORMAT_VERSION = "2.0"

# (archive key, CatalogRecord attribute, kind) in manifest order.
# category and authors are written separately, after these.
_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("title", "title", "str"),
    ("subtitle", "subtitle", "str"),
    ("isbn10", "isbn10", "str"),
    ("isbn13", "isbn13", "str"),
    ("publisher", "publisher", "str"),
    ("yearPublished", "year_published", "int"),
    ("shelfLocation", "shelf_location", "str"),
    ("tags", "tags", "str"),
    ("format", "format", "str"),
    ("language", "language", "str"),
    ("notes", "notes", "str"),
    ("physicalLocation", "physical_location", "str"),
    ("coverImagePath", "cover_image_path", "str"),
    ("isRead", "is_read", "bool"),
    ("isBorrowed", "is_borrowed", "bool"),
    ("borrowedTo", "borrowed_to", "str"),
    ("rating", "rating", "rating"),
    ("dateAdded", "date_added", "datetime"),
    ("borrowedDate", "borrowed_date", "datetime"),
)

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_UNESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t"}
_ESCAPE_RE = re.compile(r'[\\"\n\r\t]')
_UNESCAPE_RE = re.compile(r'\\([\\"nrt])')

_BOOKS_RE = re.compile(r'"books"\s*:\s*\[')


class FormatError(Exception):
    """Raised when an archive is structurally unreadable."""


class RecordError(Exception):
    """Raised when a single record cannot be parsed or imported."""

    def __init__(self, message: str, title: str | None = None) -> None:
        super().__init__(message)
        self.title = title


@dataclass
class ArchiveManifest:
    """Everything parsed out of an archive's manifest."""

    export_date: str | None
    version: str | None
    records: list[CatalogRecord] = field(default_factory=list)
    assets: set[str] = field(default_factory=set)
    rejected: list[RecordError] = field(default_factory=list)
    asset_root: Path | None = None


@dataclass
class WrittenArchive:
    """What write_archive actually put into the file."""

    path: Path
    books: int
    assets: list[str] = field(default_factory=list)
    # Titles whose cover could not be packed; they were written without one.
    dropped_covers: list[str] = field(default_factory=list)


def escape(value: str) -> str:
    """Escape backslash, double quote, newline, carriage return, and tab."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group()], value)


def unescape(value: str) -> str:
    """Reverse escape() in one left-to-right pass. Other sequences are left alone."""
    return _UNESCAPE_RE.sub(lambda m: _UNESCAPES[m.group(1)], value)


# --- Writing ---


def _render_value(value: object, kind: str) -> str:
    if kind == "bool":
        return "true" if value else "false"
    if kind in ("int", "rating"):
        return str(int(value))  # type: ignore[call-overload]
    if kind == "datetime":
        return f'"{value.isoformat(timespec="seconds")}"'  # type: ignore[attr-defined]
    return f'"{escape(str(value))}"'


def _render_record(record: CatalogRecord) -> str:
    lines = []
    for key, attr, kind in _FIELDS:
        value = getattr(record, attr)
        if value is None:
            continue
        lines.append(f'      "{key}": {_render_value(value, kind)}')

    if record.category:
        lines.append(f'      "category": "{escape(record.category)}"')

    if record.authors:
        names = ",\n".join(f'        "{escape(name)}"' for name in record.authors)
        lines.append(f'      "authors": [\n{names}\n      ]')
    else:
        lines.append('      "authors": []')

    return "    {\n" + ",\n".join(lines) + "\n    }"


def render_manifest(records: list[CatalogRecord], export_date: str) -> str:
    """Render the manifest text for records whose cover paths are already archive-relative.

    Absent optional fields are omitted; booleans are always written; authors
    is always present, possibly empty.
    """
    books = ",\n".join(_render_record(record) for record in records)
    return (
        "{\n"
        f'  "exportDate": "{escape(export_date)}",\n'
        f'  "version": "{FORMAT_VERSION}",\n'
        '  "books": [\n'
        + (books + "\n" if books else "")
        + "  ]\n"
        "}\n"
    )


def _pack_assets(zf: zipfile.ZipFile, assets: dict[str, Path]) -> set[str]:
    """Copy cover files into the zip. Returns the archive names actually written."""
    packed: set[str] = set()
    for arcname, source in assets.items():
        try:
            zf.write(source, arcname)
        except OSError as exc:
            logger.warning("Failed to export cover image %s: %s", source, exc)
            continue
        packed.add(arcname)
    return packed


def write_archive(
    dest: Path,
    entries: list[tuple[CatalogRecord, Path | None]],
    export_date: str | None = None,
) -> WrittenArchive:
    """Write records and their cover images into a single zip archive.

    Each entry pairs a record with the resolved path of its cover file, or
    None when it has no cover. Cover files are packed first, once per source
    path; two different sources with the same filename share one archive
    entry, and the last one wins. The manifest is rendered afterwards, so a
    record only gets coverImagePath = "assets/<filename>" when that entry is
    really in the zip. A cover that could not be read is logged and its
    record listed in dropped_covers.

    The archive is written to a sibling ".part" file and moved into place, so
    a failed write never leaves a truncated archive at dest.

    Raises:
        OSError: If the archive file cannot be written.
    """
    export_date = export_date or datetime.now().isoformat(timespec="seconds")

    assets: dict[str, Path] = {}
    exported_sources: set[Path] = set()
    for _, asset_path in entries:
        if asset_path is not None and asset_path not in exported_sources:
            exported_sources.add(asset_path)
            assets[f"{ASSETS_DIR}/{asset_path.name}"] = asset_path

    part = dest.with_name(dest.name + ".part")
    records: list[CatalogRecord] = []
    dropped: list[str] = []
    try:
        with zipfile.ZipFile(part, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            packed = _pack_assets(zf, assets)
            for record, asset_path in entries:
                reference = None
                if asset_path is not None:
                    reference = f"{ASSETS_DIR}/{asset_path.name}"
                    if reference not in packed:
                        reference = None
                        dropped.append(record.title)
                records.append(replace(record, cover_image_path=reference))
            zf.writestr(MANIFEST_NAME, render_manifest(records, export_date))
        part.replace(dest)
    except Exception:
        part.unlink(missing_ok=True)
        raise

    written = sorted(packed)
    logger.info("Exported %d books and %d images to %s", len(records), len(written), dest)
    return WrittenArchive(
        path=dest, books=len(records), assets=written, dropped_covers=dropped,
    )


# --- Reading ---


def _skip_string(text: str, pos: int) -> int:
    """Return the index of the quote closing the string opened at pos, or -1."""
    i = pos + 1
    while i < len(text):
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char == '"':
            return i
        i += 1
    return -1


def _find_closing(text: str, start: int) -> int:
    """Match the bracket or brace at start, ignoring anything inside quoted strings."""
    open_char = text[start]
    close_char = "]" if open_char == "[" else "}"
    depth = 0
    i = start
    while i < len(text):
        char = text[i]
        if char == '"':
            i = _skip_string(text, i)
            if i == -1:
                return -1
        elif char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _skip_blank(text: str, pos: int, also: str = "") -> int:
    while pos < len(text) and (text[pos].isspace() or text[pos] in also):
        pos += 1
    return pos


def _scan_strings(text: str) -> list[str]:
    """Collect every quoted string in text, in order (the items of a string list)."""
    items = []
    pos = text.find('"')
    while pos != -1:
        end = _skip_string(text, pos)
        if end == -1:
            break
        items.append(unescape(text[pos + 1:end]))
        pos = text.find('"', end + 1)
    return items


def _scan_value(text: str, pos: int) -> tuple[object, int]:
    """Read one value starting at pos. Returns (value, position after it).

    Strings are unescaped, lists become lists of strings, nested objects are
    skipped (None), and bare tokens become True/False/None or stay as text.
    """
    if pos >= len(text):
        return None, pos

    char = text[pos]
    if char == '"':
        end = _skip_string(text, pos)
        if end == -1:
            raise RecordError("unterminated string value")
        return unescape(text[pos + 1:end]), end + 1

    if char in "[{":
        end = _find_closing(text, pos)
        if end == -1:
            raise RecordError(f"unterminated {'list' if char == '[' else 'object'}")
        if char == "[":
            return _scan_strings(text[pos + 1:end]), end + 1
        return None, end + 1

    end = text.find(",", pos)
    if end == -1:
        end = len(text)
    token = text[pos:end].strip()
    bare = {"true": True, "false": False, "null": None}
    return (bare[token] if token in bare else token), end


def _scan_object(body: str) -> dict[str, object]:
    """Scan the top-level key/value pairs of an object body (without its braces).

    The first occurrence of a key wins.
    """
    fields: dict[str, object] = {}
    pos = 0
    while True:
        pos = _skip_blank(body, pos, also=",")
        if pos >= len(body):
            return fields
        if body[pos] != '"':
            raise RecordError(f"expected a quoted key at offset {pos}")
        key_end = _skip_string(body, pos)
        if key_end == -1:
            raise RecordError("unterminated key")
        key = unescape(body[pos + 1:key_end])

        colon = _skip_blank(body, key_end + 1)
        if colon >= len(body) or body[colon] != ":":
            raise RecordError(f"missing ':' after key '{key}'")

        value, pos = _scan_value(body, _skip_blank(body, colon + 1))
        fields.setdefault(key, value)


def _iter_objects(text: str, start: int, end: int) -> Iterator[str]:
    """Yield the body of every object between start and end (the books array)."""
    pos = start
    while pos < end:
        char = text[pos]
        if char == '"':
            close = _skip_string(text, pos)
            if close == -1:
                return
            pos = close + 1
        elif char == "{":
            close = _find_closing(text, pos)
            if close == -1 or close > end:
                # Unterminated object: take what is left of the array.
                yield text[pos + 1:end]
                return
            yield text[pos + 1:close]
            pos = close + 1
        else:
            pos += 1


def _coerce(value: object, kind: str, key: str, title: str) -> object:
    """Convert a scanned value to the field's type. Bad values become None, with a warning."""
    if value is None:
        return None

    if kind == "bool":
        return value is True or value == "true"

    if kind == "str":
        if isinstance(value, str):
            return value
        logger.warning("Ignoring non-text %s for '%s'", key, title)
        return None

    if kind in ("int", "rating"):
        number = None
        if isinstance(value, str):
            try:
                number = int(value.strip())
            except ValueError:
                number = None
        if number is None:
            logger.warning("Ignoring unparsable %s %r for '%s'", key, value, title)
            return None
        if kind == "rating" and not MIN_RATING <= number <= MAX_RATING:
            logger.warning("Ignoring out-of-range rating %d for '%s'", number, title)
            return None
        return number

    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            pass
    logger.warning("Ignoring unparsable %s %r for '%s'", key, value, title)
    return None


def _parse_record(body: str) -> CatalogRecord:
    fields = _scan_object(body)

    title = fields.get("title")
    if not isinstance(title, str) or not title.strip():
        raise RecordError("record has no title")

    kwargs: dict[str, object] = {"title": title}
    for key, attr, kind in _FIELDS[1:]:
        value = _coerce(fields.get(key), kind, key, title)
        if value is not None:
            kwargs[attr] = value

    category = fields.get("category")
    if isinstance(category, str) and category:
        kwargs["category"] = category

    authors = fields.get("authors")
    kwargs["authors"] = [name for name in authors if name] if isinstance(authors, list) else []

    try:
        return CatalogRecord(**kwargs)  # type: ignore[arg-type]
    except ValueError as exc:
        raise RecordError(str(exc), title) from exc


def _header_string(header: str, key: str) -> str | None:
    match = re.search(rf'"{key}"\s*:\s*"((?:[^"\\]|\\.)*)"', header)
    return unescape(match.group(1)) if match else None


def parse_manifest(text: str) -> ArchiveManifest:
    """Parse manifest text into an ArchiveManifest.

    Deliberately permissive: the text only needs a "books" list of objects.
    Manifests without a version (pre-2.0) parse for whatever fields they
    carry. A record that cannot be scanned or has no title is collected in
    `rejected` without affecting its neighbours.

    Raises:
        FormatError: If the books list is missing or never closed.
    """
    match = _BOOKS_RE.search(text)
    if match is None:
        raise FormatError("Invalid manifest: 'books' array not found")
    start = match.end() - 1
    end = _find_closing(text, start)
    if end == -1:
        raise FormatError("Invalid manifest: 'books' array is not terminated")

    header = text[:match.start()] + text[end + 1:]
    manifest = ArchiveManifest(
        export_date=_header_string(header, "exportDate"),
        version=_header_string(header, "version"),
    )

    for index, body in enumerate(_iter_objects(text, start + 1, end), start=1):
        try:
            record = _parse_record(body)
        except RecordError as exc:
            logger.warning("Could not parse record #%d: %s", index, exc)
            if exc.title is None:
                exc.title = f"record #{index}"
            manifest.rejected.append(exc)
            continue
        manifest.records.append(record)
        if record.cover_image_path:
            manifest.assets.add(PurePosixPath(record.cover_image_path).name)

    return manifest


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise FormatError(f"Cannot read manifest {path.name}: {exc}") from exc


def read_archive(source: Path, workdir: Path) -> ArchiveManifest:
    """Read an archive: either a zip with library.json, or plain manifest text.

    A zip is unpacked into workdir, which the caller owns and removes; the
    returned manifest's asset_root points there. Plain text has no assets.

    Raises:
        FormatError: If the file is missing or unreadable, or a zip lacks
            its manifest entry.
    """
    if not source.is_file():
        raise FormatError(f"Archive not found: {source}")

    if not zipfile.is_zipfile(source):
        return parse_manifest(_read_text(source))

    try:
        with zipfile.ZipFile(source) as zf:
            if MANIFEST_NAME not in zf.namelist():
                raise FormatError(f"Invalid archive: {MANIFEST_NAME} not found")
            zf.extractall(workdir)
    except (zipfile.BadZipFile, OSError) as exc:
        raise FormatError(f"Cannot unpack archive {source}: {exc}") from exc

    manifest = parse_manifest(_read_text(workdir / MANIFEST_NAME))
    manifest.asset_root = workdir
    return manifest
