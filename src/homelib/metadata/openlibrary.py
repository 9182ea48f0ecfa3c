# ABOUTME: Open Library ISBN lookup used to prefill new catalog entries.
# ABOUTME: Returns a CatalogRecord built from edition and author data, or None on any failure.

import logging
import re
from typing import Any

from homelib.metadata.http import HttpClient, MetadataFetchError
from homelib.metadata.types import CatalogRecord

logger = logging.getLogger(__name__)

_OL_BASE = "https://openlibrary.org"

_YEAR_RE = re.compile(r"\b(\d{4})\b")


def _first(values: list[Any] | None) -> Any:
    return values[0] if values else None


def parse_publish_year(publish_date: str | None) -> int | None:
    """Pull a four-digit year out of OL's free-form publish_date ("March 1983")."""
    if not publish_date:
        return None
    match = _YEAR_RE.search(publish_date)
    return int(match.group(1)) if match else None


def parse_language(languages: list[dict[str, str]] | None) -> str | None:
    """Turn [{"key": "/languages/eng"}] into "eng"."""
    entry = _first(languages)
    if not entry:
        return None
    key = entry.get("key", "")
    return key.rsplit("/", 1)[-1] if key else None


def parse_edition(data: dict[str, Any], authors: list[str]) -> CatalogRecord | None:
    """Map an Open Library edition response onto a CatalogRecord.

    Returns None when the response has no usable title.
    """
    title = (data.get("title") or "").strip()
    if not title:
        return None

    return CatalogRecord(
        title=title,
        subtitle=data.get("subtitle"),
        isbn10=_first(data.get("isbn_10")),
        isbn13=_first(data.get("isbn_13")),
        publisher=_first(data.get("publishers")),
        year_published=parse_publish_year(data.get("publish_date")),
        language=parse_language(data.get("languages")),
        authors=authors,
    )


class OpenLibraryLookup:
    """ISBN lookup backed by the Open Library API.

    Uses a dependency-injected HttpClient so tests never touch the network.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    def lookup_isbn(self, isbn: str) -> CatalogRecord | None:
        """Look up a book by ISBN. Returns None if nothing usable came back."""
        clean_isbn = re.sub(r"[\s-]", "", isbn)
        if not clean_isbn:
            return None

        try:
            data = self._http.get(f"{_OL_BASE}/isbn/{clean_isbn}.json")
        except MetadataFetchError as exc:
            logger.warning("ISBN lookup failed for %s: %s", isbn, exc)
            return None

        record = parse_edition(data, self._author_names(data))
        if record is None:
            logger.warning("ISBN lookup for %s returned no title", isbn)
            return None

        # Keep the ISBN the user asked for even if OL only lists the other variant.
        if len(clean_isbn) == 10 and not record.isbn10:
            record.isbn10 = clean_isbn
        elif len(clean_isbn) == 13 and not record.isbn13:
            record.isbn13 = clean_isbn
        return record

    def _author_names(self, data: dict[str, Any]) -> list[str]:
        """Resolve author keys to names. Unresolvable authors are dropped."""
        names: list[str] = []
        for ref in data.get("authors", []):
            key = ref.get("key") if isinstance(ref, dict) else None
            if not key:
                continue
            try:
                author = self._http.get(f"{_OL_BASE}{key}.json")
            except MetadataFetchError as exc:
                logger.warning("Author lookup failed for %s: %s", key, exc)
                continue
            name = author.get("name")
            if name:
                names.append(name)
        return names
