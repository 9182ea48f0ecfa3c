# ABOUTME: Converts between the CatalogRecord dataclass and SQLite rows.
# ABOUTME: Handles booleans, timestamps, and the denormalized category/author names.

from datetime import datetime
from typing import Any

from homelib.metadata.types import CatalogRecord

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Columns written by record_to_row, in INSERT/UPDATE order.
BOOK_COLUMNS = (
    "title",
    "subtitle",
    "isbn10",
    "isbn13",
    "publisher",
    "year_published",
    "category_id",
    "shelf_location",
    "tags",
    "format",
    "language",
    "notes",
    "physical_location",
    "cover_image_path",
    "is_read",
    "is_borrowed",
    "borrowed_to",
    "borrowed_date",
    "rating",
)


def format_timestamp(value: datetime | None) -> str | None:
    return value.strftime(TIMESTAMP_FORMAT) if value is not None else None


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a stored timestamp. Tolerates the space-separated form SQLite emits."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def record_to_row(record: CatalogRecord, category_id: int | None) -> dict[str, Any]:
    """Convert a CatalogRecord to a dict suitable for INSERT or UPDATE.

    Authors are not part of the row; they live in book_authors. date_added is
    only included when set, so the column default applies to new books.
    """
    row: dict[str, Any] = {
        "title": record.title,
        "subtitle": record.subtitle,
        "isbn10": record.isbn10,
        "isbn13": record.isbn13,
        "publisher": record.publisher,
        "year_published": record.year_published,
        "category_id": category_id,
        "shelf_location": record.shelf_location,
        "tags": record.tags,
        "format": record.format,
        "language": record.language,
        "notes": record.notes,
        "physical_location": record.physical_location,
        "cover_image_path": record.cover_image_path,
        "is_read": int(record.is_read),
        "is_borrowed": int(record.is_borrowed),
        "borrowed_to": record.borrowed_to,
        "borrowed_date": format_timestamp(record.borrowed_date),
        "rating": record.rating,
    }
    if record.date_added is not None:
        row["date_added"] = format_timestamp(record.date_added)
    return row


def row_to_record(row: Any, authors: list[str] | None = None) -> CatalogRecord:
    """Convert a books row (joined with category_name) back to a CatalogRecord."""
    return CatalogRecord(
        id=row["id"],
        title=row["title"],
        subtitle=row["subtitle"],
        isbn10=row["isbn10"],
        isbn13=row["isbn13"],
        publisher=row["publisher"],
        year_published=row["year_published"],
        shelf_location=row["shelf_location"],
        tags=row["tags"],
        format=row["format"],
        language=row["language"],
        notes=row["notes"],
        physical_location=row["physical_location"],
        cover_image_path=row["cover_image_path"],
        is_read=bool(row["is_read"]),
        is_borrowed=bool(row["is_borrowed"]),
        borrowed_to=row["borrowed_to"],
        borrowed_date=parse_timestamp(row["borrowed_date"]),
        rating=row["rating"],
        date_added=parse_timestamp(row["date_added"]),
        category=row["category_name"],
        authors=list(authors or []),
    )
