# ABOUTME: Core data structure for a cataloged book.
# ABOUTME: CatalogRecord is the interchange format between the store, the CLI, and archives.

from dataclasses import dataclass, field
from datetime import datetime

MIN_RATING = 0
MAX_RATING = 5


@dataclass
class CatalogRecord:
    """A book in the home library, with authors and category denormalized to names.

    This is the unit that flows between the record store, the CLI, and the
    archive codec. Only title is required. The id is assigned by the store and
    is never written into an archive.
    """

    title: str
    id: int | None = None
    subtitle: str | None = None
    isbn10: str | None = None
    isbn13: str | None = None
    publisher: str | None = None
    year_published: int | None = None
    shelf_location: str | None = None
    tags: str | None = None
    format: str | None = None
    language: str | None = None
    notes: str | None = None
    physical_location: str | None = None
    cover_image_path: str | None = None
    is_read: bool = False
    is_borrowed: bool = False
    borrowed_to: str | None = None
    borrowed_date: datetime | None = None
    rating: int | None = None
    date_added: datetime | None = None
    category: str | None = None
    authors: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("title must not be empty")
        if self.rating is not None and not MIN_RATING <= self.rating <= MAX_RATING:
            msg = f"rating must be between {MIN_RATING} and {MAX_RATING}, got {self.rating}"
            raise ValueError(msg)

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(self.authors) if self.authors else ""

    @property
    def isbn(self) -> str | None:
        """The first ISBN variant that is set, preferring ISBN-13 for display."""
        return self.isbn13 or self.isbn10 or None
