# ABOUTME: Metadata package for the catalog record type and the optional ISBN lookup.
# ABOUTME: Exports the CatalogRecord dataclass used throughout homelib.

from homelib.metadata.http import HomelibHttpClient, HttpClient, MetadataFetchError
from homelib.metadata.openlibrary import OpenLibraryLookup
from homelib.metadata.types import CatalogRecord

__all__ = [
    "CatalogRecord",
    "HomelibHttpClient",
    "HttpClient",
    "MetadataFetchError",
    "OpenLibraryLookup",
]
