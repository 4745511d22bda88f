"""
sitemap/services/sitemap_builder.py

Incremental sitemap XML assembly.

``SitemapWriter`` accepts one record at a time and hands back a finished
``SitemapChunk`` whenever the per-file entry cap is reached, so no more than
one file's worth of entries is ever held in memory. ``SitemapIndexBuilder``
collects the chunk references into the companion ``sitemapindex`` document.

Document layout
---------------
Chunk::

    <?xml version="1.0" encoding="UTF-8"?>
    <urlset xmlns=... xmlns:image=... xmlns:geo=...>
    <url>
    <loc>{base_url}{record_path}{identifier}.html</loc>
    <priority>0.7</priority>
    <lastmod>2017-05-30</lastmod>
    </url>
    </urlset>

Index::

    <?xml version="1.0" encoding="UTF-8"?>
    <sitemapindex xmlns=...>
    <sitemap>
    <loc>{base_url}/sitemap.xml?from=0&amp;to=45000</loc>
    </sitemap>
    </sitemapindex>
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, datetime, timezone
from xml.sax.saxutils import escape

from sitemap.config import DEFAULT_ENTRIES_PER_FILE
from sitemap.domain.records import CatalogRecord, SitemapChunk, SitemapIndex
from sitemap.naming import SITEMAP_FILE, chunk_file_name, range_suffix

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'
SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
IMAGE_NAMESPACE = "http://www.google.com/schemas/sitemap-image/1.1"
GEO_NAMESPACE = "http://www.google.com/geo/schemas/sitemap/1.0"

URLSET_OPENING = (
    f'<urlset xmlns="{SITEMAP_NAMESPACE}"'
    f' xmlns:image="{IMAGE_NAMESPACE}"'
    f' xmlns:geo="{GEO_NAMESPACE}">'
)
URLSET_CLOSING = "</urlset>"
SITEMAPINDEX_OPENING = f'<sitemapindex xmlns="{SITEMAP_NAMESPACE}">'
SITEMAPINDEX_CLOSING = "</sitemapindex>"

_LN = "\n"
_ENCODING = "utf-8"


def format_priority(completeness: int) -> str:
    """Map a 0-10 completeness score to a sitemap priority string."""

    if completeness > 9:
        return "1.0"
    return f"0.{completeness}"


def format_lastmod(value: datetime | date | None) -> str | None:
    """Format a last-updated timestamp as an ISO calendar date."""

    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        value = value.date()
    return value.isoformat()


def render_url_entry(record: CatalogRecord, *, base_url: str, record_url_path: str) -> str:
    """
    Render one ``<url>`` element.

    The location is plain concatenation; identifiers are URL-safe by contract.
    """

    parts = [
        "<url>",
        f"<loc>{base_url}{record_url_path}{record.identifier}.html</loc>",
        f"<priority>{format_priority(record.completeness)}</priority>",
    ]
    lastmod = format_lastmod(record.last_updated)
    if lastmod is not None:
        parts.append(f"<lastmod>{lastmod}</lastmod>")
    parts.append("</url>")
    return _LN.join(parts) + _LN


class SitemapWriter:
    """
    Accepts records one at a time and yields completed chunk documents.
    """

    def __init__(
        self,
        *,
        base_url: str,
        record_url_path: str,
        file_base_name: str,
        entries_per_file: int = DEFAULT_ENTRIES_PER_FILE,
    ) -> None:
        if entries_per_file < 1:
            raise ValueError("entries_per_file must be at least 1")
        self._base_url = base_url
        self._record_url_path = record_url_path
        self._file_base_name = file_base_name
        self._entries_per_file = entries_per_file
        self._parts: list[str] = []
        self._chunk_start = 0
        self._count = 0
        self._chunks_emitted = 0
        self._closed = False

    @property
    def records_written(self) -> int:
        return self._count

    @property
    def chunks_emitted(self) -> int:
        return self._chunks_emitted

    def add(self, record: CatalogRecord) -> SitemapChunk | None:
        """
        Append one record; return the finished chunk when the cap is reached.
        """

        if self._closed:
            raise RuntimeError("SitemapWriter is closed")
        self._parts.append(
            render_url_entry(
                record,
                base_url=self._base_url,
                record_url_path=self._record_url_path,
            )
        )
        self._count += 1
        if self._count % self._entries_per_file == 0:
            return self._flush()
        return None

    def close(self) -> SitemapChunk | None:
        """
        Finish the trailing partial chunk.

        When no record was ever written a single empty chunk is still
        produced, so every run publishes at least one file.
        """

        if self._closed:
            return None
        self._closed = True
        if self._parts or self._chunks_emitted == 0:
            return self._flush()
        return None

    def _flush(self) -> SitemapChunk:
        body = "".join(self._parts)
        content = XML_HEADER + _LN + URLSET_OPENING + _LN + body + URLSET_CLOSING
        chunk = SitemapChunk(
            start_offset=self._chunk_start,
            end_offset=self._count,
            file_name=chunk_file_name(self._file_base_name, self._chunk_start, self._count),
            content=content.encode(_ENCODING),
        )
        self._parts = []
        self._chunk_start = self._count
        self._chunks_emitted += 1
        return chunk


def iter_chunks(records: Iterable[CatalogRecord], writer: SitemapWriter) -> Iterator[SitemapChunk]:
    """
    Drive ``writer`` over ``records`` and lazily yield each finished chunk.
    """

    for record in records:
        chunk = writer.add(record)
        if chunk is not None:
            yield chunk
    last = writer.close()
    if last is not None:
        yield last


class SitemapIndexBuilder:
    """
    Collects chunk references in creation order and renders the index.
    """

    def __init__(self, *, base_url: str, public_file_name: str = SITEMAP_FILE) -> None:
        self._base_url = base_url
        self._public_file_name = public_file_name
        self._entries: list[str] = []

    def add(self, chunk: SitemapChunk) -> str:
        location = (
            f"{self._base_url}/{self._public_file_name}"
            f"{range_suffix(chunk.start_offset, chunk.end_offset)}"
        )
        self._entries.append(location)
        return location

    def build(self) -> SitemapIndex:
        parts = [XML_HEADER, _LN, SITEMAPINDEX_OPENING, _LN]
        for location in self._entries:
            parts.append(f"<sitemap>{_LN}<loc>{escape(location)}</loc>{_LN}</sitemap>{_LN}")
        parts.append(SITEMAPINDEX_CLOSING)
        return SitemapIndex(
            entries=tuple(self._entries),
            content="".join(parts).encode(_ENCODING),
        )
