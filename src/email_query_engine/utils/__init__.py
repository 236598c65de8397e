"""Utility functions for Email Query Engine."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import getaddresses, parsedate_to_datetime
from html.parser import HTMLParser

import structlog
from dateutil import parser as date_parser

logger = structlog.get_logger()


_NO_YEAR = datetime(1, 1, 1)


def _parse_lenient(value: str) -> datetime:
    # Missing fields would otherwise be filled from today.
    parsed = date_parser.parse(value, default=_NO_YEAR)
    if parsed.year == _NO_YEAR.year:
        raise ValueError(f"no year in date {value!r}")
    return parsed


def parse_header_date(value: str | None) -> datetime | None:
    """Parse a Date header leniently.

    RFC 5322 dates are tried first; partial forms (two-digit years, missing
    weekday, odd spacing) fall back to dateutil. Values holding no date, or
    an offset outside +-24h, are rejected. Results are normalised to UTC so
    every returned value is comparable; naive ones are taken as UTC.

    Args:
        value: Raw header value.

    Returns:
        Timezone-aware datetime, or None when the value cannot be parsed.
    """
    if not value:
        return None

    try:
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError, OverflowError):
            parsed = _parse_lenient(value)

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        # Out of range offsets only fail once the offset is computed.
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError) as exc:
        logger.debug("header_date_unparseable", value=value, error=str(exc))
        return None


def parse_address_list(value: str | None) -> list[tuple[str, str]]:
    """Split an address header into (display name, address) pairs."""
    if not value:
        return []
    return [(name, addr) for name, addr in getaddresses([value]) if name or addr]


class _TextExtractor(HTMLParser):
    _BREAKS = {"br", "p", "div", "li", "tr", "h1", "h2", "h3", "h4", "h5", "h6"}
    _SKIPPED = {"script", "style", "head"}

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in self._SKIPPED:
            self._skip_depth += 1
        elif tag in self._BREAKS:
            self.parts.append("\n")

    def handle_endtag(self, tag: str) -> None:
        if tag in self._SKIPPED and self._skip_depth:
            self._skip_depth -= 1
        elif tag in self._BREAKS:
            self.parts.append("\n")

    def handle_data(self, data: str) -> None:
        if not self._skip_depth:
            self.parts.append(data)


def html_to_text(html: str) -> str:
    """Render an HTML body as plain text."""
    extractor = _TextExtractor()
    extractor.feed(html)
    extractor.close()

    lines = ("".join(extractor.parts)).splitlines()
    collapsed = (" ".join(line.split()) for line in lines)
    return "\n".join(line for line in collapsed if line)
