"""Delimited text extractor for export index tables."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class CSVExtractor:
    """Split delimited text into rows of trimmed fields.

    Handles quoted fields containing the delimiter or raw newlines, and the
    doubled-quote escape. Columns carry no meaning here; callers read rows
    by position.
    """

    def __init__(self, delimiter: str = ",", quote_char: str = '"'):
        """Initialize CSV extractor.

        Args:
            delimiter: Field separator
            quote_char: Character wrapping quoted fields
        """
        self.delimiter = delimiter
        self.quote_char = quote_char

    def parse(self, content: str) -> list[list[str]]:
        """Parse delimited text in a single pass.

        Args:
            content: Raw table text

        Returns:
            Rows of trimmed field strings; rows whose fields are all empty
            are dropped
        """
        rows: list[list[str]] = []
        row: list[str] = []
        field: list[str] = []
        in_quotes = False
        length = len(content)
        i = 0

        while i < length:
            char = content[i]
            next_char = content[i + 1] if i + 1 < length else ""

            if char == self.quote_char:
                if in_quotes and next_char == self.quote_char:
                    field.append(self.quote_char)
                    i += 1
                else:
                    in_quotes = not in_quotes
            elif char == self.delimiter and not in_quotes:
                row.append("".join(field).strip())
                field = []
            elif char in "\r\n" and not in_quotes:
                if char == "\r" and next_char == "\n":
                    i += 1
                if field or row:
                    row.append("".join(field).strip())
                    self._append_row(rows, row)
                    row = []
                    field = []
            else:
                field.append(char)
            i += 1

        if field or row:
            row.append("".join(field).strip())
            self._append_row(rows, row)

        return rows

    def parse_bytes(self, data: bytes, encoding: str = "utf-8") -> list[list[str]]:
        """Decode raw bytes (dropping a BOM) and parse them."""
        text = data.decode(encoding, errors="replace")
        if text.startswith("\ufeff"):
            text = text[1:]
        return self.parse(text)

    def parse_header_record(self, content: str) -> Optional[dict[str, str]]:
        """Parse a header row plus a single data row into a dict.

        Args:
            content: Table text with a header row and at least one data row

        Returns:
            Mapping of header name to value, or None when there is no data row
        """
        rows = self.parse(content)
        if len(rows) < 2:
            logger.debug("Header record table has no data row")
            return None
        header, values = rows[0], rows[1]
        return {name: values[i] if i < len(values) else "" for i, name in enumerate(header)}

    @staticmethod
    def _append_row(rows: list[list[str]], row: list[str]) -> None:
        if any(row):
            rows.append(row)
