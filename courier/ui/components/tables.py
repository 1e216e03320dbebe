"""Fixed-width table rendering for mailbox and envelope listings."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from rich.cells import cell_len
from rich.text import Text

from courier.core.rows import DEFAULT_DELIMITER

_STRIPPED_CHARS = str.maketrans("", "", "\r\n\t")


@dataclass(frozen=True)
class Column:
    key: str
    label: str


# Column sets per view kind. The identifier column always comes first.
TABLE_COLUMNS: Dict[str, List[Column]] = {
    "mailboxes": [
        Column("delim", "DELIM"),
        Column("name", "NAME"),
        Column("attrs", "ATTRIBUTES"),
    ],
    "envelopes": [
        Column("id", "ID"),
        Column("flags", "FLAGS"),
        Column("subject", "SUBJECT"),
        Column("sender", "SENDER"),
        Column("date", "DATE"),
    ],
}


@dataclass(frozen=True)
class RenderedRow:
    text: str
    record_id: Optional[str] = None


@dataclass
class RenderedTable:
    """Header line plus one fixed-width line per record."""

    kind: str
    header: str
    rows: List[RenderedRow] = field(default_factory=list)
    widths: List[int] = field(default_factory=list)
    delimiter: str = DEFAULT_DELIMITER

    @property
    def lines(self) -> List[str]:
        """All lines, header first; data rows start at index 1."""
        return [self.header] + [row.text for row in self.rows]

    @property
    def ids(self) -> List[Optional[str]]:
        return [row.record_id for row in self.rows]

    def to_text(self) -> Text:
        """Styled rendering for a rich console."""
        text = Text(self.header, style="bold underline")
        for row in self.rows:
            text.append("\n")
            text.append(row.text)
        return text

    def __str__(self) -> str:
        return "\n".join(self.lines)


def clean_cell(value: Any) -> str:
    """Cell text with line breaks and tabs removed."""
    if value is None:
        return ""
    return str(value).translate(_STRIPPED_CHARS)


def pad_cell(value: str, width: int) -> str:
    """Left-align a cell, right-padding to ``width`` display columns."""
    return value + " " * max(0, width - cell_len(value))


class TableRenderer:
    """Renders ordered records as delimiter-separated fixed-width lines.

    Widths are measured in terminal cells, so wide glyphs and multi-byte
    text line up. Rendering is a pure function of the records and the
    column configuration.
    """

    def __init__(
        self,
        columns: Optional[Mapping[str, Sequence[Column]]] = None,
        delimiter: str = DEFAULT_DELIMITER,
    ):
        self.columns = dict(columns or TABLE_COLUMNS)
        self.delimiter = delimiter

    def column_widths(
        self, columns: Sequence[Column], records: Sequence[Mapping[str, Any]]
    ) -> List[int]:
        widths = []
        for column in columns:
            width = cell_len(column.label)
            for record in records:
                width = max(width, cell_len(clean_cell(record.get(column.key))))
            widths.append(width)
        return widths

    def render_line(self, cells: Sequence[str], widths: Sequence[int]) -> str:
        padded = [pad_cell(cell, width) for cell, width in zip(cells, widths)]
        return self.delimiter + self.delimiter.join(padded) + self.delimiter

    def render(self, kind: str, records: Sequence[Mapping[str, Any]]) -> RenderedTable:
        """Render records of a view kind into a table.

        Args:
            kind: ``"mailboxes"`` or ``"envelopes"``
            records: Row mappings keyed by column key, in display order

        Returns:
            RenderedTable whose row ``n`` (1-based line ``n``) carries the
            identifier of ``records[n - 1]``
        """
        try:
            columns = self.columns[kind]
        except KeyError:
            raise ValueError(f"Unknown table kind: {kind}") from None

        widths = self.column_widths(columns, records)
        header = self.render_line([column.label for column in columns], widths)
        id_key = columns[0].key if kind != "mailboxes" else "name"

        rows = []
        for record in records:
            cells = [clean_cell(record.get(column.key)) for column in columns]
            rows.append(
                RenderedRow(
                    text=self.render_line(cells, widths),
                    record_id=clean_cell(record.get(id_key)) or None,
                )
            )

        return RenderedTable(
            kind=kind,
            header=header,
            rows=rows,
            widths=widths,
            delimiter=self.delimiter,
        )
