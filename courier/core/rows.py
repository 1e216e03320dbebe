"""Mapping between rendered table lines and backend message identifiers."""

from typing import List, Sequence, Tuple

from courier.utils.errors import RowNotFoundError

DEFAULT_DELIMITER = "│"


def extract_id(line: str, delimiter: str = DEFAULT_DELIMITER) -> str:
    """Return the identifier held in the first cell of a rendered line.

    Raises:
        RowNotFoundError: if the line carries no delimiter or an empty first cell.
    """
    if delimiter not in line:
        raise RowNotFoundError(f"No message found on line '{line.strip()}'")

    cells = line.split(delimiter)
    # Rendered lines open with the delimiter, leaving an empty leading cell.
    first = cells[1] if line.lstrip().startswith(delimiter) else cells[0]
    identifier = first.strip()
    if not identifier:
        raise RowNotFoundError(f"No message found on line '{line.strip()}'")

    return identifier


def join_ids(ids: Sequence[str]) -> str:
    """Comma-join identifiers into the single batch argument the backend takes."""
    return ",".join(ids)


def parse_range(spec: str) -> Tuple[int, int]:
    """Parse ``N`` or ``N-M`` into an inclusive (first, last) line pair."""
    text = str(spec).strip()
    first, sep, last = text.partition("-")
    try:
        start = int(first)
        end = int(last) if sep else start
    except ValueError as e:
        raise RowNotFoundError(f"Invalid row range '{text}'") from e

    if start > end:
        start, end = end, start

    return start, end


class RowIndex:
    """Looks up identifiers on the lines of one rendered table.

    Line 0 is the header; data rows start at line 1.
    """

    def __init__(self, lines: Sequence[str], delimiter: str = DEFAULT_DELIMITER):
        self.lines = list(lines)
        self.delimiter = delimiter

    def extract_id(self, line_no: int) -> str:
        if line_no < 1 or line_no >= len(self.lines):
            raise RowNotFoundError(f"No message on row {line_no}")

        return extract_id(self.lines[line_no], self.delimiter)

    def extract_ids(self, first: int, last: int) -> List[str]:
        """Identifiers of every line in the inclusive range, in line order."""
        if first > last:
            first, last = last, first

        return [self.extract_id(line_no) for line_no in range(first, last + 1)]

    def batch_argument(self, first: int, last: int) -> str:
        return join_ids(self.extract_ids(first, last))
