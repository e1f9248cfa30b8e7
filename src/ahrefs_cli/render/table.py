"""Column alignment for tab-separated table output."""

from __future__ import annotations

from collections.abc import Iterable

PADDING = 2


def align_columns(lines: Iterable[str], padding: int = PADDING) -> list[str]:
    """Align tab-separated *lines* into columns.

    Every cell except the last on a line is padded with spaces to the width
    of the widest cell in its column plus *padding*.  Lines without a tab
    are passed through unchanged and do not affect column widths.

    Example::

        >>> align_columns(["a\\tbb\\tc", "ccc\\td\\te"])
        ['a    bb  c', 'ccc  d   e']
    """
    lines = list(lines)
    rows = [line.split("\t") if "\t" in line else None for line in lines]

    widths: list[int] = []
    for cells in rows:
        if cells is None:
            continue
        for index, cell in enumerate(cells[:-1]):
            if index >= len(widths):
                widths.append(0)
            widths[index] = max(widths[index], len(cell))

    aligned: list[str] = []
    for line, cells in zip(lines, rows):
        if cells is None:
            aligned.append(line)
            continue
        padded = [cell.ljust(widths[i] + padding) for i, cell in enumerate(cells[:-1])]
        aligned.append("".join(padded) + cells[-1])
    return aligned
