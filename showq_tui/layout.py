"""Column width allocation for the status tables.

Fixed-width columns always get their declared width.  Every column also
reserves two cells of padding, one on each side.  Whatever is left over is
shared by the flexible columns in proportion to their weights; the cells lost
to integer division go to the first flexible columns, one cell each, so the
flexible columns fill the line exactly unless a minimum width kicks in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .data import JobStatus
from .ui_config import FixedWidth, display_fields, field_info

__all__ = ["CELL_PADDING", "ColumnLayout", "column_widths", "layout_for"]

CELL_PADDING = 2


@dataclass(frozen=True)
class ColumnLayout:
    """Widths computed for one field list at one terminal width."""

    keys: tuple[str, ...]
    total_width: int
    available: int
    flex_weight: int
    widths: tuple[int, ...]

    def columns(self) -> list[tuple[str, int]]:
        """Return ``(key, width)`` pairs for the columns that fit on a line.

        Columns are taken left to right and the first column whose padded
        width would overflow ``total_width`` ends the row.
        """

        fitted: list[tuple[str, int]] = []
        used = 0
        for key, width in zip(self.keys, self.widths):
            if used + width + CELL_PADDING > self.total_width:
                break
            fitted.append((key, width))
            used += width + CELL_PADDING
        return fitted


def layout_for(fields: JobStatus | Sequence[str], total_width: int) -> ColumnLayout:
    """Compute the widths of *fields* (or a status's profile) for *total_width*."""

    if isinstance(fields, JobStatus):
        keys = display_fields(fields)
    else:
        keys = tuple(fields)

    available = total_width
    flex_weight = 0
    for key in keys:
        policy = field_info(key).width
        if isinstance(policy, FixedWidth):
            available -= policy.width + CELL_PADDING
        else:
            available -= CELL_PADDING
            flex_weight += policy.weight

    shares = [
        available * policy.weight // flex_weight
        for policy in (field_info(key).width for key in keys)
        if not isinstance(policy, FixedWidth)
    ]
    # Equals ``available % flex_weight`` when every weight is 1.
    remainder = available - sum(shares)

    widths: list[int] = []
    flex_index = 0
    for key in keys:
        policy = field_info(key).width
        if isinstance(policy, FixedWidth):
            widths.append(policy.width)
            continue
        carry = 1 if flex_index < remainder else 0
        widths.append(max(policy.min, shares[flex_index] + carry))
        flex_index += 1

    return ColumnLayout(
        keys=keys,
        total_width=total_width,
        available=available,
        flex_weight=flex_weight,
        widths=tuple(widths),
    )


def column_widths(fields: JobStatus | Sequence[str], total_width: int) -> list[int]:
    return list(layout_for(fields, total_width).widths)
