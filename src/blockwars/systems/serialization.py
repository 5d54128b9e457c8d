from __future__ import annotations

from typing import Any, Dict, List

from blockwars.grid import GridLike


def serialize_blocks(grid: GridLike) -> List[Dict[str, Any]]:
    """Flatten the board into one record per occupied slot, row-major.

    Entries built with a ``serializer`` produce their own record.
    """
    grid.ensure_matrix()
    records: List[Dict[str, Any]] = []
    for row in range(grid.grid_rows):
        matrix_row = grid.block_matrix[row] if row < len(grid.block_matrix) else None
        if not matrix_row:
            continue
        for col in range(grid.grid_cols):
            wrapper = matrix_row[col] if col < len(matrix_row) else None
            if wrapper is None or wrapper.entry is None:
                continue
            entry = wrapper.entry
            if entry.serializer is not None:
                records.append(entry.serializer(entry))
                continue
            records.append({
                "block_color": entry.block_color or "",
                "row": entry.row,
                "column": entry.column,
                "health": entry.health,
            })
    return records
