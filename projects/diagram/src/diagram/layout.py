"""Grid placement of tables added to a diagram."""

from collections.abc import Iterable, Sequence
from math import ceil, sqrt
from typing import ClassVar, NamedTuple

from diagram.schema_types import TablePosition


class LayoutPosition(NamedTuple):
    """Canvas coordinates chosen for a new table."""

    table_id: str
    x: float
    y: float


class GridLayout:
    """Places new tables on a square grid to the right of existing ones.

    Cells are sized for a typical table card so neighbours never overlap.
    """

    TABLE_WIDTH: ClassVar[float] = 300
    TABLE_HEIGHT: ClassVar[float] = 200
    MARGIN_X: ClassVar[float] = 100
    MARGIN_Y: ClassVar[float] = 100
    ORIGIN_X: ClassVar[float] = 100
    ORIGIN_Y: ClassVar[float] = 100

    def start(self, existing: Iterable[TablePosition]) -> tuple[float, float]:
        """Top-left corner of the grid for the next batch."""
        positions = [table["position_x"] for table in existing]
        if not positions:
            return self.ORIGIN_X, self.ORIGIN_Y
        return max(positions) + self.TABLE_WIDTH + self.MARGIN_X, self.ORIGIN_Y

    def place(
        self,
        existing: Iterable[TablePosition],
        new_table_ids: Sequence[str],
    ) -> list[LayoutPosition]:
        """Assign a grid cell to each new table, row by row."""
        if not new_table_ids:
            return []

        start_x, start_y = self.start(existing)
        columns = ceil(sqrt(len(new_table_ids)))
        step_x = self.TABLE_WIDTH + self.MARGIN_X
        step_y = self.TABLE_HEIGHT + self.MARGIN_Y

        return [
            LayoutPosition(
                table_id=table_id,
                x=start_x + (index % columns) * step_x,
                y=start_y + (index // columns) * step_y,
            )
            for index, table_id in enumerate(new_table_ids)
        ]


def calculate_auto_layout(
    existing: Iterable[TablePosition],
    new_table_ids: Sequence[str],
) -> list[LayoutPosition]:
    """Compute positions for new tables with the default grid."""
    return GridLayout().place(existing, new_table_ids)
