from typing import List, Tuple

from pydantic import BaseModel, Field, StrictBool

from ..heatmaps.grid import Grid, Rectangle

# Keeps side arithmetic inside int64 when anchors are filtered
MAX_RECTANGLE_SIDE = 2 ** 31


class MaskModel(BaseModel):
    """
    Occupancy mask. data is rows x cols booleans, outer index = row.
    True marks a cell that is already occupied.
    """
    rows: int = Field(ge=0)
    cols: int = Field(ge=0)
    data: List[List[StrictBool]]

    def to_grid(self) -> Grid:
        """Raises InvalidShapeError if data does not match rows x cols."""
        return Grid.from_rows(self.rows, self.cols, self.data, dtype=bool)


class RectangleModel(BaseModel):
    width: int = Field(gt=0, le=MAX_RECTANGLE_SIDE)
    height: int = Field(gt=0, le=MAX_RECTANGLE_SIDE)

    def to_rectangle(self) -> Rectangle:
        return Rectangle(self.width, self.height)


class EstimateRequest(BaseModel):
    mask: MaskModel
    rectangles: List[RectangleModel]

    def to_rectangles(self) -> List[Rectangle]:
        return [r.to_rectangle() for r in self.rectangles]


ValueColor = Tuple[float, Tuple[int, int, int]]


class ValueColorGrid(BaseModel):
    rows: int
    cols: int
    data: List[List[ValueColor]]

    @classmethod
    def from_grid(cls, grid: Grid) -> 'ValueColorGrid':
        return cls(**grid.to_dict())


class EstimateResponse(BaseModel):
    probabilities: ValueColorGrid  # viridis
    entropy: ValueColorGrid        # magma
