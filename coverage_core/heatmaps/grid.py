"""
Grid - Dense 2D cell array with NumPy storage.

One cell per grid square, row-major (data[y, x]). The same class carries
masks (bool), placement labels (int), probability/entropy maps (float) and
the (value, color) pairs returned to clients (object).
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple, Union
import numpy as np

from ..errors import InvalidShapeError


@dataclass(frozen=True)
class Position:
    """A cell address: x is the column, y is the row."""
    x: int
    y: int


@dataclass
class Rectangle:
    """An axis-aligned rectangle measured in cells."""
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    def transpose(self) -> 'Rectangle':
        """Swap width and height (in-place). Returns self for chaining."""
        self.width, self.height = self.height, self.width
        return self

    def copy(self) -> 'Rectangle':
        return Rectangle(self.width, self.height)


@dataclass
class Grid:
    """
    Rectangular grid of cells.

    Each cell is addressed by a Position. Indexing outside the grid raises
    IndexError; the region predicate `all` never does.
    """
    data: np.ndarray

    @classmethod
    def create(cls, rows: int, cols: int, value: Any, dtype: Optional[Any] = None) -> 'Grid':
        """Create a new Grid filled with a single value."""
        if dtype is None:
            dtype = np.asarray(value).dtype if not isinstance(value, tuple) else object
        data = np.empty((rows, cols), dtype=dtype)
        if data.dtype == object:
            for y in range(rows):
                for x in range(cols):
                    data[y, x] = value
        else:
            data.fill(value)
        return cls(data=data)

    @classmethod
    def zeros(cls, rows: int, cols: int, dtype: Any = np.float64) -> 'Grid':
        """Create a zero-filled Grid."""
        return cls(data=np.zeros((rows, cols), dtype=dtype))

    @classmethod
    def from_rows(cls, rows: int, cols: int, data: Sequence[Sequence[Any]], dtype: Any = bool) -> 'Grid':
        """
        Build a Grid from nested row lists, checking the declared shape.

        Raises:
            InvalidShapeError: if data is not exactly rows x cols
        """
        if rows < 0 or cols < 0:
            raise InvalidShapeError(rows, cols, "dimensions must be non-negative")
        if len(data) != rows:
            raise InvalidShapeError(rows, cols, f"expected {rows} rows, got {len(data)}")
        for i, row in enumerate(data):
            if len(row) != cols:
                raise InvalidShapeError(rows, cols, f"row {i} has {len(row)} cells, expected {cols}")
        return cls(data=np.array(data, dtype=dtype).reshape(rows, cols))

    @property
    def rows(self) -> int:
        return self.data.shape[0]

    @property
    def cols(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    def copy(self) -> 'Grid':
        """Create a deep copy of this Grid."""
        return Grid(data=self.data.copy())

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.cols and 0 <= pos.y < self.rows

    def _check(self, pos: Position) -> None:
        if not self.in_bounds(pos):
            raise IndexError(f"Position ({pos.x}, {pos.y}) outside {self.rows}x{self.cols} grid")

    def get(self, pos: Position) -> Any:
        self._check(pos)
        return self.data[pos.y, pos.x]

    def set(self, pos: Position, value: Any) -> None:
        self._check(pos)
        self.data[pos.y, pos.x] = value

    def fits(self, anchor: Position, rect: Rectangle) -> bool:
        """True if the rectangle anchored at `anchor` stays inside the grid."""
        return (
            anchor.x >= 0 and anchor.y >= 0
            and anchor.x + rect.width <= self.cols
            and anchor.y + rect.height <= self.rows
        )

    def all(self, anchor: Position, rect: Rectangle, value: Any) -> bool:
        """
        Check that every cell under the rectangle equals `value`.

        Returns False (rather than raising) when the rectangle would
        extend past the grid on either axis.
        """
        if not self.fits(anchor, rect):
            return False
        region = self.data[anchor.y:anchor.y + rect.height, anchor.x:anchor.x + rect.width]
        return bool(np.all(region == value))

    def fill(self, anchor: Position, rect: Rectangle, value: Any) -> 'Grid':
        """Assign value to every cell under the rectangle. Returns self for chaining."""
        if not self.fits(anchor, rect):
            raise IndexError(
                f"Rectangle {rect.width}x{rect.height} at ({anchor.x}, {anchor.y}) "
                f"outside {self.rows}x{self.cols} grid"
            )
        self.data[anchor.y:anchor.y + rect.height, anchor.x:anchor.x + rect.width] = value
        return self

    def __truediv__(self, scalar: float) -> 'Grid':
        """Element-wise division by a scalar."""
        return Grid(data=self.data / scalar)

    def __itruediv__(self, scalar: float) -> 'Grid':
        self.data = self.data / scalar
        return self

    def to_value_color_pairs(self, cmap: Union[str, Any]) -> 'Grid':
        """
        Pair each cell value with its colormap color.

        Returns:
            Object Grid of (value, (r, g, b)) tuples
        """
        from .visualize import to_rgb

        pairs = np.empty(self.shape, dtype=object)
        for y in range(self.rows):
            for x in range(self.cols):
                value = float(self.data[y, x])
                pairs[y, x] = (value, to_rgb(value, cmap))
        return Grid(data=pairs)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form: {'rows', 'cols', 'data'} with nested row lists."""
        return {
            'rows': self.rows,
            'cols': self.cols,
            'data': self.data.tolist(),
        }
