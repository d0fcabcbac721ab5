"""
Heatmap colors and PNG export.

to_rgb maps a value in [0, 1] through a matplotlib sequential colormap to an
8-bit RGB triple for clients that render the grid themselves. The export
helpers write debug images of the estimated maps.
"""

from enum import Enum
from functools import lru_cache
from typing import Optional, Tuple, Union
import numpy as np

import matplotlib
from matplotlib.colors import Colormap

from .grid import Grid

RGB = Tuple[int, int, int]


class ColorMap(str, Enum):
    """Supported colormaps. Values are matplotlib colormap names."""
    VIRIDIS = 'viridis'
    MAGMA = 'magma'

    @property
    def label(self) -> str:
        """Identifier used in the JSON API ('Viridis', 'Magma')."""
        return self.value.capitalize()

    @classmethod
    def parse(cls, name: Union[str, 'ColorMap']) -> 'ColorMap':
        if isinstance(name, ColorMap):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            raise ValueError(f"Unknown colormap: {name}, expected one of {[c.label for c in cls]}")


def _get_cmap(cmap: Union[str, ColorMap]) -> Colormap:
    return _registered_cmap(ColorMap.parse(cmap).value)


@lru_cache(maxsize=None)
def _registered_cmap(name: str) -> Colormap:
    # the registry returns a fresh copy on every lookup
    return matplotlib.colormaps[name]


def to_rgb(value: float, cmap: Union[str, ColorMap]) -> RGB:
    """
    Color for a scalar value.

    Values outside [0, 1] are clamped; NaN maps to 0.
    """
    value = float(value)
    if np.isnan(value):
        value = 0.0
    value = min(1.0, max(0.0, value))
    r, g, b, _ = _get_cmap(cmap)(value)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))


def export_heatmap_png(
    grid: Grid,
    path: str,
    title: str = "Heatmap",
    cmap: Union[str, ColorMap] = ColorMap.VIRIDIS,
    mask: Optional[Grid] = None,
    show_values: bool = True
) -> str:
    """
    Export a float Grid as a PNG heatmap (fixed 0..1 color scale).

    Cells occupied in `mask` are hatched out.

    Returns:
        The written path
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(max(3, grid.cols * 0.8), max(3, grid.rows * 0.8)))
    _draw_panel(fig, ax, grid, title, cmap, mask, show_values)

    plt.tight_layout()
    plt.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return path


def export_estimate_debug(
    mask: Grid,
    probabilities: Grid,
    entropy: Grid,
    path: str
) -> str:
    """Side-by-side probability (viridis) and entropy (magma) panels."""
    import matplotlib.pyplot as plt

    fig, axes = plt.subplots(1, 2, figsize=(max(6, probabilities.cols * 1.6), max(3, probabilities.rows * 0.8)))
    _draw_panel(fig, axes[0], probabilities, "Coverage probability", ColorMap.VIRIDIS, mask, True)
    _draw_panel(fig, axes[1], entropy, "Entropy (bits)", ColorMap.MAGMA, mask, True)

    plt.tight_layout()
    plt.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return path


def _draw_panel(fig, ax, grid: Grid, title: str, cmap, mask: Optional[Grid], show_values: bool) -> None:
    import matplotlib.patches as patches

    im = ax.imshow(
        grid.data.astype(np.float64),
        cmap=_get_cmap(cmap),
        vmin=0.0,
        vmax=1.0,
        interpolation='nearest',
        origin='upper'
    )
    ax.set_title(title)
    ax.set_xticks(range(grid.cols))
    ax.set_yticks(range(grid.rows))
    fig.colorbar(im, ax=ax, orientation='vertical', shrink=0.8)

    for y in range(grid.rows):
        for x in range(grid.cols):
            if mask is not None and mask.data[y, x]:
                ax.add_patch(patches.Rectangle(
                    (x - 0.5, y - 0.5), 1, 1,
                    facecolor='none', edgecolor='white', hatch='xx', linewidth=0
                ))
            elif show_values:
                value = float(grid.data[y, x])
                ax.text(x, y, f"{value:.2f}", ha='center', va='center', fontsize=7,
                        color='white' if value < 0.6 else 'black')
