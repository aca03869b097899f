"""Geometry of the maze: walls, floor, lights and the minimap."""

from __future__ import annotations

import json

from mazefps.state import MazeResource
from mazefps.vecmath import Vec3

TILE_SIZE = 0.4
WALL_SPACING = 5.0
WALL_HEIGHT = 5.0
FLOOR_Y = -0.1

LIGHT_SPACING = 10.0
LIGHT_HEIGHT = 5.0

MINIMAP_TILE = 10.0
MINIMAP_MARGIN = 10.0
MINIMAP_DEPTH = -0.1

WALL = "b"
BLACK = "#000000"

_TILE_COLORS = {
    "b": "#fb923c",  # orange 400
    "c": "#d1d5db",  # gray 300
    "r": "#ef4444",  # red 500
    "y": "#eab308",  # yellow 500
    "g": "#22c55e",  # green 500
    "l": "#3b82f6",  # blue 500
}


def _cell_size() -> float:
    return TILE_SIZE * WALL_SPACING


def parse_maze(text: str) -> MazeResource:
    """Read a maze from a JSON array of rows of strings, keeping each cell's first character."""
    data = json.loads(text)
    if not isinstance(data, list) or not all(isinstance(row, list) for row in data):
        raise ValueError("maze must be a JSON array of rows")
    grid: list[list[str]] = []
    for row in data:
        cells = []
        for cell in row:
            if not isinstance(cell, str) or not cell:
                raise ValueError(f"maze cell must be a non-empty string, got {cell!r}")
            cells.append(cell[0])
        grid.append(cells)
    if not grid:
        raise ValueError("maze has no rows")
    return MazeResource(grid=grid, width=len(grid[0]), height=len(grid))


def light_positions(maze: MazeResource) -> list[Vec3]:
    """Positions of the ceiling lights, laid out on a square grid over the maze.

    The grid spans the maze width in both directions.
    """
    extent = float(maze.width)
    steps = int(extent) // int(LIGHT_SPACING)
    return [
        Vec3(x * LIGHT_SPACING - extent / 2.0, LIGHT_HEIGHT, z * LIGHT_SPACING - extent / 2.0)
        for x in range(steps + 1)
        for z in range(steps + 1)
    ]


def floor_size(maze: MazeResource) -> tuple[float, float]:
    """Width and depth of the floor plane under the maze."""
    return maze.width * _cell_size(), maze.height * _cell_size()


def wall_positions(maze: MazeResource) -> list[Vec3]:
    """Centres of the wall blocks, row by row."""
    cell = _cell_size()
    half_width, half_depth = (size / 2.0 for size in floor_size(maze))
    return [
        Vec3(x * cell - half_width, 0.0, z * cell - half_depth)
        for z, row in enumerate(maze.grid)
        for x, kind in enumerate(row)
        if kind == WALL
    ]


def tile_color(cell: str) -> str:
    """Minimap colour of a maze cell, as an ``#rrggbb`` string."""
    return _TILE_COLORS.get(cell, BLACK)


def minimap_tiles(
    maze: MazeResource, window_width: float, window_height: float
) -> list[tuple[Vec3, str]]:
    """Screen position and colour of every minimap tile, anchored at the window's corner."""
    offset = MINIMAP_TILE / 2.0 + MINIMAP_MARGIN
    return [
        (
            Vec3(
                -window_width / 2.0 + offset + x * MINIMAP_TILE,
                -window_height / 2.0 + offset + z * MINIMAP_TILE,
                MINIMAP_DEPTH,
            ),
            tile_color(kind),
        )
        for z, row in enumerate(maze.grid)
        for x, kind in enumerate(row)
    ]