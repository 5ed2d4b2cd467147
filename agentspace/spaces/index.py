"""Occupancy indexes mapping positions to the ids of the agents placed there.

Each space owns exactly one index:

- DenseGridIndex: one bucket per grid cell, stored in a numpy object array
- CellListIndex: sparse buckets over a regular partition of a continuous extent
- VertexIndex: one bucket per vertex of a graph
- RoadIndex: buckets per road position, plus per-vertex buckets for hop queries

Buckets are ``dict[int, None]``, which gives set semantics with a stable
insertion order, so iteration over occupants is reproducible.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Hashable, Iterable, Iterator, Sequence
from itertools import product

import numpy as np


class OccupancyIndex:
    """Base class for all occupancy indexes."""

    def add(self, agent_id: int, pos) -> None:
        """Index agent_id at pos."""
        raise NotImplementedError

    def remove(self, agent_id: int, pos) -> None:
        """Remove agent_id from pos, raising KeyError if it is not indexed there."""
        raise NotImplementedError

    def occupants_at(self, pos) -> list[int]:
        """Return the ids indexed at pos in insertion order."""
        raise NotImplementedError

    def move(self, agent_id: int, old_pos, new_pos) -> None:
        """Re-index agent_id from old_pos to new_pos."""
        if old_pos == new_pos:
            return
        self.remove(agent_id, old_pos)
        try:
            self.add(agent_id, new_pos)
        except Exception:
            self.add(agent_id, old_pos)
            raise

    def is_empty(self, pos) -> bool:
        """Check if no agent is indexed at pos."""
        return not self.occupants_at(pos)


class DenseGridIndex(OccupancyIndex):
    """Dense index over every cell of a grid.

    Attributes:
        empty (np.ndarray): boolean array shaped like the grid, True for empty cells
    """

    def __init__(self, dimensions: Sequence[int]):
        """Create an index with an empty bucket for every cell.

        Args:
            dimensions: the dimensions of the grid
        """
        self._cells = np.empty(tuple(dimensions), dtype=object)
        for coordinate in np.ndindex(*dimensions):
            self._cells[coordinate] = {}
        self.empty = np.ones(tuple(dimensions), dtype=bool)

    def add(self, agent_id: int, pos: tuple[int, ...]) -> None:  # noqa: D102
        self._cells[pos][agent_id] = None
        self.empty[pos] = False

    def remove(self, agent_id: int, pos: tuple[int, ...]) -> None:  # noqa: D102
        bucket = self._cells[pos]
        del bucket[agent_id]
        if not bucket:
            self.empty[pos] = True

    def occupants_at(self, pos: tuple[int, ...]) -> list[int]:  # noqa: D102
        return list(self._cells[pos])

    def is_empty(self, pos: tuple[int, ...]) -> bool:  # noqa: D102
        return bool(self.empty[pos])


class CellListIndex(OccupancyIndex):
    """Cell list over a continuous extent.

    The extent is split into ``max(1, floor(extent / spacing))`` equally sized
    cells per dimension, so the cells tile the extent exactly and are never
    smaller than ``spacing``. Each bucket stores the exact position of its agents.

    Attributes:
        ncells (tuple[int, ...]): number of cells along each dimension
        cell_size (np.ndarray): size of a cell along each dimension
    """

    def __init__(
        self, extent: Sequence[float], spacing: float, periodic: Sequence[bool]
    ):
        """Create an empty cell list.

        Args:
            extent: size of the continuous space along each dimension
            spacing: the minimal size of a cell
            periodic: whether each dimension wraps around
        """
        self.ncells = tuple(max(1, int(e // spacing)) for e in extent)
        self.cell_size = np.asarray(extent, dtype=float) / np.asarray(self.ncells)
        self.periodic = tuple(periodic)
        self._cells: dict[tuple[int, ...], dict[int, tuple[float, ...]]] = {}

    def cell_of(self, pos: Sequence[float]) -> tuple[int, ...]:
        """Return the coordinate of the cell containing pos."""
        return tuple(
            min(int(x // w), n - 1) for x, w, n in zip(pos, self.cell_size, self.ncells)
        )

    def add(self, agent_id: int, pos: tuple[float, ...]) -> None:  # noqa: D102
        self._cells.setdefault(self.cell_of(pos), {})[agent_id] = pos

    def remove(self, agent_id: int, pos: tuple[float, ...]) -> None:  # noqa: D102
        key = self.cell_of(pos)
        bucket = self._cells[key]
        del bucket[agent_id]
        if not bucket:
            del self._cells[key]

    def occupants_at(self, pos: tuple[float, ...]) -> list[int]:  # noqa: D102
        bucket = self._cells.get(self.cell_of(pos), {})
        return [agent_id for agent_id, p in bucket.items() if p == pos]

    def _cells_within(self, pos: Sequence[float], radius: float) -> Iterable[tuple]:
        ranges = []
        for c, w, n, periodic in zip(
            self.cell_of(pos), self.cell_size, self.ncells, self.periodic
        ):
            k = math.ceil(radius / w)
            if periodic:
                if 2 * k + 1 >= n:
                    ranges.append(range(n))
                else:
                    ranges.append([(c + i) % n for i in range(-k, k + 1)])
            else:
                ranges.append(range(max(c - k, 0), min(c + k, n - 1) + 1))
        return product(*ranges)

    def candidates(
        self, pos: Sequence[float], radius: float
    ) -> Iterator[tuple[int, tuple[float, ...]]]:
        """Yield ``(agent_id, position)`` for every agent in a cell that may lie within radius of pos.

        Callers filter the candidates by exact distance.
        """
        for key in self._cells_within(pos, radius):
            bucket = self._cells.get(key)
            if bucket:
                # copy, so callers can move agents while consuming the results
                yield from list(bucket.items())


class VertexIndex(OccupancyIndex):
    """Index with one bucket per graph vertex."""

    def __init__(self, vertices: Iterable[Hashable]):
        """Create an empty bucket for every vertex.

        Args:
            vertices: the vertices of the graph
        """
        self._vertices: dict[Hashable, dict[int, None]] = {v: {} for v in vertices}

    def add(self, agent_id: int, pos: Hashable) -> None:  # noqa: D102
        self._vertices[pos][agent_id] = None

    def remove(self, agent_id: int, pos: Hashable) -> None:  # noqa: D102
        del self._vertices[pos][agent_id]

    def occupants_at(self, pos: Hashable) -> list[int]:  # noqa: D102
        return list(self._vertices.get(pos, ()))

    def add_vertex(self, vertex: Hashable) -> None:
        """Create an empty bucket for a new vertex."""
        self._vertices.setdefault(vertex, {})

    def remove_vertex(self, vertex: Hashable) -> list[int]:
        """Drop the bucket of vertex and return the ids that were in it."""
        return list(self._vertices.pop(vertex, ()))


class RoadIndex(OccupancyIndex):
    """Index over road positions.

    Agents are bucketed by their exact road position, and additionally by the
    vertex nearest to that position, which is what hop count queries expand from.
    """

    def __init__(
        self, vertices: Iterable[Hashable], nearest_vertex: Callable[[object], Hashable]
    ):
        """Create an empty road index.

        Args:
            vertices: the vertices of the road graph
            nearest_vertex: maps a road position to its nearest vertex
        """
        self._nearest_vertex = nearest_vertex
        self._positions: dict[object, dict[int, None]] = {}
        self._vertices: dict[Hashable, dict[int, None]] = {v: {} for v in vertices}

    def add(self, agent_id: int, pos) -> None:  # noqa: D102
        self._positions.setdefault(pos, {})[agent_id] = None
        self._vertices[self._nearest_vertex(pos)][agent_id] = None

    def remove(self, agent_id: int, pos) -> None:  # noqa: D102
        bucket = self._positions[pos]
        del bucket[agent_id]
        if not bucket:
            del self._positions[pos]
        del self._vertices[self._nearest_vertex(pos)][agent_id]

    def occupants_at(self, pos) -> list[int]:  # noqa: D102
        return list(self._positions.get(pos, ()))

    def occupants_near(self, vertex: Hashable) -> list[int]:
        """Return the ids of all agents whose nearest vertex is vertex."""
        return list(self._vertices.get(vertex, ()))
