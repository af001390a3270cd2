# dofhandler.py

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Sequence, Union

import numpy as np

from pyfdhelm.core.mesh import Mesh

logger = logging.getLogger(__name__)

IdsLike = Union[int, Iterable[int]]


class DofHandler:
    """Nodal value storage, pinning and equation numbering on a Mesh."""

    # .........................................................................
    def __init__(self, mesh: Mesh, n_values: int = 2):
        """
        Initialize a DOF handler.

        Parameters
        ----------
        mesh : Mesh
            The mesh whose nodes carry the values.
        n_values : int, default 2
            Number of real value slots per node. A complex unknown occupies
            two slots (see ``ComplexDofIndex``).

        Attributes set
        --------------
        values : ndarray of shape (n_nodes, n_values)
            Current nodal values.
        pinned : ndarray of bool, same shape
            True where a slot is prescribed and has no equation.
        eqn_numbers : ndarray of int, same shape
            Global equation number of each slot, ``-1`` for pinned slots.
            Free slots are numbered node-major in increasing node id.
        """
        if not isinstance(mesh, Mesh):
            raise TypeError(f"DofHandler needs a Mesh, got {type(mesh).__name__}")
        if int(n_values) < 1:
            raise ValueError("n_values must be a positive integer.")
        self.mesh = mesh
        self.n_values = int(n_values)
        n_nodes = len(mesh.nodes_list)
        self.values = np.zeros((n_nodes, self.n_values), dtype=float)
        self.pinned = np.zeros((n_nodes, self.n_values), dtype=bool)
        self.eqn_numbers = np.full((n_nodes, self.n_values), -1, dtype=int)
        self.assign_equation_numbers()

    # .........................................................................
    @property
    def n_nodes(self) -> int:
        return self.values.shape[0]

    @property
    def n_dofs(self) -> int:
        return int(np.count_nonzero(~self.pinned))

    def assign_equation_numbers(self) -> int:
        """(Re)number all free slots; returns the number of equations."""
        free = ~self.pinned.ravel()
        eqn = np.full(free.shape, -1, dtype=int)
        eqn[free] = np.arange(np.count_nonzero(free))
        self.eqn_numbers = eqn.reshape(self.pinned.shape)
        logger.debug(f"Assigned {self.n_dofs} equation numbers "
                     f"({int(self.pinned.sum())} pinned slots)")
        return self.n_dofs

    def eqn_number(self, node_id: int, value_index: int) -> int:
        return int(self.eqn_numbers[node_id, value_index])

    # ---- pinning ------------------------------------------------------------
    def _slots(self, value_index) -> Sequence[int]:
        if value_index is None:
            return range(self.n_values)
        if isinstance(value_index, (int, np.integer)):
            return [int(value_index)]
        return [int(i) for i in value_index]

    def pin(self, node_ids: IdsLike, value_index=None, value: float | None = None) -> None:
        """
        Pin slots at the given nodes and renumber.

        ``value_index`` may be a single slot, an iterable of slots or None
        (all slots). When ``value`` is given it is stored in the pinned slots.
        """
        ids = np.atleast_1d(np.asarray(node_ids, dtype=int))
        for i in self._slots(value_index):
            self.pinned[ids, i] = True
            if value is not None:
                self.values[ids, i] = value
        self.assign_equation_numbers()

    def unpin(self, node_ids: IdsLike, value_index=None) -> None:
        ids = np.atleast_1d(np.asarray(node_ids, dtype=int))
        for i in self._slots(value_index):
            self.pinned[ids, i] = False
        self.assign_equation_numbers()

    def boundary_node_ids(self, tag: str) -> List[int]:
        """All nodes (high-order nodes included) on edges tagged ``tag``."""
        return self.mesh.get_nodes_from_tags(tag)

    def pin_boundary(self, tag: str, value_index=None, value: float | None = None) -> List[int]:
        ids = self.boundary_node_ids(tag)
        if not ids:
            logger.warning(f"No boundary nodes carry tag '{tag}'; nothing pinned")
            return ids
        self.pin(ids, value_index, value)
        return ids

    # ---- complex fields -----------------------------------------------------
    def set_complex_field(self, func: Callable[[float, float], complex], u_index) -> None:
        """Interpolate ``func(r, z) -> complex`` into the (real, imag) slots of ``u_index``."""
        re, im = u_index
        for nid, (r, z) in enumerate(self.mesh.nodes_x_y_pos):
            val = complex(func(float(r), float(z)))
            self.values[nid, re] = val.real
            self.values[nid, im] = val.imag

    def complex_field(self, u_index) -> np.ndarray:
        re, im = u_index
        return self.values[:, re] + 1j * self.values[:, im]

    # ---- global vectors -----------------------------------------------------
    def dof_vector(self) -> np.ndarray:
        """Free values, ordered by equation number."""
        vec = np.zeros(self.n_dofs, dtype=float)
        free = self.eqn_numbers >= 0
        vec[self.eqn_numbers[free]] = self.values[free]
        return vec

    def set_dof_vector(self, vec: np.ndarray) -> None:
        vec = np.asarray(vec, dtype=float)
        if vec.shape != (self.n_dofs,):
            raise ValueError(f"Expected a vector of length {self.n_dofs}, got shape {vec.shape}")
        free = self.eqn_numbers >= 0
        self.values[free] = vec[self.eqn_numbers[free]]

    def __repr__(self):
        return (f"<DofHandler n_nodes={self.n_nodes}, n_values={self.n_values}, "
                f"n_dofs={self.n_dofs}>")
