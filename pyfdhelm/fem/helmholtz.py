"""pyfdhelm.fem.helmholtz
Bulk side of the Fourier-decomposed Helmholtz problem.

The complex unknown u = u_re + i u_im lives in two real nodal value slots,
identified by a ComplexDofIndex. Face elements only need the small
HelmholtzBulkEquations capability from their bulk element.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

import numpy as np

from pyfdhelm.errors import ConfigurationError
from pyfdhelm.fem.element import LagrangeElement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComplexDofIndex:
    """Nodal value slots holding the real and imaginary part of u."""
    real: int = 0
    imag: int = 1

    def __post_init__(self):
        for name in ("real", "imag"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
                raise ConfigurationError(f"ComplexDofIndex.{name} must be an int, got {v!r}")
            if v < 0:
                raise ConfigurationError(f"ComplexDofIndex.{name} must be non-negative, got {v}")
        if self.real == self.imag:
            raise ConfigurationError(f"Real and imaginary parts share slot {self.real}")

    def __iter__(self):
        yield self.real
        yield self.imag


class HelmholtzBulkEquations(ABC):
    """What a face element needs from the bulk element it is attached to."""

    @abstractmethod
    def u_index_helmholtz(self) -> ComplexDofIndex: ...

    @abstractmethod
    def nodal_value(self, l: int, i: int) -> float: ...

    @abstractmethod
    def dshape_eulerian(self, s): ...

    @property
    @abstractmethod
    def dim(self) -> int: ...

    @property
    @abstractmethod
    def n_node(self) -> int: ...

    def nodal_u(self) -> np.ndarray:
        """Complex nodal values of u, (n_node,)."""
        re, im = self.u_index_helmholtz()
        return np.array([complex(self.nodal_value(l, re), self.nodal_value(l, im))
                         for l in range(self.n_node)])

    def interpolated_u_helmholtz(self, s) -> complex:
        psi, _ = self.dshape_eulerian(s)
        return complex(psi @ self.nodal_u())

    def interpolated_dudx_helmholtz(self, s) -> np.ndarray:
        """Complex physical gradient (du/dr, du/dz)."""
        _, dpsi = self.dshape_eulerian(s)
        return self.nodal_u() @ dpsi


class FourierDecomposedHelmholtzElement(LagrangeElement, HelmholtzBulkEquations):
    """Isoparametric Lagrange element carrying the complex Helmholtz unknown."""

    def __init__(self, mesh, elem_id: int, dof_handler, *, u_index: ComplexDofIndex = ComplexDofIndex()):
        super().__init__(mesh, elem_id, dof_handler)
        if not isinstance(u_index, ComplexDofIndex):
            raise ConfigurationError(f"u_index must be a ComplexDofIndex, got {type(u_index).__name__}")
        if max(u_index) >= dof_handler.n_values:
            raise ConfigurationError(
                f"{u_index} needs {max(u_index) + 1} value slots, "
                f"the dof handler provides {dof_handler.n_values}")
        self._u_index = u_index

    def u_index_helmholtz(self) -> ComplexDofIndex:
        return self._u_index


def build_bulk_elements(mesh, dof_handler, u_index: ComplexDofIndex = ComplexDofIndex()) -> List[FourierDecomposedHelmholtzElement]:
    elements = [FourierDecomposedHelmholtzElement(mesh, eid, dof_handler, u_index=u_index)
                for eid in range(mesh.n_elements)]
    logger.debug(f"Built {len(elements)} Helmholtz bulk elements on {mesh!r}")
    return elements
