"""pyfdhelm.fem.flux_elements
Prescribed-flux boundary condition for the Fourier-decomposed Helmholtz equation.

The weak form picks up the boundary term

    - ∫ flux(r, z) * test * r ds

on every face carrying such an element; the real and imaginary parts go to
the equations of the real and imaginary value slots respectively. The flux
does not depend on the unknowns, so the Jacobian contribution vanishes.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

import numpy as np

from pyfdhelm.errors import ConfigurationError
from pyfdhelm.fem.face import HelmholtzFaceElement

logger = logging.getLogger(__name__)

FluxFunction = Callable[[float, float], complex]


class HelmholtzFluxElement(HelmholtzFaceElement):
    """Applies a prescribed complex flux on one face of a Helmholtz bulk element."""

    def __init__(self, bulk_element=None, face_index=None, *,
                 flux_fct: Optional[FluxFunction] = None, integration_rule=None):
        super().__init__(bulk_element, face_index, integration_rule=integration_rule)
        self._flux_fct = None
        self.set_flux_fct(flux_fct)

    # ---- flux callback ------------------------------------------------------
    @property
    def flux_fct(self) -> Optional[FluxFunction]:
        return self._flux_fct

    @flux_fct.setter
    def flux_fct(self, fn: Optional[FluxFunction]):
        self.set_flux_fct(fn)

    def set_flux_fct(self, fn: Optional[FluxFunction]) -> None:
        """Replace the flux callback; ``None`` means zero flux."""
        if fn is not None and not callable(fn):
            raise ConfigurationError(f"Flux function must be callable or None, got {type(fn).__name__}")
        self._flux_fct = fn

    def get_flux(self, x) -> complex:
        if self._flux_fct is None:
            return 0j
        return complex(self._flux_fct(float(x[0]), float(x[1])))

    # ---- residual / Jacobian ------------------------------------------------
    def _local_residuals(self, rule) -> np.ndarray:
        """(n_node, 2) contributions to the (real, imag) equations of each face node."""
        local = np.zeros((self.n_node, 2))
        coords = self.nodal_coords()
        for _s, w, psi, test, J in self._rule_points(rule):
            x = psi @ coords
            W = w * J * x[0]
            flux = self.get_flux(x)
            local[:, 0] -= flux.real * test * W
            local[:, 1] -= flux.imag * test * W
        return local

    def fill_in_contribution_to_residuals(self, residuals, rule=None) -> None:
        """
        Add this face's flux term to ``residuals`` (indexed by equation number).

        Pinned slots (negative equation numbers) are skipped. All quadrature
        points are evaluated before anything is written, so a
        NumericalDegeneracyError leaves ``residuals`` untouched.
        """
        local = self._local_residuals(rule)
        re, im = self._u_index
        for l in range(self.n_node):
            for k, slot in enumerate((re, im)):
                eqn = self.nodal_eqn(l, slot)
                if eqn >= 0:
                    residuals[eqn] += local[l, k]

    def fill_in_contribution_to_jacobian(self, residuals, jacobian, rule=None) -> None:
        """Residuals as above; the flux is independent of u so ``jacobian`` is left alone."""
        self.fill_in_contribution_to_residuals(residuals, rule)

    def jacobian_contribution(self) -> np.ndarray:
        """Dense local Jacobian in (node, real/imag) order: identically zero."""
        n = 2 * self.n_node
        return np.zeros((n, n))
