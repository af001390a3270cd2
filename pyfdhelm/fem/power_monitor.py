"""pyfdhelm.fem.power_monitor
Time-averaged radiated power through a face of a Helmholtz bulk element.
"""
from __future__ import annotations

import logging
import math

import numpy as np

from pyfdhelm.fem.face import HelmholtzFaceElement
from pyfdhelm.io.power_density import PowerDensityRecord

logger = logging.getLogger(__name__)


class HelmholtzPowerMonitorElement(HelmholtzFaceElement):
    """
    Monitors the power radiated through one face.

    The face contributes

        P = π ∫ r [Re(u) Im(du/dn) - Im(u) Re(du/dn)] ds

    where u is interpolated from the face nodes and du/dn from the bulk
    element at the matching bulk coordinate. The formula holds for uniform
    constitutive parameters only; with spatially varying wavenumber or
    material data the power flux acquires extra factors that are not
    accounted for here.
    """

    def global_power_contribution(self, sink=None, rule=None) -> float:
        """
        Integrate the power flux over this face.

        Parameters
        ----------
        sink : PowerDensitySink, optional
            Receives one ``begin_zone()`` followed by one
            ``PowerDensityRecord(r, z, theta, integrand)`` per quadrature point,
            theta = atan2(r, z) being the polar angle from the symmetry axis.
            Ignored when None or not open; the returned power is the same either way.
        rule : IntegrationRule, optional
            Overrides the element's own integration rule.
        """
        active = sink is not None and sink.is_open
        records = []
        coords = self.nodal_coords()
        u_nodal = self.nodal_u()
        bulk = self.bulk_element
        power = 0.0
        for s, w, psi, _test, J in self._rule_points(rule):
            normal = self.outer_unit_normal(s)
            dudx = bulk.interpolated_dudx_helmholtz(self.local_coordinate_in_bulk(s))
            x = psi @ coords
            u = complex(psi @ u_nodal)
            dudn = complex(dudx @ normal)
            integrand = u.real * dudn.imag - u.imag * dudn.real
            if active:
                r, z = float(x[0]), float(x[1])
                records.append(PowerDensityRecord(r, z, math.atan2(r, z), float(integrand)))
            power += np.pi * x[0] * integrand * w * J
        # nothing reaches the sink unless every point evaluated
        if active:
            sink.begin_zone()
            for rec in records:
                sink.accept(rec)
        return float(power)
