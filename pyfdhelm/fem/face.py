"""pyfdhelm.fem.face
Face elements: 1-D elements glued to one face (edge) of a bulk element.

Face node ``l`` coincides with the bulk lattice node at face coordinate
``s_l = -1 + 2 l / p``; the face shape functions are therefore the bulk shape
functions restricted to the face, and every face quantity is built from the
bulk element's nodes without copying any nodal data.
"""
from __future__ import annotations

import logging

import numpy as np

from pyfdhelm.core.settings import FACE
from pyfdhelm.errors import ConfigurationError, NumericalDegeneracyError
from pyfdhelm.fem import transform
from pyfdhelm.fem.helmholtz import HelmholtzBulkEquations
from pyfdhelm.fem.reference import N_FACES, face_local_nodes, face_to_bulk, get_reference
from pyfdhelm.integration.quadrature import IntegrationRule, gauss_line

logger = logging.getLogger(__name__)


class FaceGeometry:
    """Geometry of face ``face_index`` of ``bulk``, parametrised by s in [-1, 1]."""

    def __init__(self, bulk, face_index):
        n_faces = N_FACES.get(getattr(bulk, "element_type", None))
        if n_faces is None:
            raise ConfigurationError(f"Cannot attach a face element to {type(bulk).__name__}")
        if isinstance(face_index, bool) or not isinstance(face_index, (int, np.integer)) \
                or not 0 <= face_index < n_faces:
            raise ConfigurationError(
                f"Face index {face_index!r} is not a face of a {bulk.element_type} element "
                f"(expected 0..{n_faces - 1})")
        self._bulk = bulk
        self._face_index = int(face_index)
        self.bulk_node_numbers = face_local_nodes(bulk.element_type, bulk.poly_order, self._face_index)
        self.line_ref = get_reference("line", bulk.poly_order)
        # orientation of the bulk map: +1 keeps the CCW face traversal, -1 flips it
        det_mid = np.linalg.det(bulk.jacobian(self.local_coordinate_in_bulk(0.0)))
        self.normal_sign = 1.0 if det_mid >= 0.0 else -1.0

    @property
    def bulk_element(self):
        return self._bulk

    @property
    def face_index(self) -> int:
        return self._face_index

    @property
    def n_node(self) -> int:
        return len(self.bulk_node_numbers)

    @property
    def dim(self) -> int:
        return 1

    # ---- nodal data (borrowed from the bulk element) ------------------------
    def nodal_position(self, l: int, i: int) -> float:
        return self._bulk.nodal_position(self.bulk_node_numbers[l], i)

    def nodal_value(self, l: int, i: int) -> float:
        return self._bulk.nodal_value(self.bulk_node_numbers[l], i)

    def nodal_eqn(self, l: int, i: int) -> int:
        return self._bulk.nodal_eqn(self.bulk_node_numbers[l], i)

    def nodal_coords(self) -> np.ndarray:
        return np.array([[self.nodal_position(l, 0), self.nodal_position(l, 1)]
                         for l in range(self.n_node)])

    # ---- shape functions and geometry ---------------------------------------
    def shape(self, s) -> np.ndarray:
        return self.line_ref.shape(float(s))

    def dshape_local(self, s) -> np.ndarray:
        return self.line_ref.dshape(float(s))

    def interpolated_x(self, s) -> np.ndarray:
        return self.shape(s) @ self.nodal_coords()

    def _checked_length(self, dpsi) -> float:
        J = transform.line_jacobian(self.nodal_coords(), dpsi)
        if J <= FACE.jacobian_tol:
            raise NumericalDegeneracyError(
                f"Face {self._face_index} of element {getattr(self._bulk, 'elem_id', '?')}: "
                f"J_eulerian = {J:.3e}")
        return J

    def J_eulerian(self, s) -> float:
        """|dx/ds|; raises NumericalDegeneracyError at or below FACE.jacobian_tol."""
        return self._checked_length(self.dshape_local(s))

    def outer_unit_normal(self, s) -> np.ndarray:
        t = transform.line_tangent(self.nodal_coords(), self.dshape_local(s))
        length = np.linalg.norm(t)
        if length <= FACE.jacobian_tol:
            raise NumericalDegeneracyError(
                f"Face {self._face_index}: zero tangent, no normal defined")
        return self.normal_sign * np.array([t[1], -t[0]]) / length

    def local_coordinate_in_bulk(self, s) -> np.ndarray:
        return face_to_bulk(self._bulk.element_type, self._face_index, s)


class HelmholtzFaceElement(FaceGeometry):
    """
    Face element of a Fourier-decomposed Helmholtz bulk element.

    Binds to the bulk element once, at construction: the complex slot pair is
    read from ``bulk_element.u_index_helmholtz()`` and never changes. Copies
    are refused because a face element stands for one specific mesh face.
    """

    def __init__(self, bulk_element=None, face_index=None, *, integration_rule=None):
        if bulk_element is None or face_index is None:
            raise ConfigurationError("Must supply bulk element and face index")
        if not isinstance(bulk_element, HelmholtzBulkEquations):
            raise ConfigurationError(
                f"Bulk element of type {type(bulk_element).__name__} does not provide "
                f"the Helmholtz equations")
        super().__init__(bulk_element, face_index)
        self._u_index = bulk_element.u_index_helmholtz()
        if integration_rule is None:
            integration_rule = gauss_line(bulk_element.poly_order + FACE.quad_order_increment)
        self._knot_cache = {}
        self.integration_rule = integration_rule
        logger.debug(f"{type(self).__name__} bound to face {self._face_index} of {bulk_element!r} "
                     f"(u slots {tuple(self._u_index)})")

    def __copy__(self):
        raise ConfigurationError(f"{type(self).__name__} cannot be copied")

    def __deepcopy__(self, memo):
        raise ConfigurationError(f"{type(self).__name__} cannot be copied")

    @property
    def integration_rule(self) -> IntegrationRule:
        return self._integration_rule

    @integration_rule.setter
    def integration_rule(self, rule: IntegrationRule):
        if not isinstance(rule, IntegrationRule) or rule.dim != 1:
            raise ConfigurationError(f"A face element needs a 1-D IntegrationRule, got {rule!r}")
        self._integration_rule = rule
        # tabulated shape values belong to the previous knots
        self._knot_cache.clear()

    def u_index_helmholtz(self):
        return self._u_index

    def shape_and_test(self, s):
        """Shape functions, test functions (Galerkin: the same) and J at ``s``."""
        psi = self.shape(s)
        J = self.J_eulerian(s)
        return psi, psi.copy(), J

    def shape_and_test_at_knot(self, ipt: int):
        """Same as ``shape_and_test`` at knot ``ipt`` of the element's own rule.

        Shape values are tabulated once per knot; J is re-evaluated so it
        follows any change of the nodal positions.
        """
        cached = self._knot_cache.get(ipt)
        if cached is None:
            s = self.integration_rule.knot(ipt, 0)
            cached = (self.shape(s), self.dshape_local(s))
            self._knot_cache[ipt] = cached
        psi, dpsi = cached
        return psi, psi.copy(), self._checked_length(dpsi)

    def nodal_u(self) -> np.ndarray:
        re, im = self._u_index
        return np.array([complex(self.nodal_value(l, re), self.nodal_value(l, im))
                         for l in range(self.n_node)])

    def interpolated_u_helmholtz(self, s) -> complex:
        """u interpolated from the face nodes (compare the bulk's own interpolation)."""
        return complex(self.shape(s) @ self.nodal_u())

    def _rule_points(self, rule):
        """(s, w, psi, test, J) for every point of ``rule`` (default: own rule via the knot cache)."""
        if rule is None:
            own = self.integration_rule
            for ipt in range(own.nweight):
                s = own.knot(ipt, 0)
                psi, test, J = self.shape_and_test_at_knot(ipt)
                yield s, own.weight(ipt), psi, test, J
        else:
            for ipt in range(rule.nweight):
                s = rule.knot(ipt, 0)
                psi, test, J = self.shape_and_test(s)
                yield s, rule.weight(ipt), psi, test, J
