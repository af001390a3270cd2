"""pyfdhelm.fem.element
Generic isoparametric Lagrange bulk element living on a Mesh.
"""
import numpy as np

from pyfdhelm.core.mesh import Mesh
from pyfdhelm.core.settings import FACE
from pyfdhelm.errors import NumericalDegeneracyError
from pyfdhelm.fem import transform
from pyfdhelm.fem.reference import get_reference


class LagrangeElement:
    """
    A bulk element of a Mesh, seen through its reference element.

    Nodal positions are read from ``mesh.nodes_x_y_pos`` on every call and
    nodal values / equation numbers from the DofHandler, so the element
    always reflects the current state of both.
    """

    def __init__(self, mesh, elem_id: int, dof_handler):
        if not isinstance(mesh, Mesh):
            raise TypeError(f"LagrangeElement needs a Mesh, got {type(mesh).__name__}")
        if not 0 <= elem_id < mesh.n_elements:
            raise IndexError(f"Element ID {elem_id} out of range.")
        self.mesh = mesh
        self.elem_id = int(elem_id)
        self.dof_handler = dof_handler
        self.element_type = mesh.element_type
        self.poly_order = mesh.poly_order
        self.node_ids = tuple(int(n) for n in mesh.elements_connectivity[elem_id])
        self.ref = get_reference(self.element_type, self.poly_order)

    @property
    def dim(self) -> int:
        return 2

    @property
    def n_node(self) -> int:
        return len(self.node_ids)

    # ---- nodal data ---------------------------------------------------------
    def nodal_position(self, l: int, i: int) -> float:
        return float(self.mesh.nodes_x_y_pos[self.node_ids[l], i])

    def nodal_value(self, l: int, i: int) -> float:
        return float(self.dof_handler.values[self.node_ids[l], i])

    def nodal_eqn(self, l: int, i: int) -> int:
        return int(self.dof_handler.eqn_numbers[self.node_ids[l], i])

    # ---- shape functions ----------------------------------------------------
    def shape(self, s) -> np.ndarray:
        return self.ref.shape(float(s[0]), float(s[1]))

    def dshape_local(self, s) -> np.ndarray:
        return self.ref.grad(float(s[0]), float(s[1]))

    def jacobian(self, s) -> np.ndarray:
        return transform.jacobian(self.mesh, self.elem_id, s)

    def interpolated_x(self, s) -> np.ndarray:
        return transform.x_mapping(self.mesh, self.elem_id, s)

    def dshape_eulerian(self, s):
        """
        Shape functions and their physical derivatives at local coordinate ``s``.

        Returns ``(psi, dpsi_dx)`` with shapes (n_node,) and (n_node, 2).
        Raises NumericalDegeneracyError when |det J| is at or below
        ``FACE.jacobian_tol``.
        """
        psi = self.shape(s)
        dN = self.dshape_local(s)
        J = dN.T @ transform.element_coords(self.mesh, self.elem_id)
        det = np.linalg.det(J)
        if abs(det) <= FACE.jacobian_tol:
            raise NumericalDegeneracyError(
                f"Element {self.elem_id}: det J = {det:.3e} at s = {tuple(np.round(s, 12))}")
        return psi, dN @ np.linalg.inv(J).T

    def __repr__(self):
        return f"<{type(self).__name__} id={self.elem_id}, type='{self.element_type}', p={self.poly_order}>"
