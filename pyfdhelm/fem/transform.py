"""pyfdhelm.fem.transform
Reference → physical mapping for isoparametric bulk and face elements.
"""
import numpy as np
from pyfdhelm.fem.reference import get_reference

# ---------- small utilities ----------

def _shape_and_grad(ref, xi_eta):
    xi, eta = float(xi_eta[0]), float(xi_eta[1])
    N = np.asarray(ref.shape(xi, eta)).ravel()   # (n_loc,)
    dN = np.asarray(ref.grad(xi, eta))           # (n_loc,2)
    return N, dN

def element_coords(mesh, elem_id):
    """(n_loc, 2) nodal positions of an element, read from the mesh."""
    return mesh.nodes_x_y_pos[mesh.elements_connectivity[elem_id]]

def x_mapping(mesh, elem_id, xi_eta):
    ref = get_reference(mesh.element_type, mesh.poly_order)
    N, _ = _shape_and_grad(ref, xi_eta)
    return N @ element_coords(mesh, elem_id)     # (2,)

def jacobian(mesh, elem_id, xi_eta):
    """J[a, i] = d x_i / d xi_a."""
    ref = get_reference(mesh.element_type, mesh.poly_order)
    _, dN = _shape_and_grad(ref, xi_eta)
    return dN.T @ element_coords(mesh, elem_id)

def det_jacobian(mesh, elem_id, xi_eta):
    return np.linalg.det(jacobian(mesh, elem_id, xi_eta))

def inv_jac_T(mesh, elem_id, xi_eta):
    J = jacobian(mesh, elem_id, xi_eta)
    return np.linalg.inv(J).T

def map_grad_scalar(mesh, elem_id, grad_ref, xi_eta):
    """Push reference gradients (n_loc, 2) forward to physical ones (n_loc, 2)."""
    return np.asarray(grad_ref) @ inv_jac_T(mesh, elem_id, xi_eta)

# ---------- 1-D (face) maps ----------

def line_tangent(coords, dpsi):
    """dx/ds for a face with nodal positions ``coords`` (n, 2) and dpsi/ds (n,)."""
    return np.asarray(dpsi) @ np.asarray(coords)

def line_jacobian(coords, dpsi) -> float:
    """Length element |dx/ds| of a face."""
    return float(np.linalg.norm(line_tangent(coords, dpsi)))
