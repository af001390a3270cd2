# pyfdhelm.fem.reference
"""
Order-agnostic reference-element factory, plus the reference data that ties
a face (edge) of a bulk element to its 1D face element.

Faces are traversed counter-clockwise in the reference element and carry the
local coordinate ``s`` in [-1, 1]:

    quad (xi, eta) in [-1,1]^2       tri (xi, eta), t = (s+1)/2
    0 bottom  ( s, -1)               0  (t, 0)
    1 right   ( 1,  s)               1  (1-t, t)
    2 top     (-s,  1)               2  (0, 1-t)
    3 left    (-1, -s)
"""
from functools import lru_cache
from importlib import import_module
import numpy as np

from pyfdhelm.fem.reference.quad_qn import eval_1d

N_FACES = {"quad": 4, "tri": 3}


class Ref:
    def __init__(self, shape_lambda, deriv_lambdas):
        self.shape_lambda = shape_lambda
        self.deriv_lambdas = deriv_lambdas

    @lru_cache(maxsize=None)
    def shape(self, xi, eta):
        return np.asarray(self.shape_lambda(xi, eta), dtype=float).ravel()

    @lru_cache(maxsize=None)
    def derivative(self, xi, eta, order_xi, order_eta):
        alpha = (order_xi, order_eta)
        if alpha not in self.deriv_lambdas:
            raise ValueError(f"Derivative order {alpha} not computed. "
                             f"Adjust max_deriv_order >= {order_xi + order_eta}.")
        return np.asarray(self.deriv_lambdas[alpha](xi, eta), dtype=float).ravel()

    @lru_cache(maxsize=None)
    def grad(self, xi, eta):
        """(n_loc, 2) derivatives w.r.t. (xi, eta)."""
        return np.column_stack((self.derivative(xi, eta, 1, 0),
                                self.derivative(xi, eta, 0, 1)))


class LineRef:
    """1D Lagrange element on [-1,1] used by face elements."""
    def __init__(self, nodes, basis, dbasis):
        self.nodes = nodes
        self._basis = basis
        self._dbasis = dbasis

    @property
    def n_basis(self):
        return len(self.nodes)

    @lru_cache(maxsize=None)
    def shape(self, s):
        return eval_1d(self._basis, s)

    @lru_cache(maxsize=None)
    def dshape(self, s):
        return eval_1d(self._dbasis, s)


@lru_cache(maxsize=None)
def get_reference(element_type: str, poly_order: int = 1, max_deriv_order: int = 1):
    if element_type == "quad":
        shape_l, deriv_lambdas = import_module("pyfdhelm.fem.reference.quad_qn").quad_qn(poly_order, max_deriv_order)
    elif element_type == "tri":
        shape_l, deriv_lambdas = import_module("pyfdhelm.fem.reference.tri_pn").tri_pn(poly_order, max_deriv_order)
    elif element_type == "line":
        nodes, L, dL = import_module("pyfdhelm.fem.reference.quad_qn").lagrange_basis_1d(poly_order, 1)
        return LineRef(nodes, tuple(L), tuple(dL[1]))
    else:
        raise KeyError(element_type)
    return Ref(shape_l, deriv_lambdas)


@lru_cache(maxsize=None)
def reference_nodes(element_type: str, poly_order: int) -> np.ndarray:
    """Reference coordinates of the element nodes, in local node order."""
    p = int(poly_order)
    if element_type == "quad":
        # (eta outer, xi inner)
        t = np.linspace(-1.0, 1.0, p + 1)
        return np.array([(xi, eta) for eta in t for xi in t], dtype=float)
    if element_type == "tri":
        t = np.linspace(0.0, 1.0, p + 1)
        return np.array([(t[i], t[j]) for j in range(p + 1) for i in range(p + 1 - j)], dtype=float)
    raise KeyError(element_type)


def face_to_bulk(element_type: str, face_index: int, s: float) -> np.ndarray:
    """Map the face-local coordinate ``s`` to the bulk reference coordinates."""
    s = float(s)
    if element_type == "quad":
        if face_index == 0:
            return np.array([s, -1.0])
        if face_index == 1:
            return np.array([1.0, s])
        if face_index == 2:
            return np.array([-s, 1.0])
        if face_index == 3:
            return np.array([-1.0, -s])
        raise IndexError(face_index)
    if element_type == "tri":
        t = 0.5 * (s + 1.0)
        if face_index == 0:
            return np.array([t, 0.0])
        if face_index == 1:
            return np.array([1.0 - t, t])
        if face_index == 2:
            return np.array([0.0, 1.0 - t])
        raise IndexError(face_index)
    raise KeyError(element_type)


@lru_cache(maxsize=None)
def face_local_nodes(element_type: str, poly_order: int, face_index: int) -> tuple:
    """Local bulk node numbers lying on a face, ordered by increasing ``s``."""
    lattice = reference_nodes(element_type, poly_order)
    out = []
    for s in np.linspace(-1.0, 1.0, int(poly_order) + 1):
        target = face_to_bulk(element_type, face_index, s)
        hit = np.flatnonzero(np.all(np.isclose(lattice, target, atol=1e-12), axis=1))
        if hit.size != 1:
            raise RuntimeError(f"No unique {element_type} node at {target} on face {face_index}.")
        out.append(int(hit[0]))
    return tuple(out)
