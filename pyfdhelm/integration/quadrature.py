"""pyfdhelm.integration.quadrature
Quadrature provider for face (1-D) and bulk (triangle / quad) elements.
"""
# pyfdhelm.integration.quadrature
from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from numpy.polynomial.legendre import leggauss

from pyfdhelm.fem.reference import face_to_bulk, N_FACES


@dataclass(frozen=True, eq=False)
class IntegrationRule:
    """Ordered (knot, weight) pairs on a reference domain.

    ``points`` has shape (n, dim) and ``weights`` shape (n,).
    """
    points: np.ndarray
    weights: np.ndarray

    def __post_init__(self):
        pts = np.atleast_2d(np.array(self.points, dtype=float))
        if pts.shape[0] == 1 and np.ndim(self.points) == 1:
            # a flat sequence of 1-D knots
            pts = pts.T
        wts = np.array(self.weights, dtype=float).ravel()
        if pts.shape[0] != wts.shape[0]:
            raise ValueError(f"{pts.shape[0]} knots but {wts.shape[0]} weights.")
        pts.setflags(write=False)
        wts.setflags(write=False)
        object.__setattr__(self, "points", pts)
        object.__setattr__(self, "weights", wts)

    @property
    def nweight(self) -> int:
        return int(self.weights.shape[0])

    @property
    def dim(self) -> int:
        return int(self.points.shape[1])

    def knot(self, ipt: int, i: int | None = None):
        return self.points[ipt] if i is None else float(self.points[ipt, i])

    def weight(self, ipt: int) -> float:
        return float(self.weights[ipt])

    def __len__(self):
        return self.nweight

    def __iter__(self):
        return zip(self.points, self.weights)


# -------------------------------------------------------------------------
# 1-D Gauss-Legendre
# -------------------------------------------------------------------------
def gauss_legendre(order: int):
    if order < 1:
        raise ValueError(order)
    return leggauss(order)  # (points, weights)

@lru_cache(maxsize=None)
def gauss_line(order: int) -> IntegrationRule:
    """Gauss-Legendre rule with ``order`` points on the face interval [-1,1]."""
    xi, wi = gauss_legendre(int(order))
    return IntegrationRule(xi[:, None], wi)

# -------------------------------------------------------------------------
# Tensor-product construction helpers
# -------------------------------------------------------------------------
@lru_cache(maxsize=None)
def quad_rule(order: int) -> IntegrationRule:
    xi, wi = gauss_legendre(order)
    pts = np.array([[x, y] for x in xi for y in xi])
    wts = np.array([wx * wy for wx in wi for wy in wi])
    return IntegrationRule(pts, wts)

@lru_cache(maxsize=None)
def tri_rule(order: int) -> IntegrationRule:
    """Collapsed (Duffy) Gauss rule on the reference triangle (0,0)-(1,0)-(0,1)."""
    xi, wi = gauss_legendre(order)
    u = 0.5 * (xi + 1.0)   # [0,1]
    w_u = 0.5 * wi
    pts = []
    wts = []
    for i, ui in enumerate(u):
        for j, vj in enumerate(u):
            pts.append([ui, vj * (1.0 - ui)])
            wts.append(w_u[i] * w_u[j] * (1.0 - ui))
    return IntegrationRule(np.array(pts), np.array(wts))

# -------------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------------
def volume(element_type: str, order: int = 2) -> IntegrationRule:
    if element_type == 'tri':
        return tri_rule(order)
    if element_type == 'quad':
        return quad_rule(order)
    raise KeyError(element_type)


def edge(element_type: str, edge_index: int, order: int = 2) -> IntegrationRule:
    """Gauss rule on one face of the *bulk* reference element.

    Knots are bulk reference coordinates, and weights include the ratio of
    reference face length to the face interval [-1,1].
    """
    if element_type not in N_FACES:
        raise KeyError(element_type)
    if not 0 <= edge_index < N_FACES[element_type]:
        raise IndexError(edge_index)
    line = gauss_line(order)
    pts = np.array([face_to_bulk(element_type, edge_index, s) for s in line.points[:, 0]])
    scale = 1.0
    if element_type == 'tri':
        scale = 0.5 * (np.sqrt(2.0) if edge_index == 1 else 1.0)
    return IntegrationRule(pts, scale * line.weights)
