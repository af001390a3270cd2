"""pyfdhelm.utils.meshgen
Structured meshes of the meridional (r, z) half plane for quick tests.
"""
import numpy as np
from pyfdhelm.core.topology import Node
from pyfdhelm.core.mesh import Mesh
from typing import Tuple, Optional
import numba

__all__ = ["structured_quad", "structured_triangles", "meridional_annulus"]


def _check_order(poly_order):
    if not isinstance(poly_order, (int, np.integer)) or poly_order < 1:
        raise ValueError("Polynomial order must be a positive integer.")


def _unique_edges(corners: np.ndarray) -> np.ndarray:
    """Unique sorted corner pairs of all element edges (CCW corner order)."""
    if corners.shape[0] == 0:
        return np.empty((0, 2), dtype=np.int64)
    nxt = np.roll(corners, -1, axis=1)
    pairs = np.sort(np.stack((corners, nxt), axis=-1).reshape(-1, 2), axis=1)
    return np.unique(pairs, axis=0)


def _finish(coords: np.ndarray, elements, corners, offset):
    if offset is not None:
        coords = coords + np.asarray(offset, dtype=float)
    nodes = [Node(id=i, x=float(r), y=float(z)) for i, (r, z) in enumerate(coords)]
    corners = np.asarray(corners, dtype=np.int64)
    return nodes, np.asarray(elements, dtype=np.int64), _unique_edges(corners), corners


@numba.njit(cache=True)
def _structured_qn_numba(Lx: float, Ly: float, nx: int, ny: int, order: int):
    """Lattice coordinates, Qn connectivity and CCW corners of an nx x ny grid on [0, Lx] x [0, Ly]."""
    mx = order * nx + 1
    my = order * ny + 1
    coords = np.empty((mx * my, 2), dtype=np.float64)
    for g in range(mx * my):
        coords[g, 0] = Lx * (g % mx) / (mx - 1)
        coords[g, 1] = Ly * (g // mx) / (my - 1)

    k = order + 1
    elements = np.empty((nx * ny, k * k), dtype=np.int64)
    corners = np.empty((nx * ny, 4), dtype=np.int64)
    for e in range(nx * ny):
        base = order * ((e // nx) * mx + e % nx)    # lower-left lattice node
        for a in range(k * k):
            elements[e, a] = base + (a // k) * mx + a % k
        corners[e, 0] = base
        corners[e, 1] = base + order
        corners[e, 2] = base + order * mx + order
        corners[e, 3] = base + order * mx
    return coords, elements, corners


def structured_quad(Lr: float, Lz: float, *, nx: int, ny: int, poly_order: int,
                    offset: Optional[Tuple[float, float]] = None):
    """
    Structured Qn mesh of the rectangle [0, Lr] x [0, Lz] (shifted by ``offset``).

    Returns ``(nodes, elements, edges, corners)``: Node objects, full element
    connectivity (eta outer, xi inner), unique sorted corner pairs and CCW corners.
    """
    _check_order(poly_order)
    coords, elements, corners = _structured_qn_numba(float(Lr), float(Lz), int(nx), int(ny), int(poly_order))
    return _finish(coords, elements, corners, offset)


def structured_triangles(Lr: float, Lz: float, *, nx_quads: int, ny_quads: int, poly_order: int,
                         offset: Optional[Tuple[float, float]] = None):
    """
    Structured Pk mesh: every cell of an nx_quads x ny_quads grid is split
    into two CCW triangles along its rising diagonal. Same return layout as
    :func:`structured_quad`.
    """
    _check_order(poly_order)
    k = int(poly_order)
    mx, my = k * nx_quads + 1, k * ny_quads + 1
    gr, gz = np.meshgrid(np.linspace(0.0, Lr, mx), np.linspace(0.0, Lz, my))
    coords = np.column_stack((gr.ravel(), gz.ravel()))

    def gid(ix, iy):
        return iy * mx + ix

    # lattice steps (along V0->V1, along V0->V2) of the lower and upper half
    halves = (((1, 0), (1, 1)), ((1, 1), (0, 1)))
    elements, corners = [], []
    for cy in range(ny_quads):
        for cx in range(nx_quads):
            ox, oy = k * cx, k * cy
            for (ax, ay), (bx, by) in halves:
                elements.append([gid(ox + i * ax + j * bx, oy + i * ay + j * by)
                                 for j in range(k + 1) for i in range(k + 1 - j)])
                corners.append([gid(ox, oy), gid(ox + k * ax, oy + k * ay), gid(ox + k * bx, oy + k * by)])
    return _finish(coords, elements, corners, offset)


def meridional_annulus(r_inner: float, r_outer: float, *, n_theta: int, n_radial: int,
                       poly_order: int) -> Mesh:
    """
    Qn mesh of the half annulus r_inner <= R <= r_outer, 0 <= theta <= pi,
    in (r, z) = (R sin(theta), R cos(theta)).

    The structured grid runs along theta in its first direction and along R
    in its second, which keeps det J = R > 0 (CCW elements). Boundary edges are
    tagged ``outer`` (R = r_outer), ``inner`` (R = r_inner) and ``axis`` (r = 0).
    """
    if not 0.0 < r_inner < r_outer:
        raise ValueError(f"Need 0 < r_inner < r_outer, got {r_inner}, {r_outer}")
    _check_order(poly_order)
    param, elements, corners = _structured_qn_numba(
        np.pi, float(r_outer - r_inner), int(n_theta), int(n_radial), int(poly_order)
    )
    theta = param[:, 0]
    R = r_inner + param[:, 1]
    coords = np.column_stack((R * np.sin(theta), R * np.cos(theta)))
    coords[np.abs(coords[:, 0]) < 1e-14, 0] = 0.0    # nodes on the symmetry axis

    nodes = _finish(coords, elements, corners, None)[0]
    mesh = Mesh(nodes, elements, corners,
                element_type='quad', poly_order=int(poly_order))
    R_mid = 0.5 * (r_inner + r_outer)
    mesh.tag_boundary_edges({
        "axis": lambda r, z: abs(r) < 1e-12,
        "outer": lambda r, z: np.hypot(r, z) > R_mid,
        "inner": lambda r, z: np.hypot(r, z) <= R_mid,
    })
    return mesh
