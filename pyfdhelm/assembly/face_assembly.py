"""pyfdhelm.assembly.face_assembly"""
import logging
from typing import Iterable, List, Optional, Sequence

import numpy as np
import scipy.sparse as sp

logger = logging.getLogger(__name__)


def build_face_elements(mesh, bulk_elements: Sequence, tag: str, element_cls, **kwargs) -> List:
    """One ``element_cls`` per boundary edge of ``mesh`` tagged ``tag``.

    Each face element is attached to the edge's (only) owner element, with
    the edge's local index in that element as face index. ``kwargs`` are
    passed on to the constructor (e.g. ``flux_fct``, ``integration_rule``).
    """
    faces = [element_cls(bulk_elements[edge.left], edge.lid, **kwargs)
             for edge in mesh.boundary_edges(tag)]
    if not faces:
        logger.warning(f"No boundary edges tagged '{tag}'; no {element_cls.__name__} built")
    else:
        logger.debug(f"Built {len(faces)} {element_cls.__name__} on '{tag}'")
    return faces


def assemble_residual(face_elements: Iterable, n_dofs: int, residuals: Optional[np.ndarray] = None) -> np.ndarray:
    """Add the residual contributions of all face elements into ``residuals``."""
    if residuals is None:
        residuals = np.zeros(n_dofs)
    elif residuals.shape != (n_dofs,):
        raise ValueError(f"Residual vector has shape {residuals.shape}, expected ({n_dofs},)")
    count = 0
    for fe in face_elements:
        fe.fill_in_contribution_to_residuals(residuals)
        count += 1
    logger.debug(f"Assembled residuals of {count} face elements")
    return residuals


def assemble_jacobian(face_elements: Iterable, n_dofs: int):
    """Residual vector and sparse (CSR) Jacobian of the face elements."""
    residuals = np.zeros(n_dofs)
    K = sp.lil_matrix((n_dofs, n_dofs))
    for fe in face_elements:
        fe.fill_in_contribution_to_jacobian(residuals, K)
    K = K.tocsr()
    logger.debug(f"Face Jacobian: {n_dofs}x{n_dofs}, nnz={K.nnz}")
    return residuals, K


def total_radiated_power(monitors: Iterable, sink=None) -> float:
    """Sum of ``global_power_contribution`` over all power monitor elements."""
    power = 0.0
    n = 0
    for monitor in monitors:
        power += monitor.global_power_contribution(sink)
        n += 1
    logger.info(f"Total radiated power over {n} face elements: {power:.10g}")
    return power
