import logging

import numpy as np
import meshio

from pyfdhelm.core.mesh import Mesh
from pyfdhelm.core.dofhandler import DofHandler

logger = logging.getLogger(__name__)


def export_vtk(filename: str, mesh: Mesh, dof_handler: DofHandler, u_index):
    """
    Exports the complex Helmholtz field to a VTK (.vtu) file.

    Args:
        filename: The path to the output file (e.g., 'results/field.vtu').
        mesh: The computational mesh object.
        dof_handler: The DofHandler holding the nodal values.
        u_index: The (real, imag) value slots of the field.

    Point data ``u_re``, ``u_im`` and ``u_abs`` are written on every mesh node;
    cells are the element corner polygons.
    """
    # 1. Prepare mesh geometry
    points_3d = np.pad(mesh.nodes_x_y_pos, ((0, 0), (0, 1)), constant_values=0)
    if mesh.element_type == 'quad':
        cell_type = 'quad'
    elif mesh.element_type == 'tri':
        cell_type = 'triangle'
    else:
        raise ValueError(f"Unsupported element type for VTK export: {mesh.element_type}")
    cells = [meshio.CellBlock(cell_type, mesh.corner_connectivity)]

    # 2) point data
    u = dof_handler.complex_field(u_index)
    point_data = {"u_re": u.real.copy(), "u_im": u.imag.copy(), "u_abs": np.abs(u)}

    # 3) write
    meshio.Mesh(points_3d, cells, point_data=point_data).write(filename)
    logger.info(f"Solution exported to {filename}")
