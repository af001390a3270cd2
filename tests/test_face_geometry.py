import copy

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pyfdhelm.core import Mesh, Node, DofHandler
from pyfdhelm.errors import ConfigurationError, NumericalDegeneracyError
from pyfdhelm.fem.element import LagrangeElement
from pyfdhelm.fem.face import HelmholtzFaceElement
from pyfdhelm.fem.flux_elements import HelmholtzFluxElement
from pyfdhelm.fem.helmholtz import ComplexDofIndex, build_bulk_elements
from pyfdhelm.integration.quadrature import gauss_line
from pyfdhelm.utils.meshgen import structured_quad, structured_triangles, meridional_annulus


@pytest.fixture
def square():
    """Single Q1 element on [2,4] x [0,2]."""
    nodes = [Node(i, float(x), float(y)) for i, (x, y) in enumerate([(2, 0), (4, 0), (4, 2), (2, 2)])]
    mesh = Mesh(nodes, np.array([[0, 1, 3, 2]]), np.array([[0, 1, 2, 3]]), element_type='quad')
    dh = DofHandler(mesh)
    return mesh, dh, build_bulk_elements(mesh, dh)[0]


@pytest.mark.parametrize("face,normal", [(0, [0, -1]), (1, [1, 0]), (2, [0, 1]), (3, [-1, 0])])
def test_quad_faces_normals_and_lengths(square, face, normal):
    _, _, bulk = square
    fe = HelmholtzFaceElement(bulk, face)
    assert fe.normal_sign == 1.0
    assert_allclose(fe.outer_unit_normal(0.3), normal, atol=1e-14)
    assert np.isclose(fe.J_eulerian(-0.4), 1.0)
    # face coordinate maps onto the matching bulk point
    s = 0.6
    assert_allclose(fe.interpolated_x(s), bulk.interpolated_x(fe.local_coordinate_in_bulk(s)))


def test_clockwise_element_flips_normal_sign():
    # same square, corners listed clockwise: det J < 0
    nodes = [Node(i, float(x), float(y)) for i, (x, y) in enumerate([(2, 0), (2, 2), (4, 2), (4, 0)])]
    mesh = Mesh(nodes, np.array([[0, 1, 3, 2]]), np.array([[0, 1, 2, 3]]), element_type='quad')
    bulk = build_bulk_elements(mesh, DofHandler(mesh))[0]
    fe = HelmholtzFaceElement(bulk, 0)       # runs from (2,0) to (2,2): the left side
    assert fe.normal_sign == -1.0
    assert_allclose(fe.outer_unit_normal(0.0), [-1.0, 0.0], atol=1e-14)


def test_triangle_faces_point_outward():
    nodes, elems, _, corners = structured_triangles(1.0, 1.0, nx_quads=1, ny_quads=1, poly_order=2, offset=(1.0, 0.0))
    mesh = Mesh(nodes, elems, corners, element_type='tri', poly_order=2)
    bulk = build_bulk_elements(mesh, DofHandler(mesh))
    for elem in bulk:
        centroid = np.array(mesh.elements_list[elem.elem_id].centroid())
        for face in range(3):
            fe = HelmholtzFaceElement(elem, face)
            x = fe.interpolated_x(0.0)
            assert np.dot(fe.outer_unit_normal(0.0), x - centroid) > 0
    # hypotenuse of the first triangle has length sqrt(2): J = sqrt(2)/2
    fe = HelmholtzFaceElement(bulk[0], 2)
    assert np.isclose(fe.J_eulerian(0.2), np.sqrt(2) / 2)


def test_face_and_bulk_interpolation_agree():
    mesh = meridional_annulus(1.0, 2.0, n_theta=4, n_radial=1, poly_order=2)
    dh = DofHandler(mesh)
    dh.set_complex_field(lambda r, z: np.exp(1j * np.hypot(r, z)) * (1 + r * z), (0, 1))
    bulk = build_bulk_elements(mesh, dh)
    for edge in mesh.boundary_edges('outer'):
        fe = HelmholtzFaceElement(bulk[edge.left], edge.lid)
        for s in np.linspace(-1, 1, 7):
            u_face = fe.interpolated_u_helmholtz(s)
            u_bulk = bulk[edge.left].interpolated_u_helmholtz(fe.local_coordinate_in_bulk(s))
            assert abs(u_face - u_bulk) < 1e-12


def test_face_nodes_follow_edge_nodes():
    nodes, elems, _, corners = structured_quad(1.0, 1.0, nx=2, ny=2, poly_order=3)
    mesh = Mesh(nodes, elems, corners, element_type='quad', poly_order=3)
    bulk = build_bulk_elements(mesh, DofHandler(mesh))
    for edge in mesh.boundary_edges():
        fe = HelmholtzFaceElement(bulk[edge.left], edge.lid)
        ids = [bulk[edge.left].node_ids[k] for k in fe.bulk_node_numbers]
        assert tuple(ids) == edge.all_nodes


def test_construction_errors(square):
    mesh, dh, bulk = square
    with pytest.raises(ConfigurationError, match="Must supply bulk element and face index"):
        HelmholtzFaceElement()
    with pytest.raises(ConfigurationError):
        HelmholtzFaceElement(bulk)
    with pytest.raises(ConfigurationError):
        HelmholtzFaceElement(LagrangeElement(mesh, 0, dh), 0)
    for bad in (4, -1, 1.0):
        with pytest.raises(ConfigurationError):
            HelmholtzFluxElement(bulk, bad)
    with pytest.raises(ConfigurationError):
        HelmholtzFaceElement(bulk, 0, integration_rule=gauss_line(2).points)


def test_face_elements_cannot_be_copied(square):
    _, _, bulk = square
    fe = HelmholtzFluxElement(bulk, 1)
    with pytest.raises(ConfigurationError):
        copy.copy(fe)
    with pytest.raises(ConfigurationError):
        copy.deepcopy(fe)


def test_binding_reads_bulk_u_index():
    nodes, elems, _, corners = structured_quad(1.0, 1.0, nx=1, ny=1, poly_order=1, offset=(1.0, 0.0))
    mesh = Mesh(nodes, elems, corners)
    u_index = ComplexDofIndex(3, 1)
    bulk = build_bulk_elements(mesh, DofHandler(mesh, n_values=4), u_index)[0]
    fe = HelmholtzFaceElement(bulk, 2)
    assert fe.u_index_helmholtz() is u_index
    # default rule: poly_order + 2 points
    assert fe.integration_rule.nweight == 3


def test_collapsed_face_is_degenerate(square):
    mesh, _, bulk = square
    fe = HelmholtzFaceElement(bulk, 3)       # left side, nodes 3 -> 0
    mesh.nodes_x_y_pos[3] = mesh.nodes_x_y_pos[0]
    with pytest.raises(NumericalDegeneracyError):
        fe.J_eulerian(0.0)
    with pytest.raises(NumericalDegeneracyError):
        fe.shape_and_test_at_knot(0)
