import numpy as np
import pytest
from numpy.testing import assert_allclose

from pyfdhelm.core import Mesh, Node, DofHandler
from pyfdhelm.errors import ConfigurationError, NumericalDegeneracyError
from pyfdhelm.fem.flux_elements import HelmholtzFluxElement
from pyfdhelm.fem.helmholtz import ComplexDofIndex, build_bulk_elements
from pyfdhelm.integration import IntegrationRule, gauss_line
from pyfdhelm.assembly import build_face_elements, assemble_residual
from pyfdhelm.utils.meshgen import meridional_annulus


@pytest.fixture
def square():
    """Single Q1 element with corners (2,0), (4,0), (4,2), (2,2)."""
    nodes = [Node(i, float(x), float(y)) for i, (x, y) in enumerate([(2, 0), (4, 0), (4, 2), (2, 2)])]
    mesh = Mesh(nodes, np.array([[0, 1, 3, 2]]), np.array([[0, 1, 2, 3]]), element_type='quad')
    dh = DofHandler(mesh)
    return mesh, dh, build_bulk_elements(mesh, dh)[0]


def test_single_point_flux_contribution(square):
    mesh, dh, bulk = square
    dh.pin([0, 1, 2])                  # only node 3 at (2,2) stays free
    assert dh.eqn_number(3, 0) == 0 and dh.eqn_number(3, 1) == 1
    fe = HelmholtzFluxElement(bulk, 3, flux_fct=lambda r, z: 3 - 4j)
    rule = IntegrationRule([[-1.0]], [1.0])    # face node 0 = (2,2), r = 2, J = 1
    residuals = np.zeros(dh.n_dofs)
    fe.fill_in_contribution_to_residuals(residuals, rule)
    assert_allclose(residuals, [-6.0, 8.0])


def test_null_flux_contributes_nothing(square):
    mesh, dh, bulk = square
    fe = HelmholtzFluxElement(bulk, 1)
    assert fe.flux_fct is None and fe.get_flux((3.0, 1.0)) == 0j
    residuals = np.zeros(dh.n_dofs)
    fe.fill_in_contribution_to_residuals(residuals)
    assert np.all(residuals == 0.0)


def test_pinned_face_nodes_leave_residual_untouched(square):
    mesh, dh, bulk = square
    dh.pin([0, 3])                     # both nodes of the left face
    fe = HelmholtzFluxElement(bulk, 3, flux_fct=lambda r, z: 1 + 1j)
    residuals = np.arange(dh.n_dofs, dtype=float)
    fe.fill_in_contribution_to_residuals(residuals)
    assert_allclose(residuals, np.arange(dh.n_dofs))


def test_constant_flux_integrates_r_ds(square):
    mesh, dh, bulk = square
    c = 0.5 - 2.0j
    fe = HelmholtzFluxElement(bulk, 3, flux_fct=lambda r, z: c)
    residuals = np.zeros(dh.n_dofs)
    fe.fill_in_contribution_to_residuals(residuals)
    re_eqns = dh.eqn_numbers[:, 0]
    im_eqns = dh.eqn_numbers[:, 1]
    # left face: r = 2, length 2
    assert np.isclose(residuals[re_eqns].sum(), -4.0 * c.real)
    assert np.isclose(residuals[im_eqns].sum(), -4.0 * c.imag)
    # nodes off the face receive nothing
    assert residuals[dh.eqn_numbers[1]].tolist() == [0.0, 0.0]


def test_flux_callback_receives_r_and_z(square):
    mesh, dh, bulk = square
    seen = []
    def flux(r, z):
        seen.append((r, z))
        return z
    fe = HelmholtzFluxElement(bulk, 2, flux_fct=flux)
    residuals = np.zeros(dh.n_dofs)
    fe.fill_in_contribution_to_residuals(residuals)
    # top face z = 2, r in [2, 4]: -∫ 2 r ds = -12, split between the two top nodes
    assert np.isclose(residuals[dh.eqn_numbers[:, 0]].sum(), -12.0)
    assert all(np.isclose(z, 2.0) for _, z in seen)
    assert all(2.0 <= r <= 4.0 for r, _ in seen)


def test_explicit_rule_matches_own_rule(square):
    mesh, dh, bulk = square
    fe = HelmholtzFluxElement(bulk, 0, flux_fct=lambda r, z: r**2 + 1j * r)
    own = np.zeros(dh.n_dofs)
    fe.fill_in_contribution_to_residuals(own)
    other = np.zeros(dh.n_dofs)
    fe.fill_in_contribution_to_residuals(other, gauss_line(3))
    assert_allclose(own, other, rtol=1e-14, atol=1e-14)


def test_jacobian_contribution_is_zero(square):
    mesh, dh, bulk = square
    fe = HelmholtzFluxElement(bulk, 0, flux_fct=lambda r, z: 1.0)
    Ke = fe.jacobian_contribution()
    assert Ke.shape == (4, 4) and not Ke.any()
    residuals = np.zeros(dh.n_dofs)
    jac = np.zeros((dh.n_dofs, dh.n_dofs))
    fe.fill_in_contribution_to_jacobian(residuals, jac)
    assert not jac.any()
    assert residuals.any()


def test_flux_function_validation(square):
    _, _, bulk = square
    with pytest.raises(ConfigurationError):
        HelmholtzFluxElement(bulk, 0, flux_fct=3.0)
    fe = HelmholtzFluxElement(bulk, 0)
    fe.flux_fct = lambda r, z: 2j
    assert fe.get_flux((1.0, 0.0)) == 2j
    fe.set_flux_fct(None)
    assert fe.get_flux((1.0, 0.0)) == 0j
    with pytest.raises(ConfigurationError):
        fe.set_flux_fct("flux")


def test_degenerate_face_leaves_residual_untouched(square):
    mesh, dh, bulk = square
    fe = HelmholtzFluxElement(bulk, 3, flux_fct=lambda r, z: 1.0)
    mesh.nodes_x_y_pos[3] = mesh.nodes_x_y_pos[0]
    residuals = np.ones(dh.n_dofs)
    with pytest.raises(NumericalDegeneracyError):
        fe.fill_in_contribution_to_residuals(residuals)
    assert np.all(residuals == 1.0)


def test_constant_flux_on_curved_outer_boundary():
    R = 1.5
    mesh = meridional_annulus(1.0, R, n_theta=24, n_radial=2, poly_order=2)
    u_index = ComplexDofIndex(1, 0)
    dh = DofHandler(mesh)
    bulk = build_bulk_elements(mesh, dh, u_index)
    c = 2.0 + 0.5j
    faces = build_face_elements(mesh, bulk, 'outer', HelmholtzFluxElement, flux_fct=lambda r, z: c)
    assert len(faces) == 24
    residuals = assemble_residual(faces, dh.n_dofs)
    # ∫ r ds over the outer half circle = 2 R^2
    assert np.isclose(residuals[dh.eqn_numbers[:, u_index.real]].sum(), -2 * R**2 * c.real, rtol=1e-3)
    assert np.isclose(residuals[dh.eqn_numbers[:, u_index.imag]].sum(), -2 * R**2 * c.imag, rtol=1e-3)


def test_reassigned_rule_replaces_tabulated_knots(square):
    mesh, dh, bulk = square
    fe = HelmholtzFluxElement(bulk, 2, flux_fct=lambda r, z: r)
    first = np.zeros(dh.n_dofs)
    fe.fill_in_contribution_to_residuals(first)
    fe.integration_rule = gauss_line(5)
    own = np.zeros(dh.n_dofs)
    fe.fill_in_contribution_to_residuals(own)
    explicit = np.zeros(dh.n_dofs)
    fe.fill_in_contribution_to_residuals(explicit, gauss_line(5))
    assert_allclose(own, explicit, rtol=1e-13, atol=1e-13)
    assert_allclose(own, first, rtol=1e-13, atol=1e-13)    # r^2 * test is exact either way
    with pytest.raises(ConfigurationError):
        fe.integration_rule = IntegrationRule([[0.0, 0.0]], [4.0])
    assert fe.integration_rule.nweight == 5
