import numpy as np
import pytest
from pyfdhelm.integration import quadrature as q
from pyfdhelm.integration import IntegrationRule

def integrate_ref(rule, func):
    fvals = np.array([func(xy) for xy in rule.points])
    return (fvals * rule.weights).sum()

def test_constant_volume():
    for et in ('tri','quad'):
        rule = q.volume(et, 3)
        exact = 0.5 if et=='tri' else 4.0
        assert np.isclose(rule.weights.sum(), exact, rtol=1e-12)

def test_linear_exact_tri():
    # ∫_T xi dA over the reference triangle = 1/6
    val = integrate_ref(q.volume('tri', 4), lambda xy: xy[0])
    assert np.isclose(val, 1/6, rtol=1e-12)

def test_gauss_line_exact_for_degree_2n_minus_1():
    rule = q.gauss_line(3)
    assert rule.nweight == 3 and rule.dim == 1
    val = integrate_ref(rule, lambda s: s[0]**5 + s[0]**4)
    assert np.isclose(val, 2/5, rtol=1e-12)

def test_edge_rule_lengths():
    for e in range(4):
        assert np.isclose(q.edge('quad', e, 3).weights.sum(), 2.0, rtol=1e-12)
    lengths = [q.edge('tri', e, 3).weights.sum() for e in range(3)]
    assert np.allclose(lengths, [1.0, np.sqrt(2.0), 1.0], rtol=1e-12)

def test_edge_rule_points_lie_on_face():
    pts = q.edge('quad', 1, 4).points
    assert np.allclose(pts[:, 0], 1.0)
    pts = q.edge('tri', 1, 4).points
    assert np.allclose(pts.sum(axis=1), 1.0)

def test_edge_rule_bad_index():
    with pytest.raises(IndexError):
        q.edge('tri', 3, 2)
    with pytest.raises(KeyError):
        q.edge('hex', 0, 2)

def test_rule_accessors_and_flat_points():
    rule = IntegrationRule([-0.5, 0.5], [1.0, 1.0])
    assert rule.points.shape == (2, 1)
    assert rule.knot(1, 0) == 0.5
    assert rule.weight(0) == 1.0
    assert len(rule) == 2
    assert [float(w) for _, w in rule] == [1.0, 1.0]

def test_rule_copies_and_freezes_input():
    pts = np.array([[0.0]])
    rule = IntegrationRule(pts, [2.0])
    pts[0, 0] = 9.0
    assert rule.knot(0, 0) == 0.0
    with pytest.raises(ValueError):
        rule.points[0, 0] = 1.0

def test_rule_size_mismatch():
    with pytest.raises(ValueError):
        IntegrationRule([[0.0], [0.1]], [1.0])
