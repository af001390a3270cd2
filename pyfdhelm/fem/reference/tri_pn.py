from functools import lru_cache
import sympy as sp

@lru_cache(maxsize=None)
def tri_pn(n: int, max_deriv_order: int = 2):
    """
    Lagrange P_n on the reference triangle (0,0)-(1,0)-(0,1).

    Nodes are ordered row by row (eta outer, xi inner), i.e. the k-th node of
    row j sits at (i/n, j/n) for i = 0..n-j.

    Returns:
        (shape_lambda, deriv_lambdas) with deriv_lambdas keyed by the
        multi-index (alpha_xi, alpha_eta), alpha_xi + alpha_eta <= max_deriv_order.
    """
    if n < 1:
        raise ValueError("Polynomial order must be a positive integer.")
    xi_sym, eta_sym = sp.symbols("xi eta")

    nodes = [(sp.Rational(i, n), sp.Rational(j, n))
             for j in range(n + 1) for i in range(n + 1 - j)]
    monomials = [xi_sym**p * eta_sym**(d - p)
                 for d in range(n + 1) for p in range(d + 1)]
    if len(monomials) != len(nodes):
        raise RuntimeError(f"Internal error: {len(nodes)} nodes but {len(monomials)} monomials for P{n}.")

    # Row k of V holds the monomials evaluated at node k; phi = V^{-T} m.
    V = sp.Matrix([[m.subs({xi_sym: a, eta_sym: b}) for m in monomials] for a, b in nodes])
    if V.det() == 0:
        raise RuntimeError(f"Vandermonde matrix is singular for tri_pn order n={n}.")
    coeffs = V.T.inv()
    m_col = sp.Matrix(monomials)
    basis = [sp.expand((coeffs.row(k) * m_col)[0, 0]) for k in range(len(nodes))]

    shape_lambda = sp.lambdify((xi_sym, eta_sym), sp.Matrix(basis), "numpy")
    deriv_lambdas = {}
    for a in range(max_deriv_order + 1):
        for b in range(max_deriv_order + 1 - a):
            d = [sp.diff(phi, xi_sym, a, eta_sym, b) for phi in basis]
            deriv_lambdas[(a, b)] = sp.lambdify((xi_sym, eta_sym), sp.Matrix(d), "numpy")
    return shape_lambda, deriv_lambdas
