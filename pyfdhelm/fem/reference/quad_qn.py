from functools import lru_cache
import sympy as sp
import numpy as np

_x = sp.Symbol('x')


@lru_cache(maxsize=None)
def lagrange_basis_1d(n: int, max_deriv_order: int):
    """Equispaced Lagrange polynomials of degree ``n`` on [-1, 1].

    Returns ``(nodes, L, dL)``: the float nodes, the basis as numpy callables,
    and ``dL[k][i]``, the k-th derivative of ``L[i]``.
    """
    if n < 1:
        raise ValueError("Polynomial order must be a positive integer.")
    pts = [sp.Rational(2 * i, n) - 1 for i in range(n + 1)]
    polys = [
        sp.expand(sp.prod([(_x - pj) / (pi - pj) for pj in pts if pj != pi]))
        for pi in pts
    ]
    dL = {
        k: [sp.lambdify(_x, sp.diff(p, _x, k), 'numpy') for p in polys]
        for k in range(max_deriv_order + 1)
    }
    return np.linspace(-1.0, 1.0, n + 1), list(dL[0]), dL


def eval_1d(fns, z) -> np.ndarray:
    # constant lambdas return python scalars
    return np.array([f(z) for f in fns], dtype=float)


def _tensor(fx, fy):
    def evaluate(xi, eta):
        return np.kron(eval_1d(fy, eta), eval_1d(fx, xi))
    return evaluate


@lru_cache(maxsize=None)
def quad_qn(n: int, max_deriv_order: int = 2):
    """Q_n Lagrange basis on [-1, 1]^2 built from ``lagrange_basis_1d``.

    ``shape(xi, eta)`` and ``derivs[(ax, ay)](xi, eta)`` (ax + ay <= max_deriv_order)
    return ``(n+1)**2`` values; node ``j*(n+1) + i`` sits at (x_i, x_j).
    """
    _, _, dL = lagrange_basis_1d(n, max_deriv_order)
    derivs = {
        (ax, ay): _tensor(dL[ax], dL[ay])
        for ax in range(max_deriv_order + 1)
        for ay in range(max_deriv_order + 1 - ax)
    }
    return derivs[(0, 0)], derivs
