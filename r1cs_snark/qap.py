"""
qap.py

Quadratic arithmetic program built from R1CS matrices.

Constraint i is attached to the domain point x = i + 1. Every column m of
the matrices becomes a polynomial through the points (i + 1, M[i][m]), and
the vanishing polynomial T(x) = (x - 1)(x - 2)...(x - n) is zero on the
whole domain, so a witness satisfies every row iff T divides U*V - W.
"""

import logging

import galois
import numpy as np
from galois import Poly

from .errors import WitnessInconsistencyError
from .field import FP, p
from .matrices import ConstraintMatrices

logger = logging.getLogger(__name__)


def vanishing_poly(n: int) -> Poly:
    T = galois.Poly([1, p - 1], field=FP)
    for i in range(2, n + 1):
        T *= galois.Poly([1, p - i], field=FP)
    return T


def lagrange_basis(n: int):
    """Row j holds the ascending coefficients of the Lagrange polynomial of point j + 1."""
    points_x = FP(np.arange(1, n + 1))
    basis = FP.Zeros((n, n))
    for j in range(n):
        points_y = FP.Zeros(n)
        points_y[j] = 1
        poly = galois.lagrange_poly(points_x, points_y)
        basis[j, :] = poly.coefficients(n, order="asc")
    return basis


def to_poly(mtx):
    poly_list = []
    for i in range(0, mtx.shape[0]):
        poly_list.append(Poly(mtx[i][::-1]))
    return poly_list


def evaluate_poly_list(poly_list, x):
    results = []
    for poly in poly_list:
        results.append(poly(x))
    return results


class QAP:
    def __init__(self, L, R, O, T: Poly, num_instance_variables: int):
        # L, R, O: one row of ascending coefficients per column of z
        self.L = L
        self.R = R
        self.O = O
        self.T = T
        self.num_instance_variables = num_instance_variables

    @classmethod
    def from_matrices(cls, matrices: ConstraintMatrices) -> "QAP":
        n = matrices.num_constraints
        basis = lagrange_basis(n)
        A, B, C = matrices.to_dense()
        logger.debug("interpolating %d columns over a domain of size %d", matrices.num_columns, n)
        return cls(
            A.T @ basis,
            B.T @ basis,
            C.T @ basis,
            vanishing_poly(n),
            matrices.num_instance_variables,
        )

    @property
    def domain_size(self):
        return self.T.degree

    @property
    def num_columns(self):
        return self.L.shape[0]

    def witness_polys(self, w):
        """
        Combine the column polynomials with the witness vector.

        Return:
            U, V, W, H with U*V - W = H*T
        """
        U = Poly((w @ self.L)[::-1])
        V = Poly((w @ self.R)[::-1])
        W = Poly((w @ self.O)[::-1])

        H = (U * V - W) // self.T
        rem = (U * V - W) % self.T

        if rem != Poly.Zero(field=FP):
            raise WitnessInconsistencyError("U * V - W is not divisible by the vanishing polynomial")
        return U, V, W, H
