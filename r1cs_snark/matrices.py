"""
matrices.py

Sparse R1CS matrices extracted from a finalized constraint system.

Each matrix is a tuple of rows, each row a tuple of (coefficient, column)
pairs where column indexes the vector z = [1, public..., witness...].
Row i of A, B and C together encode constraint i, in insertion order.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import MatrixExtractionError, WitnessInconsistencyError
from .field import FP, field_vector

logger = logging.getLogger(__name__)

Row = Tuple[Tuple[FP, int], ...]
SparseMatrix = Tuple[Row, ...]


def evaluate_row(row: Row, z) -> FP:
    acc = FP(0)
    for coeff, col in row:
        acc = acc + coeff * z[col]
    return acc


def _num_non_zero(matrix: SparseMatrix) -> int:
    return sum(len(row) for row in matrix)


@dataclass(frozen=True)
class ConstraintMatrices:
    num_instance_variables: int
    num_witness_variables: int
    num_constraints: int
    a: SparseMatrix
    b: SparseMatrix
    c: SparseMatrix

    @property
    def num_columns(self):
        return self.num_instance_variables + self.num_witness_variables

    @property
    def a_num_non_zero(self):
        return _num_non_zero(self.a)

    @property
    def b_num_non_zero(self):
        return _num_non_zero(self.b)

    @property
    def c_num_non_zero(self):
        return _num_non_zero(self.c)

    def _coerce(self, z):
        if not isinstance(z, FP):
            z = field_vector(z)
        if len(z) != self.num_columns:
            raise WitnessInconsistencyError(
                f"witness vector has length {len(z)}, expected {self.num_columns}"
            )
        return z

    def which_is_unsatisfied(self, z) -> Optional[int]:
        z = self._coerce(z)
        for i, (a, b, c) in enumerate(zip(self.a, self.b, self.c)):
            if evaluate_row(a, z) * evaluate_row(b, z) != evaluate_row(c, z):
                return i
        return None

    def is_satisfied(self, z) -> bool:
        return self.which_is_unsatisfied(z) is None

    def _dense(self, matrix: SparseMatrix):
        out = FP.Zeros((self.num_constraints, self.num_columns))
        for i, row in enumerate(matrix):
            for coeff, col in row:
                out[i, col] = coeff
        return out

    def to_dense(self):
        """(L, R, O) as FP arrays of shape (constraints, columns)."""
        return self._dense(self.a), self._dense(self.b), self._dense(self.c)


def _check_shape(matrices: ConstraintMatrices):
    for name in ("a", "b", "c"):
        matrix = getattr(matrices, name)
        if len(matrix) != matrices.num_constraints:
            raise MatrixExtractionError(
                f"matrix {name.upper()} has {len(matrix)} rows, expected {matrices.num_constraints}"
            )
        for row in matrix:
            for _, col in row:
                if not 0 <= col < matrices.num_columns:
                    raise MatrixExtractionError(
                        f"matrix {name.upper()} references column {col} outside z"
                    )


def extract_matrices(cs) -> ConstraintMatrices:
    """
    Inline all linear combinations of `cs`, finalize it and return (A, B, C).

    The constraint system is finalized by this call: no further variables or
    constraints can be added afterwards.
    """
    if cs.num_constraints == 0:
        raise MatrixExtractionError("constraint system has no constraints")
    cs.finalize()
    matrices = cs.to_matrices()
    _check_shape(matrices)
    logger.debug(
        "extracted %d x %d matrices (nnz A=%d B=%d C=%d)",
        matrices.num_constraints,
        matrices.num_columns,
        matrices.a_num_non_zero,
        matrices.b_num_non_zero,
        matrices.c_num_non_zero,
    )
    return matrices
