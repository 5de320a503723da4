import pytest

from conftest import SharedSumCircuit, cube_system

from r1cs_snark import (
    ConstraintMatrices,
    ConstraintSystem,
    CubeCircuit,
    MatrixExtractionError,
    OptimizationGoal,
    SynthesisMode,
    WitnessInconsistencyError,
    build,
    extract_matrices,
)
from r1cs_snark.field import FP, p


def as_ints(matrix):
    return [[(int(coeff), col) for coeff, col in row] for row in matrix]


def assert_shape(matrices):
    for matrix in (matrices.a, matrices.b, matrices.c):
        assert len(matrix) == matrices.num_constraints
        for row in matrix:
            assert all(0 <= col < matrices.num_columns for _, col in row)


def test_cube_matrices_match_expected_rows(cube_matrices):
    assert as_ints(cube_matrices.a) == [
        [(1, 2)],
        [(1, 3)],
        [(5, 0), (p - 1, 1), (1, 2), (1, 4)],
    ]
    assert as_ints(cube_matrices.b) == [[(1, 2)], [(1, 2)], [(1, 0)]]
    assert as_ints(cube_matrices.c) == [[(1, 3)], [(1, 4)], []]


def test_cube_matrix_shape(cube_matrices):
    assert cube_matrices.num_constraints == 3
    assert cube_matrices.num_instance_variables == 2
    assert cube_matrices.num_witness_variables == 3
    assert cube_matrices.num_columns == 5
    assert cube_matrices.a_num_non_zero == 6
    assert cube_matrices.b_num_non_zero == 3
    assert cube_matrices.c_num_non_zero == 2
    assert_shape(cube_matrices)


@pytest.mark.parametrize("x", [1, 3, 100])
def test_columns_match_witness_length(x):
    cs = cube_system(x)
    matrices = extract_matrices(cs)
    assert matrices.num_columns == len(cs.full_assignment())
    assert matrices.is_satisfied(cs.full_assignment())


def test_matrices_do_not_depend_on_witness():
    first = extract_matrices(cube_system(3))
    second = extract_matrices(cube_system(8))
    assert as_ints(first.a) == as_ints(second.a)
    assert as_ints(first.b) == as_ints(second.b)
    assert as_ints(first.c) == as_ints(second.c)


def test_shape_only_mode_gives_same_matrices(cube_matrices):
    shape = extract_matrices(build(CubeCircuit(), mode=SynthesisMode.SETUP))
    assert shape.num_columns == cube_matrices.num_columns
    assert as_ints(shape.a) == as_ints(cube_matrices.a)
    assert as_ints(shape.b) == as_ints(cube_matrices.b)
    assert as_ints(shape.c) == as_ints(cube_matrices.c)


def test_extraction_is_repeatable():
    cs = cube_system(3)
    first = extract_matrices(cs)
    second = extract_matrices(cs)
    assert cs.is_finalized
    assert as_ints(first.a) == as_ints(second.a)
    assert first.num_columns == second.num_columns


def test_empty_system_cannot_be_extracted():
    cs = ConstraintSystem()
    cs.allocate_public(1)
    with pytest.raises(MatrixExtractionError):
        extract_matrices(cs)
    assert not cs.is_finalized


def test_to_matrices_requires_finalized_system(cube_cs):
    with pytest.raises(MatrixExtractionError):
        cube_cs.to_matrices()


def test_flipped_vector_is_rejected(cube_matrices):
    z = FP([1, 35, 3, 9, 27])
    assert cube_matrices.is_satisfied(z)
    for i in range(len(z)):
        flipped = z.copy()
        flipped[i] = flipped[i] + FP(1)
        assert not cube_matrices.is_satisfied(flipped)
    assert cube_matrices.which_is_unsatisfied([1, 36, 3, 9, 27]) == 2


def test_wrong_vector_length_is_rejected(cube_matrices):
    with pytest.raises(WitnessInconsistencyError):
        cube_matrices.is_satisfied([1, 35, 3, 9])


def test_to_dense(cube_matrices):
    L, R, O = cube_matrices.to_dense()
    assert L.shape == R.shape == O.shape == (3, 5)
    assert int(L[2, 1]) == p - 1
    assert int(L[2, 0]) == 5
    assert int(O[2].sum()) == 0
    z = FP([1, 35, 3, 9, 27])
    assert ((L @ z) * (R @ z) == O @ z).all()


def test_constraints_goal_inlines_shared_lc():
    cs = build(SharedSumCircuit(a=2, b=3, out=35))
    matrices = extract_matrices(cs)
    assert matrices.num_constraints == 3
    assert matrices.num_columns == 6
    assert as_ints(matrices.a)[0] == [(1, 2), (1, 3)]
    assert matrices.is_satisfied(cs.full_assignment())


def test_weight_goal_outlines_shared_lc():
    cs = build(SharedSumCircuit(a=2, b=3, out=35), optimization_goal=OptimizationGoal.WEIGHT)
    matrices = extract_matrices(cs)
    z = cs.full_assignment()

    assert matrices.num_constraints == 4
    assert matrices.num_columns == len(z) == 7
    assert int(z[6]) == 5
    assert as_ints(matrices.a) == [
        [(1, 6)],
        [(1, 6)],
        [(p - 1, 1), (1, 4), (1, 5)],
        [(1, 2), (1, 3)],
    ]
    assert as_ints(matrices.b) == [[(1, 6)], [(1, 2)], [(1, 0)], [(1, 0)]]
    assert as_ints(matrices.c) == [[(1, 4)], [(1, 5)], [], [(1, 6)]]
    assert matrices.is_satisfied(z)
    assert_shape(matrices)


def test_weight_goal_in_setup_mode_keeps_shape():
    proving = extract_matrices(
        build(SharedSumCircuit(a=2, b=3, out=35), optimization_goal=OptimizationGoal.WEIGHT)
    )
    shape = extract_matrices(
        build(
            SharedSumCircuit(),
            mode=SynthesisMode.SETUP,
            optimization_goal=OptimizationGoal.WEIGHT,
        )
    )
    assert shape.num_columns == proving.num_columns
    assert as_ints(shape.a) == as_ints(proving.a)
    assert as_ints(shape.c) == as_ints(proving.c)


def test_matrices_are_immutable(cube_matrices):
    with pytest.raises(AttributeError):
        cube_matrices.num_constraints = 4
    assert isinstance(cube_matrices, ConstraintMatrices)
