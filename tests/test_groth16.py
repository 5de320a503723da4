import random

import pytest
from py_ecc.optimized_bn128 import G1, Z1, curve_order, field_modulus, is_inf, multiply, normalize
from py_ecc.optimized_bn128 import optimized_curve as curve

from conftest import SharedSumCircuit, cube_system

from r1cs_snark import (
    ConstraintMatrices,
    InvalidProofEncoding,
    OptimizationGoal,
    Proof,
    PublicInputLengthError,
    SetupError,
    WitnessInconsistencyError,
    build,
    create_proof_with_blinding,
    cube_output,
    extract_matrices,
    prepare_verifying_key,
    prove,
    rerandomize_proof,
    setup,
    verify,
    verify_proof,
)


class ExhaustedRng:
    def randrange(self, start, stop):
        raise StopIteration


class ForbiddenRng:
    def randrange(self, start, stop):
        raise AssertionError("randomness drawn for an invalid witness")


def affine(proof):
    return normalize(proof.A), normalize(proof.B), normalize(proof.C)


def test_round_trip(cube_keys, cube_proof):
    _, vk = cube_keys
    assert verify(vk, [35], cube_proof)


def test_wrong_public_input_is_rejected(cube_keys, cube_proof):
    _, vk = cube_keys
    assert verify(vk, [36], cube_proof) is False


def test_keys_are_reused_across_witnesses(cube_keys):
    pk, vk = cube_keys
    cs = cube_system(5)
    extract_matrices(cs)
    proof = prove(pk, cs.full_assignment(), random.Random(7))
    assert verify(vk, [cube_output(5)], proof)


def test_fresh_blinding_gives_distinct_valid_proofs(cube_keys, cube_proof):
    pk, vk = cube_keys
    z = cube_system(3).full_assignment()
    other = prove(pk, z, random.Random(100))
    assert affine(other) != affine(cube_proof)
    assert verify(vk, [35], other)


def test_blinding_is_deterministic_given_scalars(cube_keys):
    pk, _ = cube_keys
    z = cube_system(3).full_assignment()
    first = create_proof_with_blinding(pk, z, 11, 13)
    second = create_proof_with_blinding(pk, z, 11, 13)
    assert affine(first) == affine(second)


def test_unsatisfying_witness_fails_before_drawing_randomness(cube_keys):
    pk, _ = cube_keys
    with pytest.raises(WitnessInconsistencyError) as excinfo:
        prove(pk, [1, 36, 3, 9, 27], ForbiddenRng())
    assert excinfo.value.row == 2


def test_witness_of_wrong_length_is_rejected(cube_keys):
    pk, _ = cube_keys
    with pytest.raises(WitnessInconsistencyError):
        prove(pk, [1, 35, 3], ForbiddenRng())


def test_public_input_length_mismatch(cube_keys, cube_proof):
    _, vk = cube_keys
    assert vk.num_public_inputs == 1
    with pytest.raises(PublicInputLengthError):
        verify(vk, [35, 1], cube_proof)
    with pytest.raises(PublicInputLengthError):
        verify(vk, [], cube_proof)


def test_malformed_elements_are_rejected(cube_keys, cube_proof):
    _, vk = cube_keys
    with pytest.raises(InvalidProofEncoding):
        verify(vk, [35], Proof((1, 2, 3), cube_proof.B, cube_proof.C))
    with pytest.raises(InvalidProofEncoding):
        verify(vk, [35], Proof(cube_proof.A, cube_proof.A, cube_proof.C))
    with pytest.raises(InvalidProofEncoding):
        verify(vk, [35], Proof((curve.FQ(1), curve.FQ(1), curve.FQ(1)), cube_proof.B, cube_proof.C))
    with pytest.raises(InvalidProofEncoding):
        verify(vk, [35], Proof(Z1, cube_proof.B, cube_proof.C))
    with pytest.raises(InvalidProofEncoding):
        verify(vk, [35], "not a proof")


def twist_point_outside_subgroup():
    # y^2 = x^3 + b2 over FQ2, square root for p = 3 mod 4
    q = field_modulus
    one = curve.FQ2.one()
    for k in range(1, 100):
        x = curve.FQ2([k, 1])
        rhs = x ** 3 + curve.b2
        a1 = rhs ** ((q - 3) // 4)
        alpha = a1 * a1 * rhs
        x0 = a1 * rhs
        if alpha == -one:
            y = curve.FQ2([0, 1]) * x0
        else:
            y = (one + alpha) ** ((q - 1) // 2) * x0
        if y * y == rhs:
            return (x, y, one)
    raise AssertionError("no twist point found")


def test_b_outside_prime_order_subgroup_is_rejected(cube_keys, cube_proof):
    _, vk = cube_keys
    point = twist_point_outside_subgroup()
    assert curve.is_on_curve(point, curve.b2)
    assert not is_inf(multiply(point, curve_order))
    with pytest.raises(InvalidProofEncoding):
        verify(vk, [35], Proof(cube_proof.A, point, cube_proof.C))


def test_tampered_proof_verifies_false(cube_keys, cube_proof):
    _, vk = cube_keys
    forged = Proof(cube_proof.A, cube_proof.B, multiply(G1, 5))
    assert verify(vk, [35], forged) is False


def test_prepared_key_matches_plain_verify(cube_keys, cube_proof):
    _, vk = cube_keys
    pvk = prepare_verifying_key(vk)
    assert verify_proof(pvk, [35], cube_proof)
    assert not verify_proof(pvk, [34], cube_proof)


def test_rerandomized_proof_still_verifies(cube_keys, cube_proof):
    _, vk = cube_keys
    fresh = rerandomize_proof(vk, cube_proof, random.Random(5))
    assert affine(fresh) != affine(cube_proof)
    assert verify(vk, [35], fresh)


def test_keys_are_immutable(cube_keys):
    pk, vk = cube_keys
    with pytest.raises(AttributeError):
        vk.alpha_G1 = G1
    with pytest.raises(AttributeError):
        pk.delta_G1 = G1
    assert isinstance(vk.K_gamma_G1, tuple)
    assert len(vk.K_gamma_G1) == 2
    assert len(pk.K_delta_G1) == 3
    assert len(pk.tau_G1) == 3
    assert len(pk.target_G1) == 2


def test_setup_rejects_empty_matrices():
    with pytest.raises(SetupError):
        setup(ConstraintMatrices(1, 0, 0, (), (), ()))


def test_setup_reports_exhausted_randomness(cube_matrices):
    with pytest.raises(SetupError):
        setup(cube_matrices, ExhaustedRng())


def test_outlined_circuit_round_trip():
    cs = build(SharedSumCircuit(a=2, b=3, out=35), optimization_goal=OptimizationGoal.WEIGHT)
    matrices = extract_matrices(cs)
    pk, vk = setup(matrices, random.Random(3))
    proof = prove(pk, cs.full_assignment(), random.Random(4))
    assert verify(vk, cs.public_inputs(), proof)
