"""
groth16.py

Groth16 setup, prove and verify over BN254.

Columns of z are split at the instance boundary: the constant and the
public inputs are committed on the gamma side (verifying key), the private
witnesses on the delta side (proving key). The verifier checks

    e(A, B) == e(alpha, beta) * e(sum x_i K_gamma_i, gamma) * e(C, delta)
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Tuple

from py_ecc.optimized_bn128 import optimized_curve as curve
from py_ecc.optimized_bn128 import (
    G1,
    G2,
    Z1,
    Z2,
    add,
    curve_order,
    is_inf,
    multiply,
    pairing,
)

from .errors import (
    InvalidProofEncoding,
    PublicInputLengthError,
    SetupError,
    WitnessInconsistencyError,
)
from .field import FP, random_scalar, to_field
from .matrices import ConstraintMatrices
from .qap import QAP, evaluate_poly_list, to_poly
from .utils import evaluate_poly, vector_commit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvingKey:
    tau_G1: Tuple
    tau_G2: Tuple
    alpha_G1: Tuple
    beta_G1: Tuple
    beta_G2: Tuple
    delta_G1: Tuple
    delta_G2: Tuple
    K_delta_G1: Tuple
    target_G1: Tuple
    qap: QAP
    matrices: ConstraintMatrices


@dataclass(frozen=True)
class VerifyingKey:
    alpha_G1: Tuple
    beta_G2: Tuple
    gamma_G2: Tuple
    delta_G2: Tuple
    K_gamma_G1: Tuple

    @property
    def num_public_inputs(self):
        # K_gamma_G1[0] belongs to the constant column
        return len(self.K_gamma_G1) - 1


@dataclass(frozen=True)
class PreparedVerifyingKey:
    vk: VerifyingKey
    alpha_beta: object


@dataclass(frozen=True)
class Proof:
    A: Tuple
    B: Tuple
    C: Tuple


def resolve_rng(rng):
    return rng if rng is not None else secrets.SystemRandom()


def draw_scalars(rng, count):
    rng = resolve_rng(rng)
    return [random_scalar(rng) for _ in range(count)]


def assemble_keys(
    qap: QAP,
    matrices: ConstraintMatrices,
    tau_G1,
    tau_G2,
    alpha_G1,
    beta_G1,
    beta_G2,
    gamma_G2,
    delta_G1,
    delta_G2,
    K_gamma_G1,
    K_delta_G1,
    target_G1,
):
    pk = ProvingKey(
        tuple(tau_G1),
        tuple(tau_G2),
        alpha_G1,
        beta_G1,
        beta_G2,
        delta_G1,
        delta_G2,
        tuple(K_delta_G1),
        tuple(target_G1),
        qap,
        matrices,
    )
    vk = VerifyingKey(alpha_G1, beta_G2, gamma_G2, delta_G2, tuple(K_gamma_G1))
    return pk, vk


def _generate_keys(qap: QAP, matrices: ConstraintMatrices, alpha, beta, gamma, delta, tau):
    l = qap.num_instance_variables

    beta_L = beta * qap.L
    alpha_R = alpha * qap.R
    K = beta_L + alpha_R + qap.O
    Kp = to_poly(K)
    K_eval = evaluate_poly_list(Kp, tau)

    T_tau = qap.T(tau)

    pow_tauTtau_div_delta = [
        (tau ** i * T_tau) / delta for i in range(0, qap.T.degree - 1)
    ]
    target_G1 = [multiply(G1, int(pTd)) for pTd in pow_tauTtau_div_delta]

    K_gamma, K_delta = [k / gamma for k in K_eval[:l]], [k / delta for k in K_eval[l:]]

    # generating SRS
    tau_G1 = [multiply(G1, int(tau ** i)) for i in range(0, qap.T.degree)]
    tau_G2 = [multiply(G2, int(tau ** i)) for i in range(0, qap.T.degree)]
    alpha_G1 = multiply(G1, int(alpha))
    beta_G1 = multiply(G1, int(beta))
    beta_G2 = multiply(G2, int(beta))
    gamma_G2 = multiply(G2, int(gamma))
    delta_G1 = multiply(G1, int(delta))
    delta_G2 = multiply(G2, int(delta))
    K_gamma_G1 = [multiply(G1, int(k)) for k in K_gamma]
    K_delta_G1 = [multiply(G1, int(k)) for k in K_delta]

    return assemble_keys(
        qap,
        matrices,
        tau_G1,
        tau_G2,
        alpha_G1,
        beta_G1,
        beta_G2,
        gamma_G2,
        delta_G1,
        delta_G2,
        K_gamma_G1,
        K_delta_G1,
        target_G1,
    )


def setup(matrices: ConstraintMatrices, rng=None):  # -> (ProvingKey, VerifyingKey)
    """
    Generate a proving/verifying key pair for the exact shape of `matrices`.

    The trapdoor (alpha, beta, gamma, delta, tau) only lives in this call's
    frame and is never logged or returned.
    """
    if matrices.num_constraints == 0 or matrices.num_columns == 0:
        raise SetupError("cannot run setup on empty matrices")
    qap = QAP.from_matrices(matrices)

    # generating toxic waste
    try:
        toxic_waste = draw_scalars(rng, 5)
    except (OSError, StopIteration, ValueError) as err:
        raise SetupError("randomness source is exhausted") from err
    try:
        pk, vk = _generate_keys(qap, matrices, *toxic_waste)
    finally:
        toxic_waste.clear()

    logger.debug(
        "setup done: %d tau powers, %d gamma queries, %d delta queries",
        len(pk.tau_G1),
        len(vk.K_gamma_G1),
        len(pk.K_delta_G1),
    )
    return pk, vk


def _check_witness(pk: ProvingKey, z):
    if not isinstance(z, FP):
        z = FP([int(to_field(v)) for v in z])
    row = pk.matrices.which_is_unsatisfied(z)
    if row is not None:
        raise WitnessInconsistencyError(f"witness does not satisfy constraint {row}", row=row)
    return z


def _create_proof(pk: ProvingKey, w, r, s):
    w_priv = w[pk.qap.num_instance_variables:]

    U, V, W, H = pk.qap.witness_polys(w)

    # [K/δ*w]G1
    Kw_delta_G1 = vector_commit(pk.K_delta_G1, w_priv, Z1)

    r_delta_G1 = multiply(pk.delta_G1, int(r))
    s_delta_G1 = multiply(pk.delta_G1, int(s))
    s_delta_G2 = multiply(pk.delta_G2, int(s))

    A_G1 = evaluate_poly(U, pk.tau_G1, Z1)
    A_G1 = add(A_G1, pk.alpha_G1)
    A_G1 = add(A_G1, r_delta_G1)

    B_G2 = evaluate_poly(V, pk.tau_G2, Z2)
    B_G2 = add(B_G2, pk.beta_G2)
    B_G2 = add(B_G2, s_delta_G2)

    B_G1 = evaluate_poly(V, pk.tau_G1, Z1)
    B_G1 = add(B_G1, pk.beta_G1)
    B_G1 = add(B_G1, s_delta_G1)

    As_G1 = multiply(A_G1, int(s))
    Br_G1 = multiply(B_G1, int(r))
    rs_delta_G1 = multiply(pk.delta_G1, int(-r * s))

    HT_G1 = evaluate_poly(H, pk.target_G1, Z1)

    C_G1 = add(Kw_delta_G1, HT_G1)
    C_G1 = add(C_G1, As_G1)
    C_G1 = add(C_G1, Br_G1)
    C_G1 = add(C_G1, rs_delta_G1)

    return Proof(A_G1, B_G2, C_G1)


def create_proof_with_blinding(pk: ProvingKey, z, r, s) -> Proof:
    """Prove with caller supplied blinding scalars. Never reuse (r, s) across proofs."""
    w = _check_witness(pk, z)
    return _create_proof(pk, w, to_field(r), to_field(s))


def prove(pk: ProvingKey, z, rng=None) -> Proof:
    w = _check_witness(pk, z)
    r, s = draw_scalars(rng, 2)
    proof = _create_proof(pk, w, r, s)
    logger.debug("proof created for %d columns", len(w))
    return proof


def _check_point(point, field_type, b, name, allow_identity=False):
    if (
        not isinstance(point, tuple)
        or len(point) != 3
        or not all(isinstance(c, field_type) for c in point)
    ):
        raise InvalidProofEncoding(f"{name} is not a valid group element")
    if not curve.is_on_curve(point, b):
        raise InvalidProofEncoding(f"{name} is not on the curve")
    if is_inf(point) and not allow_identity:
        raise InvalidProofEncoding(f"{name} is the point at infinity")


def _in_subgroup(point):
    return is_inf(multiply(point, curve_order))


def check_proof_encoding(proof: Proof):
    if not isinstance(proof, Proof):
        raise InvalidProofEncoding("not a proof")
    _check_point(proof.A, curve.FQ, curve.b, "A")
    _check_point(proof.B, curve.FQ2, curve.b2, "B")
    _check_point(proof.C, curve.FQ, curve.b, "C", allow_identity=True)
    # G1 has cofactor 1, G2 does not
    if not _in_subgroup(proof.B):
        raise InvalidProofEncoding("B is not in the prime order subgroup")


def prepare_verifying_key(vk: VerifyingKey) -> PreparedVerifyingKey:
    return PreparedVerifyingKey(vk, pairing(vk.beta_G2, vk.alpha_G1))


def verify_proof(pvk: PreparedVerifyingKey, public_inputs, proof: Proof) -> bool:
    vk = pvk.vk
    check_proof_encoding(proof)
    public_inputs = [to_field(x) for x in public_inputs]
    if len(public_inputs) != vk.num_public_inputs:
        raise PublicInputLengthError(vk.num_public_inputs, len(public_inputs))

    e1 = pairing(proof.B, proof.A)

    # [K/γ*w]G1
    Kw_gamma_G1 = vector_commit(vk.K_gamma_G1, [FP(1)] + public_inputs, Z1)

    e3 = pairing(vk.gamma_G2, Kw_gamma_G1)
    e4 = pairing(vk.delta_G2, proof.C)

    return e1 == pvk.alpha_beta * e3 * e4


def verify(vk: VerifyingKey, public_inputs, proof: Proof) -> bool:
    return verify_proof(prepare_verifying_key(vk), public_inputs, proof)


def rerandomize_proof(vk: VerifyingKey, proof: Proof, rng=None) -> Proof:
    """
    A fresh proof of the same statement, computed without the witness:
    A' = A / r1, B' = r1 B + r1 r2 delta, C' = C + r2 A.
    """
    check_proof_encoding(proof)
    r1, r2 = draw_scalars(rng, 2)
    A = multiply(proof.A, int(FP(1) / r1))
    B = add(multiply(proof.B, int(r1)), multiply(vk.delta_G2, int(r1 * r2)))
    C = add(proof.C, multiply(proof.A, int(r2)))
    return Proof(A, B, C)
