"""
ceremony.py

Multi-party key generation. Every participant multiplies the running state
by its own trapdoor and forgets it, so the final trapdoor is the product of
all contributions and stays unknown as long as one participant is honest.

The state keeps, for i < 2n (n = domain size):
    tau^i G1, tau^i G2, tau^i/gamma G1, beta tau^i/gamma G1, alpha tau^i/gamma G1
and the same three vectors over delta. The K queries and the h query of the
keys are linear combinations of those vectors.
"""

import logging

from py_ecc.optimized_bn128 import G1, G2, Z1, Z2, add, eq, multiply, pairing

from .errors import SetupError
from .field import FP
from .groth16 import assemble_keys, draw_scalars, resolve_rng
from .matrices import ConstraintMatrices
from .qap import QAP, to_poly
from .utils import evaluate_poly, vector_commit

logger = logging.getLogger(__name__)

BASIS_KEYS = (
    "beta_tau_over_gamma_g1",
    "alpha_tau_over_gamma_g1",
    "tau_over_gamma_g1",
    "beta_tau_over_delta_g1",
    "alpha_tau_over_delta_g1",
    "tau_over_delta_g1",
)


def initialize_state(tau_length):
    state = {
        "tau_g1": [G1 for _ in range(tau_length)],
        "tau_g2": [G2 for _ in range(tau_length)],
        "alpha_g1": G1,
        "beta_g1": G1,
        "beta_g2": G2,
        "gamma_g2": G2,
        "delta_g1": G1,
        "delta_g2": G2,
    }
    for key in BASIS_KEYS:
        state[key] = [G1 for _ in range(tau_length)]
    return state


def apply_contribution(state, tau, alpha, beta, gamma, delta):
    gamma_inv = FP(1) / gamma
    delta_inv = FP(1) / delta

    state["alpha_g1"] = multiply(state["alpha_g1"], int(alpha))
    state["beta_g1"] = multiply(state["beta_g1"], int(beta))
    state["beta_g2"] = multiply(state["beta_g2"], int(beta))
    state["gamma_g2"] = multiply(state["gamma_g2"], int(gamma))
    state["delta_g1"] = multiply(state["delta_g1"], int(delta))
    state["delta_g2"] = multiply(state["delta_g2"], int(delta))

    tau_pow = FP(1)
    for i in range(len(state["tau_g1"])):
        state["tau_g1"][i] = multiply(state["tau_g1"][i], int(tau_pow))
        state["tau_g2"][i] = multiply(state["tau_g2"][i], int(tau_pow))

        gamma_factor = tau_pow * gamma_inv
        delta_factor = tau_pow * delta_inv
        factors = (
            gamma_factor * beta,
            gamma_factor * alpha,
            gamma_factor,
            delta_factor * beta,
            delta_factor * alpha,
            delta_factor,
        )
        for key, factor in zip(BASIS_KEYS, factors):
            state[key][i] = multiply(state[key][i], int(factor))

        tau_pow *= tau


def compute_target_points(state, qap: QAP):
    # tau^i T(tau)/delta = sum_j T_j tau^(i+j)/delta
    coeffs = qap.T.coefficients(order="asc")
    target_points = []
    for i in range(qap.T.degree - 1):
        points = state["tau_over_delta_g1"][i:i + len(coeffs)]
        target_points.append(vector_commit(points, coeffs, Z1))
    return target_points


def _build_query(L_polys, R_polys, O_polys, state, side):
    beta_basis = state[f"beta_tau_over_{side}_g1"]
    alpha_basis = state[f"alpha_tau_over_{side}_g1"]
    const_basis = state[f"tau_over_{side}_g1"]

    queries = []
    for L, R, O in zip(L_polys, R_polys, O_polys):
        acc = evaluate_poly(L, beta_basis, Z1)
        acc = add(acc, evaluate_poly(R, alpha_basis, Z1))
        acc = add(acc, evaluate_poly(O, const_basis, Z1))
        queries.append(acc)
    return queries


class Ceremony:
    def __init__(self, matrices: ConstraintMatrices):
        if matrices.num_constraints == 0:
            raise SetupError("cannot run a ceremony on empty matrices")
        self.matrices = matrices
        self.qap = QAP.from_matrices(matrices)
        self.contributions = 0
        self.state = initialize_state(self.qap.domain_size * 2)

    def contribute(self, rng=None):
        try:
            toxic_waste = draw_scalars(rng, 5)
        except (OSError, StopIteration, ValueError) as err:
            raise SetupError("randomness source is exhausted") from err
        try:
            apply_contribution(self.state, *toxic_waste)
        finally:
            toxic_waste.clear()
        self.contributions += 1
        logger.debug("applied contribution #%d", self.contributions)

    def verify_powers(self, rng=None) -> bool:
        """
        Check that tau_g1 and tau_g2 are consecutive powers of one secret.

        Uses a random linear combination so that the whole vector is checked
        with four pairings: e(sum c_i tau^(i+1) G1, G2) == e(sum c_i tau^i G1, tau G2).
        """
        rng = resolve_rng(rng)
        tau_g1, tau_g2 = self.state["tau_g1"], self.state["tau_g2"]
        if not (eq(tau_g1[0], G1) and eq(tau_g2[0], G2)):
            return False
        weights = [rng.randrange(1, 2 ** 64) for _ in range(len(tau_g1) - 1)]

        lo_g1 = vector_commit(tau_g1[:-1], weights, Z1)
        hi_g1 = vector_commit(tau_g1[1:], weights, Z1)
        if not pairing(G2, hi_g1) == pairing(tau_g2[1], lo_g1):
            return False

        lo_g2 = vector_commit(tau_g2[:-1], weights, Z2)
        hi_g2 = vector_commit(tau_g2[1:], weights, Z2)
        return pairing(hi_g2, G1) == pairing(lo_g2, tau_g1[1])

    def finalize(self):  # -> (ProvingKey, VerifyingKey)
        if self.contributions == 0:
            raise SetupError("ceremony has no contributions")
        qap, state = self.qap, self.state
        n = qap.domain_size
        l = qap.num_instance_variables

        L_polys = to_poly(qap.L)
        R_polys = to_poly(qap.R)
        O_polys = to_poly(qap.O)
        K_gamma_G1 = _build_query(L_polys[:l], R_polys[:l], O_polys[:l], state, "gamma")
        K_delta_G1 = _build_query(L_polys[l:], R_polys[l:], O_polys[l:], state, "delta")

        return assemble_keys(
            qap,
            self.matrices,
            state["tau_g1"][:n],
            state["tau_g2"][:n],
            state["alpha_g1"],
            state["beta_g1"],
            state["beta_g2"],
            state["gamma_g2"],
            state["delta_g1"],
            state["delta_g2"],
            K_gamma_G1,
            K_delta_G1,
            compute_target_points(state, qap),
        )
