"""
cli.py

Command line demo: prove knowledge of x with x^3 + x + 5 = y.

Usage:
    python -m r1cs_snark --x 3
    python -m r1cs_snark --config cfg.json --verbose
"""

import argparse
import logging
import sys

from .circuits import CubeCircuit, cube_output
from .config import DEFAULT_CONFIG, build_from_config, load_config
from .field import p
from .groth16 import prove, setup, verify
from .matrices import extract_matrices
from .utils import setup_basic_logger


def _print_matrix(name, matrix):
    print(f"\nMatrix {name}:")
    for row in matrix:
        print([(int(coeff), col) for coeff, col in row])


def run(config) -> bool:
    x = config["x"]
    y = cube_output(x)
    cs = build_from_config(CubeCircuit(x=x, y=y), config)

    print("Equation: y = x^3 + x + 5")
    print(f"Private input x: {x}")
    print(f"Public input y: {int(y)}")
    print(f"Constraint system is satisfied: {cs.is_satisfied()}")
    print(f"Number of constraints: {cs.num_constraints}")
    print(f"Field size: {p}")

    matrices = extract_matrices(cs)
    z = cs.full_assignment()
    print(f"\nVector z: {[int(v) for v in z]}")
    print(f"Instance variables: {[int(v) for v in cs.instance_assignment]}")
    print(f"Witness variables: {[int(v) for v in cs.witness_assignment]}")

    _print_matrix("A", matrices.a)
    _print_matrix("B", matrices.b)
    _print_matrix("C", matrices.c)

    pk, vk = setup(matrices)
    proof = prove(pk, z)
    ok = verify(vk, cs.public_inputs(), proof)
    print(f"\nProof verified: {ok}")
    return ok


def main(argv=None):
    parser = argparse.ArgumentParser(description="R1CS + Groth16 demo on x^3 + x + 5 = y")
    parser.add_argument("--x", type=int, help="private input (default from config)")
    parser.add_argument("--config", help="JSON config file to merge over the defaults")
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    config = load_config(args.config) if args.config else DEFAULT_CONFIG.copy()
    if args.x is not None:
        config["x"] = args.x
    if config.get("synthesis_mode") != "prove":
        parser.error("the demo needs synthesis_mode 'prove' to produce a witness")
    level = logging.DEBUG if args.verbose else getattr(logging, str(config["log_level"]).upper(), logging.INFO)
    setup_basic_logger("r1cs_snark", level)

    return 0 if run(config) else 1


if __name__ == "__main__":
    sys.exit(main())
