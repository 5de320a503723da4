"""
utils.py

Group helpers shared by setup, proving and the ceremony, plus a minimal
logger setup helper for command-line use.
"""

import logging
from functools import reduce

from py_ecc.optimized_bn128 import add, multiply


def setup_basic_logger(name: str = "r1cs_snark", level: int = logging.INFO) -> logging.Logger:
    """
    Return a logger configured with a StreamHandler and a compact formatter.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return logger
    ch = logging.StreamHandler()
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    ch.setFormatter(fmt)
    logger.addHandler(ch)
    return logger


# if points = G1, G2, G3, G4 and scalars = a,b,c,d vector_commit returns
# aG1 + bG2 + cG3 + dG4
def vector_commit(points, scalars, identity):
    terms = [multiply(P, int(s)) for P, s in zip(points, scalars) if int(s) != 0]
    return reduce(add, terms, identity)


def evaluate_poly(poly, trusted_points, identity):
    """
    Evaluate `poly` at the secret point hidden in `trusted_points`, where
    trusted_points[i] commits to the i-th power of that point.
    """
    coeffs = poly.coefficients(order="asc")
    for i in range(len(trusted_points), len(coeffs)):
        if int(coeffs[i]) != 0:
            raise ValueError("Polynomial degree exceeds basis size.")
    return vector_commit(trusted_points, coeffs, identity)
