from galois import GF
import numpy as np
from py_ecc.optimized_bn128 import curve_order

# p = 21888242871839275222246405745257275088548364400416034343698204186575808495617
p = curve_order
FP = GF(p)


def to_field(value):
    """Coerce an int (negative values wrap mod p) or a field element into FP."""
    if isinstance(value, FP):
        return value
    return FP(int(value) % p)


def field_vector(values):
    return FP([int(v) % p for v in values])


def is_zero(value):
    return int(value) == 0


def random_scalar(rng):
    # non-zero scalar, drawn from a caller owned source
    return FP(rng.randrange(1, p))
