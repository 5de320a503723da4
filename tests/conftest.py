"""Shared fixtures. Keys are session scoped because setup and pairings are slow."""

import random

import pytest

from r1cs_snark import CubeCircuit, FieldVar, build, cube_output, extract_matrices, prove, setup


class SharedSumCircuit:
    """out = (a + b)^2 + (a + b) * a, with a + b used by two constraints."""

    def __init__(self, a=None, b=None, out=None):
        self.a = a
        self.b = b
        self.out = out

    def synthesize(self, cs):
        a = FieldVar.new_witness(cs, lambda: self.a)
        b = FieldVar.new_witness(cs, lambda: self.b)
        out = FieldVar.new_input(cs, lambda: self.out)
        s = a + b
        (s * s + s * a).enforce_equal(out)


def cube_system(x, **kwargs):
    return build(CubeCircuit(x=x, y=cube_output(x)), **kwargs)


@pytest.fixture
def cube_cs():
    return cube_system(3)


@pytest.fixture(scope="session")
def cube_matrices():
    return extract_matrices(cube_system(3))


@pytest.fixture(scope="session")
def cube_keys(cube_matrices):
    return setup(cube_matrices, random.Random(1234))


@pytest.fixture(scope="session")
def cube_proof(cube_keys):
    pk, _ = cube_keys
    cs = cube_system(3)
    extract_matrices(cs)
    return prove(pk, cs.full_assignment(), random.Random(99))
