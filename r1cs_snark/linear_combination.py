"""
linear_combination.py

Variables and linear combinations over FP.

A linear combination is a weighted sum of variables, represented as a
mapping variable -> coefficient, for example x = 5 + 3w₀ - y can be
represented as {ONE: 5, W(0): 3, I(1): p-1}. Variables with coefficient 0
are always omitted.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, Tuple

from .field import FP, is_zero, to_field


class VariableKind(IntEnum):
    # the declaration order is the column order inside a matrix row
    ONE = 0
    INSTANCE = 1
    WITNESS = 2
    SYMBOLIC = 3


@dataclass(frozen=True, order=True)
class Variable:
    kind: VariableKind
    index: int

    @property
    def is_one(self):
        return self.kind == VariableKind.ONE

    def __repr__(self):
        return f"{self.kind.name}({self.index})"


ONE = Variable(VariableKind.ONE, 0)


class LinearCombination:
    __slots__ = ("_terms",)

    def __init__(self, terms: Iterable[Tuple[Variable, object]] = ()):
        merged: Dict[Variable, FP] = {}
        for var, coeff in terms:
            coeff = to_field(coeff)
            if var in merged:
                merged[var] = merged[var] + coeff
            else:
                merged[var] = coeff
        self._terms = {v: c for v, c in merged.items() if not is_zero(c)}

    @classmethod
    def from_variable(cls, var: Variable, coeff=1):
        return cls([(var, coeff)])

    @property
    def terms(self):
        return dict(self._terms)

    def sorted_terms(self):
        return sorted(self._terms.items(), key=lambda item: item[0])

    def variables(self):
        return list(self._terms)

    def coefficient(self, var: Variable):
        return self._terms.get(var, FP(0))

    def is_zero(self):
        return not self._terms

    def __len__(self):
        return len(self._terms)

    def __iter__(self):
        return iter(self._terms.items())

    def __add__(self, other):
        if isinstance(other, Variable):
            other = LinearCombination.from_variable(other)
        if not isinstance(other, LinearCombination):
            return NotImplemented
        return LinearCombination(list(self._terms.items()) + list(other._terms.items()))

    __radd__ = __add__

    def __neg__(self):
        return LinearCombination((v, -c) for v, c in self._terms.items())

    def __sub__(self, other):
        if isinstance(other, Variable):
            other = LinearCombination.from_variable(other)
        if not isinstance(other, LinearCombination):
            return NotImplemented
        return self + (-other)

    def __mul__(self, k):
        if isinstance(k, (LinearCombination, Variable)):
            return NotImplemented
        k = to_field(k)
        return LinearCombination((v, c * k) for v, c in self._terms.items())

    __rmul__ = __mul__

    def __eq__(self, other):
        if not isinstance(other, LinearCombination):
            return NotImplemented
        if self._terms.keys() != other._terms.keys():
            return False
        return all(int(c) == int(other._terms[v]) for v, c in self._terms.items())

    def __hash__(self):
        return hash(tuple((v, int(c)) for v, c in self.sorted_terms()))

    def __repr__(self):
        body = " + ".join(f"{int(c)}*{v!r}" for v, c in self.sorted_terms())
        return f"LC({body or '0'})"


def add(lc1: LinearCombination, lc2: LinearCombination) -> LinearCombination:
    return lc1 + lc2


def scale(lc: LinearCombination, k) -> LinearCombination:
    return lc * k


def mul_variable(var: Variable, k=1) -> LinearCombination:
    return LinearCombination.from_variable(var, k)


def lc_one() -> LinearCombination:
    return LinearCombination.from_variable(ONE)


def lc_zero() -> LinearCombination:
    return LinearCombination()
