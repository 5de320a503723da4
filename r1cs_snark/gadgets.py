"""
gadgets.py

FieldVar: a field element living inside a constraint system.

A FieldVar is either a constant (no variable, folded at synthesis time) or
a variable of the system (a public input, a witness, or a symbolic linear
combination). Addition and subtraction only build linear combinations and
never emit a constraint; multiplication of two non-constant values
allocates the product as a new witness and enforces a * b = product.
"""

from .errors import AssignmentMissing, SynthesisError
from .field import FP, is_zero, to_field
from .linear_combination import LinearCombination, lc_one, lc_zero, mul_variable


class FieldVar:
    def __init__(self, cs, variable=None, value=None, constant=None):
        self.cs = cs
        self.variable = variable
        self._value = value
        self._constant = constant

    @classmethod
    def constant(cls, cs, value):
        value = to_field(value)
        return cls(cs, value=value, constant=value)

    @classmethod
    def _allocate(cls, cs, allocate, value):
        if cs.is_in_setup_mode:
            return cls(cs, variable=allocate(None))
        if callable(value):
            value = value()
        if value is None:
            raise AssignmentMissing("a value is required when synthesizing in prove mode")
        value = to_field(value)
        return cls(cs, variable=allocate(value), value=value)

    @classmethod
    def new_input(cls, cs, value=None):
        return cls._allocate(cs, cs.allocate_public, value)

    @classmethod
    def new_witness(cls, cs, value=None):
        return cls._allocate(cs, cs.allocate_witness, value)

    @property
    def is_constant(self):
        return self._constant is not None

    def value(self) -> FP:
        if self._value is None:
            raise AssignmentMissing("no value is assigned in setup mode")
        return self._value

    def lc(self) -> LinearCombination:
        if self.is_constant:
            return lc_one() * self._constant
        return mul_variable(self.variable)

    def _coerce(self, other):
        if isinstance(other, FieldVar):
            return other
        return FieldVar.constant(self.cs, other)

    def _combine(self, other, lc, op):
        value = None
        if self._value is not None and other._value is not None:
            value = op(self._value, other._value)
        return FieldVar(self.cs, variable=self.cs.new_lc(lc), value=value)

    def __add__(self, other):
        other = self._coerce(other)
        if self.is_constant and other.is_constant:
            return FieldVar.constant(self.cs, self._constant + other._constant)
        return self._combine(other, self.lc() + other.lc(), lambda a, b: a + b)

    __radd__ = __add__

    def __sub__(self, other):
        other = self._coerce(other)
        if self.is_constant and other.is_constant:
            return FieldVar.constant(self.cs, self._constant - other._constant)
        return self._combine(other, self.lc() - other.lc(), lambda a, b: a - b)

    def __rsub__(self, other):
        return self._coerce(other) - self

    def __neg__(self):
        return FieldVar.constant(self.cs, 0) - self

    def __mul__(self, other):
        other = self._coerce(other)
        if self.is_constant and other.is_constant:
            return FieldVar.constant(self.cs, self._constant * other._constant)
        if self.is_constant or other.is_constant:
            const, var = (self, other) if self.is_constant else (other, self)
            return var._combine(const, var.lc() * const._constant, lambda a, b: a * b)

        cs = self.cs
        if cs.is_in_setup_mode:
            product = FieldVar(cs, variable=cs.allocate_witness(None))
        else:
            value = self.value() * other.value()
            product = FieldVar(cs, variable=cs.allocate_witness(value), value=value)
        cs.enforce(self.lc(), other.lc(), product.lc())
        return product

    __rmul__ = __mul__

    def square(self):
        return self * self

    def inverse(self):
        cs = self.cs
        if self.is_constant:
            if is_zero(self._constant):
                raise SynthesisError("division by zero")
            return FieldVar.constant(cs, FP(1) / self._constant)
        if cs.is_in_setup_mode:
            inv = FieldVar(cs, variable=cs.allocate_witness(None))
        else:
            if is_zero(self.value()):
                raise SynthesisError("division by zero")
            value = FP(1) / self.value()
            inv = FieldVar(cs, variable=cs.allocate_witness(value), value=value)
        cs.enforce(self.lc(), inv.lc(), lc_one())
        return inv

    def enforce_equal(self, other):
        other = self._coerce(other)
        if self.is_constant and other.is_constant:
            if self._constant != other._constant:
                raise SynthesisError("constants are not equal")
            return
        self.cs.enforce(self.lc() - other.lc(), lc_one(), lc_zero())

    def __repr__(self):
        if self.is_constant:
            return f"FieldVar(constant={int(self._constant)})"
        return f"FieldVar({self.variable!r})"
