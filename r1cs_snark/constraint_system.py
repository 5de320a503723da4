"""
constraint_system.py

Rank-1 constraint system builder.

Variables are allocated in program order: the instance vector starts with
the constant 1 followed by the public inputs, the witness vector holds the
private values. Every constraint is a triple of linear combinations
(a, b, c) asserting <a, z> * <b, z> = <c, z> where z = instance ++ witness.

Linear combinations may reference other linear combinations through
SYMBOLIC variables (see `new_lc`); those references are removed by
`inline_all_lcs` before the matrices are produced.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple

from .errors import (
    AllocationError,
    AssignmentMissing,
    MatrixExtractionError,
    SynthesisError,
    UnsatisfiedConstraint,
)
from .field import FP, to_field
from .linear_combination import (
    LinearCombination,
    Variable,
    VariableKind,
    lc_one,
    mul_variable,
)
from .matrices import ConstraintMatrices

logger = logging.getLogger(__name__)


class SynthesisMode(Enum):
    # SETUP records the shape only, PROVE also records the assignment
    SETUP = "setup"
    PROVE = "prove"


class OptimizationGoal(Enum):
    CONSTRAINTS = "constraints"
    WEIGHT = "weight"


class ConstraintSystemState(Enum):
    RECORDING = "recording"
    FINALIZED = "finalized"


class Circuit(Protocol):
    def synthesize(self, cs: "ConstraintSystem") -> None:
        ...


def _as_lc(value) -> LinearCombination:
    if isinstance(value, LinearCombination):
        return value
    if isinstance(value, Variable):
        return mul_variable(value)
    raise TypeError(f"expected a LinearCombination or Variable, got {type(value).__name__}")


class ConstraintSystem:
    def __init__(
        self,
        mode: SynthesisMode = SynthesisMode.PROVE,
        optimization_goal: OptimizationGoal = OptimizationGoal.CONSTRAINTS,
    ):
        self.mode = mode
        self.optimization_goal = optimization_goal
        self.state = ConstraintSystemState.RECORDING

        self.num_instance_variables = 1
        self.num_witness_variables = 0
        self.instance_assignment: List[FP] = [FP(1)]
        self.witness_assignment: List[FP] = []

        self.constraints: List[Tuple[LinearCombination, LinearCombination, LinearCombination]] = []
        self.lc_map: Dict[int, LinearCombination] = {}
        self._inlined = True
        # SYMBOLIC index -> synthetic witness, kept across inlining passes
        self._outlined: Dict[int, Variable] = {}

    @property
    def num_constraints(self):
        return len(self.constraints)

    @property
    def is_in_setup_mode(self):
        return self.mode == SynthesisMode.SETUP

    @property
    def is_finalized(self):
        return self.state == ConstraintSystemState.FINALIZED

    def _check_recording(self, action):
        if self.is_finalized:
            raise AllocationError(f"cannot {action}: constraint system is finalized")

    def _resolve(self, value):
        if callable(value):
            value = value()
        if value is None:
            raise AssignmentMissing("a value is required when synthesizing in prove mode")
        return to_field(value)

    # ============================================== allocation ==============================================

    def allocate_public(self, value=None) -> Variable:
        self._check_recording("allocate a public input")
        var = Variable(VariableKind.INSTANCE, self.num_instance_variables)
        if not self.is_in_setup_mode:
            self.instance_assignment.append(self._resolve(value))
        self.num_instance_variables += 1
        return var

    def allocate_witness(self, value=None) -> Variable:
        self._check_recording("allocate a witness")
        var = Variable(VariableKind.WITNESS, self.num_witness_variables)
        if not self.is_in_setup_mode:
            self.witness_assignment.append(self._resolve(value))
        self.num_witness_variables += 1
        return var

    def new_lc(self, lc) -> Variable:
        """Store a linear combination and return a SYMBOLIC reference to it."""
        self._check_recording("create a linear combination")
        lc = _as_lc(lc)
        self._check_lc(lc)
        index = len(self.lc_map)
        self.lc_map[index] = lc
        return Variable(VariableKind.SYMBOLIC, index)

    def _check_lc(self, lc: LinearCombination):
        for var in lc.variables():
            if var.kind == VariableKind.INSTANCE and var.index >= self.num_instance_variables:
                raise SynthesisError(f"unknown public input {var!r}")
            if var.kind == VariableKind.WITNESS and var.index >= self.num_witness_variables:
                raise SynthesisError(f"unknown witness {var!r}")
            if var.kind == VariableKind.SYMBOLIC and var.index not in self.lc_map:
                raise SynthesisError(f"unknown linear combination {var!r}")

    def enforce(self, a, b, c):
        self._check_recording("add a constraint")
        a, b, c = _as_lc(a), _as_lc(b), _as_lc(c)
        for lc in (a, b, c):
            self._check_lc(lc)
        self.constraints.append((a, b, c))
        self._inlined = False

    # ============================================== assignment ==============================================

    def _require_assignment(self):
        if self.is_in_setup_mode:
            raise AssignmentMissing("constraint system was synthesized in setup mode")

    def _assigned_value(self, var: Variable, cache):
        if var.kind == VariableKind.ONE:
            return self.instance_assignment[0]
        if var.kind == VariableKind.INSTANCE:
            return self.instance_assignment[var.index]
        if var.kind == VariableKind.WITNESS:
            return self.witness_assignment[var.index]
        if var.index not in cache:
            if var.index not in self.lc_map:
                raise MatrixExtractionError(f"reference to unknown linear combination {var!r}")
            cache[var.index] = self._eval(self.lc_map[var.index], cache)
        return cache[var.index]

    def _eval(self, lc: LinearCombination, cache):
        acc = FP(0)
        for var, coeff in lc:
            acc = acc + coeff * self._assigned_value(var, cache)
        return acc

    def eval_lc(self, lc) -> FP:
        self._require_assignment()
        return self._eval(_as_lc(lc), {})

    def full_assignment(self) -> FP:
        """The concrete vector z = instance ++ witness."""
        self._require_assignment()
        return FP(
            [int(v) for v in self.instance_assignment]
            + [int(v) for v in self.witness_assignment]
        )

    def public_inputs(self):
        self._require_assignment()
        return list(self.instance_assignment[1:])

    def which_is_unsatisfied(self) -> Optional[int]:
        self._require_assignment()
        cache = {}
        for row, (a, b, c) in enumerate(self.constraints):
            if self._eval(a, cache) * self._eval(b, cache) != self._eval(c, cache):
                return row
        return None

    def check_satisfied(self):
        row = self.which_is_unsatisfied()
        if row is not None:
            raise UnsatisfiedConstraint(row)

    def is_satisfied(self) -> bool:
        try:
            self.check_satisfied()
        except UnsatisfiedConstraint as err:
            logger.debug("unsatisfied constraint at row %d", err.row)
            return False
        return True

    # ============================================== inlining ==============================================

    def _expand(self, index, cache):
        if index not in cache:
            if index not in self.lc_map:
                raise MatrixExtractionError(f"reference to unknown linear combination SYMBOLIC({index})")
            cache[index] = self._inline(self.lc_map[index], cache, {})
        return cache[index]

    def _inline(self, lc, cache, outlined):
        terms = []
        for var, coeff in lc:
            if var.kind != VariableKind.SYMBOLIC:
                terms.append((var, coeff))
            elif var.index in outlined:
                terms.append((outlined[var.index], coeff))
            else:
                terms.extend((v, c * coeff) for v, c in self._expand(var.index, cache))
        return LinearCombination(terms)

    def _outline_candidates(self, cache):
        uses: Dict[int, int] = {}
        for row in self.constraints:
            referenced = {
                var.index
                for lc in row
                for var in lc.variables()
                if var.kind == VariableKind.SYMBOLIC
            }
            for index in referenced:
                uses[index] = uses.get(index, 0) + 1
        return [
            index
            for index in sorted(uses)
            if index not in self._outlined
            and uses[index] > 1
            and len(self._expand(index, cache)) > 1
        ]

    def inline_all_lcs(self):
        """
        Rewrite every constraint over ONE/INSTANCE/WITNESS variables only.

        With OptimizationGoal.WEIGHT, a symbolic linear combination with more
        than one term that is referenced by several constraints gets its own
        synthetic witness column, bound by an extra constraint lc * 1 = w.
        """
        if self._inlined:
            return
        cache: Dict[int, LinearCombination] = {}
        outlined = self._outlined
        extra = []

        if self.optimization_goal == OptimizationGoal.WEIGHT:
            for index in self._outline_candidates(cache):
                expansion = self._expand(index, cache)
                var = Variable(VariableKind.WITNESS, self.num_witness_variables)
                if not self.is_in_setup_mode:
                    try:
                        value = self._eval(expansion, {})
                    except IndexError as err:
                        raise MatrixExtractionError(
                            f"cannot evaluate synthetic column for SYMBOLIC({index})"
                        ) from err
                    self.witness_assignment.append(value)
                self.num_witness_variables += 1
                outlined[index] = var
                extra.append((expansion, lc_one(), mul_variable(var)))
            logger.debug("%d linear combinations outlined so far", len(outlined))

        self.constraints = [
            tuple(self._inline(lc, cache, outlined) for lc in row)
            for row in self.constraints
        ] + extra
        self._inlined = True

    def finalize(self):
        if self.is_finalized:
            return
        self.inline_all_lcs()
        self.state = ConstraintSystemState.FINALIZED
        logger.debug(
            "finalized: %d constraints, %d instance, %d witness variables",
            self.num_constraints,
            self.num_instance_variables,
            self.num_witness_variables,
        )

    def _column(self, var: Variable):
        if var.kind in (VariableKind.ONE, VariableKind.INSTANCE):
            return var.index
        if var.kind == VariableKind.WITNESS:
            return self.num_instance_variables + var.index
        raise MatrixExtractionError(f"{var!r} survived inlining")

    def _row(self, lc: LinearCombination):
        return tuple((coeff, self._column(var)) for var, coeff in lc.sorted_terms())

    def to_matrices(self) -> ConstraintMatrices:
        if not self.is_finalized:
            raise MatrixExtractionError("constraint system must be finalized before extracting matrices")
        rows = [[self._row(lc) for lc in row] for row in self.constraints]
        return ConstraintMatrices(
            num_instance_variables=self.num_instance_variables,
            num_witness_variables=self.num_witness_variables,
            num_constraints=self.num_constraints,
            a=tuple(r[0] for r in rows),
            b=tuple(r[1] for r in rows),
            c=tuple(r[2] for r in rows),
        )


def build(
    circuit: Circuit,
    mode: SynthesisMode = SynthesisMode.PROVE,
    optimization_goal: OptimizationGoal = OptimizationGoal.CONSTRAINTS,
) -> ConstraintSystem:
    cs = ConstraintSystem(mode=mode, optimization_goal=optimization_goal)
    circuit.synthesize(cs)
    logger.debug("synthesized %s: %d constraints", type(circuit).__name__, cs.num_constraints)
    return cs
