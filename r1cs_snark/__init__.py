"""R1CS constraint building and Groth16 over BN254."""

from .ceremony import Ceremony
from .circuits import CubeCircuit, cube_output
from .constraint_system import (
    Circuit,
    ConstraintSystem,
    ConstraintSystemState,
    OptimizationGoal,
    SynthesisMode,
    build,
)
from .errors import (
    AllocationError,
    AssignmentMissing,
    InvalidProofEncoding,
    MatrixExtractionError,
    PublicInputLengthError,
    SetupError,
    SnarkError,
    SynthesisError,
    UnsatisfiedConstraint,
    WitnessInconsistencyError,
)
from .field import FP, p, to_field
from .gadgets import FieldVar
from .groth16 import (
    PreparedVerifyingKey,
    Proof,
    ProvingKey,
    VerifyingKey,
    create_proof_with_blinding,
    prepare_verifying_key,
    prove,
    rerandomize_proof,
    setup,
    verify,
    verify_proof,
)
from .linear_combination import LinearCombination, Variable, VariableKind, add, mul_variable, scale
from .matrices import ConstraintMatrices, extract_matrices
from .qap import QAP
