"""
errors.py

Exception taxonomy for constraint building, matrix extraction and the
Groth16 setup/prove/verify pipeline. Each error carries the structured
context needed to diagnose it (row index, expected sizes).
"""


class SnarkError(Exception):
    """Base class for every error raised by this package."""


class SynthesisError(SnarkError):
    """A circuit could not be synthesized into constraints."""


class AssignmentMissing(SynthesisError):
    """A concrete value was requested but none is available."""


class AllocationError(SnarkError):
    """A finalized constraint system was asked to grow."""


class UnsatisfiedConstraint(SnarkError):
    def __init__(self, row: int):
        super().__init__(f"constraint {row} is not satisfied")
        self.row = row


class MatrixExtractionError(SnarkError):
    """Symbolic constraints could not be turned into sparse matrices."""


class SetupError(SnarkError):
    """Key generation failed (empty matrices or exhausted randomness)."""


class WitnessInconsistencyError(SnarkError):
    def __init__(self, message: str, row: int = None):
        super().__init__(message)
        self.row = row


class InvalidProofEncoding(SnarkError):
    """A group element handed to the verifier is malformed."""


class PublicInputLengthError(SnarkError):
    def __init__(self, expected: int, got: int):
        super().__init__(f"expected {expected} public inputs, got {got}")
        self.expected = expected
        self.got = got
