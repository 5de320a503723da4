from .field import to_field
from .gadgets import FieldVar


def cube_output(x):
    # y = x^3 + x + 5
    x = to_field(x)
    return x * x * x + x + to_field(5)


class CubeCircuit:
    """Knowledge of a private x with x^3 + x + 5 = y for a public y."""

    def __init__(self, x=None, y=None):
        self.x = x  # private input (witness)
        self.y = y  # public input

    def synthesize(self, cs):
        y_var = FieldVar.new_input(cs, lambda: self.y)
        x_var = FieldVar.new_witness(cs, lambda: self.x)

        # constrain x^2 = x * x
        x_squared = x_var * x_var
        # constrain x^3 = x^2 * x
        x_cubed = x_squared * x_var
        # constrain y = x^3 + x + 5
        (x_var + FieldVar.constant(cs, 5) + x_cubed).enforce_equal(y_var)
