"""Operands of a Booth multiplication, as entered by a user."""

from .steps import all_steps, clamp_bits, clamp_input, initial_step


def _parse_int(text):
    try:
        return int(text)
    except ValueError:
        return None


class Operands:
    """Multiplicand, multiplier and width entered as text.

    Text that does not parse as an integer is remembered (so it can be
    shown back) but otherwise ignored; the last valid value stays in
    effect. Valid values are clamped rather than rejected.

    Parameters
    ----------
    a : int
        Initial multiplicand.
    b : int
        Initial multiplier.
    bits : int
        Initial width in bits of ``a`` and ``b``.

    Attributes
    ----------
    a : int
        The multiplicand, always representable in ``bits`` signed bits.
    b : int
        The multiplier, always representable in ``bits`` signed bits.
    bits : int
        Width in bits, between :data:`~boothviz.steps.MIN_BITS` and
        :data:`~boothviz.steps.MAX_BITS`.
    input_a : str
        Last text entered for ``a``.
    input_b : str
        Last text entered for ``b``.
    """

    def __init__(self, a=3, b=-7, bits=5):
        self.bits = clamp_bits(bits)
        self.a = clamp_input(a, self.bits)
        self.b = clamp_input(b, self.bits)
        self.input_a = str(a)
        self.input_b = str(b)

    def update_a(self, text):
        self.input_a = text
        val = _parse_int(text)
        if val is not None:
            self.a = clamp_input(val, self.bits)

    def update_b(self, text):
        self.input_b = text
        val = _parse_int(text)
        if val is not None:
            self.b = clamp_input(val, self.bits)

    def update_bits(self, text):
        """Change the width, re-clamping ``a`` and ``b`` to fit it."""
        val = _parse_int(text)
        if val is not None:
            self.bits = clamp_bits(val)
            self.a = clamp_input(self.a, self.bits)
            self.b = clamp_input(self.b, self.bits)

    def initial_step(self):
        return initial_step(self.b, self.bits)

    def steps(self):
        """Compute the full trace for the current operands."""
        return all_steps(self.initial_step(), self.a, self.bits)

    def answer(self):
        return self.steps()[-1].product
