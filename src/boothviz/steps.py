"""Step-by-step model of Booth multiplication."""

from dataclasses import dataclass

from amaranth.lib.enum import Enum


MIN_BITS = 1
MAX_BITS = 15


class Action(Enum, shape=2):
    """Indicate which operation produced a :class:`Step`.

    Attributes
    ----------
    INIT : int
        No operation was performed; only ever the first step of a trace.

    ADD : int
        The multiplicand, shifted into position, was added to the partial
        product.

    SUB : int
        The multiplicand, shifted into position, was subtracted from the
        partial product.

    SHIFT : int
        The partial product was arithmetically shifted right by one bit. The
        bit shifted out becomes the additional bit.
    """

    INIT = 0
    ADD = 1
    SUB = 2
    SHIFT = 3

    @property
    def label(self):
        """Name of the action as shown in a step table."""
        return self.name.capitalize()


@dataclass(frozen=True)
class Step:
    """One point in the execution of Booth multiplication.

    Attributes
    ----------
    step : int
        Number of transitions applied so far.
    shift_steps : int
        Number of transitions so far whose action was ``SHIFT``. The trace
        ends once this reaches ``bits``.
    action : Action
        The action that produced this step from the previous one.
    product : int
        Signed partial product register, :math:`2*bits+1` bits wide.
    additional : int
        Bit shifted out of ``product`` by the most recent ``SHIFT``.
    bits : int
        Width in bits of the multiplicand and multiplier.
    """

    step: int
    shift_steps: int
    action: Action
    product: int
    additional: int
    bits: int


def clamp_input(value, bits):
    """Clamp ``value`` to the range of a ``bits``-wide signed integer."""
    lo = -(1 << bits) // 2
    hi = (1 << bits) // 2 - 1
    return max(lo, min(value, hi))


def clamp_bits(bits):
    """Clamp a width to the range of widths a trace is shown for."""
    return max(MIN_BITS, min(bits, MAX_BITS))


def get_bit(number, i):
    """Return bit ``i`` (0 is the LSb) of ``number`` in twos-complement."""
    return 1 if number & (1 << i) else 0


def initial_step(b, bits):
    """Create the ``INIT`` step for multiplier ``b``.

    ``b`` is masked to its low ``bits`` bits and zero-extended into the
    product register; it is *not* sign-extended. Booth recoding only
    inspects the low ``bits`` bits of the register before they are shifted
    out, so the sign of ``b`` is recovered from bit ``bits - 1``.

    Parameters
    ----------
    b : int
        The multiplier.
    bits : int
        Width in bits of the multiplicand and multiplier.

    Returns
    -------
    Step
        The first step of a trace.
    """
    return Step(step=0, shift_steps=0, action=Action.INIT,
                product=b & ((1 << bits) - 1), additional=0, bits=bits)


def shift(prev):
    """Arithmetic-shift the partial product of ``prev`` right by one bit."""
    return Step(step=prev.step + 1,
                shift_steps=prev.shift_steps + 1,
                action=Action.SHIFT,
                product=prev.product >> 1,
                additional=prev.product & 1,
                bits=prev.bits)


def check(prev, a):
    """Decide and apply the next action from the low bits of ``prev``.

    The LSb of the partial product and the additional bit form a 2-bit
    window over the multiplier:

    * ``10``: start of a run of ones; subtract ``a``.
    * ``01``: end of a run of ones; add ``a``.
    * ``00`` or ``11``: nothing to do; shift.

    ``a`` is shifted left by ``bits`` instead of shifting the partial
    product left, so the register never has to move for an add/subtract.

    Parameters
    ----------
    prev : Step
        A step whose action was ``INIT`` or ``SHIFT``.
    a : int
        The multiplicand.

    Returns
    -------
    Step
        The step following ``prev``.
    """
    lowbits = (prev.product & 1) * 2 + prev.additional

    if lowbits == 2:
        return Step(step=prev.step + 1,
                    shift_steps=prev.shift_steps,
                    action=Action.SUB,
                    product=prev.product - (a << prev.bits),
                    additional=prev.additional,
                    bits=prev.bits)
    elif lowbits == 1:
        return Step(step=prev.step + 1,
                    shift_steps=prev.shift_steps,
                    action=Action.ADD,
                    product=prev.product + (a << prev.bits),
                    additional=prev.additional,
                    bits=prev.bits)
    else:
        return shift(prev)


def next_step(prev, a):
    """Derive the step following ``prev``.

    An ``ADD`` or ``SUB`` is always followed by a ``SHIFT``; after ``INIT``
    or ``SHIFT`` the low bits are checked.
    """
    if prev.action in (Action.ADD, Action.SUB):
        return shift(prev)
    else:
        return check(prev, a)


def all_steps(init, a, bits):
    """Run Booth multiplication to completion from ``init``.

    Parameters
    ----------
    init : Step
        The first step, usually from :func:`initial_step`.
    a : int
        The multiplicand.
    bits : int
        Width in bits of the multiplicand and multiplier. The trace ends
        after this many ``SHIFT`` steps.

    Returns
    -------
    list of Step
        Every step from ``init`` up to and including the first step whose
        ``shift_steps`` equals ``bits``. Its ``product`` is the result.

    Raises
    ------
    ValueError
        If ``bits`` is less than 1, or does not match ``init.bits``.
    """
    if bits < 1:
        raise ValueError(f"width must be at least 1 bit, got {bits}")
    if init.bits != bits:
        raise ValueError(f"initial step is {init.bits} bits wide, "
                         f"expected {bits}")

    steps = []
    current = init

    while current.shift_steps < bits:
        steps.append(current)
        current = next_step(current, a)
    steps.append(current)

    return steps
