"""Booth multiplier soft-core."""

from amaranth import Cat, Module, Signal, signed, unsigned
from amaranth.lib.data import StructLayout
from amaranth.lib.wiring import In, Out, Component
from amaranth.lib import stream

from .steps import Action


class StepLayout(StructLayout):  # noqa: DOC602,DOC603
    """Layout of one :class:`~boothviz.steps.Step` in gateware.

    Parameters
    ----------
    width : int
        Width in bits of the multiplicand and multiplier. The partial product
        is :math:`2*n+1` bits wide.

    Attributes
    ----------
    step: Signal(range(2*width + 1))
        Number of transitions applied so far.
    shift_steps: Signal(range(width + 1))
        Number of ``SHIFT`` transitions applied so far.
    action: Action
        The action that produced the current register contents.
    product: Signal(signed(2*width + 1))
        The partial product.
    additional: Signal(1)
        The bit most recently shifted out of ``product``.
    """

    def __init__(self, width):
        super().__init__({
            "step": range(2*width + 1),
            "shift_steps": range(width + 1),
            "action": Action,
            "product": signed(2*width + 1),
            "additional": unsigned(1),
        })


class Inputs(StructLayout):  # noqa: DOC602,DOC603
    """Operands of a Booth multiply.

    Both operands are always treated as signed.

    Parameters
    ----------
    width : int
        Width in bits of both inputs ``a`` and ``b``, including the sign bit.

    Attributes
    ----------
    a: Signal(width)
        The multiplicand; i.e. the ':math:`a`' in :math:`a * b`.
    b: Signal(width)
        The multiplier; i.e. the ':math:`b`' in :math:`a * b`.
    """

    def __init__(self, width):
        super().__init__({
            "a": unsigned(width),
            "b": unsigned(width),
        })


class Outputs(StructLayout):  # noqa: DOC602,DOC603
    """Result of a Booth multiply.

    Parameters
    ----------
    width : int
        Width in bits of the output ``o``, including the sign bit.

    Attributes
    ----------
    o: Signal(width)
        The product of :math:`a * b`. Should be treated as a
        :class:`~amaranth:amaranth.hdl.Value` with an
        :class:`~amaranth:amaranth.hdl.as_signed` Shape.
    """

    def __init__(self, width):
        super().__init__({
            "o": unsigned(width),
        })


def multiplier_input_signature(width):
    """Create a parametric multiplier input port.

    A multiply starts on the current cycle when both ``valid`` and ``ready``
    are asserted.

    Parameters
    ----------
    width : int
        Width in bits of the inputs ``a`` and ``b``, including the sign bit.

    Returns
    -------
    :class:`amaranth:amaranth.lib.stream.Signature`
        :py:`Signature(Inputs)`
    """
    return stream.Signature(Inputs(width))


def multiplier_output_signature(width):
    """Create a parametric multiplier output port.

    Parameters
    ----------
    width : int
        Width in bits of output ``o``, including the sign bit.

    Returns
    -------
    :class:`amaranth:amaranth.lib.stream.Signature`
        :py:`Signature(Outputs)`
    """
    return stream.Signature(Outputs(width))


class BoothMul(Component):  # noqa: DOC602,DOC603
    r"""Multicycle Booth multiplier soft-core.

    This multiplier core is a gateware implementation of the step-by-step
    model in :mod:`boothviz.steps`; each clock cycle performs exactly one
    transition of :func:`~boothviz.steps.next_step`.

    * A multiply starts on the current cycle when both ``inp.valid`` and
      ``inp.ready`` are asserted. The registers are loaded with the ``INIT``
      step.
    * A multiply result is available when ``outp.valid`` is asserted. The
      result is read/overwritten once a downstream core asserts ``outp.ready``.
    * ``inp.ready`` is deasserted while a multiply is in progress, and while
      a result is pending that is not being read this cycle.

    * Latency: between ``width`` and ``2*width`` clock cycles after
      assertion of both ``inp.valid`` and ``inp.ready``, depending on how
      many add/subtract steps the multiplier ``b`` requires.

    Parameters
    ----------
    width : int
        Width in bits of both inputs ``a`` and ``b``, including the sign bit.
        Output ``o`` width will be :math:`2*n`.
    debug : bool, optional
        Expose the internal registers on the ``trace`` port.

    Attributes
    ----------
    width : int
        Bit width of the inputs ``a`` and ``b``. Output ``o`` width will
        be :math:`2*n`.
    inp : In(multiplier_input_signature(width))
        Input interface to the multiplier.
    outp : Out(multiplier_output_signature(2*width))
        Output interface of the multiplier.
    trace : Out(StepLayout(width))
        Current step of the multiply. Only present if ``debug`` is set.
    debug: bool
        Flag which indicates whether the ``trace`` port is present.

    Raises
    ------
    ValueError
        If ``width`` is less than 1.

    Notes
    -----
    * The partial product register is :math:`2*n+1` bits wide. The extra
      bit holds the sign when ``a`` is the most negative value for the
      width, since subtracting it adds :math:`2^{2n-1}`.

    * ``b`` is zero-extended into the partial product register. Only its low
      :math:`n` bits are ever inspected, and they are shifted out by the time
      the multiply finishes.

    * For an :math:`n`-bit multiply, this multiplier requires :math:`O(3*n)`
      storage elements (the multiplicand, the partial product and the step
      counters).
    """

    def __init__(self, width=8, debug=False):
        if width < 1:
            raise ValueError("Booth multiplication needs a width of at "
                             "least 1 bit")

        self.width = width
        self.debug = debug

        sig = {
            "inp": In(multiplier_input_signature(self.width)),
            "outp": Out(multiplier_output_signature(2*self.width))
        }
        if self.debug:
            sig["trace"] = Out(StepLayout(self.width))

        super().__init__(sig)

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        addend = Signal(signed(self.width))
        product = Signal(signed(2*self.width + 1))
        additional = Signal()
        action = Signal(Action)
        step = Signal(range(2*self.width + 1))
        shift_steps = Signal(range(self.width + 1))
        in_progress = Signal()

        # LSb of the partial product in bit 1, additional bit in bit 0.
        lowbits = Signal(2)

        m.d.comb += [
            self.inp.ready.eq(~in_progress &
                              (~self.outp.valid | self.outp.ready)),
            lowbits.eq(Cat(additional, product[0]))
        ]

        with m.If(self.outp.valid & self.outp.ready):
            m.d.sync += self.outp.valid.eq(0)

        with m.If(self.inp.ready & self.inp.valid):
            m.d.sync += [
                addend.eq(self.inp.payload.a.as_signed()),
                product.eq(self.inp.payload.b),
                additional.eq(0),
                action.eq(Action.INIT),
                step.eq(0),
                shift_steps.eq(0),
                in_progress.eq(1)
            ]

        def shift():
            m.d.sync += [
                product.eq(product >> 1),
                additional.eq(product[0]),
                action.eq(Action.SHIFT),
                shift_steps.eq(shift_steps + 1)
            ]

            with m.If(shift_steps + 1 == self.width):
                m.d.sync += [
                    in_progress.eq(0),
                    self.outp.valid.eq(1)
                ]

        with m.If(in_progress):
            m.d.sync += step.eq(step + 1)

            # An add/subtract is always followed by a shift.
            with m.If((action == Action.ADD) | (action == Action.SUB)):
                shift()
            with m.Elif(lowbits == 0b10):
                m.d.sync += [
                    product.eq(product - (addend << self.width)),
                    action.eq(Action.SUB)
                ]
            with m.Elif(lowbits == 0b01):
                m.d.sync += [
                    product.eq(product + (addend << self.width)),
                    action.eq(Action.ADD)
                ]
            with m.Else():
                shift()

        # Once all shifts are done, the multiplier has been shifted out
        # completely and the product fits in the bottom 2*n bits.
        m.d.comb += self.outp.payload.o.eq(product[:2*self.width])

        if self.debug:
            m.d.comb += [
                self.trace.step.eq(step),
                self.trace.shift_steps.eq(shift_steps),
                self.trace.action.eq(action),
                self.trace.product.eq(product),
                self.trace.additional.eq(additional)
            ]

        return m
