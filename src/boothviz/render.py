"""Plain-text rendering of Booth multiplication traces."""

from .steps import get_bit


COLUMNS = ("Step", "Sub Step", "Action", "Partial Product", "Additional Bit")


def format_bits(number, width):
    """Return the low ``width`` bits of ``number``, MSb first."""
    return "".join(str(get_bit(number, i)) for i in reversed(range(width)))


def _row(step):
    # The "Step" column counts rounds (shifts); "Sub Step" counts every
    # transition.
    return (str(step.shift_steps),
            str(step.step),
            step.action.label,
            format_bits(step.product, 2*step.bits + 1),
            str(step.additional))


def render_steps(steps):
    """Render a trace as a table, one row per step.

    Parameters
    ----------
    steps : list of Step
        A trace, as returned by :func:`~boothviz.steps.all_steps`.

    Returns
    -------
    str
        The table, with a header row and a separator row. Columns are
        left-aligned and separated by two spaces.
    """
    rows = [COLUMNS] + [_row(s) for s in steps]
    widths = [max(len(r[c]) for r in rows) for c in range(len(COLUMNS))]

    lines = []
    for i, r in enumerate(rows):
        lines.append("  ".join(f.ljust(w) for f, w in zip(r, widths)).rstrip())
        if i == 0:
            lines.append("  ".join("-" * w for w in widths))

    return "\n".join(lines)


def render(operands):
    """Render operands, their trace, and the final answer."""
    steps = operands.steps()

    return "\n".join([
        f"A = {operands.a}",
        format_bits(operands.a, operands.bits),
        f"B = {operands.b}",
        format_bits(operands.b, operands.bits),
        f"Bits = {operands.bits}",
        "",
        render_steps(steps),
        "",
        f"Answer is {steps[-1].product}"
    ])
