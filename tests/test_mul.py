# amaranth: UnusedElaboratable=no

import pytest
from boothviz.mul import BoothMul
from boothviz.steps import Action, all_steps, initial_step
from itertools import product
import random


def make_testbench(mod, values):
    m = mod

    async def tb(ctx):
        # Not yielding to the simulator when values don't change
        # can result in significant speedups.
        a_prev = None
        b_prev = None

        await ctx.tick()

        ctx.set(m.outp.ready, 1)

        for (a, b) in values:
            if a != a_prev:
                ctx.set(m.inp.payload.a.as_signed(), a)
            if b != b_prev:
                ctx.set(m.inp.payload.b.as_signed(), b)

            ctx.set(m.inp.valid, 1)
            await ctx.tick()
            (a_prev, b_prev) = (a, b)

            ctx.set(m.inp.valid, 0)
            await ctx.tick().until(m.outp.valid == 1)

            assert a*b == ctx.get(m.outp.payload.o.as_signed())

    return tb


@pytest.fixture
def all_values(mod):
    w = mod.width
    return product(range(-2**(w-1), 2**(w-1)), repeat=2)


@pytest.fixture
def random_vals(mod):
    w = mod.width - 1

    def vals():
        for i in range(256):
            a = random.randint(-2**w, (2**w)-1)
            b = random.randint(-2**w, (2**w)-1)
            yield (a, b)

    return vals()


@pytest.fixture
def trace_tb(mod, a, b):
    m = mod
    steps = all_steps(initial_step(b, m.width), a, m.width)

    async def testbench(ctx):
        await ctx.tick()

        ctx.set(m.inp.payload.a.as_signed(), a)
        ctx.set(m.inp.payload.b.as_signed(), b)
        ctx.set(m.inp.valid, 1)
        await ctx.tick()

        ctx.set(m.inp.valid, 0)

        # One transition per clock cycle.
        for s in steps:
            assert ctx.get(m.trace.step) == s.step
            assert ctx.get(m.trace.shift_steps) == s.shift_steps
            assert Action(ctx.get(m.trace.action)) == s.action
            assert ctx.get(m.trace.product) == s.product
            assert ctx.get(m.trace.additional) == s.additional

            if s is steps[-1]:
                assert ctx.get(m.outp.valid) == 1
            else:
                assert ctx.get(m.outp.valid) == 0
                assert ctx.get(m.inp.ready) == 0
                await ctx.tick()

        assert ctx.get(m.outp.payload.o.as_signed()) == a*b

        # Result is held until read.
        await ctx.tick().repeat(2)
        assert ctx.get(m.outp.valid) == 1
        assert ctx.get(m.inp.ready) == 0
        assert ctx.get(m.outp.payload.o.as_signed()) == a*b

        ctx.set(m.outp.ready, 1)
        assert ctx.get(m.inp.ready) == 1
        await ctx.tick()

        assert ctx.get(m.outp.valid) == 0
        assert ctx.get(m.inp.ready) == 1

    return testbench


@pytest.fixture
def busy_tb(mod):
    m = mod

    async def testbench(ctx):
        await ctx.tick()

        ctx.set(m.inp.payload.a.as_signed(), 3)
        ctx.set(m.inp.payload.b.as_signed(), -7)
        ctx.set(m.inp.valid, 1)
        await ctx.tick()

        # A second multiply waits until the first is done and read.
        ctx.set(m.inp.payload.a.as_signed(), -7)
        ctx.set(m.inp.payload.b.as_signed(), -7)
        assert ctx.get(m.inp.ready) == 0
        await ctx.tick().until(m.outp.valid == 1)

        assert ctx.get(m.outp.payload.o.as_signed()) == -21
        assert ctx.get(m.inp.ready) == 0

        ctx.set(m.outp.ready, 1)
        assert ctx.get(m.inp.ready) == 1
        await ctx.tick()

        ctx.set(m.inp.valid, 0)
        assert ctx.get(m.outp.valid) == 0
        await ctx.tick().until(m.outp.valid == 1)

        assert ctx.get(m.outp.payload.o.as_signed()) == 49

    return testbench


@pytest.mark.parametrize("mod", [BoothMul(1), BoothMul(5),
                                 BoothMul(6, debug=True)],
                         ids=["m1", "m5", "m6d"])
@pytest.mark.parametrize("clks", [1.0 / 12e6])
def test_all_values(sim, mod, all_values):
    sim.run(testbenches=[make_testbench(mod, all_values)])


@pytest.mark.parametrize("mod", [BoothMul(15), BoothMul(32)],
                         ids=["m15", "m32"])
@pytest.mark.parametrize("clks", [1.0 / 12e6])
def test_random(sim, mod, random_vals):
    random.seed(0)
    sim.run(testbenches=[make_testbench(mod, random_vals)])


@pytest.mark.parametrize("a,b", [(3, -7), (-7, -7), (-16, -16), (15, -16),
                                 (-16, 15), (0, 0), (0, -7), (-1, 1)])
@pytest.mark.parametrize("mod,clks", [(BoothMul(5, debug=True),
                                       1.0 / 12e6)])
def test_trace(sim, trace_tb):
    sim.run(testbenches=[trace_tb])


@pytest.mark.parametrize("mod,clks", [(BoothMul(5), 1.0 / 12e6)])
def test_busy(sim, busy_tb):
    sim.run(testbenches=[busy_tb])


def test_bad_width():
    with pytest.raises(ValueError):
        BoothMul(0)


def test_debug_port():
    assert "trace" in BoothMul(4, debug=True).signature.members
    assert "trace" not in BoothMul(4).signature.members
