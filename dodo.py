# ruff: noqa: D100, D101, D103

import importlib
import inspect
from amaranth import Elaboratable
from amaranth.back.verilog import convert

import subprocess
from string import Template
from io import StringIO
import json

from boothviz.operands import Operands
from boothviz.render import render


ICE40_SCRIPT = Template("""
${quiet} read_verilog << verilog
${verilog_text}
verilog
${quiet} synth_ice40 -run ${from_}:${to} ${extra}
${emit}
""")


def print_trace(a, b, width):
    # Same clamping as interactive input; out-of-range operands are not
    # an error.
    print(render(Operands(a=a, b=b, bits=width)))


def find_module_create_verilog(module, width):
    mod_name, cls_name = module.split(":")
    cls = getattr(importlib.import_module(mod_name), cls_name)

    p = inspect.signature(cls.__init__).parameters
    kwargs = dict()
    if "width" in p:
        kwargs["width"] = width

    m = cls(**kwargs)
    if not isinstance(m, Elaboratable):
        raise ValueError(f"{cls} does not look like an Elaboratable")

    v = convert(m)
    return {"verilog": v}


def run_yosys(v_file, from_="begin", to="blif", emit="stat -json", extra=""):
    stdin = ICE40_SCRIPT.substitute(verilog_text=v_file, quiet="tee -q",
                                    from_=from_, to=to, emit=emit,
                                    extra=extra)
    p = subprocess.Popen(["yosys", "-Q", "-T", "-"],
                         stdin=subprocess.PIPE,
                         stdout=subprocess.PIPE,
                         stderr=subprocess.PIPE,
                         encoding="utf-8")

    stdout, stderr = p.communicate(stdin)
    if p.returncode:
        raise subprocess.SubprocessError(stderr.strip())

    return {"stdout": stdout}


def print_verilog(v_file, preprocess="none", extra=""):
    if preprocess in ("none",):
        # No point in invoking yosys for a no-op.
        print(v_file)
        return

    if preprocess == "coarse":
        to = "map_gates"
    elif preprocess == "fine":
        to = "map_ffs"
    else:
        to = ""

    raw_out = run_yosys(v_file, to=to, emit="tee -q write_verilog -",
                        extra=extra)["stdout"]

    # Skip the yosys banner; the netlist starts at the first comment.
    lines = StringIO(raw_out).readlines()
    start = next((i for i, line in enumerate(lines)
                  if line.startswith("/*")), len(lines))
    print("".join(lines[start:]))


def print_stats(raw_stats):
    # Find the start of the JSON from the stats command.
    lines = StringIO(raw_stats).readlines()
    start = next(i for i, line in enumerate(lines) if line.startswith("{"))

    print(json.dumps(json.loads("".join(lines[start:])), indent=4))


def task_trace():
    return {
        "params": [
            {
                "name": "a",
                "short": "a",
                "type": int,
                "default": 3,
                "help": "multiplicand"
            },
            {
                "name": "b",
                "short": "b",
                "type": int,
                "default": -7,
                "help": "multiplier"
            },
            {
                "name": "width",
                "short": "w",
                "type": int,
                "default": 5,
                "help": "width in bits of multiplicand and multiplier (1-15)"
            },
        ],
        "uptodate": [False],
        "actions": [(print_trace,)],
        "verbosity": 2
    }


def task_find_module():
    return {
        "params": [
            {
                "name": "module",
                "short": "m",
                "type": str,
                "default": "boothviz.mul:BoothMul",
                "help": "boothviz module to synthesize"
            },
            {
                "name": "width",
                "short": "w",
                "type": int,
                "default": 8,
                "help": "module input port width (if present)"
            },
        ],
        "actions": [(find_module_create_verilog,)],
    }


def task_emit_verilog():
    return {
        "params": [
            {
                "name": "preprocess",
                "short": "p",
                "type": str,
                "choices": (("none", ""),
                            ("coarse", "to map_gates"),
                            ("fine", "to map_ffs"),
                            ("all", "")),
                "default": "none",
                "help": "yosys preprocessing for Amaranth output"
            },
            {
                "name": "extra",
                "short": "e",
                "type": str,
                "default": "",
                "help": "extra args for yosys synthesis pass"
            }
        ],
        "uptodate": [False],
        "actions": [(print_verilog, (), {})],
        "getargs": {"v_file": ("find_module", "verilog")},
        "verbosity": 2
    }


def task_run_yosys():
    return {
        "params": [
            {
                "name": "extra",
                "short": "e",
                "type": str,
                "default": "",
                "help": "extra args for yosys synthesis pass"
            }
        ],
        "uptodate": [False],
        "actions": [(run_yosys, (), {})],
        "getargs": {"v_file": ("find_module", "verilog")},
    }


def task_stats():
    return {
        "uptodate": [False],
        "actions": [(print_stats, (), {})],
        "getargs": {"raw_stats": ("run_yosys", "stdout")},
        "verbosity": 2
    }
