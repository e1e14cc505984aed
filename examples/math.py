"""Demo module: positional and named arguments.

    cmdlets -m examples "add(2, 3)" "sub(a: 5, b: 2)"
"""

from cmdlets.core.types import ArgKind


def _number(value):
    number = float(value)
    return int(number) if number.is_integer() else number


def setup(registrar):
    @registrar.command(
        "add",
        help="addition, ex: add(a, b) => a+b",
        group="math",
        accepts={ArgKind.POSITIONAL},
    )
    async def add(a, b):
        total = _number(a) + _number(b)
        registrar.message(f"{a}+{b}={total}")
        return total

    @registrar.command(
        "sub",
        help="subtraction, ex: sub(a: 2, b: 1) => a-b",
        group="math",
        accepts={ArgKind.NAMED},
    )
    async def sub(args):
        difference = _number(args["a"]) - _number(args["b"])
        registrar.message(f"{args['a']}-{args['b']}={difference}")
        return difference
