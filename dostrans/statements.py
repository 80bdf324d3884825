"""
Typed statement records produced by the translator.

The translator never builds target-language text itself. It produces these
records and a renderer in ``dostrans.formatter`` turns them into Go or Python
source in one final pass.
"""
from dataclasses import dataclass
from typing import Union

from dostrans.models import Width


@dataclass(frozen=True)
class Literal:
    """Text copied verbatim into the output (numbers, labels, raw syntax)"""
    text: str


@dataclass(frozen=True)
class RegisterRead:
    """Current word value of a register, by canonical identity"""
    register: str


@dataclass(frozen=True)
class MemoryRead:
    """Memory contents at an address expression"""
    address: "Expression"


Expression = Union[Literal, RegisterRead, MemoryRead]

ZERO = Literal("0")


@dataclass(frozen=True)
class Statement:
    """Base record; ``source`` is the instruction text the statement came from"""
    source: str


@dataclass(frozen=True)
class Declare(Statement):
    """First binding of a register that was not declared before"""
    register: str


@dataclass(frozen=True)
class SetRegister(Statement):
    register: str
    width: Width
    value: Expression


@dataclass(frozen=True)
class CopyRegister(Statement):
    """Full word copy from one register into another"""
    register: str
    source_register: str


@dataclass(frozen=True)
class MemoryWrite(Statement):
    offset: str
    value: Expression


@dataclass(frozen=True)
class InterruptCall(Statement):
    vector: str


@dataclass(frozen=True)
class StackPush(Statement):
    register: str


@dataclass(frozen=True)
class StackPop(Statement):
    """Move the top of the stack into a register and drop that slot"""
    register: str


@dataclass(frozen=True)
class Comment(Statement):
    pass
