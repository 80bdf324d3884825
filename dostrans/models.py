"""Core data models for dostrans"""
from dataclasses import dataclass
from enum import Enum


class OperandKind(Enum):
    """What an operand token denotes"""
    IMMEDIATE = "immediate"
    REGISTER = "register"
    MEMORY = "memory"
    EXPRESSION = "expression"   # Anything else, passed through untouched


class Width(Enum):
    """Which part of a register a token addresses"""
    LOW = "low"     # al, bl, cl, dl
    HIGH = "high"   # ah, bh, ch, dh
    WORD = "word"   # ax, si, es, ...


@dataclass(frozen=True)
class Instruction:
    """A normalized instruction line"""
    text: str         # Comment-stripped, trimmed line
    mnemonic: str     # First token of the line


@dataclass(frozen=True)
class Mov(Instruction):
    """mov <destination>, <source>"""
    destination: str
    source: str


@dataclass(frozen=True)
class Interrupt(Instruction):
    """int <vector>"""
    vector: str


@dataclass(frozen=True)
class Push(Instruction):
    """push <operand>"""
    operand: str


@dataclass(frozen=True)
class Pop(Instruction):
    """pop <operand>"""
    operand: str


@dataclass(frozen=True)
class Unmodeled(Instruction):
    """Any mnemonic the translator does not model; emitted as a comment"""
    pass
