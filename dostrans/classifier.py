"""Operand classification and register alias resolution for 16-bit x86"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Set

from dostrans.models import OperandKind, Width
from dostrans.statements import Expression, Literal, MemoryRead, RegisterRead, ZERO

logger = logging.getLogger(__name__)


REGISTERS = frozenset({
    'al', 'ah', 'ax', 'bl', 'bh', 'bx', 'cl', 'ch', 'cx', 'dl', 'dh', 'dx',
    'si', 'di', 'sp', 'bp', 'ip',
    'cs', 'es', 'ds', 'fs', 'gs', 'ss',
})

# Registers the runtime always provides, declared by the preamble
PRESEEDED_REGISTERS = ('a', 'b', 'c', 'd', 'es', 'cs', 'di', 'ds')

_FAMILIES = {
    'al': 'a', 'ah': 'a', 'ax': 'a',
    'bl': 'b', 'bh': 'b', 'bx': 'b',
    'cl': 'c', 'ch': 'c', 'cx': 'c',
    'dl': 'd', 'dh': 'd', 'dx': 'd',
}

_IMMEDIATE_CHARS = frozenset('0123456789x')


@dataclass
class TranslationState:
    """
    Carry-over state for one translation run.

    seen_registers holds the canonical identities already declared in the
    output. memory_bases records register names used as memory addressing
    bases; nothing branches on it.
    """
    seen_registers: Set[str] = field(default_factory=set)
    memory_bases: Set[str] = field(default_factory=set)

    @classmethod
    def preseeded(cls) -> 'TranslationState':
        """State with the architecturally always-present registers already seen"""
        return cls(seen_registers=set(PRESEEDED_REGISTERS))

    def has_seen(self, register: str) -> bool:
        return canonical_identity(register) in self.seen_registers

    def mark_seen(self, register: str) -> bool:
        """
        Record a register as declared.

        Returns:
            True if this was the register's first appearance
        """
        identity = canonical_identity(register)
        if identity in self.seen_registers:
            return False
        self.seen_registers.add(identity)
        return True

    def record_memory_base(self, register: str):
        self.memory_bases.add(register)


@dataclass
class Operand:
    """Classified view of an operand token"""
    raw: str                           # Original text
    kind: OperandKind
    register: Optional[str] = None     # Canonical identity if the token names a register
    width: Optional[Width] = None      # Register part addressed by the spelling
    inner: Optional['Operand'] = None  # Bracket contents of a memory reference

    @staticmethod
    def parse(token: str) -> 'Operand':
        """Classify a token and resolve its register alias, if any"""
        token = token.strip()
        kind = classify_kind(token)
        operand = Operand(raw=token, kind=kind)

        if is_register(token):
            operand.register = canonical_identity(token)
            operand.width = register_width(token)
        if is_memory_reference(token):
            operand.inner = Operand.parse(token[1:-1])

        return operand

    @property
    def is_register(self) -> bool:
        return self.register is not None


def is_immediate(token: str) -> bool:
    """
    Coarse numeric test: any decimal digit or the letter 'x' anywhere.

    This accepts every numeric literal the disassembler prints (0x10, 10,
    21h) but also catches ax, bx, cx, dx and labels containing digits.
    """
    return any(ch in _IMMEDIATE_CHARS for ch in token)


def is_register(token: str) -> bool:
    return token in REGISTERS


def is_memory_reference(token: str) -> bool:
    return len(token) >= 2 and token[0] == '[' and token[-1] == ']'


def classify_kind(token: str) -> OperandKind:
    """
    Classify a token as an immediate, a register or a memory reference.

    The immediate heuristic runs first, so it wins over everything else.
    Tokens that match nothing fall through to EXPRESSION.
    """
    if is_immediate(token):
        return OperandKind.IMMEDIATE
    if is_register(token):
        return OperandKind.REGISTER
    if is_memory_reference(token):
        return OperandKind.MEMORY
    return OperandKind.EXPRESSION


def canonical_identity(register: str) -> str:
    """Collapse al/ah/ax to 'a' (and so on for b, c, d); other names map to themselves"""
    return _FAMILIES.get(register, register)


def register_width(register: str) -> Width:
    if register in _FAMILIES:
        if register.endswith('h'):
            return Width.HIGH
        if register.endswith('l'):
            return Width.LOW
    return Width.WORD


def resolve_value(token: str, state: TranslationState) -> Expression:
    """
    Expression for the value a token denotes.

    Registers that have not been declared yet read as zero.
    """
    if is_immediate(token):
        return Literal(token)
    if is_register(token):
        if not state.has_seen(token):
            logger.warning(f"Register {token} read before it was assigned, using 0")
            return ZERO
        return RegisterRead(canonical_identity(token))
    return Literal(token)


def resolve_operand(token: str, state: TranslationState) -> Expression:
    """
    Expression for a source operand, following one level of memory indirection.

    [reg] reads memory at the register's value and records reg as a memory
    base. [expr] for anything else reads memory at the address stored at
    expr. Other tokens pass through unchanged.
    """
    if is_immediate(token):
        return Literal(token)
    if is_memory_reference(token):
        inner = token[1:-1]
        if is_register(inner):
            address = resolve_value(inner, state)
            state.record_memory_base(inner)
            return MemoryRead(address)
        return MemoryRead(MemoryRead(Literal(inner)))
    return Literal(token)
