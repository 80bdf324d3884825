"""Line normalization and instruction parsing for 16-bit disassembly listings"""
from typing import Callable, Dict, List

from dostrans.classifier import is_memory_reference
from dostrans.error_handling import MalformedOperandCount
from dostrans.models import Instruction, Interrupt, Mov, Pop, Push, Unmodeled


# Size keywords printed by ndisasm ("word") and capstone ("word ptr")
SIZE_SPECIFIERS = ('byte ptr', 'word ptr', 'dword ptr', 'byte', 'word', 'dword')


def normalize_line(line: str) -> str:
    """Drop everything after the first ';' and trim surrounding whitespace"""
    if ';' in line:
        line = line.split(';', 1)[0]
    return line.strip()


def normalize_listing(text: str) -> List[str]:
    """
    Split a listing into normalized instruction lines.

    Args:
        text: Disassembler output, one instruction per line

    Returns:
        Non-empty, comment-stripped lines in program order
    """
    lines = []
    for raw in text.split('\n'):
        line = normalize_line(raw)
        if line:
            lines.append(line)
    return lines


def strip_size_specifier(operand: str) -> str:
    """Remove a leading size keyword ('word [bx]' -> '[bx]')"""
    operand = operand.strip()
    for spec in SIZE_SPECIFIERS:
        if operand.startswith(spec + ' '):
            return operand[len(spec):].strip()
    return operand


class AssemblyParser:
    """Turns normalized lines into tagged instruction variants"""

    def __init__(self):
        self._builders: Dict[str, Callable[[str, str, str], Instruction]] = {
            'mov': self._parse_mov,
            'int': self._parse_interrupt,
            'push': self._parse_push,
            'pop': self._parse_pop,
        }

    def parse_instruction(self, line: str) -> Instruction:
        """
        Parse one normalized line.

        Mnemonics are matched exactly and case-sensitively against the
        modeled set; everything else becomes Unmodeled.

        Args:
            line: Comment-stripped, trimmed instruction text

        Returns:
            The instruction variant for the line

        Raises:
            MalformedOperandCount: If a modeled mnemonic has the wrong number of operands
        """
        parts = line.split(None, 1)
        mnemonic = parts[0] if parts else ''
        operands = parts[1].strip() if len(parts) > 1 else ''

        builder = self._builders.get(mnemonic)
        if builder is None:
            return Unmodeled(text=line, mnemonic=mnemonic)
        return builder(line, mnemonic, operands)

    def _parse_mov(self, line: str, mnemonic: str, operands: str) -> Mov:
        fields = operands.split(',')
        if len(fields) > 2:
            raise MalformedOperandCount("Too many commas", line)
        if len(fields) < 2 or not fields[0].strip() or not fields[1].strip():
            raise MalformedOperandCount("Expected two operands for mov", line)
        return Mov(
            text=line,
            mnemonic=mnemonic,
            destination=strip_size_specifier(fields[0]),
            source=strip_size_specifier(fields[1]),
        )

    def _single_operand(self, line: str, mnemonic: str, operands: str) -> str:
        operand = strip_size_specifier(operands)
        if is_memory_reference(operand):
            return operand
        fields = operand.split()
        if not fields:
            raise MalformedOperandCount(f"Too few arguments to {mnemonic}", line)
        if len(fields) > 1:
            raise MalformedOperandCount(f"Too many arguments to {mnemonic}", line)
        return fields[0]

    def _parse_interrupt(self, line: str, mnemonic: str, operands: str) -> Interrupt:
        return Interrupt(text=line, mnemonic=mnemonic,
                         vector=self._single_operand(line, mnemonic, operands))

    def _parse_push(self, line: str, mnemonic: str, operands: str) -> Push:
        return Push(text=line, mnemonic=mnemonic,
                    operand=self._single_operand(line, mnemonic, operands))

    def _parse_pop(self, line: str, mnemonic: str, operands: str) -> Pop:
        return Pop(text=line, mnemonic=mnemonic,
                   operand=self._single_operand(line, mnemonic, operands))
