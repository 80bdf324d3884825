"""Single-pass translation of 16-bit x86 instructions into emulator statements"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Type

from dostrans.classifier import Operand, TranslationState, resolve_operand
from dostrans.config import TranslatorConfig
from dostrans.error_handling import TranslationError, UnsupportedOperandForm
from dostrans.formatter import OutputFormatter
from dostrans.models import Instruction, Interrupt, Mov, OperandKind, Pop, Push, Unmodeled
from dostrans.parser import AssemblyParser, normalize_listing
from dostrans.statements import (
    Comment,
    CopyRegister,
    Declare,
    InterruptCall,
    MemoryWrite,
    SetRegister,
    StackPop,
    StackPush,
    Statement,
)

logger = logging.getLogger(__name__)


@dataclass
class LineResult:
    """Outcome of translating one line: statements, or the fatal error that stopped it"""
    line: str
    statements: List[Statement] = field(default_factory=list)
    error: Optional[TranslationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class InstructionTranslator:
    """
    Translates normalized instruction lines into typed statements.

    Only mov, int, push and pop are modeled. Every other mnemonic becomes a
    comment carrying the original text. The only state kept between lines is
    the TranslationState (declared registers and observed memory bases).
    """

    def __init__(self, config: Optional[TranslatorConfig] = None,
                 state: Optional[TranslationState] = None):
        self.config = config or TranslatorConfig()
        if state is None:
            state = TranslationState.preseeded() if self.config.preseed_registers else TranslationState()
        self.state = state
        self.parser = AssemblyParser()
        self._handlers: Dict[Type[Instruction], Callable[[Instruction], List[Statement]]] = {
            Mov: self._translate_mov,
            Interrupt: self._translate_interrupt,
            Push: self._translate_push,
            Pop: self._translate_pop,
            Unmodeled: self._translate_unmodeled,
        }

    def translate_line(self, line: str, line_number: Optional[int] = None) -> LineResult:
        """
        Translate one normalized line.

        Input problems are returned on the result instead of raised, so the
        caller decides how to stop.

        Args:
            line: Comment-stripped, trimmed instruction text
            line_number: Position in the listing, for error reports

        Returns:
            LineResult with the emitted statements or the error
        """
        try:
            instruction = self.parser.parse_instruction(line)
            statements = self._handlers[type(instruction)](instruction)
        except TranslationError as e:
            if line_number is not None and e.context.line_number is None:
                e.context.line_number = line_number
            return LineResult(line=line, error=e)
        return LineResult(line=line, statements=statements)

    def translate_lines(self, lines: Iterable[str]) -> List[Statement]:
        """
        Translate lines in order, stopping at the first fatal error.

        Raises:
            TranslationError: The first line that could not be translated
        """
        statements: List[Statement] = []
        for number, line in enumerate(lines, start=1):
            result = self.translate_line(line, line_number=number)
            if not result.ok:
                raise result.error
            statements.extend(result.statements)
        return statements

    def translate(self, listing: str) -> str:
        """
        Translate a whole disassembly listing into target source code.

        Args:
            listing: Raw disassembler output

        Returns:
            Preamble, one annotated block per instruction, and epilogue
        """
        statements = self.translate_lines(normalize_listing(listing))
        formatter = OutputFormatter(target=self.config.target)
        return formatter.format(statements)

    def _translate_mov(self, instruction: Mov) -> List[Statement]:
        line = instruction.text
        destination = Operand.parse(instruction.destination)
        source = Operand.parse(instruction.source)
        statements: List[Statement] = []

        if destination.is_register:
            register = destination.register
            if self.state.mark_seen(register):
                statements.append(Declare(source=line, register=register))

            if source.is_register:
                statements.append(CopyRegister(source=line, register=register,
                                               source_register=source.register))
            else:
                value = resolve_operand(source.raw, self.state)
                statements.append(SetRegister(source=line, register=register,
                                              width=destination.width, value=value))
        else:
            # Write side takes the bracket contents literally, no register lookup
            offset = destination.inner.raw if destination.inner else destination.raw
            value = resolve_operand(source.raw, self.state)
            statements.append(MemoryWrite(source=line, offset=offset, value=value))

        return statements

    def _translate_interrupt(self, instruction: Interrupt) -> List[Statement]:
        return [InterruptCall(source=instruction.text, vector=instruction.vector)]

    def _translate_push(self, instruction: Push) -> List[Statement]:
        operand = Operand.parse(instruction.operand)
        if operand.is_register:
            return [StackPush(source=instruction.text, register=operand.register)]
        if operand.kind == OperandKind.IMMEDIATE:
            raise UnsupportedOperandForm("Pushing values directly to the stack is not implemented",
                                         instruction.text)
        raise UnsupportedOperandForm("Pushing memory locations to the stack is not implemented",
                                     instruction.text)

    def _translate_pop(self, instruction: Pop) -> List[Statement]:
        operand = Operand.parse(instruction.operand)
        if operand.is_register:
            return [StackPop(source=instruction.text, register=operand.register)]
        if operand.kind == OperandKind.IMMEDIATE:
            raise UnsupportedOperandForm("Popping to a value is not possible", instruction.text)
        raise UnsupportedOperandForm("Popping to a memory location is not implemented",
                                     instruction.text)

    def _translate_unmodeled(self, instruction: Unmodeled) -> List[Statement]:
        logger.debug(f"Unmodeled instruction kept as comment: {instruction.text}")
        return [Comment(source=instruction.text)]


def translate(listing: str, config: Optional[TranslatorConfig] = None) -> str:
    """Translate a listing with a fresh translator"""
    return InstructionTranslator(config).translate(listing)
