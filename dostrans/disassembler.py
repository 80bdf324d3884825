"""Disassembler adapters producing 16-bit listing text for the translator"""
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from capstone import Cs, CsError, CS_ARCH_X86, CS_MODE_16

from dostrans.config import TranslatorConfig
from dostrans.error_handling import DisassemblyError, ErrorContext, create_error

logger = logging.getLogger(__name__)


# ndisasm prints "ADDRESS  HEXBYTES  INSTRUCTION"; the instruction starts at column 29
NDISASM_TEXT_COLUMN = 28


@dataclass
class ListingLine:
    """One disassembled instruction"""
    address: int
    text: str         # "<mnemonic> <operands>", ndisasm style

    def __str__(self):
        return self.text


class NdisasmDisassembler:
    """
    Runs the external ndisasm tool in 16-bit mode.

    Equivalent to ``ndisasm -a -b 16 FILE | cut -b29-``.
    """

    def __init__(self, executable: str = "ndisasm", timeout: float = 30.0, origin: int = 0x100):
        self.executable = executable
        self.timeout = timeout
        self.origin = origin

    def command(self, path: Union[str, Path]) -> List[str]:
        return [self.executable, "-a", "-b", "16", "-o", str(self.origin), str(path)]

    def disassemble(self, path: Union[str, Path]) -> str:
        """
        Disassemble a binary file.

        Args:
            path: File to disassemble

        Returns:
            Listing text, one instruction per line, address columns removed

        Raises:
            DisassemblyError: If ndisasm is missing, fails or times out
        """
        command = self.command(path)
        logger.debug(f"Running: {' '.join(command)}")
        context = ErrorContext(file=str(path), function="ndisasm")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except FileNotFoundError as e:
            error = create_error("disassembler_missing", DisassemblyError,
                                 context=context, command=self.executable)
            error.original_exception = e
            raise error from e
        except subprocess.TimeoutExpired as e:
            error = create_error("disassembly_timeout", DisassemblyError,
                                 context=context, timeout=self.timeout)
            error.original_exception = e
            raise error from e

        if result.returncode != 0:
            if result.stderr.strip():
                context.additional_info = {"stderr": result.stderr.strip()}
            raise create_error("disassembly_failed", DisassemblyError, context=context,
                               path=path, status=result.returncode)

        return self.strip_columns(result.stdout)

    @staticmethod
    def strip_columns(output: str) -> str:
        """Keep only the instruction column of ndisasm output"""
        return "\n".join(line[NDISASM_TEXT_COLUMN:] for line in output.split("\n"))


class CapstoneDisassembler:
    """
    16-bit x86 disassembler using the Capstone engine.

    Output is rendered in the same style as ndisasm so the rest of the
    pipeline does not care which backend produced it.
    """

    def __init__(self, origin: int = 0x100):
        self.origin = origin
        try:
            self._cs = Cs(CS_ARCH_X86, CS_MODE_16)
        except CsError as e:
            raise DisassemblyError(f"Failed to initialize Capstone: {e}", original_exception=e)

    def disassemble_bytes(self, code: bytes, address: Optional[int] = None) -> List[ListingLine]:
        """
        Disassemble raw bytes, continuing past undecodable bytes.

        Bytes Capstone cannot decode are emitted as ``db 0x..`` lines, which
        the translator passes through as comments.

        Args:
            code: Raw machine code
            address: Load address of the first byte (defaults to the origin)

        Returns:
            List of ListingLine objects in program order
        """
        if address is None:
            address = self.origin

        lines: List[ListingLine] = []
        offset = 0

        while offset < len(code):
            current = address + offset
            try:
                decoded = list(self._cs.disasm(code[offset:], current, 1))
            except CsError:
                decoded = []

            if decoded:
                insn = decoded[0]
                lines.append(ListingLine(address=insn.address, text=self._render(insn.mnemonic, insn.op_str)))
                offset += insn.size
            else:
                lines.append(ListingLine(address=current, text=f"db {code[offset]:#04x}"))
                offset += 1

        return lines

    def disassemble(self, path: Union[str, Path]) -> str:
        """
        Disassemble a binary file.

        Raises:
            DisassemblyError: If the file cannot be read
        """
        try:
            code = Path(path).read_bytes()
        except OSError as e:
            raise DisassemblyError(f"Cannot read {path}", original_exception=e,
                                   context=ErrorContext(file=str(path), function="capstone"))
        logger.debug(f"Disassembling {len(code)} bytes from {path} with Capstone")
        return "\n".join(line.text for line in self.disassemble_bytes(code))

    @staticmethod
    def _render(mnemonic: str, op_str: str) -> str:
        op_str = op_str.replace(" ptr ", " ")
        if op_str:
            return f"{mnemonic} {op_str}"
        return mnemonic


def create_disassembler(config: Optional[TranslatorConfig] = None):
    """
    Factory function for the configured disassembler backend.

    Args:
        config: Translator configuration (backend, executable, timeout, origin)

    Returns:
        NdisasmDisassembler or CapstoneDisassembler
    """
    config = config or TranslatorConfig()
    if config.backend == "capstone":
        return CapstoneDisassembler(origin=config.origin)
    return NdisasmDisassembler(
        executable=config.ndisasm_path,
        timeout=config.disassembler_timeout,
        origin=config.origin
    )
