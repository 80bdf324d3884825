"""Input handler for reading programs and listings from files or stdin"""
import sys
from pathlib import Path
from typing import Optional

from dostrans.config import TranslatorConfig
from dostrans.disassembler import create_disassembler
from dostrans.error_handling import ErrorContext, InputError, create_error


class InputHandler:
    """Produces listing text from a binary, a listing file or standard input"""

    def __init__(self, config: Optional[TranslatorConfig] = None):
        self.config = config or TranslatorConfig()

    def check_file(self, filepath: str) -> Path:
        """
        Make sure the input file exists.

        Raises:
            InputError: If the path does not exist or is not a regular file
        """
        path = Path(filepath)
        if not path.exists():
            raise create_error("file_not_found", InputError,
                               context=ErrorContext(file=filepath), path=filepath)
        if not path.is_file():
            raise InputError(f"Not a file: {filepath}", context=ErrorContext(file=filepath))
        return path

    def read_binary(self, filepath: str) -> str:
        """
        Disassemble a binary with the configured backend.

        Args:
            filepath: Path to a 16-bit real-mode binary

        Returns:
            Listing text

        Raises:
            InputError: If the file doesn't exist
            DisassemblyError: If the disassembler fails
        """
        path = self.check_file(filepath)
        disassembler = create_disassembler(self.config)
        return disassembler.disassemble(path)

    def read_listing(self, filepath: str) -> str:
        """
        Read an existing disassembly listing. ``-`` reads standard input.

        Raises:
            InputError: If the file doesn't exist, can't be read or is empty
        """
        if filepath == "-":
            content = sys.stdin.read()
        else:
            path = self.check_file(filepath)
            try:
                content = path.read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError) as e:
                raise InputError(f"Cannot read file: {filepath}", original_exception=e,
                                 context=ErrorContext(file=filepath)) from e

        if not content.strip():
            raise create_error("empty_input", InputError,
                               context=ErrorContext(file=filepath), path=filepath)
        return content

    def read(self, filepath: str, listing: bool = False) -> str:
        """Listing text for the given input, disassembling unless listing is set"""
        if listing:
            return self.read_listing(filepath)
        return self.read_binary(filepath)
