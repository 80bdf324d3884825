"""Translator configuration"""
from dataclasses import dataclass

from dostrans.error_handling import ConfigurationError


TARGETS = ("go", "python")
BACKENDS = ("ndisasm", "capstone")


@dataclass
class TranslatorConfig:
    """Options for one translation run"""
    target: str = "go"                  # Output language renderer
    backend: str = "ndisasm"            # Disassembler used for binary input
    preseed_registers: bool = True      # Start with a, b, c, d, es, cs, di, ds already declared
    ndisasm_path: str = "ndisasm"       # Executable for the ndisasm backend
    disassembler_timeout: float = 30.0  # Seconds
    origin: int = 0x100                 # Load address of a .com image

    def validate(self) -> "TranslatorConfig":
        """
        Check option values.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: If an option has an unsupported value
        """
        if self.target not in TARGETS:
            raise ConfigurationError(
                f"Unsupported target language: {self.target}",
                suggestion=f"Choose one of: {', '.join(TARGETS)}"
            )
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unsupported disassembler backend: {self.backend}",
                suggestion=f"Choose one of: {', '.join(BACKENDS)}"
            )
        if self.disassembler_timeout <= 0:
            raise ConfigurationError("Disassembler timeout must be positive")
        if not 0 <= self.origin <= 0xFFFF:
            raise ConfigurationError(f"Origin out of 16-bit range: {self.origin:#x}")
        return self
