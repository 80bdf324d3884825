"""dostrans - translate 16-bit DOS programs into emulator-backed Go or Python"""
from dostrans.__version__ import __version__
from dostrans.classifier import TranslationState
from dostrans.config import TranslatorConfig
from dostrans.error_handling import (
    DosTransError,
    MalformedOperandCount,
    TranslationError,
    UnsupportedOperandForm,
)
from dostrans.translator import InstructionTranslator, LineResult, translate

__all__ = [
    "DosTransError",
    "InstructionTranslator",
    "LineResult",
    "MalformedOperandCount",
    "TranslationError",
    "TranslationState",
    "TranslatorConfig",
    "UnsupportedOperandForm",
    "__version__",
    "translate",
]
