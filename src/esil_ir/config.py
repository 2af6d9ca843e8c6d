"""
ESIL-IR Configuration
=====================

Translator settings and how to build a parser from them. Configuration
can come from:
- Default values (defined here)
- Environment variables (TranslatorConfig.from_env)
- Command-line options (esil2ir)

Environment variables (all optional):
    ESIL_IR_ARCH: Architecture profile name (e.g., "x86_64")
    ESIL_IR_DEFAULT_SIZE: Width in bits for constants and unknown operands
    ESIL_IR_STRICT: "1", "true", "yes" or "on" to raise on the first problem
"""

from dataclasses import dataclass
from typing import Optional
import os

from esil_ir.parser import EsilParser
from esil_ir.registers import DEFAULT_ARCHITECTURE, get_architecture

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class TranslatorConfig:
    """
    Settings for building an EsilParser.

    Attributes:
        architecture: Registered architecture profile name
        default_size: Operand width override (None = profile default)
        strict: Raise TranslationError instead of recording diagnostics
    """
    architecture: str = DEFAULT_ARCHITECTURE
    default_size: Optional[int] = None
    strict: bool = False

    @classmethod
    def from_env(cls) -> "TranslatorConfig":
        """
        Create TranslatorConfig from environment variables.

        Invalid values are ignored and the default is kept.
        """
        config = cls()

        if arch := os.environ.get("ESIL_IR_ARCH"):
            config.architecture = arch

        if size := os.environ.get("ESIL_IR_DEFAULT_SIZE"):
            try:
                parsed = int(size)
            except ValueError:
                parsed = 0
            if parsed > 0:
                config.default_size = parsed

        if strict := os.environ.get("ESIL_IR_STRICT"):
            if strict.lower() in _TRUE_VALUES:
                config.strict = True
            elif strict.lower() in _FALSE_VALUES:
                config.strict = False

        return config

    def create_parser(self) -> EsilParser:
        """
        Build a parser from these settings.

        Raises:
            UnknownArchitectureError: If the architecture is not registered
        """
        return EsilParser(
            get_architecture(self.architecture),
            default_size=self.default_size,
            strict=self.strict,
        )
