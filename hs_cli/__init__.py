"""hs-cli -- scaffold Vue 3 and Nuxt 3 projects with selectable features."""

from hs_cli.codemod.manifest import ManifestReadError
from hs_cli.codemod.parsing import ParseError
from hs_cli.codemod.transpiler import ConversionError
from hs_cli.scaffolder.factory import TemplateFactory
from hs_cli.scaffolder.handler import (
    TemplateCommands,
    TemplateHandler,
    TemplateNotFoundError,
    TemplateResult,
)

__version__ = "0.1.0"

__all__ = [
    "ConversionError",
    "ManifestReadError",
    "ParseError",
    "TemplateCommands",
    "TemplateFactory",
    "TemplateHandler",
    "TemplateNotFoundError",
    "TemplateResult",
    "__version__",
]
