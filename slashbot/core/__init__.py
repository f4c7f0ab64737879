"""
slashbot Core

Command registry, interaction dispatch and deployment.
"""

from slashbot.core.deploy import CommandDeployer, RegistrationClient, publish
from slashbot.core.diagnostics import Diagnostic, DiagnosticCode, DiagnosticLevel, DiagnosticLog
from slashbot.core.dispatcher import ERROR_REPLY, InteractionDispatcher
from slashbot.core.models import (
    CommandDefinition,
    CommandHandler,
    CommandModule,
    CommandOption,
    CommandUnit,
    OptionChoice,
    OptionType,
)
from slashbot.core.registry import (
    CommandDirectoryError,
    CommandLoader,
    CommandRegistry,
    discover,
)

__all__ = [
    # Models
    "CommandDefinition",
    "CommandHandler",
    "CommandModule",
    "CommandOption",
    "CommandUnit",
    "OptionChoice",
    "OptionType",
    # Diagnostics
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticLevel",
    "DiagnosticLog",
    # Registry
    "CommandDirectoryError",
    "CommandLoader",
    "CommandRegistry",
    "discover",
    # Dispatch
    "ERROR_REPLY",
    "InteractionDispatcher",
    # Deploy
    "CommandDeployer",
    "RegistrationClient",
    "publish",
]
