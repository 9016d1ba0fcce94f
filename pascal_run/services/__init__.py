from .best_effort import NonCriticalOperation, NonCriticalResult, retry
from .command_builder import build_instructions, escape_path_for_shell
from .compiler_locator import CompilerLocator
from .run_orchestrator import RunOrchestrator, validate_source

__all__ = [
    "CompilerLocator",
    "NonCriticalOperation",
    "NonCriticalResult",
    "RunOrchestrator",
    "build_instructions",
    "escape_path_for_shell",
    "retry",
    "validate_source",
]
