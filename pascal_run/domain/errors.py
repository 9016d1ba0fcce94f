class SourceValidationError(ValueError):
    """The file handed to a compile job cannot be compiled in place."""


class CompilerSaveError(RuntimeError):
    """A selected compiler path could not be persisted to configuration."""
