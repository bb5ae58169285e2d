"""Exception hierarchy for codebox."""


class CodeboxError(Exception):
    """Base exception for codebox"""
    pass


class ExecutionError(CodeboxError):
    """Unexpected failure while dispatching or running a submission"""
    pass


class WorkspaceError(CodeboxError):
    """Scratch directory could not be allocated or written"""
    pass


class SettingsError(CodeboxError, ValueError):
    """Invalid executor settings"""
    pass
