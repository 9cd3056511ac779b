# src/eztest/exceptions.py

"""
Custom exceptions for eztest.
"""


class EztestError(Exception):
    """Base class for all eztest errors."""

    pass


class ConfigurationError(EztestError):
    """Raised when the application settings file cannot be used."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        full_message = message
        if path:
            full_message += f" (File: '{path}')"
        super().__init__(full_message)


class StateError(EztestError):
    """Raised when the persisted project state cannot be read or written."""

    pass


class RunnerError(EztestError):
    """Base class for failures while driving the external test runner."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        details: Exception | None = None,
    ):
        self.command = command
        self.details = details
        full_message = f"[Runner] {message}"
        super().__init__(full_message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class RunnerLaunchError(RunnerError):
    """The runner command could not be located or started."""

    pass


class RunnerReadError(RunnerError):
    """Reading the runner's output failed for a reason other than process exit."""

    pass

# 🧪⚙️
