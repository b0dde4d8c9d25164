"""Exceptions for the Phantom PBIP exporter."""


class PhantomExportError(Exception):
    """Base exception for all export errors."""
    pass


class UnknownScenarioError(PhantomExportError, ValueError):
    """Exception raised when a scenario name is not part of the catalog."""
    def __init__(self, scenario=None, message="Unknown scenario"):
        self.scenario = scenario
        if scenario is not None:
            message = f"{message}: {scenario!r}"
        super().__init__(message)


class PackageSerializationError(PhantomExportError):
    """Exception raised when the PBIP archive cannot be written.

    No partial archive is ever returned alongside this error.
    """
    def __init__(self, message="Failed to serialize PBIP package", project_name=None):
        self.project_name = project_name
        if project_name:
            message = f"{message} ({project_name})"
        super().__init__(message)


class OutputWriteError(PhantomExportError):
    """Exception raised when a finished archive cannot be saved to disk."""
    def __init__(self, path, reason=None):
        self.path = path
        message = f"Cannot write {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
