"""Error and warning types raised by the dependency updater."""


class DependencyUpdaterError(Exception):
    """Base class for fatal dependency updater errors."""


class ResolutionError(DependencyUpdaterError):
    """Raised when the service returns no identifier or version for a package.

    Fatal: the whole run is aborted and nothing is persisted.
    """

    def __init__(self, message: str, package_id: str = ""):
        super().__init__(message)
        self.package_id = package_id


class ServiceRequestError(ResolutionError):
    """Raised when a request to the distribution service fails or times out."""

    def __init__(self, message: str, package_id: str = "", status: int = 0):
        super().__init__(message, package_id)
        self.status = status


class ManifestParseError(DependencyUpdaterError):
    """Raised when the project manifest cannot be read or has the wrong shape."""


class ConfigurationError(DependencyUpdaterError):
    """Raised when no usable org connection can be assembled."""


class AliasNotFoundWarning(UserWarning):
    """No alias exists locally or remotely; the identifier is used as alias."""

    def __init__(self, package_id: str):
        super().__init__(f"No alias found for package {package_id}; using the identifier")
        self.package_id = package_id
