"""Domain-specific exceptions for packages services."""


class PackagesServiceError(Exception):
    """Base exception for packages services."""
    pass


class PackageCapacityError(PackagesServiceError):
    """Raised when a package would hold more sessions than it was sold with."""
    pass


class PackageClosedError(PackagesServiceError):
    """Raised when scheduling into a cancelled package."""
    pass


class InvalidPackageError(PackagesServiceError):
    """Raised when package data is inconsistent."""
    pass
