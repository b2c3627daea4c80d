"""Services for session packages."""

from .exceptions import (
    PackagesServiceError,
    PackageCapacityError,
    PackageClosedError,
    InvalidPackageError,
)
from .package_management import (
    value_per_session_for,
    create_package,
    create_sessions_for_package,
    recalculate_consumption,
    recalculate_packages,
    cancel_package,
    delete_package,
    package_progress,
)

__all__ = [
    # Exceptions
    'PackagesServiceError',
    'PackageCapacityError',
    'PackageClosedError',
    'InvalidPackageError',
    # Services
    'value_per_session_for',
    'create_package',
    'create_sessions_for_package',
    'recalculate_consumption',
    'recalculate_packages',
    'cancel_package',
    'delete_package',
    'package_progress',
]
