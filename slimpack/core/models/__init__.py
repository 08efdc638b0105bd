"""
Domain models — Pydantic types for the packager.

    from slimpack.core.models import PackagerConfig, PackageSpec, Action, Receipt
"""

from slimpack.core.models.action import Action, Receipt
from slimpack.core.models.package import LOCK_FILES, PackagerConfig, PackageSpec
from slimpack.core.models.report import PackageReport

__all__ = [
    "LOCK_FILES",
    "Action",
    "PackageReport",
    "PackageSpec",
    "PackagerConfig",
    "Receipt",
]
