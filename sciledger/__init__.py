"""Sciledger: a registry for user-submitted scientific data contributions.

Contributions (observations, measurements, photos, samples) must pass
structural validation, pay a submission fee to the configured authority,
and be approved by that authority before they count as valid.
"""

__version__ = "0.1.0"
__description__ = "Fee-gated, authority-approved registry for scientific data contributions"

from sciledger.core.errors import ErrorKind, RegistryError
from sciledger.core.registry import ContributionRegistry

__all__ = ["ContributionRegistry", "ErrorKind", "RegistryError", "__version__"]
