from savings.models.base import Base
from savings.models.asset import Asset, DEFAULT_ASSETS
from savings.models.transaction import NATURAL_KEY, SavingsTransaction

__all__ = [
    "Base",
    "Asset",
    "DEFAULT_ASSETS",
    "NATURAL_KEY",
    "SavingsTransaction",
]
