# portfolio_client/__init__.py
from .config import ClientConfig
from .client import PortfolioClient
from .store import CollectionState, OptimisticStore, PortfolioStores, reduce
from . import models
from . import exceptions

__all__ = [
    "ClientConfig", "PortfolioClient", "CollectionState", "OptimisticStore", "PortfolioStores", "reduce",
    "models", "exceptions",
]
