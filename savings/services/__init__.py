# Services package
from savings.services.data_service import DataService
from savings.services.portfolio_service import PortfolioService
from savings.services.quote_service import ExchangeRate, QuoteGateway
from savings.services.sync_service import SyncReport, SyncService

__all__ = [
    "DataService",
    "ExchangeRate",
    "PortfolioService",
    "QuoteGateway",
    "SyncReport",
    "SyncService",
]
