from savings.api.routes.health import router as health_router
from savings.api.routes.ledger import router as ledger_router
from savings.api.routes.portfolio import router as portfolio_router
from savings.api.routes.sync import router as sync_router

__all__ = ["health_router", "ledger_router", "portfolio_router", "sync_router"]
