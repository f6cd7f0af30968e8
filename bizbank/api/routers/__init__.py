from .auth import router as auth_router
from .market import router as market_router
from .watchlist import router as watchlist_router
