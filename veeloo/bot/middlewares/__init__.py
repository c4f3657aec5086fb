from veeloo.bot.middlewares.db_session import DbSessionMiddleware
from veeloo.bot.middlewares.feature_gate import FeatureGateMiddleware
from veeloo.bot.middlewares.user_context import UserContextMiddleware

__all__ = [
    "DbSessionMiddleware",
    "FeatureGateMiddleware",
    "UserContextMiddleware",
]
