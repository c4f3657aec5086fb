from veeloo.db.models.core import MessageCount, User

__all__ = ["MessageCount", "User"]
