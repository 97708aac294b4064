from .engine import Database
from .models import Base, CredentialRow, GameRow

__all__ = ["Base", "CredentialRow", "Database", "GameRow"]
