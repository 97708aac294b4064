from sqlalchemy import BigInteger, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class CredentialRow(Base):
    __tablename__ = "credentials"

    namespace: Mapped[str] = mapped_column(String, primary_key=True)
    access_token: Mapped[str] = mapped_column(String, default="", server_default="")
    token_expiry_time: Mapped[int] = mapped_column(BigInteger, default=0, server_default="0")


class GameRow(Base):
    __tablename__ = "games"

    # Surrogate key; igdb_id is deliberately not unique so plain inserts can duplicate
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String)
    image: Mapped[str] = mapped_column(String)
    igdb_id: Mapped[str] = mapped_column(String, index=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str] = mapped_column(Text, default="", server_default="")
