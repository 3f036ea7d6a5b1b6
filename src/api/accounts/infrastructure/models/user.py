"""SQLAlchemy ORM model for the users table.

One row per User aggregate. The inventory and the two auction rosters are
stored as JSON arrays of integer identifiers on the same row, so that a
single versioned UPDATE persists the whole aggregate.
"""

from sqlalchemy import JSON, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class UserModel(Base, TimestampMixin):
    """ORM model for users table.

    version is SQLAlchemy's version_id_col: every UPDATE is issued with
    "WHERE version = <loaded version>" and bumps it, so a concurrent writer
    from another process fails with StaleDataError instead of overwriting.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="balance_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="user")
    balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    items: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    active_bids: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    created_auctions: Mapped[list[int]] = mapped_column(
        JSON, nullable=False, default=list
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(id={self.id}, username={self.username})>"
