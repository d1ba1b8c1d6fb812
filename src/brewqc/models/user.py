"""User database model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from brewqc.models.base import BaseModel


class User(BaseModel):
    """Brewery staff member; inspectors sign quality checks."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))
    role: Mapped[str] = mapped_column(String(50), default="brewer")

    @property
    def full_name(self) -> str:
        """First and last name, as printed on exports."""
        return f"{self.first_name} {self.last_name}"
