"""SQLAlchemy ORM model for the roles table.

The table mirrors the fixed role catalog so that users.role_id has a
foreign key target. Rows are seeded, never edited.
"""

from sqlalchemy import Integer, String
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from access.domain.roles import ROLE_CATALOG
from infrastructure.database.models import Base, TimestampMixin


class RoleModel(Base, TimestampMixin):
    """ORM model for roles table."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    scope: Mapped[str] = mapped_column(String(20), nullable=False)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<RoleModel(id={self.id}, slug={self.slug})>"


async def seed_roles(session: AsyncSession) -> None:
    """Insert any catalog role missing from the roles table.

    Idempotent; existing rows are left untouched.
    """
    stmt = insert(RoleModel).values(
        [
            {
                "id": role.id,
                "name": role.name,
                "slug": role.slug.value,
                "scope": role.scope.value,
            }
            for role in ROLE_CATALOG
        ]
    )
    await session.execute(stmt.on_conflict_do_nothing(index_elements=["id"]))
