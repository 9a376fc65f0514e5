"""High-level data access helpers backed by SQLAlchemy.

Each method opens its own session, so every call is one store-level
transaction. Unique indexes back the services' pre-checks: a commit that
loses a uniqueness race raises ConflictError from get_session().
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, text, update

from webapp.db.models import HealthCheck, Image, Product, User
from webapp.db.session import get_session


class AccountRepository:
    """Keyed user records with a unique email."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        with get_session() as session:
            return session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        with get_session() as session:
            stmt = select(User).where(User.email == email)
            return session.execute(stmt).scalar_one_or_none()

    def email_exists(self, email: str) -> bool:
        with get_session() as session:
            stmt = select(User.id).where(User.email == email).limit(1)
            return session.execute(stmt).first() is not None

    def add(self, user: User) -> User:
        with get_session() as session:
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    def save(self, user: User) -> User:
        with get_session() as session:
            merged = session.merge(user)
            session.commit()
            session.refresh(merged)
            return merged

    def consume_verification_token(self, email: str, token: str, now: datetime) -> bool:
        """Mark the account verified if ``token`` is still live; one conditional UPDATE.

        Returns False when another caller consumed the token first or it expired.
        """
        with get_session() as session:
            stmt = (
                update(User)
                .where(
                    User.email == email,
                    User.verification_token == token,
                    User.verified.is_(False),
                    User.verification_expiry > now,
                )
                .values(verified=True, verification_token=None, verification_expiry=None, account_updated=now)
                .execution_options(synchronize_session=False)
            )
            result = session.execute(stmt)
            session.commit()
            return result.rowcount == 1


class CatalogRepository:
    """Products (unique SKU) and their images (unique storage key)."""

    # -------------------------- products --------------------------
    def get_product(self, product_id: int) -> Optional[Product]:
        with get_session() as session:
            return session.get(Product, product_id)

    def get_owned_product(self, product_id: int, owner_user_id: int) -> Optional[Product]:
        with get_session() as session:
            stmt = select(Product).where(Product.id == product_id, Product.owner_user_id == owner_user_id)
            return session.execute(stmt).scalar_one_or_none()

    def sku_exists(self, sku: str, exclude_id: int | None = None) -> bool:
        with get_session() as session:
            stmt = select(Product.id).where(Product.sku == sku)
            if exclude_id is not None:
                stmt = stmt.where(Product.id != exclude_id)
            return session.execute(stmt.limit(1)).first() is not None

    def add_product(self, product: Product) -> Product:
        with get_session() as session:
            session.add(product)
            session.commit()
            session.refresh(product)
            return product

    def save_product(self, product: Product) -> Product:
        with get_session() as session:
            merged = session.merge(product)
            session.commit()
            session.refresh(merged)
            return merged

    def delete_product(self, product_id: int) -> None:
        with get_session() as session:
            session.execute(delete(Image).where(Image.product_id == product_id))
            session.execute(delete(Product).where(Product.id == product_id))
            session.commit()

    # -------------------------- images --------------------------
    def get_image(self, image_id: int) -> Optional[Image]:
        with get_session() as session:
            return session.get(Image, image_id)

    def list_images(self, product_id: int) -> list[Image]:
        with get_session() as session:
            stmt = select(Image).where(Image.product_id == product_id)
            return list(session.execute(stmt).scalars().all())

    def add_image(self, image: Image) -> Image:
        with get_session() as session:
            session.add(image)
            session.commit()
            session.refresh(image)
            return image

    def delete_image(self, image_id: int) -> None:
        with get_session() as session:
            session.execute(delete(Image).where(Image.image_id == image_id))
            session.commit()


class HealthRepository:
    """Trivial round-trip and liveness records."""

    def ping(self) -> int | None:
        with get_session() as session:
            return session.execute(text("SELECT 1")).scalar()

    def record(self, checked_at: datetime) -> HealthCheck:
        entity = HealthCheck(check_datetime=checked_at)
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity
