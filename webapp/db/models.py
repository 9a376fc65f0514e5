"""SQLAlchemy models for accounts, catalog records and liveness probes.

Timestamps carry no server defaults or onupdate hooks: the service performing
a mutation assigns them.
"""
from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from .session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column("username", String(255), unique=True, nullable=False)
    password_hash = Column("password", String(255), nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    account_created = Column(DateTime(timezone=True), nullable=False)
    account_updated = Column(DateTime(timezone=True), nullable=False)
    verified = Column("is_verified", Boolean, default=False, nullable=False)
    verification_token = Column(String(255), nullable=True)
    verification_expiry = Column(DateTime(timezone=True), nullable=True)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    sku = Column(String(255), unique=True, nullable=False)
    manufacturer = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    date_added = Column(DateTime(timezone=True), nullable=False)
    date_last_updated = Column(DateTime(timezone=True), nullable=False)
    owner_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    images = relationship("Image", back_populates="product", cascade="all,delete-orphan")


class Image(Base):
    __tablename__ = "images"

    image_id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    file_name = Column(String(255), nullable=False)
    content_type = Column(String(100), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    storage_key = Column("s3_bucket_path", String(512), unique=True, nullable=False)
    date_created = Column(DateTime(timezone=True), nullable=False)

    product = relationship("Product", back_populates="images")


class HealthCheck(Base):
    __tablename__ = "health_checks"

    check_id = Column(Integer, primary_key=True, autoincrement=True)
    check_datetime = Column(DateTime(timezone=True), nullable=False)
