"""
Catalog Models: Category, Product, RecipeItem.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, Money, Quantity, TimestampMixin, new_id

if TYPE_CHECKING:
    from .inventory import Material


class Category(TimestampMixin, Base):
    """Menu category grouping products."""

    __tablename__ = "category"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    products: Mapped[list["Product"]] = relationship(back_populates="category")


class Product(TimestampMixin, Base):
    """Sellable menu item."""

    __tablename__ = "product"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    category_id: Mapped[str] = mapped_column(
        Text, ForeignKey("category.id"), nullable=False, index=True
    )
    price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text)

    category: Mapped["Category"] = relationship(back_populates="products")
    recipe_items: Mapped[list["RecipeItem"]] = relationship(back_populates="product")


class RecipeItem(TimestampMixin, Base):
    """
    Bill-of-materials line: how much of a raw material one unit of a
    product consumes.
    """

    __tablename__ = "recipe_item"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    product_id: Mapped[str] = mapped_column(
        Text, ForeignKey("product.id"), nullable=False, index=True
    )
    material_id: Mapped[str] = mapped_column(
        Text, ForeignKey("material.id"), nullable=False, index=True
    )
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False, default=0)

    product: Mapped["Product"] = relationship(back_populates="recipe_items")
    material: Mapped["Material"] = relationship()
