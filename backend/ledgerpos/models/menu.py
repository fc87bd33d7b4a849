from __future__ import annotations

from ..extensions import db
from ledgerpos.time_utils import to_utc_z


class MenuItem(db.Model):
    """Sellable item. Its recipe (if any) drives inventory depletion."""
    __tablename__ = "menu_items"
    __table_args__ = (
        db.Index("ix_menu_items_bu_active", "business_unit_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    recipe = db.relationship("Recipe", uselist=False, back_populates="menu_item", lazy="joined")

    def __repr__(self) -> str:
        return f"<MenuItem id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit_id": self.business_unit_id,
            "name": self.name,
            "price_cents": self.price_cents,
            "is_active": self.is_active,
            "has_recipe": self.recipe is not None,
            "created_at": to_utc_z(self.created_at),
        }


class Recipe(db.Model):
    """Bill of materials for one menu item."""
    __tablename__ = "recipes"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    menu_item_id = db.Column(db.Integer, db.ForeignKey("menu_items.id"), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=True)

    menu_item = db.relationship("MenuItem", back_populates="recipe")
    recipe_items = db.relationship(
        "RecipeItem",
        back_populates="recipe",
        order_by="RecipeItem.id",
        lazy="selectin",
    )


class RecipeItem(db.Model):
    """
    Component consumed per sold unit.

    location_id designates the stock location depleted for this binding; when
    NULL the business unit's default location applies.
    """
    __tablename__ = "recipe_items"
    __table_args__ = (
        db.UniqueConstraint("recipe_id", "inventory_item_id", name="uq_recipe_items_recipe_item"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey("recipes.id"), nullable=False, index=True)
    inventory_item_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False)
    location_id = db.Column(db.Integer, db.ForeignKey("inventory_locations.id"), nullable=True)

    quantity_used = db.Column(db.Numeric(18, 4), nullable=False)

    recipe = db.relationship("Recipe", back_populates="recipe_items")
    inventory_item = db.relationship("InventoryItem", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "recipe_id": self.recipe_id,
            "inventory_item_id": self.inventory_item_id,
            "location_id": self.location_id,
            "quantity_used": str(self.quantity_used),
        }
