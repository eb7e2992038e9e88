"""
Migration Schema Descriptors

Hand-enumerated, ordered field lists for every migrated table. Each
descriptor is checked against the declared SQLAlchemy table when it is
constructed, so a field-order or nullability mismatch fails at import time
instead of on the first insert.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple

from sqlalchemy import Table, column, table
from sqlalchemy.sql.expression import TableClause

from droguerie.database.models import (
    Base,
    Category,
    Coupon,
    Order,
    OrderItem,
    Product,
    User,
    WishlistItem,
)


class SchemaDescriptorError(ValueError):
    """Descriptor disagrees with the declared destination table"""


@dataclass(frozen=True)
class FieldSpec:
    """One migrated column"""
    name: str
    nullable: bool = True


def required(name: str) -> FieldSpec:
    return FieldSpec(name, nullable=False)


def nullable(name: str) -> FieldSpec:
    return FieldSpec(name, nullable=True)


@dataclass(frozen=True)
class EntitySchema:
    """
    Ordered description of one migrated table.

    Attributes:
        name: Table name in both stores
        label: Plural noun used in progress messages
        icon: Emoji prefix for progress messages
        fields: Columns in destination order
        optional: Absence in the source is tolerated
    """
    name: str
    label: str
    icon: str
    fields: Tuple[FieldSpec, ...]
    optional: bool = False
    declared: Table = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        declared = Base.metadata.tables.get(self.name)
        if declared is None:
            raise SchemaDescriptorError(f"No declared table named '{self.name}'")

        declared_names = [c.name for c in declared.columns]
        if list(self.field_names) != declared_names:
            raise SchemaDescriptorError(
                f"Field order for '{self.name}' does not match the declared table: "
                f"{list(self.field_names)} != {declared_names}"
            )

        for field_spec in self.fields:
            declared_nullable = bool(declared.columns[field_spec.name].nullable)
            if field_spec.nullable != declared_nullable:
                raise SchemaDescriptorError(
                    f"Nullability of '{self.name}.{field_spec.name}' is {field_spec.nullable}, "
                    f"declared table says {declared_nullable}"
                )

        object.__setattr__(self, "declared", declared)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def primary_key(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self.declared.primary_key.columns)

    def as_clause(self) -> TableClause:
        """
        Untyped table clause over the descriptor's columns.

        Values bound through it reach the driver exactly as read from the
        source, without type coercion.
        """
        return table(self.name, *[column(name) for name in self.field_names])

    def project(self, row: Mapping[str, Any]) -> dict:
        """
        Order a source row by the descriptor's fields.

        Raises:
            KeyError: A descriptor field is missing from the row
        """
        return {name: row[name] for name in self.field_names}


CATEGORIES = EntitySchema(
    name=Category.__tablename__,
    label="categories",
    icon="📁",
    fields=(
        required("id"),
        required("name"),
        nullable("name_ar"),
        nullable("name_fr"),
        nullable("description"),
        nullable("description_ar"),
        nullable("description_fr"),
        nullable("image_url"),
        nullable("is_active"),
        nullable("created_at"),
        nullable("updated_at"),
    ),
)

PRODUCTS = EntitySchema(
    name=Product.__tablename__,
    label="products",
    icon="📦",
    fields=(
        required("id"),
        required("name"),
        nullable("name_ar"),
        nullable("name_fr"),
        nullable("description"),
        nullable("description_ar"),
        nullable("description_fr"),
        required("price"),
        nullable("category_id"),
        nullable("image_url"),
        nullable("stock_quantity"),
        nullable("is_active"),
        nullable("featured"),
        nullable("created_at"),
        nullable("updated_at"),
    ),
)

USERS = EntitySchema(
    name=User.__tablename__,
    label="users",
    icon="👥",
    fields=(
        required("id"),
        required("name"),
        required("email"),
        required("password"),
        nullable("phone"),
        nullable("address"),
        nullable("role"),
        nullable("status"),
        nullable("email_verified"),
        nullable("email_verified_at"),
        nullable("created_at"),
        nullable("updated_at"),
    ),
)

ORDERS = EntitySchema(
    name=Order.__tablename__,
    label="orders",
    icon="📋",
    fields=(
        required("id"),
        nullable("user_id"),
        nullable("customer_name"),
        nullable("customer_email"),
        nullable("customer_phone"),
        nullable("shipping_address"),
        nullable("shipping_city"),
        nullable("shipping_postal_code"),
        nullable("payment_method"),
        nullable("payment_intent_id"),
        nullable("payment_status"),
        nullable("total_amount"),
        nullable("status"),
        nullable("tracking_number"),
        nullable("estimated_delivery"),
        nullable("delivered_at"),
        nullable("notes"),
        nullable("created_at"),
        nullable("updated_at"),
    ),
)

ORDER_ITEMS = EntitySchema(
    name=OrderItem.__tablename__,
    label="order items",
    icon="📦",
    fields=(
        required("id"),
        nullable("order_id"),
        nullable("product_id"),
        nullable("product_name"),
        nullable("quantity"),
        nullable("price"),
        nullable("created_at"),
    ),
)

COUPONS = EntitySchema(
    name=Coupon.__tablename__,
    label="coupons",
    icon="🎫",
    optional=True,
    fields=(
        required("id"),
        required("code"),
        required("name"),
        nullable("description"),
        nullable("type"),
        required("value"),
        nullable("minimum_order_amount"),
        nullable("maximum_discount_amount"),
        nullable("usage_limit"),
        nullable("used_count"),
        nullable("user_usage_limit"),
        required("start_date"),
        required("end_date"),
        nullable("is_active"),
        nullable("created_at"),
        nullable("updated_at"),
    ),
)

WISHLIST = EntitySchema(
    name=WishlistItem.__tablename__,
    label="wishlist items",
    icon="❤️",
    optional=True,
    fields=(
        required("id"),
        required("user_id"),
        required("product_id"),
        nullable("created_at"),
    ),
)

# Parents before children so foreign keys always resolve
MIGRATION_PLAN: Tuple[EntitySchema, ...] = (
    CATEGORIES,
    PRODUCTS,
    USERS,
    ORDERS,
    ORDER_ITEMS,
    COUPONS,
    WISHLIST,
)
