"""
Database Models for Grocery Inventory Manager
Defines Category, Supplier and Product models
"""

import enum
import logging
import math
import re
from datetime import date, datetime
from typing import Any, Dict, Union

from sqlalchemy import create_engine, Column, Integer, String, Float, Date, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import declarative_base, sessionmaker, validates

from exceptions import ValidationError

logger = logging.getLogger(__name__)

Base = declarative_base()

# Default low stock warning threshold
DEFAULT_LOW_STOCK_THRESHOLD = 5

# Expiry dates are entered as YYYY-MM-DD
_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class Category(enum.Enum):
    """Product categories for a grocery store"""
    DAIRY = "Dairy"
    PRODUCE = "Produce"
    MEAT = "Meat"
    BEVERAGES = "Beverages"
    CANNED_FOOD = "Canned food"
    DRIED_FOOD = "Dried food"

    def __str__(self):
        return self.value

    @classmethod
    def from_choice(cls, choice: int) -> "Category":
        """Map a 1-based menu number to a category"""
        members = list(cls)
        if isinstance(choice, bool) or not isinstance(choice, int) or not 1 <= choice <= len(members):
            raise ValidationError(
                f"Invalid category choice: {choice}. Expected a number between 1 and {len(members)}",
                field="category"
            )
        return members[choice - 1]


class ProductKind(enum.Enum):
    """Variant tag for products"""
    PERISHABLE = "Perishable"
    NON_PERISHABLE = "Non-Perishable"


# ==================== Field Validation Helpers ====================

def _require_positive_id(value: Any, message: str, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(message, field=field)
    return value


def _require_text(value: Any, message: str, field: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(message, field=field)
    return value


def _require_non_negative_int(value: Any, message: str, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field.replace('_', ' ').capitalize()} must be a whole number", field=field)
    if value < 0:
        raise ValidationError(message, field=field)
    return value


def parse_expiry_date(value: Union[str, date]) -> date:
    """Parse an expiry date in strict YYYY-MM-DD form"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError("Expiry date cannot be null or empty", field="expiry_date")

    text = value.strip()
    if not _ISO_DATE_PATTERN.match(text):
        raise ValidationError(
            f"Invalid date format: '{value}'. Expected format: YYYY-MM-DD", field="expiry_date"
        )
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(
            f"Invalid date format: '{value}'. Expected format: YYYY-MM-DD", field="expiry_date"
        ) from e


class Supplier(Base):
    """Supplier model - a vendor that provides products to the store"""
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(100), nullable=False)
    contact = Column(String(200), nullable=False)

    # Insertion order, assigned by the inventory manager
    position = Column(Integer, nullable=False, default=0, index=True)

    def __init__(self, id: int, name: str, contact: str):
        self.id = id
        self.name = name
        self.contact = contact

    @validates("id")
    def _validate_id(self, key, value):
        _require_positive_id(value, "Supplier ID must be positive", key)
        if self.id is not None and value != self.id:
            raise ValidationError("Supplier ID cannot be changed", field=key)
        return value

    @validates("name")
    def _validate_name(self, key, value):
        return _require_text(value, "Supplier name cannot be null or empty", key)

    @validates("contact")
    def _validate_contact(self, key, value):
        return _require_text(value, "Contact information cannot be null or empty", key)

    # Suppliers are equal if they have the same supplier ID
    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Supplier):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"<Supplier(id={self.id}, name='{self.name}')>"

    def __str__(self):
        return f"{self.id} | {self.name} | {self.contact}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "contact": self.contact
        }


class Product(Base):
    """Product model - one record per stocked item.

    Perishable and non-perishable products share this table and are told
    apart by ``kind``. Perishables carry ``expiry_date``; non-perishables
    carry a free-text ``shelf_life`` and never expire.

    The product keeps only its supplier's id. Resolving it to a Supplier is
    the inventory manager's job.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=False)
    kind = Column(SQLEnum(ProductKind), nullable=False)
    name = Column(String(200), nullable=False)
    category = Column(SQLEnum(Category), nullable=False)
    price = Column(Float, nullable=False)

    # Stock information
    quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=DEFAULT_LOW_STOCK_THRESHOLD)

    # Variant payload
    expiry_date = Column(Date)  # Perishable only
    shelf_life = Column(String(100))  # Non-perishable only, e.g. "2 years"

    # Foreign keys
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)

    # Insertion order, assigned by the inventory manager
    position = Column(Integer, nullable=False, default=0, index=True)

    def __init__(self, id: int, name: str, price: float, quantity: int,
                 category: Category, supplier: Supplier, kind: ProductKind,
                 expiry_date: Union[str, date] = None, shelf_life: str = None,
                 low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD):
        # kind goes first so the payload validators know which variant this is
        self.kind = kind
        self.id = id
        self.name = name
        self.price = price
        self.quantity = quantity
        self.category = category
        if not isinstance(supplier, Supplier):
            raise ValidationError("Supplier cannot be null", field="supplier")
        self.supplier_id = supplier.id
        self.low_stock_threshold = low_stock_threshold

        if kind is ProductKind.PERISHABLE:
            self.expiry_date = expiry_date
        else:
            self.shelf_life = shelf_life

    @classmethod
    def perishable(cls, id: int, name: str, price: float, quantity: int,
                   category: Category, supplier: Supplier,
                   expiry_date: Union[str, date]) -> "Product":
        """Create a perishable product. ``expiry_date`` is YYYY-MM-DD"""
        return cls(id, name, price, quantity, category, supplier,
                   kind=ProductKind.PERISHABLE, expiry_date=expiry_date)

    @classmethod
    def non_perishable(cls, id: int, name: str, price: float, quantity: int,
                       category: Category, supplier: Supplier,
                       shelf_life: str) -> "Product":
        """Create a non-perishable product with a shelf life description"""
        return cls(id, name, price, quantity, category, supplier,
                   kind=ProductKind.NON_PERISHABLE, shelf_life=shelf_life)

    # ==================== Validation ====================

    @validates("kind")
    def _validate_kind(self, key, value):
        if not isinstance(value, ProductKind):
            raise ValidationError("Product kind must be perishable or non-perishable", field=key)
        if self.kind is not None and value is not self.kind:
            raise ValidationError("Product kind cannot be changed", field=key)
        return value

    @validates("id")
    def _validate_id(self, key, value):
        _require_positive_id(value, "Product ID must be positive", key)
        if self.id is not None and value != self.id:
            raise ValidationError("Product ID cannot be changed", field=key)
        return value

    @validates("name")
    def _validate_name(self, key, value):
        return _require_text(value, "Product name cannot be null or empty", key)

    @validates("price")
    def _validate_price(self, key, value):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError("Price must be a number", field=key)
        try:
            price = float(value)
        except OverflowError:
            raise ValidationError("Price must be a finite number", field=key) from None
        if not math.isfinite(price):
            raise ValidationError("Price must be a finite number", field=key)
        if price < 0:
            raise ValidationError("Price cannot be negative", field=key)
        return price

    @validates("quantity")
    def _validate_quantity(self, key, value):
        return _require_non_negative_int(value, "Quantity cannot be negative", key)

    @validates("low_stock_threshold")
    def _validate_low_stock_threshold(self, key, value):
        return _require_non_negative_int(value, "Low stock threshold cannot be negative", key)

    @validates("category")
    def _validate_category(self, key, value):
        if not isinstance(value, Category):
            raise ValidationError("Category cannot be null", field=key)
        return value

    @validates("supplier_id")
    def _validate_supplier_id(self, key, value):
        return _require_positive_id(value, "Supplier cannot be null", key)

    @validates("expiry_date")
    def _validate_expiry_date(self, key, value):
        if self.kind is not ProductKind.PERISHABLE:
            raise ValidationError("Only perishable products have an expiry date", field=key)
        parsed = parse_expiry_date(value)
        if parsed < date.today():
            logger.warning(f"Expiry date {parsed.isoformat()} is in the past. Product may be expired.")
        return parsed

    @validates("shelf_life")
    def _validate_shelf_life(self, key, value):
        if self.kind is not ProductKind.NON_PERISHABLE:
            raise ValidationError("Only non-perishable products have a shelf life", field=key)
        _require_text(value, "Shelf life cannot be null or empty for non-perishable products", key)
        return value.strip()

    # ==================== Derived State ====================

    @property
    def is_perishable(self) -> bool:
        return self.kind is ProductKind.PERISHABLE

    @property
    def is_low_stock(self) -> bool:
        """Check if current stock is at or below the threshold"""
        return self.quantity <= self.low_stock_threshold

    @property
    def is_expired(self) -> bool:
        """Check the expiry date against today's date.

        Recomputed on every access, so a perishable product turns expired
        once its date has passed without anything being written to it.
        """
        if self.kind is ProductKind.PERISHABLE:
            return self.expiry_date is not None and self.expiry_date < date.today()
        return False

    @property
    def stock_value(self) -> float:
        """Retail value of the units on hand"""
        return self.price * self.quantity

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', kind={self.kind.value}, qty={self.quantity})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "category": self.category.value,
            "supplier_id": self.supplier_id,
            "low_stock_threshold": self.low_stock_threshold,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "shelf_life": self.shelf_life,
            "is_low_stock": self.is_low_stock,
            "is_expired": self.is_expired
        }


# Database setup functions
def get_engine(db_url: str = "sqlite://"):
    """Create and return database engine"""
    return create_engine(db_url, echo=False)


def get_session(engine):
    """Create and return database session"""
    Session = sessionmaker(bind=engine)
    return Session()


def init_database(db_url: str = "sqlite://"):
    """Initialize database and create all tables"""
    engine = get_engine(db_url)
    Base.metadata.create_all(engine)
    return engine
