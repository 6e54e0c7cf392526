"""
Inventory Manager - Core logic for inventory management operations
Handles products, suppliers, identifier assignment and stock queries
"""

import enum
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import func, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import make_transient

from config import settings
from exceptions import ValidationError
from models import Product, Supplier, Category, init_database, get_session


class RemovalResult(enum.Enum):
    """Outcome of removing a product or supplier"""
    REMOVED = "Removed"
    NOT_FOUND = "Not found"
    IN_USE = "In use"  # Supplier still referenced by at least one product

    @property
    def ok(self) -> bool:
        return self is RemovalResult.REMOVED


class InventoryManager:
    """Core inventory management class.

    Owns every product and supplier and hands out their ids from two
    counters. A counter only moves forward: it is always greater than every
    id stored for that entity, and removing an entity never frees its id.

    A supplier cannot be removed while any product still refers to it.
    Lookups return ``None`` rather than raising; invalid data raises
    ``ValidationError`` before anything is changed.
    """

    def __init__(self, db_url: str = None):
        self.db_url = db_url or settings.DATABASE_URL
        self.engine = init_database(self.db_url)
        self.session = get_session(self.engine)

        # ID counters - seeded from whatever is already stored
        self._next_product_id = self._max_value(Product.id) + 1
        self._next_supplier_id = self._max_value(Supplier.id) + 1
        self._next_position = max(self._max_value(Product.position),
                                  self._max_value(Supplier.position)) + 1

    def close(self):
        """Close database session"""
        self.session.close()
        self.engine.dispose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    @property
    def next_product_id(self) -> int:
        return self._next_product_id

    @property
    def next_supplier_id(self) -> int:
        return self._next_supplier_id

    # ==================== Supplier Management ====================

    def add_supplier(self, name: str, contact: str) -> Supplier:
        """Add a new supplier with the next free ID"""
        supplier = Supplier(id=self._next_supplier_id, name=name, contact=contact)
        supplier.position = self._take_position()
        self.session.add(supplier)
        self._commit()
        self._next_supplier_id += 1
        return supplier

    def add_existing_supplier(self, supplier: Supplier) -> Supplier:
        """Add a supplier that already carries an ID (e.g. when loading).

        The supplier counter is moved past its ID so later suppliers never
        collide with it.
        """
        if supplier is None:
            raise ValidationError("Supplier cannot be null", field="supplier")
        if not isinstance(supplier, Supplier):
            raise ValidationError(f"Expected a Supplier, got {type(supplier).__name__}", field="supplier")
        self._claim(supplier, "Supplier")
        supplier_id = supplier.id
        if self.find_supplier(supplier_id) is not None:
            raise ValidationError(f"Supplier with ID {supplier_id} already exists", field="id")

        supplier.position = self._take_position()
        self.session.add(supplier)
        self._commit()
        self._next_supplier_id = max(self._next_supplier_id, supplier_id + 1)
        return supplier

    def find_supplier(self, supplier_id: int) -> Optional[Supplier]:
        """Get supplier by ID"""
        return self.session.query(Supplier).filter(Supplier.id == supplier_id).first()

    def get_all_suppliers(self) -> List[Supplier]:
        """Get all suppliers in the order they were added"""
        return self.session.query(Supplier).order_by(Supplier.position).all()

    def update_supplier(self, supplier_id: int, name: str = None,
                        contact: str = None) -> Optional[Supplier]:
        """Update supplier name and/or contact. Both change or neither does."""
        supplier = self.find_supplier(supplier_id)
        if supplier is None:
            return None
        try:
            if name is not None:
                supplier.name = name
            if contact is not None:
                supplier.contact = contact
        except ValidationError:
            self.session.rollback()
            raise
        self._commit()
        return supplier

    def remove_supplier(self, supplier_id: int) -> RemovalResult:
        """Remove a supplier if no products are associated with it"""
        supplier = self.find_supplier(supplier_id)
        if supplier is None:
            return RemovalResult.NOT_FOUND

        if self.has_products_for_supplier(supplier_id):
            return RemovalResult.IN_USE

        self.session.delete(supplier)
        self._commit()
        return RemovalResult.REMOVED

    def has_products_for_supplier(self, supplier_id: int) -> bool:
        """Check whether any product references the given supplier"""
        return self.session.query(Product.id).filter(Product.supplier_id == supplier_id).first() is not None

    def get_products_by_supplier(self, supplier_id: int) -> List[Product]:
        """Get products by supplier"""
        return self.session.query(Product).filter(
            Product.supplier_id == supplier_id
        ).order_by(Product.position).all()

    def supplier_name_for(self, product: Product) -> str:
        """Resolve a product's supplier to its name"""
        supplier = self.find_supplier(product.supplier_id)
        return supplier.name if supplier is not None else "Unknown"

    @property
    def supplier_count(self) -> int:
        return self.session.query(Supplier).count()

    @property
    def has_suppliers(self) -> bool:
        return self.session.query(Supplier.id).first() is not None

    # ==================== Product Management ====================

    def add_product(self, product: Product) -> Product:
        """Add a product to the inventory.

        The product counter is moved past the product's ID.
        """
        if product is None:
            raise ValidationError("Product cannot be null", field="product")
        if not isinstance(product, Product):
            raise ValidationError(f"Expected a Product, got {type(product).__name__}", field="product")
        self._claim(product, "Product")
        product_id = product.id
        if self.find_product(product_id) is not None:
            raise ValidationError(f"Product with ID {product_id} already exists", field="id")

        product.position = self._take_position()
        self.session.add(product)
        self._commit()
        self._next_product_id = max(self._next_product_id, product_id + 1)
        return product

    def find_product(self, product_id: int) -> Optional[Product]:
        """Get product by ID"""
        return self.session.query(Product).filter(Product.id == product_id).first()

    def remove_product(self, product_id: int) -> RemovalResult:
        """Remove a product. Nothing depends on products, so no checks."""
        product = self.find_product(product_id)
        if product is None:
            return RemovalResult.NOT_FOUND

        self.session.delete(product)
        self._commit()
        return RemovalResult.REMOVED

    def update_stock(self, product_id: int, quantity: int) -> Optional[Product]:
        """Set the stock quantity of a product.

        Returns None when the product does not exist. A negative quantity
        raises ValidationError and the stored quantity stays as it was.
        """
        product = self.find_product(product_id)
        if product is None:
            return None
        product.quantity = quantity
        self._commit()
        return product

    def update_product(self, product_id: int, price: float = None,
                       low_stock_threshold: int = None) -> Optional[Product]:
        """Update price and/or low stock threshold. Both change or neither does."""
        product = self.find_product(product_id)
        if product is None:
            return None
        try:
            if price is not None:
                product.price = price
            if low_stock_threshold is not None:
                product.low_stock_threshold = low_stock_threshold
        except ValidationError:
            self.session.rollback()
            raise
        self._commit()
        return product

    @property
    def product_count(self) -> int:
        return self.session.query(Product).count()

    @property
    def has_products(self) -> bool:
        return self.session.query(Product.id).first() is not None

    # ==================== Stock Queries ====================

    def get_all_products(self) -> List[Product]:
        """Get all products in the order they were added"""
        return self.session.query(Product).order_by(Product.position).all()

    def filter_products(self, predicate: Callable[[Product], bool]) -> List[Product]:
        """Get the products matching an arbitrary predicate"""
        return [product for product in self.get_all_products() if predicate(product)]

    def get_expired_products(self) -> List[Product]:
        """Get perishable products whose expiry date has passed"""
        # Expiry depends on today's date, so it is evaluated in Python
        return self.filter_products(lambda product: product.is_expired)

    def get_low_stock_products(self) -> List[Product]:
        """Get all products at or below their low stock threshold"""
        return self.session.query(Product).filter(
            Product.quantity <= Product.low_stock_threshold
        ).order_by(Product.position).all()

    def get_products_by_category(self, category: Category) -> List[Product]:
        """Get products by category"""
        if not isinstance(category, Category):
            raise ValidationError("Category cannot be null", field="category")
        return self.session.query(Product).filter(
            Product.category == category
        ).order_by(Product.position).all()

    def count_expired_products(self) -> int:
        return len(self.get_expired_products())

    def count_low_stock_products(self) -> int:
        return self.session.query(Product).filter(
            Product.quantity <= Product.low_stock_threshold
        ).count()

    def get_stock_summary(self) -> Dict[str, Any]:
        """Get comprehensive stock summary"""
        products = self.get_all_products()
        return {
            "total_products": len(products),
            "total_suppliers": self.supplier_count,
            "total_units": sum(p.quantity for p in products),
            "expired_count": sum(1 for p in products if p.is_expired),
            "low_stock_count": sum(1 for p in products if p.is_low_stock),
            "stock_value": round(sum(p.stock_value for p in products), 2)
        }

    # ==================== Helper Methods ====================

    def _max_value(self, column) -> int:
        return self.session.query(func.max(column)).scalar() or 0

    def _claim(self, instance, label: str):
        """Make a previously removed or loaded object addable to this session.

        Objects still held by another inventory are refused. Removed or
        detached ones are turned back into new, unsaved objects.
        """
        state = inspect(instance)
        if state.session is not None and state.session is not self.session:
            raise ValidationError(f"{label} belongs to another inventory", field=label.lower())
        if state.deleted or state.detached:
            make_transient(instance)
        if instance.id is None:
            raise ValidationError(f"{label} ID is missing", field="id")

    def _take_position(self) -> int:
        position = self._next_position
        self._next_position += 1
        return position

    def _commit(self):
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
