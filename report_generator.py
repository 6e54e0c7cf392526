"""
Report Generator - Text reports and file export for the inventory
Builds the low stock, expired, category and complete inventory reports
for the console and writes them to report files
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from config import settings
from exceptions import ValidationError
from inventory_manager import InventoryManager
from models import Category, Product, ProductKind, Supplier

logger = logging.getLogger(__name__)

# Report layout
SEPARATOR_WIDTH = 60
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
CURRENCY = "LKR"


class ReportType(enum.Enum):
    """Reports that can be saved to a file"""
    LOW_STOCK = "low_stock"
    EXPIRED_PRODUCTS = "expired_products"
    CATEGORY = "category"
    COMPLETE_INVENTORY = "complete_inventory"

    def default_filename(self, category: Category = None) -> str:
        if self is ReportType.CATEGORY:
            if category is None:
                raise ValidationError("Category cannot be null", field="category")
            return f"category_report_{category.name.lower()}.txt"
        return f"{self.value}_report.txt"


@dataclass
class ExportResult:
    """Outcome of writing a report file"""
    path: Path
    success: bool
    error: Optional[str] = None


def separator(char: str, width: int = SEPARATOR_WIDTH) -> str:
    return char * width


def format_product(product: Product, supplier_name: str) -> str:
    """Format a product as a single report line.

    ``id | name | LKR price | Qty: n | category | Supplier: name [flags]``
    followed by the expiry date or the shelf life.
    """
    expired = product.is_expired
    status = ""
    if product.is_low_stock:
        status += " [LOW STOCK]"
    if expired:
        status += " [EXPIRED]"

    line = (f"{product.id} | {product.name} | {CURRENCY} {product.price:.2f} | "
            f"Qty: {product.quantity} | {product.category} | Supplier: {supplier_name}{status}")

    if product.kind is ProductKind.PERISHABLE:
        expiry = product.expiry_date.isoformat()
        line += f" [Expired {expiry}]" if expired else f" | Expiry: {expiry}"
    else:
        line += f" | Shelf Life: {product.shelf_life}"
    return line


def format_supplier(supplier: Supplier) -> str:
    """Format a supplier as ``id | name | contact``"""
    return f"{supplier.id} | {supplier.name} | {supplier.contact}"


class ReportGenerator:
    """Builds text reports from the inventory and saves them to files.

    Only reads from the inventory manager. Console reports carry no
    timestamp; file reports add a ``Generated:`` line and a closing footer.
    """

    def __init__(self, inventory: InventoryManager, report_dir: str = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.inventory = inventory
        self.report_dir = Path(report_dir or settings.REPORT_DIR)
        self.clock = clock

    # ==================== Report Text ====================

    def product_lines(self, products: List[Product]) -> List[str]:
        return [format_product(p, self.inventory.supplier_name_for(p)) for p in products]

    def supplier_lines(self) -> List[str]:
        return [format_supplier(s) for s in self.inventory.get_all_suppliers()]

    def low_stock_report(self, for_file: bool = False) -> str:
        products = self.inventory.get_low_stock_products()
        return self._product_report("LOW STOCK PRODUCTS REPORT", "LOW STOCK PRODUCTS",
                                    products, for_file)

    def expired_report(self, for_file: bool = False) -> str:
        products = self.inventory.get_expired_products()
        return self._product_report("EXPIRED PRODUCTS REPORT", "EXPIRED PRODUCTS",
                                    products, for_file)

    def category_report(self, category: Category, for_file: bool = False) -> str:
        products = self.inventory.get_products_by_category(category)
        return self._product_report(f"CATEGORY REPORT: {category}",
                                    f"PRODUCTS IN CATEGORY: {category}",
                                    products, for_file)

    def complete_report(self, include_supplier_details: bool = False,
                        for_file: bool = False) -> str:
        """Full inventory report with summary, all, expired and low stock sections"""
        lines = self._header("COMPLETE INVENTORY REPORT", for_file)

        if include_supplier_details:
            lines += self._section("SUPPLIER DETAILS", self.supplier_lines(), "No suppliers found!")

        summary = self.inventory.get_stock_summary()
        lines += self._section("PRODUCT SUMMARY", [
            f"Total Products: {summary['total_products']}",
            f"Total Suppliers: {summary['total_suppliers']}",
            f"Expired Products: {summary['expired_count']}",
            f"Low Stock Products: {summary['low_stock_count']}",
            f"Total Units: {summary['total_units']}",
            f"Stock Value: {CURRENCY} {summary['stock_value']:,.2f}",
        ], "")

        lines += self._section("ALL PRODUCTS",
                               self.product_lines(self.inventory.get_all_products()),
                               "No products found!")
        lines += self._section("EXPIRED PRODUCTS",
                               self.product_lines(self.inventory.get_expired_products()),
                               "No expired products found!")
        lines += self._section("LOW STOCK PRODUCTS",
                               self.product_lines(self.inventory.get_low_stock_products()),
                               "No low stock products found!")
        lines += self._footer(for_file)
        return "\n".join(lines) + "\n"

    # ==================== File Export ====================

    def save_low_stock_report(self, filename: str) -> ExportResult:
        return self._write(filename, self.low_stock_report(for_file=True))

    def save_expired_report(self, filename: str) -> ExportResult:
        return self._write(filename, self.expired_report(for_file=True))

    def save_category_report(self, filename: str, category: Category) -> ExportResult:
        return self._write(filename, self.category_report(category, for_file=True))

    def save_complete_report(self, filename: str, include_supplier_details: bool = False) -> ExportResult:
        return self._write(filename, self.complete_report(include_supplier_details, for_file=True))

    def save_report(self, report_type: ReportType, filename: str = None,
                    category: Category = None,
                    include_supplier_details: bool = False) -> ExportResult:
        """Save any report type, falling back to its default filename"""
        filename = filename or report_type.default_filename(category)
        if report_type is ReportType.LOW_STOCK:
            return self.save_low_stock_report(filename)
        if report_type is ReportType.EXPIRED_PRODUCTS:
            return self.save_expired_report(filename)
        if report_type is ReportType.CATEGORY:
            return self.save_category_report(filename, category)
        return self.save_complete_report(filename, include_supplier_details)

    # ==================== Helper Methods ====================

    def _product_report(self, title: str, section_title: str,
                        products: List[Product], for_file: bool) -> str:
        lines = self._header(title, for_file)
        lines += self._section(f"{section_title} ({len(products)})",
                               self.product_lines(products), "No products found!")
        lines += self._footer(for_file)
        return "\n".join(lines) + "\n"

    def _header(self, title: str, for_file: bool) -> List[str]:
        lines = [separator("="), title]
        if for_file:
            lines.append(f"Generated: {self.clock().strftime(TIMESTAMP_FORMAT)}")
        lines.append(separator("="))
        return lines

    def _section(self, title: str, body: List[str], empty_message: str) -> List[str]:
        return ["", f"{title}:", separator("-")] + (body or [empty_message])

    def _footer(self, for_file: bool) -> List[str]:
        if for_file:
            return ["", separator("="), "REPORT END",
                    f"Generated by {settings.APP_NAME}", separator("=")]
        return ["", separator("="), "REPORT COMPLETE", separator("=")]

    def _resolve(self, filename: str) -> Path:
        if not filename or not filename.strip():
            raise ValidationError("Report filename cannot be empty", field="filename")
        path = Path(filename.strip())
        return path if path.is_absolute() else self.report_dir / path

    def _write(self, filename: str, text: str) -> ExportResult:
        path = self._resolve(filename)
        try:
            with open(path, "w", encoding="utf-8") as report_file:
                report_file.write(text)
        except OSError as e:
            logger.error(f"Error saving report to file '{path}': {e}")
            return ExportResult(path=path, success=False, error=str(e))

        logger.info(f"Report saved to: {path}")
        return ExportResult(path=path, success=True)
