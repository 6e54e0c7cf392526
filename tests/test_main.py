"""Tests for the console application, driven by scripted input."""

import io
from datetime import date, timedelta
from pathlib import Path

import pytest
from rich.console import Console

from inventory_manager import InventoryManager
from main import GroceryInventoryApp, LineReader, seed_sample_data
from models import Category, Product, ProductKind, Supplier


def run_app(inventory: InventoryManager, lines, report_dir: Path = None) -> str:
    """Run the app over the given input lines and return everything it printed."""
    console = Console(file=io.StringIO(), width=200)
    stream = io.StringIO("".join(f"{line}\n" for line in lines))
    app = GroceryInventoryApp(inventory=inventory, console=console, stream=stream,
                              report_dir=str(report_dir) if report_dir else None)
    app.run()
    return console.file.getvalue()


EXIT = ["0", "y"]


class TestLineReader:
    """Tests for the scripted input wrapper."""

    def test_strips_line_endings(self) -> None:
        reader = LineReader(io.StringIO("first\r\n\nlast"))
        assert reader.readline() == "first"
        assert reader.readline() == ""
        assert reader.readline() == "last"

    def test_end_of_input_raises(self) -> None:
        with pytest.raises(EOFError):
            LineReader(io.StringIO("")).readline()


# ============================================================================
# Main loop
# ============================================================================


class TestMainLoop:
    """Tests for the main menu and shutdown."""

    def test_exit_with_confirmation(self, inventory: InventoryManager) -> None:
        output = run_app(inventory, EXIT)
        assert "Goodbye! Thank you for using Grocery Inventory Manager." in output

    def test_exit_default_is_yes(self, inventory: InventoryManager) -> None:
        output = run_app(inventory, ["0", ""])
        assert "Goodbye!" in output

    def test_declined_exit_keeps_running(self, inventory: InventoryManager) -> None:
        output = run_app(inventory, ["0", "n"] + EXIT)
        assert output.count("Are you sure you want to exit?") == 2

    def test_end_of_input_exits(self, inventory: InventoryManager) -> None:
        output = run_app(inventory, [])
        assert "Exiting..." in output

    def test_invalid_option(self, inventory: InventoryManager) -> None:
        output = run_app(inventory, ["9"] + EXIT)
        assert "Invalid option. Please try again." in output

    def test_injected_inventory_stays_open(self, inventory: InventoryManager) -> None:
        run_app(inventory, EXIT)
        assert inventory.add_supplier("ABC Farms", "abc@farms.lk").id == 1


# ============================================================================
# Suppliers
# ============================================================================


class TestSupplierMenu:
    """Tests for the supplier management screens."""

    def test_add_supplier(self, inventory: InventoryManager) -> None:
        output = run_app(inventory, ["2", "2", "ABC Farms", "abc@farms.lk", "0"] + EXIT)

        assert "Supplier will be assigned ID: 1" in output
        assert "Supplier 'ABC Farms' added with ID: 1" in output
        assert inventory.find_supplier(1).contact == "abc@farms.lk"

    def test_validation_error_is_reported(self, inventory: InventoryManager) -> None:
        output = run_app(inventory, ["2", "2", "", "abc@farms.lk"] + EXIT)

        assert "Error: Supplier name cannot be null or empty" in output
        assert inventory.supplier_count == 0
        assert inventory.next_supplier_id == 1

    def test_update_supplier_keeps_defaults(self, inventory: InventoryManager,
                                            supplier: Supplier) -> None:
        run_app(inventory, ["2", "3", "1", "", "info@abc.lk", "0"] + EXIT)

        stored = inventory.find_supplier(1)
        assert stored.name == "ABC Farms"
        assert stored.contact == "info@abc.lk"

    def test_remove_supplier_in_use(self, inventory: InventoryManager, supplier: Supplier) -> None:
        inventory.add_product(Product.non_perishable(1, "Rice", 400.0, 10, Category.DRIED_FOOD,
                                                     supplier, "1 year"))

        output = run_app(inventory, ["2", "5", "1", "0"] + EXIT)

        assert ("Cannot remove supplier 'ABC Farms'! "
                "There are products associated with this supplier.") in output
        assert inventory.find_supplier(1) is not None

    def test_remove_supplier(self, inventory: InventoryManager, supplier: Supplier) -> None:
        output = run_app(inventory, ["2", "5", "1", "0"] + EXIT)

        assert "Supplier 'ABC Farms' with ID: 1 removed successfully!" in output
        assert not inventory.has_suppliers


# ============================================================================
# Products
# ============================================================================


class TestProductMenu:
    """Tests for the product management screens."""

    def test_add_perishable_product(self, inventory: InventoryManager, supplier: Supplier) -> None:
        output = run_app(inventory, [
            "1", "5", "1", "Fresh Milk", "350", "3", "1", "1", "2099-01-31", "0",
        ] + EXIT)

        assert "Product 'Fresh Milk' added with ID: 1" in output
        product = inventory.find_product(1)
        assert product.kind is ProductKind.PERISHABLE
        assert product.category is Category.DAIRY
        assert product.expiry_date == date(2099, 1, 31)
        assert product.supplier_id == supplier.id

    def test_add_non_perishable_product(self, inventory: InventoryManager, supplier: Supplier) -> None:
        run_app(inventory, [
            "1", "5", "2", "Canned Tuna", "540", "25", "5", "1", "3 years", "0",
        ] + EXIT)

        product = inventory.find_product(1)
        assert product.kind is ProductKind.NON_PERISHABLE
        assert product.category is Category.CANNED_FOOD
        assert product.shelf_life == "3 years"

    def test_add_product_adds_first_supplier(self, inventory: InventoryManager) -> None:
        output = run_app(inventory, [
            "1", "5", "2", "Salt", "90", "50", "6",
            "1", "Island Dry Goods", "sales@islanddry.lk",
            "1", "Indefinite", "0",
        ] + EXIT)

        assert "No suppliers available!" in output
        assert inventory.find_product(1).supplier_id == 1
        assert inventory.find_supplier(1).name == "Island Dry Goods"

    def test_unknown_supplier_then_cancel(self, inventory: InventoryManager, supplier: Supplier) -> None:
        output = run_app(inventory, [
            "1", "5", "1", "Milk", "350", "3", "1", "42", "3", "0",
        ] + EXIT)

        assert "Supplier with ID 42 not found!" in output
        assert "Product addition cancelled." in output
        assert inventory.product_count == 0

    def test_category_prompt_repeats_until_valid(self, inventory: InventoryManager,
                                                 supplier: Supplier) -> None:
        output = run_app(inventory, [
            "1", "5", "2", "Cola", "200", "12", "9", "4", "1", "6 months", "0",
        ] + EXIT)

        assert "between 1 and 6" in output
        assert inventory.find_product(1).category is Category.BEVERAGES

    def test_malformed_expiry_date(self, inventory: InventoryManager, supplier: Supplier) -> None:
        output = run_app(inventory, [
            "1", "5", "1", "Milk", "350", "3", "1", "1", "31/01/2099",
        ] + EXIT)

        assert "Expected format: YYYY-MM-DD" in output
        assert inventory.product_count == 0

    def test_update_stock(self, inventory: InventoryManager, supplier: Supplier) -> None:
        inventory.add_product(Product.non_perishable(1, "Rice", 400.0, 10, Category.DRIED_FOOD,
                                                     supplier, "1 year"))

        output = run_app(inventory, ["1", "6", "1", "2", "0"] + EXIT)

        assert "Stock updated successfully!" in output
        assert inventory.find_product(1).quantity == 2

    def test_negative_stock_asks_again(self, inventory: InventoryManager, supplier: Supplier) -> None:
        inventory.add_product(Product.non_perishable(1, "Rice", 400.0, 10, Category.DRIED_FOOD,
                                                     supplier, "1 year"))

        output = run_app(inventory, ["1", "6", "1", "-3", "7", "0"] + EXIT)

        assert "Quantity cannot be negative" in output
        assert "Error:" not in output
        assert "Stock updated successfully!" in output
        assert inventory.find_product(1).quantity == 7

    def test_update_price_and_threshold(self, inventory: InventoryManager, supplier: Supplier) -> None:
        inventory.add_product(Product.non_perishable(1, "Rice", 400.0, 10, Category.DRIED_FOOD,
                                                     supplier, "1 year"))

        run_app(inventory, ["1", "7", "1", "", "20", "0"] + EXIT)

        product = inventory.find_product(1)
        assert product.price == 400.0
        assert product.low_stock_threshold == 20
        assert product.is_low_stock

    def test_remove_product(self, inventory: InventoryManager, supplier: Supplier) -> None:
        inventory.add_product(Product.non_perishable(1, "Rice", 400.0, 10, Category.DRIED_FOOD,
                                                     supplier, "1 year"))

        output = run_app(inventory, ["1", "8", "1", "0"] + EXIT)

        assert "Product 'Rice' with ID: 1 removed successfully!" in output
        assert inventory.product_count == 0

    def test_bracketed_text_is_shown_verbatim(self, inventory: InventoryManager) -> None:
        bulk = inventory.add_supplier("Bulk [Wholesale] Traders", "[orders] bulk@traders.lk")
        inventory.add_product(Product.non_perishable(1, "Rice [organic]", 400.0, 10,
                                                     Category.DRIED_FOOD, bulk, "[sealed] 1 year"))
        inventory.add_product(Product.non_perishable(2, "Salt [/b]", 90.0, 50,
                                                     Category.DRIED_FOOD, bulk, "Indefinite"))

        output = run_app(inventory, ["1", "1", "0", "2", "1", "4", "1", "0"] + EXIT)

        assert "Rice [organic]" in output
        assert "Salt [/b]" in output
        assert "[sealed] 1 year" in output
        assert "Bulk [Wholesale] Traders" in output
        assert "[orders] bulk@traders.lk" in output
        assert "Products from: Bulk [Wholesale] Traders" in output
        assert "An error occurred" not in output

    def test_empty_listings_warn(self, inventory: InventoryManager) -> None:
        output = run_app(inventory, ["1", "1", "2", "3", "0"] + EXIT)

        assert "No products found!" in output
        assert "No expired products found!" in output
        assert "No low stock products found!" in output


# ============================================================================
# Reports and tools
# ============================================================================


class TestReportsMenu:
    """Tests for viewing and saving reports."""

    def test_low_stock_report_saved_with_default_name(self, inventory: InventoryManager,
                                                       supplier: Supplier, tmp_path: Path) -> None:
        inventory.add_product(Product.non_perishable(1, "Rice", 400.0, 2, Category.DRIED_FOOD,
                                                     supplier, "1 year"))

        output = run_app(inventory, ["3", "1", "y", "", "0"] + EXIT, report_dir=tmp_path)

        assert "LOW STOCK PRODUCTS (1):" in output
        report = tmp_path / "low_stock_report.txt"
        assert report.exists()
        assert "1 | Rice | LKR 400.00 | Qty: 2" in report.read_text(encoding="utf-8")

    def test_report_not_saved_by_default(self, inventory: InventoryManager, tmp_path: Path) -> None:
        output = run_app(inventory, ["3", "2", "", "0"] + EXIT, report_dir=tmp_path)

        assert "Report not saved. Displayed on console only." in output
        assert list(tmp_path.iterdir()) == []

    def test_complete_report_with_suppliers(self, inventory: InventoryManager,
                                            supplier: Supplier, tmp_path: Path) -> None:
        output = run_app(inventory, ["3", "4", "", "n", "0"] + EXIT, report_dir=tmp_path)

        assert "SUPPLIER DETAILS:" in output
        assert "1 | ABC Farms | abc@farms.lk" in output

    def test_failed_save_is_reported(self, inventory: InventoryManager, tmp_path: Path) -> None:
        missing = tmp_path / "missing" / "low.txt"
        output = run_app(inventory, ["3", "1", "y", str(missing), "0"] + EXIT, report_dir=tmp_path)

        assert "Error saving report to file" in output
        assert "Goodbye!" in output


class TestSettingsMenu:
    """Tests for the sample data and storage tools."""

    def test_add_sample_data(self, inventory: InventoryManager) -> None:
        output = run_app(inventory, ["4", "1", "y", "0"] + EXIT)

        assert "Sample data added: 4 suppliers, 8 products." in output
        assert inventory.supplier_count == 4
        assert inventory.product_count == 8

    def test_sample_data_cancelled(self, inventory: InventoryManager) -> None:
        run_app(inventory, ["4", "1", "", "0"] + EXIT)
        assert inventory.product_count == 0

    def test_storage_info(self, inventory: InventoryManager, supplier: Supplier) -> None:
        output = run_app(inventory, ["4", "2", "0"] + EXIT)

        assert "Storage Info" in output
        assert "Suppliers: 1" in output


class TestSeedSampleData:
    """Tests for the sample data helper."""

    def test_seeds_expired_and_low_stock_items(self, inventory: InventoryManager) -> None:
        today = date(2026, 6, 1)
        suppliers, products = seed_sample_data(inventory, today=today)

        assert [s.id for s in suppliers] == [1, 2, 3, 4]
        assert [p.id for p in products] == list(range(1, 9))
        tomatoes = next(p for p in products if p.name.startswith("Tomatoes"))
        assert tomatoes.expiry_date == today - timedelta(days=1)
        assert inventory.count_low_stock_products() == 3
