"""
Grocery Inventory Manager - Main Application
A console menu interface for managing grocery store inventory
"""

import logging
from datetime import date, timedelta
from typing import List, Optional, TextIO, Tuple

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt, IntPrompt, FloatPrompt, Confirm
from rich.table import Table

from config import settings
from exceptions import ValidationError
from inventory_manager import InventoryManager, RemovalResult
from models import Category, Product, Supplier
from report_generator import ReportGenerator, ReportType, CURRENCY

logger = logging.getLogger(__name__)


class LineReader:
    """Input stream wrapper that reads lines the way input() does.

    The line ending is dropped so an empty line picks the prompt default,
    and end of input raises EOFError.
    """

    def __init__(self, stream: TextIO):
        self._stream = stream

    def readline(self) -> str:
        line = self._stream.readline()
        if not line:
            raise EOFError("End of input")
        return line.rstrip("\r\n")


class GroceryInventoryApp:
    """Main application class for the Grocery Inventory Manager.

    Output goes to ``console`` and input is read from ``stream`` (standard
    input when not given). An inventory passed in stays open when the app
    exits; one created here is closed on exit.
    """

    def __init__(self, inventory: InventoryManager = None, console: Console = None,
                 stream: TextIO = None, report_dir: str = None):
        self._owns_inventory = inventory is None
        self.inventory = inventory or InventoryManager()
        self.reports = ReportGenerator(self.inventory, report_dir=report_dir)
        self.console = console or Console()
        self.stream = LineReader(stream) if stream is not None else None

    def print_header(self, title: str):
        """Print a styled header"""
        self.console.print(Panel(title, style="bold blue", box=box.DOUBLE))

    def print_success(self, message: str):
        self.console.print(f"✅ {message}", style="bold green", markup=False)

    def print_error(self, message: str):
        self.console.print(f"❌ {message}", style="bold red", markup=False)

    def print_warning(self, message: str):
        self.console.print(f"⚠️  {message}", style="bold yellow", markup=False)

    def print_info(self, message: str):
        self.console.print(f"ℹ️  {message}", style="bold cyan", markup=False)

    def show_options(self, options: List[Tuple[str, str]]):
        for opt, desc in options:
            self.console.print(f"  {opt}. {desc}", markup=False)

    def get_input(self, prompt: str, default: str = None) -> str:
        """Get string input from user"""
        if default is None:
            return Prompt.ask(prompt, console=self.console, stream=self.stream)
        return Prompt.ask(prompt, console=self.console, stream=self.stream, default=default)

    def get_int(self, prompt: str, default: int = None) -> int:
        """Get integer input from user, asking again until it is valid"""
        if default is None:
            return IntPrompt.ask(prompt, console=self.console, stream=self.stream)
        return IntPrompt.ask(prompt, console=self.console, stream=self.stream, default=default)

    def get_float(self, prompt: str, default: float = None) -> float:
        """Get number input from user, asking again until it is valid"""
        if default is None:
            return FloatPrompt.ask(prompt, console=self.console, stream=self.stream)
        return FloatPrompt.ask(prompt, console=self.console, stream=self.stream, default=default)

    def confirm(self, prompt: str, default: bool = False) -> bool:
        """Get yes/no confirmation from user"""
        return Confirm.ask(prompt, console=self.console, stream=self.stream, default=default)

    # ==================== Main Menu ====================

    def show_main_menu(self) -> str:
        """Display the main menu"""
        self.print_header("🛒 Grocery Inventory Manager")

        menu_options = [
            ("1", "📦 Product Management"),
            ("2", "🏢 Supplier Management"),
            ("3", "📈 Inventory Reports"),
            ("4", "⚙️  Settings & Tools"),
            ("0", "🚪 Exit")
        ]

        table = Table(show_header=False, box=box.ROUNDED)
        table.add_column("Option", style="cyan", width=4)
        table.add_column("Description", style="white")
        for opt, desc in menu_options:
            table.add_row(opt, desc)
        self.console.print(table)

        return self.get_input("\nSelect option")

    def run(self):
        """Main application loop"""
        self.console.print(Panel(
            "[bold green]Welcome to the Grocery Inventory Manager![/bold green]\n"
            "Manage your store's products and suppliers, and generate stock reports.",
            title="🛒 Grocery Store Inventory",
            box=box.DOUBLE
        ))

        try:
            while True:
                try:
                    choice = self.show_main_menu()

                    if choice == "0":
                        if self.confirm("Are you sure you want to exit?", True):
                            self.print_info(f"Goodbye! Thank you for using {settings.APP_NAME}.")
                            break
                    elif choice == "1":
                        self.product_menu()
                    elif choice == "2":
                        self.supplier_menu()
                    elif choice == "3":
                        self.reports_menu()
                    elif choice == "4":
                        self.settings_menu()
                    else:
                        self.print_error("Invalid option. Please try again.")

                except ValidationError as e:
                    self.print_error(f"Error: {e}")
                except EOFError:
                    raise
                except Exception as e:
                    logger.exception("Unexpected error in menu loop")
                    self.print_error(f"An error occurred: {e}")
        except (KeyboardInterrupt, EOFError):
            self.console.print()
            self.print_info("Exiting...")
        finally:
            if self._owns_inventory:
                self.inventory.close()

    # ==================== Product Management ====================

    def product_menu(self):
        """Product management submenu"""
        while True:
            self.print_header("📦 Product Management")

            options = [
                ("1", "View All Products"),
                ("2", "View Expired Products"),
                ("3", "View Low Stock Products"),
                ("4", "View Products by Category"),
                ("5", "Add Product"),
                ("6", "Update Product Stock"),
                ("7", "Update Price / Low Stock Threshold"),
                ("8", "Remove Product"),
                ("0", "Back to Main Menu")
            ]
            self.show_options(options)

            choice = self.get_input("\nSelect option")

            if choice == "0":
                break
            elif choice == "1":
                self.show_products(self.inventory.get_all_products(), "All Products",
                                   "No products found!")
            elif choice == "2":
                self.show_products(self.inventory.get_expired_products(), "Expired Products",
                                   "No expired products found!")
            elif choice == "3":
                self.show_products(self.inventory.get_low_stock_products(), "Low Stock Products",
                                   "No low stock products found!")
            elif choice == "4":
                category = self.select_category()
                self.show_products(self.inventory.get_products_by_category(category),
                                   f"Products in Category: {category}",
                                   "No products found in this category!")
            elif choice == "5":
                self.add_product()
            elif choice == "6":
                self.update_product_stock()
            elif choice == "7":
                self.update_product()
            elif choice == "8":
                self.remove_product()
            else:
                self.print_error("Invalid option.")

    def show_products(self, products: List[Product], title: str, empty_message: str):
        """Display products in a table"""
        if not products:
            self.print_warning(empty_message)
            return

        table = Table(title=f"{escape(title)} (Total: {len(products)})", box=box.ROUNDED)
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Name", style="white")
        table.add_column("Type", style="blue")
        table.add_column("Category", style="magenta")
        table.add_column(f"Price ({CURRENCY})", style="green", justify="right")
        table.add_column("Qty", justify="right")
        table.add_column("Supplier", style="yellow")
        table.add_column("Expiry / Shelf Life")
        table.add_column("Status", justify="center")

        for p in products:
            if p.is_expired:
                status = "[red]EXPIRED[/red]"
            elif p.is_low_stock:
                status = "[yellow]LOW STOCK[/yellow]"
            else:
                status = "[green]OK[/green]"
            table.add_row(
                str(p.id),
                escape(p.name[:30]),
                p.kind.value,
                str(p.category),
                f"{p.price:,.2f}",
                str(p.quantity),
                escape(self.inventory.supplier_name_for(p)),
                p.expiry_date.isoformat() if p.is_perishable else escape(p.shelf_life),
                status
            )

        self.console.print(table)

    def add_product(self):
        """Add a perishable or non-perishable product"""
        self.print_header("➕ Add Product")
        self.show_options([
            ("1", "Perishable Product"),
            ("2", "Non-Perishable Product"),
            ("0", "Return to Product Menu")
        ])
        kind_choice = self.get_input("Select product type")
        if kind_choice not in ("1", "2"):
            if kind_choice != "0":
                self.print_error("Invalid option.")
            return

        product_id = self.inventory.next_product_id
        self.print_info(f"Product will be assigned ID: {product_id}")

        name = self.get_input("Product Name")
        price = self.get_float(f"Price ({CURRENCY})")
        quantity = self.get_int("Quantity")
        category = self.select_category()

        supplier = self.select_supplier()
        if supplier is None:
            self.print_warning("Product addition cancelled.")
            return

        if kind_choice == "1":
            expiry_date = self.get_input("Expiry Date (YYYY-MM-DD)")
            product = Product.perishable(product_id, name, price, quantity,
                                         category, supplier, expiry_date)
        else:
            shelf_life = self.get_input("Shelf Life (e.g., 2 years)")
            product = Product.non_perishable(product_id, name, price, quantity,
                                             category, supplier, shelf_life)

        self.inventory.add_product(product)
        self.print_success(f"Product '{product.name}' added with ID: {product.id}")
        if product.is_expired:
            self.print_warning(f"Expiry date {product.expiry_date.isoformat()} is in the past. "
                               "Product is already expired.")

    def update_product_stock(self):
        """Update the stock quantity of an existing product"""
        if not self.inventory.has_products:
            self.print_warning("No products available to update!")
            return
        self.show_products(self.inventory.get_all_products(), "All Products", "No products found!")

        product_id = self.get_int("Enter Product ID to update")
        product = self.inventory.find_product(product_id)
        if product is None:
            self.print_error(f"Product with ID {product_id} not found!")
            return

        self.print_info(f"Current stock for '{product.name}': {product.quantity}")
        while True:
            quantity = self.get_int("Enter new quantity")
            try:
                self.inventory.update_stock(product_id, quantity)
                break
            except ValidationError as e:
                self.print_error(str(e))
        self.print_success("Stock updated successfully!")

    def update_product(self):
        """Update price and low stock threshold"""
        product_id = self.get_int("Enter Product ID")
        product = self.inventory.find_product(product_id)
        if product is None:
            self.print_error(f"Product with ID {product_id} not found!")
            return

        self.print_info(f"Updating: {product.name} (press Enter to keep current value)")
        price = self.get_float(f"Price ({CURRENCY})", default=product.price)
        threshold = self.get_int("Low stock threshold", default=product.low_stock_threshold)

        self.inventory.update_product(product_id, price=price, low_stock_threshold=threshold)
        self.print_success("Product updated successfully!")

    def remove_product(self):
        """Remove a product from the inventory"""
        if not self.inventory.has_products:
            self.print_warning("No products available to remove!")
            return
        self.show_products(self.inventory.get_all_products(), "All Products", "No products found!")

        product_id = self.get_int("Enter the Product ID to remove")
        product = self.inventory.find_product(product_id)
        name = product.name if product is not None else None

        result = self.inventory.remove_product(product_id)
        if result.ok:
            self.print_success(f"Product '{name}' with ID: {product_id} removed successfully!")
        else:
            self.print_error(f"Product with ID {product_id} not found!")

    def select_category(self) -> Category:
        """Display the categories and read a selection"""
        categories = list(Category)
        self.console.print("\nAvailable Categories:")
        self.show_options([(str(i), str(c)) for i, c in enumerate(categories, 1)])

        while True:
            choice = self.get_int(f"Select Category (1-{len(categories)})")
            try:
                return Category.from_choice(choice)
            except ValidationError as e:
                self.print_error(str(e))

    def select_supplier(self) -> Optional[Supplier]:
        """Pick the supplier for a new product. None means the user cancelled."""
        while True:
            self.show_suppliers()

            if not self.inventory.has_suppliers:
                self.print_warning("No suppliers available! You need to add a supplier first.")
                self.show_options([("1", "Add new supplier"), ("2", "Cancel product addition")])
                if self.get_input("Enter choice") == "1":
                    self.add_supplier()
                    continue
                return None

            supplier_id = self.get_int("Enter Supplier ID for this product (0 to cancel)")
            if supplier_id == 0:
                return None

            supplier = self.inventory.find_supplier(supplier_id)
            if supplier is not None:
                return supplier

            self.print_error(f"Supplier with ID {supplier_id} not found!")
            self.show_options([
                ("1", "Try another supplier ID"),
                ("2", "Add a new supplier"),
                ("3", "Cancel product addition")
            ])
            choice = self.get_input("Enter choice")
            if choice == "1":
                continue
            if choice == "2":
                self.add_supplier()
                continue
            return None

    # ==================== Supplier Management ====================

    def supplier_menu(self):
        """Supplier management submenu"""
        while True:
            self.print_header("🏢 Supplier Management")

            options = [
                ("1", "View All Suppliers"),
                ("2", "Add New Supplier"),
                ("3", "Update Supplier"),
                ("4", "View Supplier Products"),
                ("5", "Remove Supplier"),
                ("0", "Back to Main Menu")
            ]
            self.show_options(options)

            choice = self.get_input("\nSelect option")

            if choice == "0":
                break
            elif choice == "1":
                self.show_suppliers()
            elif choice == "2":
                self.add_supplier()
            elif choice == "3":
                self.update_supplier()
            elif choice == "4":
                self.view_supplier_products()
            elif choice == "5":
                self.remove_supplier()
            else:
                self.print_error("Invalid option.")

    def show_suppliers(self):
        """Display all suppliers"""
        suppliers = self.inventory.get_all_suppliers()

        if not suppliers:
            self.print_warning("No suppliers found!")
            return

        table = Table(title="Suppliers", box=box.ROUNDED)
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Name", style="white")
        table.add_column("Contact", style="yellow")
        table.add_column("Products", justify="right")

        for s in suppliers:
            table.add_row(str(s.id), escape(s.name), escape(s.contact),
                          str(len(self.inventory.get_products_by_supplier(s.id))))

        self.console.print(table)

    def add_supplier(self):
        """Add a new supplier"""
        self.print_info(f"Supplier will be assigned ID: {self.inventory.next_supplier_id}")

        name = self.get_input("Supplier Name")
        contact = self.get_input("Contact Information")

        supplier = self.inventory.add_supplier(name, contact)
        self.print_success(f"Supplier '{supplier.name}' added with ID: {supplier.id}")

    def update_supplier(self):
        """Update supplier information"""
        supplier_id = self.get_int("Enter Supplier ID")
        supplier = self.inventory.find_supplier(supplier_id)

        if supplier is None:
            self.print_error(f"Supplier with ID {supplier_id} not found!")
            return

        self.print_info(f"Updating: {supplier.name} (press Enter to keep current value)")
        name = self.get_input("Name", default=supplier.name)
        contact = self.get_input("Contact Information", default=supplier.contact)

        self.inventory.update_supplier(supplier_id, name=name, contact=contact)
        self.print_success("Supplier updated successfully!")

    def view_supplier_products(self):
        """View products from a specific supplier"""
        supplier_id = self.get_int("Enter Supplier ID")
        supplier = self.inventory.find_supplier(supplier_id)

        if supplier is None:
            self.print_error(f"Supplier with ID {supplier_id} not found!")
            return

        self.show_products(self.inventory.get_products_by_supplier(supplier_id),
                           f"Products from: {supplier.name}",
                           "No products from this supplier.")

    def remove_supplier(self):
        """Remove a supplier. Only allowed when no products reference it."""
        if not self.inventory.has_suppliers:
            self.print_warning("No suppliers available to remove!")
            return
        self.show_suppliers()

        supplier_id = self.get_int("Enter the Supplier ID to remove")
        supplier = self.inventory.find_supplier(supplier_id)
        name = supplier.name if supplier is not None else None

        result = self.inventory.remove_supplier(supplier_id)
        if result.ok:
            self.print_success(f"Supplier '{name}' with ID: {supplier_id} removed successfully!")
        elif result is RemovalResult.IN_USE:
            self.print_error(f"Cannot remove supplier '{name}'! "
                             "There are products associated with this supplier.")
        else:
            self.print_error(f"Supplier with ID {supplier_id} not found!")

    # ==================== Reports ====================

    def reports_menu(self):
        """Inventory reports submenu"""
        while True:
            self.print_header("📈 Inventory Reports")

            options = [
                ("1", "Low Stock Report"),
                ("2", "Expired Products Report"),
                ("3", "Category Report"),
                ("4", "Complete Inventory Report"),
                ("0", "Back to Main Menu")
            ]
            self.show_options(options)

            choice = self.get_input("\nSelect option")

            if choice == "0":
                break
            elif choice == "1":
                self.show_report(self.reports.low_stock_report())
                self.ask_to_save_report(ReportType.LOW_STOCK)
            elif choice == "2":
                self.show_report(self.reports.expired_report())
                self.ask_to_save_report(ReportType.EXPIRED_PRODUCTS)
            elif choice == "3":
                category = self.select_category()
                self.show_report(self.reports.category_report(category))
                self.ask_to_save_report(ReportType.CATEGORY, category=category)
            elif choice == "4":
                include_suppliers = self.confirm("Include supplier details?", True)
                self.show_report(self.reports.complete_report(include_suppliers))
                self.ask_to_save_report(ReportType.COMPLETE_INVENTORY,
                                        include_supplier_details=include_suppliers)
            else:
                self.print_error("Invalid option.")

    def show_report(self, text: str):
        self.console.print(text, markup=False, highlight=False)

    def ask_to_save_report(self, report_type: ReportType, category: Category = None,
                           include_supplier_details: bool = False):
        """Offer to save the report just shown to a file"""
        if not self.confirm("Save report to file?", False):
            self.print_info("Report not saved. Displayed on console only.")
            return

        filename = self.get_input("Enter filename", default=report_type.default_filename(category))
        result = self.reports.save_report(report_type, filename, category=category,
                                          include_supplier_details=include_supplier_details)
        if result.success:
            self.print_success(f"Report saved to: {result.path}")
        else:
            self.print_error(f"Error saving report to file '{result.path}': {result.error}")

    # ==================== Settings Menu ====================

    def settings_menu(self):
        """Settings and tools submenu"""
        while True:
            self.print_header("⚙️ Settings & Tools")

            options = [
                ("1", "Add Sample Data"),
                ("2", "Storage Info"),
                ("0", "Back to Main Menu")
            ]
            self.show_options(options)

            choice = self.get_input("\nSelect option")

            if choice == "0":
                break
            elif choice == "1":
                self.add_sample_data()
            elif choice == "2":
                self.show_storage_info()
            else:
                self.print_error("Invalid option.")

    def add_sample_data(self):
        """Add sample data for trying the application out"""
        if not self.confirm("This will add sample suppliers and products. Continue?", False):
            self.print_info("Cancelled.")
            return

        suppliers, products = seed_sample_data(self.inventory)
        self.print_success(f"Sample data added: {len(suppliers)} suppliers, {len(products)} products.")

    def show_storage_info(self):
        """Show storage information"""
        self.console.print(Panel(
            f"[bold cyan]Database:[/bold cyan] {escape(self.inventory.db_url)}\n"
            f"[bold cyan]Report directory:[/bold cyan] {escape(str(self.reports.report_dir))}\n\n"
            f"[bold yellow]Record Counts:[/bold yellow]\n"
            f"  Products: {self.inventory.product_count}\n"
            f"  Suppliers: {self.inventory.supplier_count}\n\n"
            f"[bold green]Next IDs:[/bold green]\n"
            f"  Product: {self.inventory.next_product_id}\n"
            f"  Supplier: {self.inventory.next_supplier_id}",
            title="Storage Info", box=box.ROUNDED
        ))


def seed_sample_data(inventory: InventoryManager,
                     today: date = None) -> Tuple[List[Supplier], List[Product]]:
    """Add a handful of suppliers and products. Expiry dates are relative to today."""
    today = today or date.today()

    suppliers_data = [
        ("ABC Farms", "+94 11 234 5678"),
        ("Lanka Dairies", "orders@lankadairies.lk"),
        ("Ceylon Beverages", "+94 77 123 4567"),
        ("Island Dry Goods", "sales@islanddry.lk"),
    ]
    suppliers = [inventory.add_supplier(name, contact) for name, contact in suppliers_data]
    farms, dairies, beverages, dry_goods = suppliers

    products = []
    perishables = [
        ("Fresh Milk 1L", 350.00, 3, Category.DAIRY, dairies, today + timedelta(days=5)),
        ("Cheddar Cheese", 1250.00, 12, Category.DAIRY, dairies, today + timedelta(days=30)),
        ("Carrots 1kg", 420.00, 25, Category.PRODUCE, farms, today + timedelta(days=7)),
        ("Tomatoes 500g", 280.00, 4, Category.PRODUCE, farms, today - timedelta(days=1)),
        ("Chicken Breast 1kg", 1800.00, 8, Category.MEAT, farms, today + timedelta(days=2)),
    ]
    for name, price, quantity, category, supplier, expiry in perishables:
        product = Product.perishable(inventory.next_product_id, name, price, quantity,
                                     category, supplier, expiry)
        products.append(inventory.add_product(product))

    non_perishables = [
        ("Orange Juice 1L", 650.00, 20, Category.BEVERAGES, beverages, "9 months"),
        ("Canned Tuna", 540.00, 2, Category.CANNED_FOOD, dry_goods, "3 years"),
        ("Red Lentils 1kg", 460.00, 40, Category.DRIED_FOOD, dry_goods, "1 year"),
    ]
    for name, price, quantity, category, supplier, shelf_life in non_perishables:
        product = Product.non_perishable(inventory.next_product_id, name, price, quantity,
                                         category, supplier, shelf_life)
        products.append(inventory.add_product(product))

    return suppliers, products


def setup_logging(level: str = None, console: Console = None):
    """Route log records through rich"""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)]
    )


def main():
    """Main entry point"""
    setup_logging()
    app = GroceryInventoryApp()
    app.run()


if __name__ == "__main__":
    main()
