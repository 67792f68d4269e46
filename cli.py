# cli.py
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from catalog.config import settings
from catalog_sdk.client import CatalogClient

console = Console()
c = CatalogClient(base_url=settings.api_url)


# Global state for status messages and caching
status_message = "Ready"
product_cache: List[Dict[str, Any]] = []

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]], title: str = "📦 Product Catalog"):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=8)
    table.add_column("Name", style="bold", width=20)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Qty", justify="right", width=8)
    table.add_column("Category", width=15)

    for p in products:
        table.add_row(
            str(p.get("id", "N/A")),
            p.get("name", "N/A"),
            f"${p.get('price', 0):.2f}",
            str(p.get("quantity", 0)),
            p.get("category", "N/A")
        )
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner. Errors end up in the status
    panel and make the call return None.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except Exception as e:
        status_message = f"Error: {e}"
        console.print(show_status(f"Error: {e}", False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def get_product_completer():
    global product_cache
    if not product_cache:
        product_cache = try_api(c.list_products) or []
    ids = [str(p.get("id", "")) for p in product_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True)


def get_name_completer():
    names = [p.get("name", "") for p in product_cache]
    return WordCompleter([n for n in names if n], ignore_case=True)


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ product-catalog",
        "[bold blue]Catalog CLI with Autocomplete[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Input helpers
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 10.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def ask_product_id() -> Optional[int]:
    raw = prompt_with_autocomplete("Enter product ID", completer=get_product_completer()).strip()
    try:
        return int(raw)
    except ValueError:
        console.print("[red]Product IDs are integers.[/red]")
        return None


def refresh_cache():
    global product_cache
    product_cache = try_api(c.list_products) or []


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message, product_cache

    console.clear()
    console.print(create_header())
    refresh_cache()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "7", "📤 Sell"),
            ("2", "🏷️ List by category", "8", "📥 Restock"),
            ("3", "🔍 Find by name", "9", "🗑️ Delete product"),
            ("4", "➕ Create product", "10", "💰 Total value"),
            ("5", "ℹ️ Get product by ID", "11", "⚡ Batch fetch details"),
            ("6", "💲 Update price", "12", "🔄 Reset catalog"),
            ("", "", "q", "👋 Quit")
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 13)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            products = try_api(c.list_products, success_msg="Products loaded successfully")
            if products is not None:
                product_cache = products
                show_products(products)

        elif choice == "2":
            category = prompt_with_autocomplete("🏷️ Category", default="general")
            products = try_api(c.list_products, category, success_msg=f"Category '{category}' loaded")
            if products is not None:
                show_products(products, title=f"🏷️ {category}")

        elif choice == "3":
            name = prompt_with_autocomplete("Enter product name", completer=get_name_completer())
            res = try_api(c.search_product, name, success_msg=f"Search for '{name}' completed")
            if isinstance(res, str):
                console.print(f"[yellow]{res}[/yellow]")
            elif res:
                show_products([res])

        elif choice == "4":
            pid = IntPrompt.ask("🔑 Product ID")
            name = prompt_with_autocomplete("Enter product name")
            price = ask_float("💰 Price", default=10.0)
            qty = IntPrompt.ask("📦 Quantity", default=1)
            category = prompt_with_autocomplete("🏷️ Category", default="general")
            resp = try_api(
                c.create_product, pid, name, price, qty, category,
                success_msg=f"Product '{name}' created"
            )
            if resp:
                refresh_cache()

        elif choice == "5":
            pid = ask_product_id()
            if pid is not None:
                text = try_api(c.display_product, pid, success_msg=f"Product {pid} loaded")
                if text:
                    console.print(Panel.fit(text, title=f"ℹ️ Product {pid}"))

        elif choice == "6":
            pid = ask_product_id()
            if pid is not None:
                price = ask_float("💲 New price", default=10.0)
                resp = try_api(c.update_price, pid, price, success_msg=f"Price of {pid} set to {price:.2f}")
                if resp:
                    show_products([resp])

        elif choice == "7":
            pid = ask_product_id()
            if pid is not None:
                qty = IntPrompt.ask("Quantity to sell", default=1)
                r = try_api(c.sell, pid, qty)
                if r is not None:
                    if r.status_code == 200:
                        status_message = f"Sold {qty} of product {pid}"
                        show_products([r.json()])
                    else:
                        status_message = f"Error: {r.json().get('detail', r.status_code)}"

        elif choice == "8":
            pid = ask_product_id()
            if pid is not None:
                qty = IntPrompt.ask("Quantity to add", default=1)
                resp = try_api(c.restock, pid, qty, success_msg=f"Restocked {qty} of product {pid}")
                if resp:
                    show_products([resp])

        elif choice == "9":
            pid = ask_product_id()
            if pid is not None and Confirm.ask(f"Delete product {pid}?"):
                try_api(c.delete_product, pid, success_msg=f"Product {pid} deleted")
                refresh_cache()

        elif choice == "10":
            total = try_api(c.total_value)
            if total is not None:
                console.print(Panel.fit(f"💰 [bold green]{total:.2f}[/bold green]", title="Inventory value"))

        elif choice == "11":
            raw = Prompt.ask("IDs (space separated)", default="1 2 3 4 5")
            try:
                ids = [int(x) for x in raw.split()]
            except ValueError:
                console.print("[red]IDs must be integers.[/red]")
                continue
            resp = try_api(c.fetch_many, ids)
            if resp:
                status_message = f"Fetched {resp['fetched']} of {resp['requested']} products"
                show_products(resp["products"], title="⚡ Fetched details")

        elif choice == "12":
            if Confirm.ask("[red]This will clear the catalog. Continue?[/red]"):
                resp = try_api(c.reset, success_msg="Catalog reset successfully")
                console.print(resp)
                product_cache = []

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Bye! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
