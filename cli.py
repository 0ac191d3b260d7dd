# cli.py - interactive terminal client for the stockroom API
import logging
import sys
from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.logging import RichHandler
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from stockroom.config import ClientConfig
from stockroom.errors import RemoteUnavailable, StockroomError
from stockroom.listing import ProductListView, SORT_KEYS, use_system_collation
from stockroom.models import Product, ProductInput
from stockroom.client import StockroomClient

console = Console()
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    handlers=[RichHandler(console=console, show_path=False)],
)

c = StockroomClient(ClientConfig.from_env())
view = ProductListView()

status_message = "Ready"
product_cache: List[Product] = []

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def source_badge() -> str:
    if c.last_source == "local":
        return "[yellow]offline (local store)[/yellow]"
    if c.last_source == "remote":
        return "[green]live (API)[/green]"
    return "[dim]not loaded[/dim]"


def show_products(products: List[Product]):
    direction = "ascending" if view.ascending else "descending"
    caption = f"sort: {view.sort_key} {direction}"
    if view.search.strip():
        caption += f" | search: '{view.search.strip()}'"

    table = Table(
        title="📦 Products",
        caption=caption,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=12)
    table.add_column("Name", style="bold", width=24)
    table.add_column("SKU", width=10)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Stock", justify="right", width=7)
    table.add_column("Category", width=14)
    table.add_column("Added", width=11)

    for p in products:
        table.add_row(
            p.id[:12],
            p.name,
            p.sku,
            f"${p.price:.2f}",
            str(p.stock),
            p.category or "-",
            p.created_at[:10],
        )
    if not products:
        table.add_row("", "[italic yellow]No products match your search.[/italic yellow]", "", "", "", "", "")
    console.print(table)

    totals = ProductListView.summary(products)
    console.print(
        f"[dim]{totals['count']} products, {totals['units']} units, "
        f"stock value ${totals['value']:.2f}[/dim]  {source_badge()}"
    )


def show_dashboard():
    try:
        health = c.get_health()
    except RemoteUnavailable:
        console.print(Panel.fit("[red]Backend unavailable[/red]", title="📊 Dashboard", border_style="red"))
        return
    grid = Table.grid(padding=(0, 4))
    grid.add_column()
    grid.add_column()
    grid.add_column()
    grid.add_row("[dim]Status[/dim]", "[dim]Database[/dim]", "[dim]Uptime[/dim]")
    grid.add_row(f"[bold]{health.status}[/bold]", f"[bold]{health.db}[/bold]", f"[bold]{round(health.uptime)}s[/bold]")
    console.print(Panel(grid, title="📊 Dashboard", border_style="green"))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    SDK errors are shown as a status panel and turn into a None result.
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
    except (StockroomError, ValueError) as e:
        status_message = f"Error: {e}"
        console.print(show_status(f"Error: {e}", False))
        return None


def refresh_products() -> List[Product]:
    global product_cache
    products = try_api(c.list_products)
    if products is not None:
        product_cache = products
    return product_cache


# ---------------------------
# Autocompletion helpers
# ---------------------------
def get_product_completer():
    if not product_cache:
        refresh_products()
    words = [p.id for p in product_cache] + [p.sku for p in product_cache]
    return WordCompleter([w for w in words if w], ignore_case=True)


def find_product(ref: str) -> Optional[Product]:
    ref = ref.strip()
    for p in product_cache:
        if p.id == ref or p.sku.lower() == ref.lower():
            return p
    matches = [p for p in product_cache if p.id.startswith(ref)] if ref else []
    return matches[0] if len(matches) == 1 else None


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🏬 Stockroom",
        "[bold blue]Inventory manager[/bold blue]",
        f"[dim]{c.config.base_url}[/dim]\n[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Input helpers
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 0.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            value = float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")
            continue
        if value < 0:
            console.print("[red]Value must not be negative.[/red]")
            continue
        return value


def ask_product_fields(initial: Optional[Product] = None) -> dict:
    name = prompt_with_autocomplete("Name", default=initial.name if initial else "")
    sku = prompt_with_autocomplete("SKU", default=initial.sku if initial else "")
    price = ask_float("💰 Price", default=initial.price if initial else 0.0)
    stock = IntPrompt.ask("📦 Stock", default=initial.stock if initial else 0)
    category = prompt_with_autocomplete("🏷️ Category (optional)", default=(initial.category or "") if initial else "")
    return {"name": name, "sku": sku, "price": price, "stock": stock, "category": category or None}


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message

    console.clear()
    console.print(create_header())
    refresh_products()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📊 Dashboard", "6", "➕ New product"),
            ("2", "📦 List products", "7", "✏️ Edit product"),
            ("3", "🔍 Search", "8", "🗑️ Delete product"),
            ("4", "↕️ Sort by", "9", "🔌 Reconnect"),
            ("5", "🔁 Toggle direction", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title=f"📋 Menu  {source_badge()}", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 10)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            show_dashboard()

        elif choice == "2":
            show_products(view.apply(refresh_products()))

        elif choice == "3":
            view.search = prompt_with_autocomplete("Search by name, SKU, category", default=view.search)
            show_products(view.apply(product_cache))

        elif choice == "4":
            key = prompt_with_autocomplete("Sort by", completer=WordCompleter(list(SORT_KEYS)), default=view.sort_key)
            try:
                view.set_sort(key.strip())
            except ValueError as e:
                console.print(show_status(str(e), False))
                continue
            show_products(view.apply(product_cache))

        elif choice == "5":
            view.toggle_direction()
            show_products(view.apply(product_cache))

        elif choice == "6":
            fields = ask_product_fields()
            try:
                payload = ProductInput(**fields)
            except ValueError as e:
                console.print(show_status(f"Error: {e}", False))
                continue
            created = try_api(c.create_product, payload, success_msg=f"Product '{payload.name}' created")
            if created:
                show_products(view.apply(refresh_products()))

        elif choice == "7":
            ref = prompt_with_autocomplete("Product ID or SKU", completer=get_product_completer())
            current = find_product(ref)
            if current is None:
                console.print(show_status(f"Error: no product matches '{ref}'", False))
                continue
            fields = ask_product_fields(current)
            updated = try_api(c.update_product, current.id, fields, success_msg=f"Product '{current.name}' updated")
            if updated:
                show_products(view.apply(refresh_products()))

        elif choice == "8":
            ref = prompt_with_autocomplete("Product ID or SKU", completer=get_product_completer())
            current = find_product(ref)
            if current is None:
                console.print(show_status(f"Error: no product matches '{ref}'", False))
                continue
            if Confirm.ask(f"[red]Are you sure you want to delete \"{current.name}\"?[/red]"):
                try_api(c.delete_product, current.id, success_msg=f"Product '{current.name}' deleted")
                show_products(view.apply(refresh_products()))

        elif choice == "9":
            if try_api(c.reconnect):
                status_message = "Connected to API"
                refresh_products()
            else:
                status_message = "Error: API still unreachable, staying on local store"

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Bye! 👋[/bold green]", title="Goodbye"))
                c.close()
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    use_system_collation()
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
