import typer
from datetime import date
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from finance_tracker.config.settings import ConfigLoader
from finance_tracker.dates import month_label, shift_month
from finance_tracker.domain.enums import Controllability, TransactionType
from finance_tracker.domain.models import Transaction
from finance_tracker.logging_setup import configure_logging
from finance_tracker.aggregation.models import CategoryBreakdown
from finance_tracker.repositories.factory import RepositoryFactory
from finance_tracker.services.transaction_service import TransactionService

app = typer.Typer(
    name="finance-tracker",
    help="Log income and expenses and see where the money goes",
    add_completion=False,
)

console = Console()

class State:
    verbose: bool = False
    service: Optional[TransactionService] = None


state = State()

@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    ),
    store: Optional[str] = typer.Option(
        None,
        "--store",
        help="Store backend (json, sqlite). Defaults to the app config.",
    ),
):
    """
    Finance Tracker - monthly summaries, calendar and category breakdowns.
    """
    config = ConfigLoader.load_app_config()
    if store is not None:
        config["store"] = store

    configure_logging("DEBUG" if verbose else config.get("log_level"))

    if state.service is None:
        state.service = TransactionService(RepositoryFactory.create(config))

    state.verbose = verbose


def _fail(e: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {e}")
    if state.verbose:
        console.print_exception()
    raise typer.Exit(code=1)


def _resolve_month(year: Optional[int], month: Optional[int], prev: bool = False, next_: bool = False) -> tuple[int, int]:
    """Fill in the current year/month, then step one month back or forward"""
    today = date.today()
    year = year if year is not None else today.year
    month = month if month is not None else today.month
    return shift_month(year, month, int(next_) - int(prev))


def _money(amount, sign: str = "") -> str:
    return f"{sign}{amount:,.2f}"


def _transactions_table(transactions: List[Transaction], title: Optional[str] = None) -> Table:
    table = Table(title=title, show_header=True, padding=(0, 1))
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Date", style="cyan", width=12)
    table.add_column("Item / Source", style="white", max_width=30)
    table.add_column("Category", style="magenta", max_width=20)
    table.add_column("Description", style="dim", max_width=30)
    table.add_column("Amount", justify="right")

    for txn in transactions:
        if txn.type == TransactionType.EXPENSE:
            amount_str = f"[red]{_money(txn.amount, '-')}[/red]"
        else:
            amount_str = f"[green]{_money(txn.amount, '+')}[/green]"

        table.add_row(
            txn.id or "",
            str(txn.calendar_date or txn.date),
            txn.display_name,
            txn.category,
            txn.description,
            amount_str,
        )
    return table


def _breakdown_table(rows: List[CategoryBreakdown], amount_style: str) -> Table:
    table = Table(show_header=True, box=None, padding=(0, 2))
    table.add_column("Category", style="cyan", no_wrap=True)
    table.add_column("Count", justify="right", style="dim")
    table.add_column("Amount", justify="right", style=amount_style)
    table.add_column("% of Group", justify="right", style="dim")

    for row in rows:
        table.add_row(
            row.category,
            str(row.count),
            _money(row.total),
            f"{row.percentage_of_group:.1f}%",
        )
    return table


@app.command(name="add")
def add(
    transaction_type: TransactionType = typer.Argument(
        ...,
        help="income or expense",
        case_sensitive=False,
    ),
    amount: str = typer.Argument(..., help="Amount, e.g. 1200 or 49.99"),
    category: str = typer.Argument(..., help="Income source or expense category"),
    on: Optional[str] = typer.Option(
        None,
        "--date", "-d",
        help="Date as YYYY-MM-DD (defaults to today)",
    ),
    item: str = typer.Option("", "--item", "-i", help="Expense item"),
    description: str = typer.Option("", "--description", "-n", help="Optional note"),
):
    """
    Record an income or an expense.

    Examples:
        finance-tracker add income 5000 Salary --date 2024-03-01
        finance-tracker add expense 300 Food --item Groceries
    """
    try:
        txn = state.service.add_transaction(
            transaction_type=transaction_type,
            amount=amount,
            category=category,
            transaction_date=on or date.today().isoformat(),
            description=description,
            item=item,
        )
        console.print(f"[bold green]✓ Added {txn.type.value}[/bold green] {txn.display_name} "
                      f"{_money(txn.amount)} on {txn.calendar_date} [dim]({txn.id})[/dim]")
    except Exception as e:
        _fail(e)


@app.command(name="edit")
def edit(
    transaction_id: str = typer.Argument(..., help="ID of the transaction"),
    amount: Optional[str] = typer.Option(None, "--amount", "-a"),
    category: Optional[str] = typer.Option(None, "--category", "-c"),
    on: Optional[str] = typer.Option(None, "--date", "-d"),
    item: Optional[str] = typer.Option(None, "--item", "-i"),
    description: Optional[str] = typer.Option(None, "--description", "-n"),
):
    """
    Edit a transaction. The income/expense type cannot be changed.
    """
    changes = {
        "amount": amount,
        "category": category,
        "date": on,
        "item": item,
        "description": description,
    }
    changes = {key: value for key, value in changes.items() if value is not None}

    if not changes:
        console.print("[yellow]Nothing to change[/yellow]")
        return

    try:
        txn = state.service.update_transaction(transaction_id, **changes)
        console.print(f"[bold green]✓ Updated[/bold green] {txn.display_name} "
                      f"{_money(txn.amount)} on {txn.calendar_date}")
    except Exception as e:
        _fail(e)


@app.command(name="delete")
def delete(
    transaction_id: str = typer.Argument(..., help="ID of the transaction"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
):
    """
    Delete a transaction permanently.
    """
    try:
        if not yes and not typer.confirm(f"Delete transaction {transaction_id}?"):
            raise typer.Abort()

        if state.service.delete_transaction(transaction_id):
            console.print(f"[bold green]✓ Deleted {transaction_id}[/bold green]")
        else:
            console.print(f"[yellow]Transaction {transaction_id} not found[/yellow]")
            raise typer.Exit(code=1)
    except (typer.Abort, typer.Exit):
        raise
    except Exception as e:
        _fail(e)


@app.command(name="list")
def list_transactions(
    month: Optional[int] = typer.Option(None, "--month", "-m", help="Month (1-12)", min=1, max=12),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year"),
):
    """
    List the transactions of a month, newest first.
    """
    try:
        year, month = _resolve_month(year, month)
        transactions = state.service.get_transactions(year, month)
        if not transactions:
            console.print(f"[yellow]No transactions in {month_label(year, month)}[/yellow]")
            return

        console.print(_transactions_table(transactions, title=month_label(year, month)))
    except Exception as e:
        _fail(e)


@app.command(name="report")
def report(
    month: Optional[int] = typer.Option(None, "--month", "-m", help="Month (1-12)", min=1, max=12),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year"),
    prev: bool = typer.Option(False, "--prev", help="The month before"),
    next_: bool = typer.Option(False, "--next", help="The month after"),
):
    """
    Monthly summary: totals, controllable split and category tables.

    Examples:
        finance-tracker report
        finance-tracker report --month 3 --year 2024
        finance-tracker report --prev
    """
    try:
        year, month = _resolve_month(year, month, prev, next_)
        summary = state.service.get_monthly_summary(year=year, month=month)

        console.print(f"\n[bold cyan]Monthly Report: {summary.label}[/bold cyan]")

        if summary.total_transactions == 0:
            console.print(Panel(
                "[yellow]No transactions found for this month[/yellow]",
                title="Empty Report",
                border_style="yellow"
            ))
            return

        totals = summary.totals
        summary_text = (
            f"[bold]Transactions:[/bold] {summary.total_transactions}\n\n"
            f"[green]💰 Income:[/green]           {totals.income:>12,.2f}\n"
            f"[red]💸 Expense:[/red]          {totals.expense:>12,.2f}\n"
            f"   Controllable:      {summary.split.controllable:>12,.2f}\n"
            f"   Non-controllable:  {summary.split.non_controllable:>12,.2f}\n"
            f"{'─' * 34}\n"
        )
        if totals.balance >= 0:
            summary_text += f"[bold green]📈 Balance:[/bold green]          {totals.balance:>12,.2f}"
        else:
            summary_text += f"[bold red]📉 Balance:[/bold red]          {totals.balance:>12,.2f}"

        console.print(Panel(
            summary_text,
            title=f"[bold]{summary.label} Summary[/bold]",
            border_style="cyan",
            padding=(1, 2)
        ))

        if summary.expense_breakdown:
            console.print(f"\n[bold]Expenses by Category[/bold]")
            console.print(_breakdown_table(summary.expense_breakdown, "red"))

        if summary.income_breakdown:
            console.print(f"\n[bold]Income by Source[/bold]")
            console.print(_breakdown_table(summary.income_breakdown, "green"))

    except Exception as e:
        _fail(e)


@app.command(name="calendar")
def calendar(
    month: Optional[int] = typer.Option(None, "--month", "-m", help="Month (1-12)", min=1, max=12),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year"),
    prev: bool = typer.Option(False, "--prev", help="The month before"),
    next_: bool = typer.Option(False, "--next", help="The month after"),
):
    """
    Calendar of daily income and expense totals.
    """
    try:
        year, month = _resolve_month(year, month, prev, next_)
        cal = state.service.get_calendar(year, month)

        table = Table(title=cal.label, show_lines=True)
        for day_name in ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"):
            table.add_column(day_name, justify="center", min_width=9)

        for week in cal.weeks:
            cells = []
            for day in week:
                if not cal.in_month(day):
                    cells.append(f"[dim]{day.day}[/dim]")
                    continue

                lines = [f"[bold]{day.day}[/bold]"]
                totals = cal.totals_for(day)
                if totals is not None:
                    if totals.income > 0:
                        lines.append(f"[green]+{totals.income:,.0f}[/green]")
                    if totals.expense > 0:
                        lines.append(f"[red]-{totals.expense:,.0f}[/red]")
                cells.append("\n".join(lines))
            table.add_row(*cells)

        console.print(table)
    except Exception as e:
        _fail(e)


@app.command(name="day")
def day(
    on: str = typer.Argument(..., help="Date as YYYY-MM-DD"),
):
    """
    Show the transactions of a single day.
    """
    try:
        target = date.fromisoformat(on)
        transactions = state.service.get_day(target.year, target.month, target.day)
        title = f"Transactions - {target.strftime('%B %d, %Y')}"

        if not transactions:
            console.print(f"[yellow]No transactions for this day[/yellow]")
            return

        console.print(_transactions_table(transactions, title=title))
    except Exception as e:
        _fail(e)


@app.command(name="breakdown")
def breakdown(
    transaction_type: TransactionType = typer.Option(
        TransactionType.EXPENSE,
        "--type", "-t",
        case_sensitive=False,
    ),
    group: Optional[Controllability] = typer.Option(
        None,
        "--group", "-g",
        help="Only controllable or non-controllable expenses",
        case_sensitive=False,
    ),
    category: Optional[str] = typer.Option(
        None,
        "--category", "-c",
        help="Show the transactions of one category instead",
    ),
    month: Optional[int] = typer.Option(None, "--month", "-m", help="Month (1-12)", min=1, max=12),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year"),
):
    """
    Per-category breakdown of income, expenses or one expense group.

    Examples:
        finance-tracker breakdown --group non-controllable
        finance-tracker breakdown --type income
        finance-tracker breakdown --category Food
    """
    try:
        year, month = _resolve_month(year, month)
        label = month_label(year, month)

        if category is not None:
            items = state.service.get_category_details(year, month, category, transaction_type)
            if not items:
                console.print(f"[yellow]No data available[/yellow]")
                return
            console.print(_transactions_table(items, title=f"{category} Details - {label}"))
            total = sum(t.amount for t in items)
            console.print(f"[bold]Total: {_money(total)}[/bold]")
            return

        rows = state.service.get_breakdown(year, month, transaction_type, group)
        if group is not None:
            title = f"{group.value.capitalize()} Expenses - {label}"
        else:
            title = f"{transaction_type.value.capitalize()} Breakdown - {label}"

        console.print(f"\n[bold cyan]{title}[/bold cyan]")
        if not rows:
            console.print(f"[yellow]No data available[/yellow]")
            return

        style = "green" if transaction_type == TransactionType.INCOME else "red"
        console.print(_breakdown_table(rows, style))

        count = sum(row.count for row in rows)
        grand_total = sum(row.total for row in rows)
        console.print(f"\n[dim]Total Transactions: {count}[/dim]   [bold]Total Amount: {_money(grand_total)}[/bold]")
    except Exception as e:
        _fail(e)


@app.command(name="suggest")
def suggest():
    """
    List known income sources, expense categories and expense items.
    """
    try:
        suggestions = state.service.get_suggestions()

        table = Table(show_header=True)
        table.add_column("Income Sources", style="green")
        table.add_column("Expense Categories", style="red")
        table.add_column("Expense Items", style="magenta")

        columns = [
            suggestions.income_sources,
            suggestions.expense_categories,
            suggestions.expense_items,
        ]
        for i in range(max((len(c) for c in columns), default=0)):
            table.add_row(*(c[i] if i < len(c) else "" for c in columns))

        console.print(table)
    except Exception as e:
        _fail(e)


def cli_main():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    cli_main()
