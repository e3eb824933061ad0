"""CLI entry point using Typer."""
import typer
from rich.console import Console
from rich.table import Table

from app.database import SessionLocal, init_db
from app.services.employee_service import EmployeeService
from app.services.payment_service import PaymentService

app = typer.Typer(
    name="payments",
    help="Camp reservation payments back-office.",
    add_completion=False,
)

console = Console()

STATUS_STYLES = {
    "paid": "green",
    "partial": "yellow",
    "partially_paid": "yellow",
    "unpaid": "red",
    "returned": "magenta",
    "pending_refund": "cyan",
    "canceled": "dim",
}


def _styled(value: str) -> str:
    style = STATUS_STYLES.get(value)
    return f"[{style}]{value}[/{style}]" if style else value


@app.command()
def summary(
    camp_id: int = typer.Option(None, "--camp-id", help="Only reservations of this camp"),
):
    """Print the payment summary of every reservation."""
    db = SessionLocal()
    try:
        rows = PaymentService(db).list_payment_summaries(camp_id)
    finally:
        db.close()

    table = Table(title="Reservation payments")
    table.add_column("Reservation")
    table.add_column("Participant")
    table.add_column("Camp")
    table.add_column("Total", justify="right")
    table.add_column("Paid", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Status")
    table.add_column("Invoice")

    for row in rows:
        s = row["summary"]
        table.add_row(
            row["reservation_name"] or str(row["reservation_id"]),
            row["participant_name"],
            row["camp_name"] or "",
            str(s["total_amount"]),
            str(s["paid_amount"]),
            str(s["remaining_amount"]),
            _styled(s["overall_status"]),
            "yes" if s["invoice_paid_eligible"] else "no",
        )
    console.print(table)


@app.command()
def show(reservation_id: int = typer.Argument(..., help="Reservation id")):
    """Print the payment items and installments of one reservation."""
    db = SessionLocal()
    try:
        details = PaymentService(db).get_payment_details(reservation_id)
    finally:
        db.close()

    if details is None:
        console.print(f"[red]Error:[/red] Reservation {reservation_id} not found.")
        raise typer.Exit(code=1)

    s = details.summary
    console.print(f"\n[bold]{details.reservation_name or reservation_id}[/bold] ({details.invoice_number or '-'})")
    console.print(
        f"  Total {s.total_amount}  Paid {s.paid_amount}  Remaining {s.remaining_amount}  "
        f"Status {_styled(s.overall_status.value)}"
    )
    if details.in_deposit_phase:
        console.print(f"  Deposit phase, deposit {details.deposit_amount}")

    table = Table()
    table.add_column("Item")
    table.add_column("Label")
    table.add_column("Amount", justify="right")
    table.add_column("Allocated", justify="right")
    table.add_column("Status")
    table.add_column("Paid on")
    for item in details.items:
        table.add_row(
            item.id,
            item.label,
            str(item.amount),
            str(item.allocated),
            _styled(item.status.value),
            item.paid_date.isoformat() if item.paid_date else "",
        )
        for inst in item.installments:
            table.add_row(
                "",
                f"  {'Zaliczka' if inst.index == 0 else f'Rata {inst.index}/{inst.total}'}",
                str(inst.amount),
                "",
                _styled("paid" if inst.paid else "unpaid"),
                inst.paid_date.isoformat() if inst.paid_date else "",
            )
    console.print(table)

    for warning in details.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


@app.command("create-admin")
def create_admin(
    username: str = typer.Argument(..., help="Login name"),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
    name: str = typer.Option("Administrator", "--name", help="Display name"),
):
    """Create an admin account."""
    init_db()
    db = SessionLocal()
    try:
        employee = EmployeeService(db).create_admin(username, password, name)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    finally:
        db.close()
    console.print(f"[green]Admin {employee.username} created (id {employee.id}).[/green]")


if __name__ == "__main__":
    app()
