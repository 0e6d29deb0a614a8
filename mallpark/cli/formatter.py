from datetime import datetime
from io import StringIO

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mallpark.schemas.parking import ComplexStatus, ParkedVehicle, SlotResponse
from mallpark.schemas.session import SessionResponse, VehicleBilling
from mallpark.utils.constants import RateClass, SessionStatus, SlotStatus

DEFAULT_WIDTH = 80
CURRENCY = "pesos"


def render(renderable: RenderableType, width: int = DEFAULT_WIDTH) -> str:
    """Plain-text rendering, used for logs and tests."""
    console = Console(file=StringIO(), width=width, color_system=None, force_terminal=False)
    console.print(renderable)
    return console.file.getvalue()


def format_time(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def format_header(text: str) -> Text:
    return Text(text.upper(), style="bold cyan")


def format_error(message: str) -> Text:
    return Text.assemble(("ERROR: ", "bold red"), message)


def format_ticket(ticket: SessionResponse) -> Panel:
    status = "ACTIVE" if ticket.status == SessionStatus.ACTIVE else "COMPLETED"
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Ticket", ticket.ticket_number)
    table.add_row("Status", status)
    table.add_row("Vehicle", f"{ticket.license_plate} ({ticket.vehicle_size.value.upper()})")
    table.add_row("Slot", f"{ticket.slot_id} ({ticket.rate_class.value.upper()})")
    table.add_row("Entry Point", str(ticket.entry_point_id))
    table.add_row("Entry Time", format_time(ticket.entry_time))
    if ticket.exit_time is not None:
        table.add_row("Exit Time", format_time(ticket.exit_time))
        table.add_row("Duration", f"{ticket.duration_hours} hours")
        table.add_row("Fee", f"{ticket.fee} {CURRENCY}")

    body: list[RenderableType] = [table]
    if ticket.previous_ticket_number:
        body.append(
            Text(
                f"\nContinuous rate applies from previous ticket {ticket.previous_ticket_number}",
                style="yellow",
            )
        )
    return Panel(Group(*body), title="Parking Ticket", expand=False)


def format_status(status: ComplexStatus) -> Table:
    table = Table(title="Parking Complex Status", show_header=False)
    table.add_column(style="bold")
    table.add_column(justify="right")
    table.add_row("Entry Points", str(status.entry_points))
    table.add_row("Parking Slots", str(status.parking_slots))
    table.add_row("Parked Vehicles", str(status.parked_vehicles))
    table.add_row("Available Slots", str(status.available_slots))
    for size in RateClass:
        table.add_row(f"  {size.value.capitalize()}", str(status.available_by_size.get(size, 0)))
    return table


def format_slots(slots: list[SlotResponse], title: str = "Parking Slots") -> RenderableType:
    if not slots:
        return Text(f"No {title.lower()} found")

    table = Table(title=f"{title} ({len(slots)})")
    table.add_column("ID", justify="right")
    table.add_column("TYPE")
    table.add_column("STATUS")
    table.add_column("DISTANCES")
    for slot in sorted(slots, key=lambda s: s.id):
        available = slot.status == SlotStatus.AVAILABLE
        table.add_row(
            str(slot.id),
            slot.size.value.upper(),
            Text("AVAILABLE" if available else "OCCUPIED", style="green" if available else "red"),
            ", ".join(str(d) for d in slot.distances),
        )
    return table


def format_vehicles(vehicles: list[ParkedVehicle]) -> RenderableType:
    if not vehicles:
        return Text("No vehicles currently parked")

    table = Table(title=f"Parked Vehicles ({len(vehicles)})")
    table.add_column("ID")
    table.add_column("TYPE")
    table.add_column("SLOT", justify="right")
    table.add_column("TICKET")
    for vehicle in vehicles:
        table.add_row(
            vehicle.license_plate,
            vehicle.size.value.upper(),
            str(vehicle.slot_id),
            vehicle.ticket_number,
        )
    return table


def format_billing(billing: VehicleBilling) -> RenderableType:
    tickets = Table(title=f"Tickets for {billing.license_plate}")
    tickets.add_column("TICKET")
    tickets.add_column("CLASS")
    tickets.add_column("ENTRY")
    tickets.add_column("EXIT")
    tickets.add_column("HOURS", justify="right")
    tickets.add_column("FEE", justify="right")
    tickets.add_column("CONTINUES")
    for ticket in billing.sessions:
        tickets.add_row(
            ticket.ticket_number,
            ticket.rate_class.value.upper(),
            format_time(ticket.entry_time),
            format_time(ticket.exit_time),
            "-" if ticket.duration_hours is None else str(ticket.duration_hours),
            "-" if ticket.fee is None else str(ticket.fee),
            ticket.previous_ticket_number or "",
        )

    segments = Table(title="Continuous Segments")
    segments.add_column("#", justify="right")
    segments.add_column("TICKETS", justify="right")
    segments.add_column("BILLED HOURS", justify="right")
    segments.add_column("HOURS BY CLASS")
    segments.add_column("FEE", justify="right")
    for index, segment in enumerate(billing.segments, start=1):
        by_class = ", ".join(
            f"{rate_class.value}={hours}h" for rate_class, hours in segment.hours_by_class.items()
        )
        segments.add_row(
            str(index),
            str(len(segment.sessions)),
            str(segment.billed_hours),
            by_class,
            str(segment.fee),
        )

    totals = Text.assemble(
        ("Charged: ", "bold"),
        f"{billing.charged_fee} {CURRENCY}   ",
        ("Continuous rate: ", "bold"),
        f"{billing.continuous_fee} {CURRENCY}",
    )
    return Group(tickets, segments, totals)
