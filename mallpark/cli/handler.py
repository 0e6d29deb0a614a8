from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import pydantic
from loguru import logger
from rich.console import RenderableType
from rich.text import Text
from sqlalchemy.orm import Session

from mallpark.cli import formatter
from mallpark.core.exceptions import CarParkException
from mallpark.schemas.session import ParkRequest
from mallpark.services import parking as parking_service
from mallpark.services import session as session_service
from mallpark.services import vehicle as vehicle_service
from mallpark.utils.constants import RateClass

HELP_TEXT = """Available commands:

help                              - Show this help message
status                            - Show parking complex status
park <plate> <type> <entry> [at]  - Park a vehicle (type: small, medium, large)
unpark <plate> [at]               - Unpark a vehicle
slots [type]                      - List parking slots (type: small, medium, large)
vehicles                          - List parked vehicles
history <plate>                   - Show tickets and continuous-rate billing
exit                              - Exit the application

[at] is an ISO-8601 time such as 2024-05-01T09:30; it defaults to now."""


@dataclass
class CommandResult:
    success: bool
    message: RenderableType


class CommandHandler:
    """Parses shell commands and runs them against one database session."""

    def __init__(self, db: Session):
        self.db = db
        self.commands: dict[str, Callable[[list[str]], CommandResult]] = {
            "help": self.execute_help,
            "status": self.execute_status,
            "park": self.execute_park,
            "unpark": self.execute_unpark,
            "slots": self.execute_slots,
            "vehicles": self.execute_vehicles,
            "history": self.execute_history,
            "exit": self.execute_exit,
        }

    @staticmethod
    def parse_command(line: str | None) -> tuple[str, list[str]] | None:
        if line is None or not line.strip():
            return None
        command, *args = line.strip().split()
        return command.lower(), args

    def execute_command(self, line: str | None) -> CommandResult:
        parsed = self.parse_command(line)
        if parsed is None:
            return CommandResult(False, "Invalid command. Type 'help' for available commands.")

        command, args = parsed
        handler = self.commands.get(command)
        if handler is None:
            return CommandResult(
                False, f"Unknown command: {command}. Type 'help' for available commands."
            )

        try:
            result = handler(args)
            self.db.commit()
        except CarParkException as exc:
            self.db.rollback()
            logger.info(f"{command} failed: {exc.detail}")
            return CommandResult(False, exc.detail)
        except pydantic.ValidationError as exc:
            self.db.rollback()
            message = "; ".join(err["msg"] for err in exc.errors())
            logger.info(f"{command} rejected: {message}")
            return CommandResult(False, message)
        return result

    def execute_help(self, args: list[str]) -> CommandResult:
        return CommandResult(True, Text(HELP_TEXT))

    def execute_status(self, args: list[str]) -> CommandResult:
        return CommandResult(True, formatter.format_status(parking_service.get_complex_status(self.db)))

    def execute_park(self, args: list[str]) -> CommandResult:
        if len(args) < 3:
            return self.invalid_command("park <plate> <type> <entry> [at]")

        plate, size, entry = args[:3]
        vehicle_size = self.parse_size(size)
        if vehicle_size is None:
            return CommandResult(False, f"Invalid vehicle type: {size}")
        if not entry.isdigit():
            return CommandResult(False, f"Entry point not found: {entry}")
        at, error = self.parse_time(args[3:])
        if error:
            return error

        ticket = session_service.park_vehicle(
            self.db,
            ParkRequest(license_plate=plate, vehicle_size=vehicle_size, entry_point_id=int(entry)),
            at=at,
        )
        return CommandResult(True, formatter.format_ticket(ticket))

    def execute_unpark(self, args: list[str]) -> CommandResult:
        if not args:
            return self.invalid_command("unpark <plate> [at]")

        at, error = self.parse_time(args[1:])
        if error:
            return error
        ticket = session_service.unpark_vehicle(self.db, args[0], at=at)
        return CommandResult(True, formatter.format_ticket(ticket))

    def execute_slots(self, args: list[str]) -> CommandResult:
        if not args:
            return CommandResult(True, formatter.format_slots(parking_service.list_slots(self.db)))

        size = self.parse_size(args[0])
        if size is None:
            return CommandResult(False, f"Invalid slot type: {args[0]}")
        slots = parking_service.list_slots(self.db, size=size)
        return CommandResult(
            True, formatter.format_slots(slots, title=f"{size.value.capitalize()} Parking Slots")
        )

    def execute_vehicles(self, args: list[str]) -> CommandResult:
        return CommandResult(True, formatter.format_vehicles(vehicle_service.list_parked_vehicles(self.db)))

    def execute_history(self, args: list[str]) -> CommandResult:
        if not args:
            return self.invalid_command("history <plate>")
        billing = session_service.get_vehicle_billing(self.db, args[0])
        return CommandResult(True, formatter.format_billing(billing))

    def execute_exit(self, args: list[str]) -> CommandResult:
        return CommandResult(True, "Exiting the parking system. Goodbye!")

    @staticmethod
    def parse_size(value: str) -> RateClass | None:
        try:
            return RateClass(value.lower())
        except ValueError:
            return None

    @staticmethod
    def parse_time(args: list[str]) -> tuple[datetime | None, CommandResult | None]:
        if not args:
            return None, None
        try:
            return datetime.fromisoformat(args[0]), None
        except ValueError:
            return None, CommandResult(False, f"Invalid time: {args[0]}")

    @staticmethod
    def invalid_command(usage: str) -> CommandResult:
        return CommandResult(False, f"Invalid command format. Usage: {usage}")
