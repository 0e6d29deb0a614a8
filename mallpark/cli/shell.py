import sys
from typing import TextIO

from rich.console import Console, Group

from mallpark.cli import formatter
from mallpark.cli.handler import CommandHandler
from mallpark.services import parking as parking_service

PROMPT = "\nEnter command (or 'exit' to quit): "


class Shell:
    """Interactive loop around a :class:`CommandHandler`."""

    def __init__(
        self,
        handler: CommandHandler,
        console: Console | None = None,
        input_stream: TextIO | None = None,
    ):
        self.handler = handler
        self.console = console or Console()
        self.input_stream = input_stream or sys.stdin
        self.running = True

    def display_welcome(self) -> None:
        status = parking_service.get_complex_status(self.handler.db)
        self.console.print(
            Group(
                formatter.format_header("Parking System"),
                "Welcome to the Mall Parking System!",
                "Type 'help' for a list of available commands.\n",
                formatter.format_status(status),
            )
        )

    def stop(self) -> None:
        self.running = False

    def read_command(self) -> str | None:
        line = self.input_stream.readline()
        if not line:
            return None
        return line.rstrip("\n")

    def process_command(self, line: str) -> None:
        command = line.strip()
        if command.lower() == "exit":
            self.stop()
            return

        result = self.handler.execute_command(command)
        if result.success:
            self.console.print(result.message)
        else:
            self.console.print(formatter.format_error(str(result.message)))

    def start(self) -> None:
        self.display_welcome()
        while self.running:
            self.console.print(PROMPT, end="", markup=False)
            line = self.read_command()
            if line is None:
                break
            self.process_command(line)
        self.console.print("\nThank you for using the Parking System. Goodbye!")
