import io

from rich.console import Console
from sqlalchemy.orm import Session
from typer.testing import CliRunner

from mallpark.cli.formatter import render
from mallpark.cli.handler import CommandHandler
from mallpark.cli.shell import Shell
from mallpark.main import app

runner = CliRunner()


def run_shell(db: Session, script: str) -> str:
    """Feed ``script`` to a shell and return what it printed."""
    output = io.StringIO()
    console = Console(file=output, width=120, color_system=None)
    Shell(CommandHandler(db), console=console, input_stream=io.StringIO(script)).start()
    return output.getvalue()


def test_parse_command():
    assert CommandHandler.parse_command("  PARK abc small 0 ") == ("park", ["abc", "small", "0"])
    assert CommandHandler.parse_command("   ") is None
    assert CommandHandler.parse_command(None) is None


def test_unknown_and_empty_commands(parking_complex: Session):
    handler = CommandHandler(parking_complex)
    result = handler.execute_command("fly away")
    assert not result.success
    assert "Unknown command: fly" in result.message
    assert not handler.execute_command("").success


def test_help_and_status(parking_complex: Session):
    handler = CommandHandler(parking_complex)
    assert "unpark <plate> [at]" in render(handler.execute_command("help").message)

    status = render(handler.execute_command("status").message)
    assert "Parking Slots" in status
    assert "Available Slots" in status


def test_park_and_unpark_commands(parking_complex: Session):
    handler = CommandHandler(parking_complex)

    parked = handler.execute_command("park abc123 medium 0 2024-05-01T08:00")
    assert parked.success
    text = render(parked.message, width=120)
    assert "ABC123 (MEDIUM)" in text
    assert "ACTIVE" in text

    vehicles = render(handler.execute_command("vehicles").message, width=120)
    assert "ABC123" in vehicles

    unparked = handler.execute_command("unpark ABC123 2024-05-01T13:00")
    assert unparked.success
    text = render(unparked.message, width=120)
    assert "COMPLETED" in text
    assert "160 pesos" in text


def test_park_command_errors(parking_complex: Session):
    handler = CommandHandler(parking_complex)
    assert "Usage: park" in handler.execute_command("park abc").message
    assert "Invalid vehicle type: huge" in handler.execute_command("park abc huge 0").message
    assert "Entry point not found: 9" in handler.execute_command("park abc small 9").message
    assert "Invalid time: noon" in handler.execute_command("park abc small 0 noon").message
    assert "not parked" in handler.execute_command("unpark abc").message


def test_history_command_shows_continuous_rate(parking_complex: Session):
    handler = CommandHandler(parking_complex)
    handler.execute_command("park abc123 small 0 2024-05-01T08:00")
    handler.execute_command("unpark abc123 2024-05-01T10:00")
    handler.execute_command("park abc123 small 0 2024-05-01T10:30")
    handler.execute_command("unpark abc123 2024-05-01T12:00")

    result = handler.execute_command("history abc123")
    assert result.success
    text = render(result.message, width=160)
    assert "Continuous Segments" in text
    assert "Continuous rate: 60 pesos" in text
    assert "Charged: 80 pesos" in text


def test_slots_command(parking_complex: Session):
    handler = CommandHandler(parking_complex)
    text = render(handler.execute_command("slots large").message)
    assert "Large Parking Slots (2)" in text
    assert not handler.execute_command("slots tiny").success


def test_shell_session(parking_complex: Session):
    output = run_shell(
        parking_complex,
        "park car1 large 2 2024-05-01T08:00\nbogus\nexit\nstatus\n",
    )
    assert "PARKING SYSTEM" in output
    assert "CAR1 (LARGE)" in output
    assert "ERROR: Unknown command: bogus" in output
    assert "Goodbye" in output


def test_shell_stops_at_end_of_input(parking_complex: Session):
    output = run_shell(parking_complex, "vehicles\n")
    assert "No vehicles currently parked" in output
    assert "Goodbye" in output


def test_quote_command():
    result = runner.invoke(
        app,
        ["quote", "--rate-class", "LARGE", "--entry", "2024-05-01 08:00:00", "--exit", "2024-05-01 13:00:00"],
    )
    assert result.exit_code == 0
    assert "240 pesos" in result.output


def test_quote_rejects_exit_before_entry():
    result = runner.invoke(
        app,
        ["quote", "--rate-class", "small", "--entry", "2024-05-01 08:00:00", "--exit", "2024-05-01 07:00:00"],
    )
    assert result.exit_code == 1


def test_quote_continuous_command():
    result = runner.invoke(
        app,
        [
            "quote-continuous",
            "--stay", "small,2024-05-01T08:00,2024-05-01T10:00",
            "--stay", "medium,2024-05-01T10:30,2024-05-01T11:30",
            "--stay", "large,2024-05-01T12:00,2024-05-01T14:00",
        ],
    )
    assert result.exit_code == 0
    assert "240 pesos" in result.output


def test_shell_command_runs_default_complex():
    result = runner.invoke(app, ["shell"], input="park van9 large 0 2024-05-01T08:00\nexit\n")
    assert result.exit_code == 0
    assert "VAN9 (LARGE)" in result.output


def test_quote_continuous_mixes_naive_and_aware_times():
    result = runner.invoke(
        app,
        [
            "quote-continuous",
            "--stay", "small,2024-05-01T08:00,2024-05-01T10:00+00:00",
            "--stay", "medium,2024-05-01T10:30+00:00,2024-05-01T11:30",
            "--stay", "large,2024-05-01T12:00,2024-05-01T14:00+00:00",
        ],
    )
    assert result.exit_code == 0
    assert "240 pesos" in result.output


def test_quote_continuous_rejects_exit_before_entry():
    result = runner.invoke(
        app,
        ["quote-continuous", "--stay", "small,2024-05-01T10:00,2024-05-01T08:00"],
    )
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_quote_continuous_rejects_malformed_stay():
    result = runner.invoke(app, ["quote-continuous", "--stay", "small,2024-05-01T08:00"])
    assert result.exit_code == 2


def test_shell_keeps_info_logs_off_the_prompt():
    result = runner.invoke(app, ["shell"], input="park van9 large 0 2024-05-01T08:00\nexit\n")
    assert result.exit_code == 0
    assert "VAN9 (LARGE)" in result.output
    assert "| INFO |" not in result.output
