#!/usr/bin/env python3
"""
Hotel Rafaela Smart Service - Console Entry Point
A multi-persona front desk: Sarah greets, Daisy books, John fixes things.

Features:
- Keyword routing of guest messages to the right agent
- Scripted replies in English, Tagalog, Chinese, Japanese and Korean
- Generative fallback through Gemini, OpenAI, Anthropic or a local model
- Per-agent voices through pyttsx3

Version: 1.0.0
Python: 3.11+
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from hotel_desk.core.application import HotelDeskApplication
from hotel_desk.core.config import load_config
from hotel_desk.core.errors import UnsupportedLanguageError
from hotel_desk.core.event_bus import Events
from hotel_desk.models.agent import AGENT_ORDER, Agent, LanguageCode, get_profile
from hotel_desk.models.conversation import Turn
from hotel_desk.utils.logger import setup_logging

app = typer.Typer(add_completion=False, help="Hotel Rafaela multi-agent service desk")
console = Console()

HELP_TEXT = (
    "Type a message to talk to the desk.\n"
    "/agent <host|concierge|support>  switch agent\n"
    "/lang <en|tl|zh|ja|ko>            change language\n"
    "/history                          show the active agent's thread\n"
    "/quit                             exit"
)


def check_python_version():
    """Ensure compatible Python version."""
    if sys.version_info < (3, 11):
        console.print("[red]❌ Python 3.11 or higher is required![/red]")
        console.print(f"Current version: {sys.version}")
        raise typer.Exit(code=1)


def print_turn(agent: Agent, turn: Turn):
    """Echo an agent turn in the agent's color."""
    if turn.is_user:
        return
    profile = get_profile(agent)
    console.print(f"[bold {profile.color}]{profile.name}[/] [dim]({profile.badge})[/dim]: {turn.text}")


def print_history(desk: HotelDeskApplication):
    agent = desk.session.active_agent
    profile = get_profile(agent)
    table = Table(title=f"{profile.name} - {profile.role}")
    table.add_column("Time", style="dim")
    table.add_column("From")
    table.add_column("Message")
    for turn in desk.session.thread(agent):
        speaker = "Guest" if turn.is_user else profile.name
        table.add_row(turn.created_at.strftime("%H:%M:%S"), speaker, turn.text)
    console.print(table)


async def run_console(desk: HotelDeskApplication):
    """Read guest input until /quit or end of input."""
    desk.event_bus.subscribe(Events.TURN_APPENDED, print_turn)
    desk.event_bus.subscribe(
        Events.SUBMISSION_REJECTED,
        lambda text: console.print("[yellow]Still answering, please wait.[/yellow]"),
    )
    await desk.initialize()

    agents = ", ".join(f"{get_profile(a).name} ({a.value})" for a in AGENT_ORDER)
    console.print(Panel(HELP_TEXT, title=desk.config.app_name, subtitle=agents))

    while desk.running:
        try:
            line = await asyncio.to_thread(console.input, "[bold]You[/bold]: ")
        except EOFError:
            break

        line = line.strip()
        if not line:
            continue

        if line.startswith("/"):
            command, _, argument = line.partition(" ")
            argument = argument.strip()
            if command == "/quit":
                break
            elif command == "/history":
                print_history(desk)
            elif command == "/agent":
                try:
                    await desk.session.switch_agent(argument)
                except ValueError as e:
                    console.print(f"[red]{e}[/red]")
            elif command == "/lang":
                try:
                    await desk.session.set_language(argument)
                except UnsupportedLanguageError as e:
                    console.print(f"[red]{e}[/red]")
            else:
                console.print(HELP_TEXT)
            continue

        await desk.handle_text(line)

    await desk.shutdown()


@app.command()
def main(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a YAML config file"),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Starting language code"),
    no_voice: bool = typer.Option(False, "--no-voice", help="Print replies without speaking them"),
):
    """Run the interactive service desk."""
    check_python_version()

    settings = load_config(str(config) if config else None)
    if language:
        try:
            settings.session.default_language = LanguageCode.parse(language)
        except ValueError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(code=2)
    if no_voice:
        settings.voice.tts_engine = "none"

    setup_logging(settings.log_level, settings.log_dir, console=settings.debug)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting {settings.app_name} v{settings.version}")

    desk = HotelDeskApplication(settings)
    try:
        asyncio.run(run_console(desk))
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        console.print("\n👋 Goodbye!")
    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=True)
        console.print(f"[red]❌ Application error: {e}[/red]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
