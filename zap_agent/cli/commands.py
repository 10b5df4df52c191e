"""CLI commands for zap-agent."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from zap_agent import __brand__, __logo__, __version__

app = typer.Typer(
    name="zap-agent",
    help=f"{__logo__} {__brand__} - WhatsApp store assistant",
    no_args_is_help=True,
)

console = Console()


def _cli_fail(cause: str, fix: str | None = None, *, exit_code: int = 1) -> None:
    """Print a consistent CLI error block and exit."""
    console.print(f"[red]{cause}[/red]")
    if fix:
        console.print(f"[dim]Fix: {fix}[/dim]")
    raise typer.Exit(exit_code)


def _load_config_or_fail(config_path: Path | None):
    from zap_agent.config.loader import get_config_path, load_config

    if config_path is not None and not config_path.is_file():
        _cli_fail(
            f"Config file not found: {config_path}",
            f"Create it or drop --config to use {get_config_path()}",
        )
    return load_config(config_path)


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} {__brand__} v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
):
    """zap-agent - WhatsApp store assistant."""
    pass


@app.command("version")
def version_command():
    """Show zap-agent version."""
    console.print(f"{__logo__} {__brand__} v{__version__}")


@app.command()
def gateway(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config.json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Start the WhatsApp gateway: channel, routing engine and daily reset."""
    from zap_agent.agent.loop import AgentLoop
    from zap_agent.bus.queue import MessageBus
    from zap_agent.channels.manager import ChannelManager
    from zap_agent.config.loader import get_config_path
    from zap_agent.scheduler import DailyResetScheduler
    from zap_agent.utils.helpers import setup_logging

    setup_logging(verbose)
    config = _load_config_or_fail(config_path)

    default_name = config.enable_prefix.default_model
    default_model = config.model_id(default_name)
    if default_model is None:
        _cli_fail(
            f"Default model '{default_name}' is not in the model table.",
            f"Set enablePrefix.defaultModel in {config_path or get_config_path()}",
        )
    if not config.get_api_key(default_model):
        provider = config.provider_for(default_model)
        _cli_fail(
            f"No API key configured for provider '{provider}'.",
            f"Set providers.{provider}.apiKey in {config_path or get_config_path()} "
            f"or ZAP_AGENT_PROVIDERS__{provider.upper()}__API_KEY",
        )

    console.print(f"{__logo__} Starting {__brand__} gateway...")

    bus = MessageBus()
    agent = AgentLoop.from_config(config, bus)
    channels = ChannelManager(config, bus)
    reset = DailyResetScheduler.from_config(agent.memory, config.memory)

    console.print(f"[green]✓[/green] Models: {', '.join(agent.router.names) or '-'}")
    if channels.enabled_channels:
        console.print(f"[green]✓[/green] Channels enabled: {', '.join(channels.enabled_channels)}")
    else:
        console.print("[yellow]Warning: No channels enabled[/yellow]")
    console.print(f"[green]✓[/green] Memory reset: {config.memory.reset_cron}")

    async def run():
        try:
            reset.start()
            await asyncio.gather(
                agent.run(),
                channels.start_all(),
            )
        except KeyboardInterrupt:
            console.print("\nShutting down...")
        finally:
            reset.stop()
            await agent.shutdown()
            await channels.stop_all()

    asyncio.run(run())


@app.command()
def classify(
    text: str = typer.Argument(..., help="Message text to classify"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config.json"),
):
    """Print the knowledge category a message would be routed to."""
    from zap_agent.agent.loop import AgentLoop
    from zap_agent.bus.queue import MessageBus

    config = _load_config_or_fail(config_path)
    agent = AgentLoop.from_config(config, MessageBus(), backends={})
    category = asyncio.run(agent.classifier.classify(text))
    console.print(category.value)


@app.command()
def prompt(
    text: str = typer.Argument(..., help="Message text"),
    sender: str = typer.Option("cli:local", "--sender", "-s", help="Sender key"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config.json"),
):
    """Assemble the prompt for a message without sending it to a model."""
    from zap_agent.agent.loop import AgentLoop
    from zap_agent.bus.queue import MessageBus

    config = _load_config_or_fail(config_path)
    agent = AgentLoop.from_config(config, MessageBus(), backends={})
    category, assembled = asyncio.run(agent.build_prompt(sender, text))
    console.print(f"[cyan]Category:[/cyan] {category.value}")
    console.print(assembled, markup=False)


@app.command()
def status(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config.json"),
):
    """Show configured models, knowledge source and channel."""
    from zap_agent.config.loader import get_config_path

    config = _load_config_or_fail(config_path)
    path = config_path or get_config_path()

    console.print(f"{__logo__} {__brand__} Status\n")
    console.print(f"Config: {path} {'[green]✓[/green]' if path.exists() else '[dim]defaults[/dim]'}")

    table = Table(title="Models")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Prefix")
    table.add_column("Model", style="yellow")
    table.add_column("Type")
    table.add_column("API key")

    for name, entry in config.models.builtin.items():
        if not entry.enable:
            continue
        key = "[green]✓[/green]" if config.get_api_key(entry.model) else "[dim]not set[/dim]"
        table.add_row(name, entry.prefix, entry.model, entry.kind, key)
    for custom in config.models.custom:
        if not custom.enable:
            continue
        key = "[green]✓[/green]" if config.get_api_key(custom.model) else "[dim]not set[/dim]"
        table.add_row(custom.model_name, custom.prefix, custom.model, "text", key)
    console.print(table)

    prefix_mode = "required" if config.enable_prefix.enable else "optional"
    console.print(f"Default model: {config.enable_prefix.default_model} (prefix {prefix_mode})")
    console.print(f"Knowledge: {config.knowledge.base_url}")
    console.print(f"Classifier: {config.classifier.strategy}")
    wa = config.channels.whatsapp
    console.print(f"WhatsApp: {'✓' if wa.enabled else '✗'} {wa.bridge_url}")


if __name__ == "__main__":
    app()
