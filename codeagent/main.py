"""Command line entry point for the code agent backend."""

import asyncio
import sys
import time

import click
from rich.console import Console
from rich.panel import Panel

from codeagent import __version__
from codeagent.config import config
from codeagent.db import MessageRepository, ProjectNotFoundError, init_db
from codeagent.utils import format_duration, logger, print_table

console = Console()


@click.group()
@click.version_option(version=__version__)
def cli():
    """Code Agent - build apps from prompts inside sandboxes."""
    pass


@cli.command("init-db")
def init_db_command():
    """Create the database tables."""
    init_db()
    console.print("[green]✓ Database ready[/green]")


@cli.command("create-project")
@click.argument("name")
def create_project(name: str):
    """Create a project to hold a conversation."""
    project = MessageRepository().create_project(name)
    console.print(f"[green]✓ Project created:[/green] {project.id}")


@cli.command()
def projects():
    """List projects."""
    rows = [
        [project.id, project.name, project.updated_at.strftime("%Y-%m-%d %H:%M")]
        for project in MessageRepository().list_projects()
    ]
    print_table("Projects", ["ID", "Name", "Updated"], rows, show_lines=False)


@cli.command()
@click.argument("prompt", required=False)
@click.option("--project", "-p", "project_id", default=None, help="Project id (default: new project)")
@click.option("--model", "-m", default=None, help="LLM model to use (default: from config)")
@click.option(
    "--max-iterations",
    "-i",
    default=None,
    type=int,
    help=f"Maximum number of agent iterations (default: {config.max_iterations})",
)
def run(prompt: str, project_id: str, model: str, max_iterations: int):
    """
    Run the code agent on a prompt.

    Examples:

        \b
        codeagent run "create a hello world page"

        \b
        codeagent run "add a dark mode toggle" --project <id>
    """
    if not prompt:
        console.print(
            Panel(
                "[bold green]Code Agent - Interactive Mode[/bold green]\n\n"
                "Describe what to build, or type 'exit' to quit.",
                border_style="green",
            )
        )
        prompt = console.input("\n[bold cyan]Prompt:[/bold cyan] ")

        if prompt.lower() in ["exit", "quit", "q"]:
            console.print("[yellow]Goodbye![/yellow]")
            sys.exit(0)

    asyncio.run(_run_workflow(prompt, project_id, model, max_iterations))


async def _run_workflow(prompt: str, project_id: str, model: str, max_iterations: int) -> None:
    """Run the workflow through the event client."""
    from codeagent.workflow import CodeAgentWorkflow, create_event_client, submit_prompt

    try:
        init_db()
        repository = MessageRepository()

        if not project_id:
            project_id = repository.create_project(prompt[:60]).id

        workflow = CodeAgentWorkflow(
            repository=repository, model=model, max_iterations=max_iterations
        )
        client = create_event_client(workflow)

        console.print(f"\n[bold]Prompt:[/bold] {prompt}\n")
        console.print("[yellow]Setting up sandbox environment...[/yellow]")

        started = time.time()
        result = await submit_prompt(client, repository, project_id, prompt)
        elapsed = format_duration(time.time() - started)

        messages = repository.list_messages(project_id)
        reply = messages[-1].content if messages else ""

        if result["files"]:
            console.print(f"\n[bold green]✓ Done in {elapsed}[/bold green]\n")
            console.print(Panel(reply, title="Response", border_style="green"))
            console.print(f"[bold]Preview:[/bold] {result['url']}")
            for path in result["files"]:
                console.print(f"  • {path}")
        else:
            console.print(Panel(reply, title="Error", border_style="red"))

        console.print(f"\n[dim]Project ID: {project_id}[/dim]\n")

    except ProjectNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Run cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        logger.exception("Workflow run failed")
        sys.exit(1)


@cli.command()
@click.argument("project_id")
def messages(project_id: str):
    """Show the conversation of a project."""
    for message in MessageRepository().list_messages(project_id):
        style = "cyan" if message.role.value == "USER" else (
            "red" if message.type.value == "ERROR" else "green"
        )
        console.print(Panel(message.content, title=message.role.value.lower(), border_style=style))
        if message.fragment:
            console.print(f"  [bold]{message.fragment.title}[/bold] {message.fragment.sandbox_url}")
            for path in message.fragment.files:
                console.print(f"    • {path}")


@cli.command()
def info():
    """Display information about the agent and configuration."""
    console.print("\n[bold cyan]Code Agent[/bold cyan]\n")

    config_info = [
        ["LLM Provider", config.llm_provider],
        ["LLM Model", config.model_name],
        ["Temperature", str(config.temperature)],
        ["Sandbox Template", config.sandbox_template],
        ["Sandbox Timeout", format_duration(config.sandbox_timeout)],
        ["Preview Port", str(config.sandbox_port)],
        ["Max Iterations", str(config.max_iterations)],
        ["Context Messages", str(config.previous_messages_limit)],
        ["Database", config.database_url],
    ]

    print_table("Configuration", ["Setting", "Value"], config_info, show_lines=False)

    from codeagent.tools import list_tools

    tools = list_tools()
    console.print(f"\n[bold]Available Tools:[/bold] {len(tools)}")
    for tool in tools:
        console.print(f"  • {tool}")

    console.print()


@cli.command()
def status():
    """Check Docker and sandbox status."""
    import docker

    from codeagent.sandbox import SandboxError, SandboxManager

    console.print("\n[bold cyan]System Status[/bold cyan]\n")

    manager = SandboxManager()
    try:
        client = manager.connect_daemon()
        console.print("[green]✓ Docker daemon: Connected[/green]")

        try:
            image = client.images.get(config.sandbox_template)
            console.print(f"[green]✓ Sandbox template: {config.sandbox_template}[/green]")
            console.print(f"  Size: {image.attrs['Size'] / 1024 / 1024:.1f} MB")
        except docker.errors.ImageNotFound:
            console.print(f"[red]✗ Sandbox template not found: {config.sandbox_template}[/red]")

        sandboxes = manager.list_sandboxes()
        console.print(f"\n[bold]Sandboxes:[/bold] {len(sandboxes)}")
        for container in sandboxes:
            console.print(f"  • {container.id[:12]} {container.name} ({container.status})")

    except SandboxError as e:
        console.print(f"[red]✗ {e}[/red]")

    console.print()


@cli.command()
@click.argument("sandbox_id")
def kill(sandbox_id: str):
    """Remove a sandbox."""
    from codeagent.sandbox import SandboxManager, SandboxNotFoundError

    try:
        asyncio.run(SandboxManager().kill(sandbox_id))
        console.print(f"[green]✓ Sandbox removed: {sandbox_id[:12]}[/green]")
    except SandboxNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    cli()
