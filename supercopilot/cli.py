"""
SuperCopilot CLI - persona and command preprocessing from the terminal.

Commands:
- process: Render the prompt for a piece of user input
- personas: List configured personas
- commands: List configured slash commands
- help-text: Show the generated command help
- request: Run a raw dispatcher request (JSON in, JSON out)
- validate: Check a configuration file
- hook: Run the UserPromptSubmit hook (stdin JSON)
"""

import json
import sys

import click

from supercopilot import __version__
from supercopilot.config import ConfigError, resolve_config
from supercopilot.main import SuperCopilotMain
from supercopilot.settings import Settings, configure_logging
from supercopilot.ux import print_error, print_success, print_table, print_bullets


def _dispatcher(ctx: click.Context) -> SuperCopilotMain:
    """Build the dispatcher for this invocation, exiting on bad config."""
    obj = ctx.ensure_object(dict)
    if obj.get("dispatcher") is None:
        settings = Settings.from_env()
        configure_logging(settings)
        result = resolve_config(obj.get("config_path") or settings.config_path)
        try:
            config = result.unwrap()
        except ConfigError as e:
            print_error(f"Invalid configuration ({result.source}):")
            print_bullets(e.errors, err=True)
            sys.exit(1)
        dispatcher = SuperCopilotMain(config=config, settings=settings)
        dispatcher.initialize()
        obj["dispatcher"] = dispatcher
    return obj["dispatcher"]


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Persona/command table (YAML or JSON). Defaults to built-ins.")
@click.pass_context
def cli(ctx, config_path):
    """SuperCopilot - persona selection and slash commands for AI assistants.

    Detects commands like /review in user input, or picks the persona that
    best fits the active file and query, and prints the rendered prompt.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument("text")
@click.option("--file", "-f", "file_path", default="", help="Active file path")
@click.option("--persona", "-p", default=None, help="Force a persona")
@click.option("--json", "as_json", is_flag=True, help="Print prompt and context as JSON")
@click.pass_context
def process(ctx, text: str, file_path: str, persona: str, as_json: bool):
    """Render the prompt for TEXT.

    \b
    Examples:
        supercopilot process "explain this function" -f app.ts
        supercopilot process "/review check the auth flow"
    """
    dispatcher = _dispatcher(ctx)
    response = dispatcher.handle_request({
        "action": "processInput",
        "userText": text,
        "filePath": file_path,
        "options": {"persona": persona} if persona else {},
    })

    if as_json:
        click.echo(json.dumps(response, indent=2))
    elif response["success"]:
        click.echo(response["prompt"])
    else:
        print_error(response["error"])
        sys.exit(1)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def personas(ctx, as_json: bool):
    """List configured personas in tie-break order."""
    response = _dispatcher(ctx).handle_request({"action": "getPersonas"})
    if as_json:
        click.echo(json.dumps(response, indent=2))
        return

    rows = [
        [p["key"], ", ".join(p["extensions"]) or "-", ", ".join(p["keywords"])]
        for p in response.get("personas", [])
    ]
    print_table(["PERSONA", "EXTENSIONS", "KEYWORDS"], rows)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def commands(ctx, as_json: bool):
    """List configured slash commands."""
    response = _dispatcher(ctx).handle_request({"action": "getCommands"})
    if as_json:
        click.echo(json.dumps(response, indent=2))
        return

    rows = [
        [c["key"], c["trigger"], ", ".join(c["aliases"]) or "-", c["description"]]
        for c in response.get("commands", [])
    ]
    print_table(["COMMAND", "TRIGGER", "ALIASES", "DESCRIPTION"], rows)


@cli.command("help-text")
@click.pass_context
def help_text(ctx):
    """Show the generated command help."""
    response = _dispatcher(ctx).handle_request({"action": "generateHelp"})
    click.echo(response.get("helpText", ""))


@cli.command()
@click.argument("payload", default="-")
@click.pass_context
def request(ctx, payload: str):
    """Run a raw dispatcher request.

    PAYLOAD is a JSON object, or "-" to read it from stdin.

    \b
    Example:
        supercopilot request '{"action": "processInput", "userText": "/help"}'
    """
    raw = sys.stdin.read() if payload == "-" else payload
    try:
        data = json.loads(raw) if raw.strip() else {}
    except json.JSONDecodeError as e:
        click.echo(json.dumps({"success": False, "error": f"Invalid JSON: {e}"}))
        sys.exit(1)

    response = _dispatcher(ctx).handle_request(data)
    click.echo(json.dumps(response, indent=2))
    if not response.get("success"):
        sys.exit(1)


@cli.command()
@click.argument("path", required=False, type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def validate(ctx, path: str, as_json: bool):
    """Check a configuration file (defaults to --config or built-ins)."""
    result = resolve_config(path or ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.ok:
        print_success(f"Valid: {result.source}")
        print_bullets([
            f"{len(result.config.personas)} personas (default: {result.config.default_persona})",
            f"{len(result.config.commands)} commands",
        ])
    else:
        print_error(f"Invalid: {result.source}")
        print_bullets(result.errors, err=True)

    if not result.ok:
        sys.exit(1)


@cli.command()
def hook():
    """Run the UserPromptSubmit hook (reads JSON on stdin)."""
    from supercopilot.hooks.user_prompt import main as hook_main
    hook_main()


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
