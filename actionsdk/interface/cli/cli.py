import logging
import os
from pathlib import Path

import click
from pydantic import BaseModel
from pydantic_core import to_json

from actionsdk.application.action_runner import build_payload, load_fixture, run_action
from actionsdk.application.config_loader import load_harness_config
from actionsdk.application.logging_config import configure_logging
from actionsdk.domain.constants import ALLOW_MULTIPLE_WRITES_ENV
from actionsdk.interface.cli.output_models import InvokeOutput, PayloadOutput

logger = logging.getLogger(__name__)


def _json_emit(model: BaseModel, *, keep_null: tuple[str, ...] = ()) -> None:
    # Single-line JSON, omit None fields (e.g., PayloadOutput.payload on error)
    # unless named in keep_null.
    exclude = {name for name, value in model if value is None and name not in keep_null}
    click.echo(model.model_dump_json(exclude=exclude), nl=True)


def _get_json_mode(ctx: click.Context) -> bool:
    obj = ctx.obj or {}
    return bool(obj.get("json", False))


def _parse_secret_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    secrets: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got: {pair}", param_hint="--secret")
        secrets[name] = value
    return secrets


@click.group(help="Workflow action SDK tools.")
@click.option("--json", "json_output", is_flag=True, help="Emit machine-readable JSON on stdout.")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def cli(ctx: click.Context, json_output: bool, verbose: bool) -> None:
    ctx.ensure_object(dict)
    ctx.obj["json"] = bool(json_output)
    configure_logging("DEBUG" if verbose else None)


@cli.command("payload", help="Print the invocation payload built from FIXTURE.")
@click.argument("fixture", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--args-version", "args_version", type=int, required=False)
@click.pass_context
def payload_cmd(ctx: click.Context, fixture: Path, args_version: int | None) -> None:
    try:
        cfg = load_harness_config(project_root=Path.cwd(), user_home=Path.home())

        # CLI --args-version overrides config; fixture overrides both
        version = args_version if args_version is not None else cfg.args_version
        args = build_payload(load_fixture(fixture), args_version=version)

        if _get_json_mode(ctx):
            _json_emit(
                PayloadOutput(
                    exit_code=0,
                    payload=args.model_dump(by_alias=True, mode="json"),
                )
            )
            raise click.exceptions.Exit(0)

        click.echo(args.to_wire())
    except click.exceptions.Exit:
        raise
    except Exception as e:
        if _get_json_mode(ctx):
            _json_emit(PayloadOutput(exit_code=1, error=str(e)))
            raise click.exceptions.Exit(1)
        raise click.ClickException(str(e)) from e


@cli.command(
    "invoke",
    help="Run COMMAND as an action with the payload built from FIXTURE.",
    context_settings={"ignore_unknown_options": True},
)
@click.argument("fixture", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.option("--timeout", type=float, required=False, help="Seconds before the action is killed.")
@click.option("--secret", "secret_pairs", multiple=True, help="NAME=VALUE secret (repeatable).")
@click.pass_context
def invoke_cmd(
    ctx: click.Context,
    fixture: Path,
    command: tuple[str, ...],
    timeout: float | None,
    secret_pairs: tuple[str, ...],
) -> None:
    try:
        cfg = load_harness_config(project_root=Path.cwd(), user_home=Path.home())
        fx = load_fixture(fixture)
        logger.debug(f"Invoking {command[0]} with fixture {fixture}")

        # Secrets: config < fixture < CLI
        secrets = {**cfg.secrets, **fx.secrets, **_parse_secret_pairs(secret_pairs)}
        timeout = timeout if timeout is not None else cfg.timeout

        base_env = None
        if cfg.allow_multiple_writes:
            base_env = {**os.environ, ALLOW_MULTIPLE_WRITES_ENV: "1"}

        run = run_action(
            list(command),
            build_payload(fx, args_version=cfg.args_version),
            secrets=secrets,
            timeout=timeout,
            base_env=base_env,
        )

        output = run.output
        # A written JSON null is still a result; only empty stdout means none.
        wrote_result = output is not None and not output.is_error and bool(run.stdout.strip())
        if _get_json_mode(ctx):
            _json_emit(
                InvokeOutput(
                    exit_code=run.exit_code,
                    result=output.value if output and not output.is_error else None,
                    action_error=output.error if output else None,
                    output_error=run.output_error,
                    stderr=run.stderr or None,
                ),
                keep_null=("result",) if wrote_result else (),
            )
            raise click.exceptions.Exit(run.exit_code)

        if run.stderr:
            click.echo(run.stderr, err=True, nl=False)

        click.echo(f"exit_code={run.exit_code}")
        if run.output_error:
            click.echo(f"output_error={run.output_error}")
        elif output is not None and output.is_error:
            click.echo(f"error={output.error}")
        elif output is not None:
            click.echo(f"result={to_json(output.value).decode('utf-8')}")

        if run.exit_code != 0:
            raise click.exceptions.Exit(run.exit_code)

    except click.exceptions.Exit:
        raise
    except click.BadParameter:
        raise
    except Exception as e:
        if _get_json_mode(ctx):
            _json_emit(InvokeOutput(exit_code=1, error=str(e)))
            raise click.exceptions.Exit(1)
        raise click.ClickException(str(e)) from e
