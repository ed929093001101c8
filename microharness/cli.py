"""microharness - run a benchmark function from the command line (Typer).

    microharness run mypkg.benches:bench_parse -n 1000
    microharness run mypkg.benches:bench_parse --duration-ms 500 --json
"""

from __future__ import annotations

import importlib
import json
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import typer

from microharness.defaults import NS_PER_MS, get_defaults
from microharness.exceptions import ClockUnavailableError, ConfigurationError
from microharness.logger import get_logger, setup_logging
from microharness.report import format_result
from microharness.runner import run_n, run_ns

logger = get_logger(__name__)

app = typer.Typer(
    help="Micro-benchmark harness: fixed-count and duration-target runs.",
    no_args_is_help=True,
    add_completion=False,
)


class LogFormat(str, Enum):
    text = "text"
    json = "json"


def load_target(target: str) -> Callable:
    """Resolve ``package.module:function`` (the attribute may be dotted)."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise typer.BadParameter(
            f"expected 'module:function', got '{target}'", param_hint="TARGET"
        )
    try:
        obj = importlib.import_module(module_name)
    except ImportError as exc:
        raise typer.BadParameter(f"cannot import '{module_name}': {exc}", param_hint="TARGET") from exc
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise typer.BadParameter(
                f"'{module_name}' has no attribute '{attr_path}'", param_hint="TARGET"
            ) from exc
    if not callable(obj):
        raise typer.BadParameter(f"'{target}' is not callable", param_hint="TARGET")
    return obj


@app.callback()
def main_callback() -> None:
    """Micro-benchmark harness."""


@app.command("run")
def run_command(
    target: str = typer.Argument(..., help="Benchmark function as 'package.module:function'"),
    iterations: Optional[int] = typer.Option(
        None, "--iterations", "-n", min=1, help="Run exactly N iterations"
    ),
    duration_ms: Optional[float] = typer.Option(
        None, "--duration-ms", help="Scale iterations until one run takes this long (default 1000)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    log_level: str = typer.Option(
        get_defaults().log_level, "--log-level", help="DEBUG, INFO, WARNING or ERROR"
    ),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file"),
    log_format: LogFormat = typer.Option(LogFormat.text, "--log-format", help="Format for --log-file"),
) -> None:
    """Benchmark TARGET and report ns/op and allocation figures."""
    setup_logging(level=log_level, log_file=log_file, log_format=log_format.value)

    if iterations is not None and duration_ms is not None:
        raise typer.BadParameter("use either --iterations or --duration-ms, not both")
    if duration_ms is not None and duration_ms <= 0:
        raise typer.BadParameter("must be > 0", param_hint="--duration-ms")

    function = load_target(target)
    try:
        if iterations is not None:
            result = run_n(function, iterations)
        else:
            target_ns = int(duration_ms * NS_PER_MS) if duration_ms else get_defaults().default_duration_ns
            result = run_ns(function, target_ns)
    except (ConfigurationError, ClockUnavailableError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)
    except Exception:
        # Already logged by the runner
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(json.dumps({"name": target, **result.to_dict()}, indent=2))
    else:
        for line in format_result(result, target):
            typer.echo(line)
    if result.leaked:
        logger.warning("%s leaked %d bytes", target, result.live_bytes)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
