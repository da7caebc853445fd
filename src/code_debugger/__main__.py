"""Command line entry point.

By default the HTTP service is started. ``--dry-run``, ``--health-check`` and
``--analyze FILE`` instead load the configuration, do one thing and exit.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import structlog

from code_debugger._version import __version__

log = structlog.get_logger()

DEFAULT_CONFIG_PATH = Path("config/config.yaml")


def setup_logging(debug: bool = False, log_format: str = "console") -> None:
    """Configure console logging until the configuration file is read."""
    from code_debugger.utils.logging import LogLevel, configure_logging

    configure_logging(level=LogLevel.DEBUG if debug else LogLevel.INFO, log_format=log_format)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="code-debugger",
        description="Lint, compile and explain JavaScript, Python and C++ code.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help=f"YAML configuration file (default: {DEFAULT_CONFIG_PATH} when present)",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default="console",
        help="Log format used before the configuration is loaded",
    )
    parser.add_argument("--host", help="Override server.host")
    parser.add_argument("--port", type=int, help="Override server.port")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dry-run", action="store_true", help="Validate configuration and exit")
    mode.add_argument(
        "--health-check", action="store_true", help="Check tools and credentials and exit"
    )
    mode.add_argument(
        "--analyze", type=Path, metavar="FILE", help="Print the analysis of FILE as JSON"
    )
    parser.add_argument(
        "--language", help="Language tag for --analyze (default: from the file extension)"
    )
    return parser.parse_args(argv)


def describe_config(config: Any) -> dict[str, Any]:
    """Dotted-key view of the configuration with credentials masked.

    JavaScript rules are left out; they are listed by the health check.
    """
    from code_debugger.utils.security import mask_config_value

    summary: dict[str, Any] = {}

    def walk(prefix: str, value: Any) -> None:
        if isinstance(value, dict):
            for key, item in value.items():
                walk(f"{prefix}.{key}" if prefix else str(key), item)
        elif isinstance(value, str):
            summary[prefix] = mask_config_value(prefix, value)
        else:
            summary[prefix] = value

    walk("", config.model_dump(mode="json", exclude={"javascript"}))
    return summary


def load_settings(config_path: Path | None, host: str | None, port: int | None) -> Any:
    """Load configuration, apply CLI overrides and reconfigure logging from it."""
    from code_debugger.config.loader import load_config
    from code_debugger.utils.logging import configure_logging

    config = load_config(config_path)
    if host:
        config.server.host = host
    if port:
        config.server.port = port

    log_file = config.logging.file
    configure_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        file_path=log_file.path,
        file_enabled=log_file.enabled,
    )
    return config


async def check_health(config: Any) -> int:
    from code_debugger.utils.health import HealthChecker

    report = await HealthChecker(config).run_all_checks()
    for check in report.checks:
        log.info(
            "health_check_result",
            check=check.name,
            status=check.status.value,
            message=check.message,
        )
    if not report.healthy:
        log.error("health_check_failed", details=report.details)
        return 1
    log.info("health_check_passed", details=report.details)
    return 0


async def analyze_file(config: Any, path: Path, language: str | None = None) -> int:
    """Analyze one local file and print the result.

    Returns:
        0 when the analysis completed, 1 otherwise.
    """
    from code_debugger.core.dispatcher import create_augmenter, create_dispatcher
    from code_debugger.core.ingress import resolve_pasted, resolve_upload

    data = path.read_bytes()
    if language:
        submission = resolve_pasted(data.decode("utf-8", errors="replace"), language)
    else:
        submission = resolve_upload(path.name, data)

    augmenter = create_augmenter(config)
    try:
        dispatcher = create_dispatcher(config, augmenter)
        result = await dispatcher.analyze(submission.code, submission.language)
    finally:
        await augmenter.close()
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.success else 1


async def serve(config: Any) -> None:
    """Serve the HTTP application until interrupted."""
    import uvicorn

    from code_debugger.server.app import create_app
    from code_debugger.utils.logging import LogEventNames

    server = uvicorn.Server(
        uvicorn.Config(
            create_app(config),
            host=config.server.host,
            port=config.server.port,
            log_config=None,
        )
    )
    await server.serve()
    log.info(LogEventNames.SERVICE_STOPPED)


async def run_service(
    config_path: Path | None,
    dry_run: bool = False,
    health_check: bool = False,
    host: str | None = None,
    port: int | None = None,
    analyze: Path | None = None,
    language: str | None = None,
) -> int:
    """Load configuration and run the selected mode.

    Args:
        config_path: YAML file to load. None falls back to
            ``config/config.yaml`` when it exists, else to defaults and the
            environment.
        dry_run: Stop after the configuration validates.
        health_check: Run the dependency checks instead of serving.
        host: Overrides ``server.host``.
        port: Overrides ``server.port``.
        analyze: Analyze this file once instead of serving.
        language: Language tag for ``analyze``.

    Returns:
        Process exit code.
    """
    from code_debugger.utils.logging import LogEventNames

    if config_path is None and DEFAULT_CONFIG_PATH.exists():
        config_path = DEFAULT_CONFIG_PATH

    try:
        config = load_settings(config_path, host, port)
        log.info(
            LogEventNames.SERVICE_STARTING,
            version=__version__,
            config_path=str(config_path) if config_path else None,
            **describe_config(config),
        )

        if dry_run:
            log.info("dry_run_mode_config_valid")
            return 0
        if health_check:
            return await check_health(config)
        if analyze is not None:
            return await analyze_file(config, analyze, language)
        await serve(config)
        return 0

    except FileNotFoundError as e:
        log.error("file_not_found", error=str(e))
    except ValueError as e:
        # pydantic's ValidationError is a ValueError
        log.error("configuration_invalid", error=str(e))
    except Exception as e:
        log.exception("fatal_error", error=str(e))
    return 1


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(debug=args.debug, log_format=args.format)

    try:
        return asyncio.run(
            run_service(
                args.config,
                dry_run=args.dry_run,
                health_check=args.health_check,
                host=args.host,
                port=args.port,
                analyze=args.analyze,
                language=args.language,
            )
        )
    except KeyboardInterrupt:
        log.info("shutting_down_gracefully")
        return 0


if __name__ == "__main__":
    sys.exit(main())
