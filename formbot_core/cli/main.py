#!/usr/bin/env python3
"""
formbot CLI - run declarative form automation targets

Usage:
    formbot run <target|target.yaml> [--set key=value,...] [--headless] [--timeout S] [--log]
    formbot agent [task] --target <target> [--model provider/model] [--max-steps N]
    formbot targets
    formbot cleanup [--days N]
"""

import argparse
import asyncio
import json
import shlex
import sys
from dataclasses import replace
from typing import Dict, Optional

from ..agent import FormAgent
from ..config import Config, config as default_config
from ..diagnostics import get_logger, set_level
from ..error_handler import create_error_response, format_error_for_logging
from ..exceptions import TargetConfigError
from ..form_fill import parse_form_pairs
from ..llm_config import LLMConfig
from ..run_logger import RunLogger
from ..runner import run_target
from ..screenshots import cleanup_old_screenshots
from ..session import AutomationSession
from ..targets import TargetSpec, list_targets, load_target

logger = get_logger(__name__)


def _configure_diagnostics(args):
    if getattr(args, "verbose", False):
        set_level("DEBUG")
    elif getattr(args, "quiet", False):
        set_level("ERROR")


def _config_from_args(args) -> Config:
    overrides = {}
    if getattr(args, "headless", False):
        overrides["headless"] = True
    if getattr(args, "timeout", None):
        overrides["run_timeout_s"] = float(args.timeout)
    if getattr(args, "max_steps", None):
        overrides["max_steps"] = int(args.max_steps)
    return replace(default_config, **overrides)


def _parse_values(args) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for raw in args.set or []:
        pairs = parse_form_pairs(raw)
        if not pairs:
            logger.warning(f"Invalid value format: {raw} (use key=value)")
        values.update(pairs)
    return values


def _load(args) -> tuple:
    target = load_target(args.target)
    values = _parse_values(args)
    # Fail before launching a browser on unknown field keys
    target.submission.with_values(values)
    return target, values


def _emit(data: dict, output: Optional[str]) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info(f"Result written to: {output}")
    else:
        print(text)


def _run_logger(args, cfg: Config, target: TargetSpec) -> Optional[RunLogger]:
    if not args.log:
        return None
    command_line = "formbot " + " ".join(shlex.quote(a) for a in sys.argv[1:])
    return RunLogger(target=target.name, url=target.url, command_line=command_line, log_dir=str(cfg.log_dir))


def cmd_run(args):
    """Run a target with the fixed navigate, fill, confirm sequence"""
    _configure_diagnostics(args)
    cfg = _config_from_args(args)
    try:
        target, values = _load(args)
    except (TargetConfigError, ValueError) as e:
        print(format_error_for_logging(e, "loading target"), file=sys.stderr)
        return 1

    run_logger = _run_logger(args, cfg, target)
    result = asyncio.run(run_target(target, cfg, values, run_logger=run_logger))
    _emit(result.to_dict(), args.output)
    if run_logger:
        logger.info(f"Run log: {run_logger.path}")

    if result.error is not None:
        print(format_error_for_logging(result.error, f"running {target.name}"), file=sys.stderr)
        return 1
    return 0


async def _run_agent(target: TargetSpec, cfg: Config, llm_config: LLMConfig, task: str, run_logger=None):
    session = await AutomationSession.launch(target, cfg, run_logger=run_logger)
    try:
        agent = FormAgent(session, llm_config, max_steps=cfg.max_steps)
        return await agent.run(task)
    finally:
        await session.close()


def cmd_agent(args):
    """Let a language model drive the target through the tool interface"""
    _configure_diagnostics(args)
    cfg = _config_from_args(args)
    try:
        target, values = _load(args)
        target = replace(target, submission=target.submission.with_values(values))
        llm_config = LLMConfig.from_env()
        llm_config = replace(llm_config, provider=args.model or cfg.llm_provider)
        llm_config.validate()
    except (TargetConfigError, ValueError) as e:
        print(format_error_for_logging(e, "agent setup"), file=sys.stderr)
        return 1

    task = args.task or f"Fill the {target.description or 'form'} on {target.url}"
    run_logger = _run_logger(args, cfg, target)
    try:
        result = asyncio.run(_run_agent(target, cfg, llm_config, task, run_logger))
    except Exception as e:
        print(format_error_for_logging(e, "agent run"), file=sys.stderr)
        _emit(create_error_response(e, "agent run", include_stacktrace=args.verbose), args.output)
        return 1

    _emit(result.to_dict(), args.output)
    return 0 if result.completed else 1


def cmd_targets(args):
    """List bundled targets"""
    names = list_targets()
    if not names:
        print("No targets found")
        return 0

    print("\nAvailable targets:")
    print("=" * 60)
    for name in names:
        try:
            target = load_target(name)
        except TargetConfigError as e:
            print(f"\n{name}")
            print(f"  Error: {e}")
            continue
        print(f"\n{name}")
        if target.description:
            print(f"  Description: {target.description}")
        print(f"  URL: {target.url}")
        print(f"  Fields: {', '.join(target.submission.keys)}")
    print("\n" + "=" * 60)
    print(f"Total: {len(names)} targets")
    return 0


def cmd_cleanup(args):
    """Delete screenshot runs older than --days"""
    cfg = _config_from_args(args)
    removed = cleanup_old_screenshots(max_age_days=args.days, base_dir=cfg.screenshot_dir)
    print(f"Removed {removed} screenshot run(s) older than {args.days} days from {cfg.screenshot_dir}")
    return 0


TARGET_ARG_HELP = "Bundled target name or path to a target YAML file"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formbot",
        description="formbot - declarative form automation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    run_parser = subparsers.add_parser("run", help="Run a target")
    run_parser.add_argument("target", help=TARGET_ARG_HELP)
    run_parser.add_argument("--set", "-s", action="append", help="Override field values (key=value,...)")
    run_parser.add_argument("--headless", action="store_true", help="Run the browser headless")
    run_parser.add_argument("--timeout", type=float, help="Overall run timeout in seconds")
    run_parser.add_argument("--log", action="store_true", help="Write a Markdown run log")
    run_parser.add_argument("--output", "-o", help="Output file for the JSON result")
    run_parser.add_argument("--verbose", action="store_true", help="Verbose output")
    run_parser.add_argument("--quiet", "-q", action="store_true", help="Quiet mode")
    run_parser.set_defaults(func=cmd_run)

    agent_parser = subparsers.add_parser("agent", help="Drive a target with a language model")
    agent_parser.add_argument("task", nargs="?", help="Task for the agent")
    agent_parser.add_argument("--target", "-t", required=True, help=TARGET_ARG_HELP)
    agent_parser.add_argument("--model", "-m", help="litellm model, e.g. openai/gpt-4o-mini")
    agent_parser.add_argument("--max-steps", type=int, help="Maximum model turns")
    agent_parser.add_argument("--set", "-s", action="append", help="Override field values (key=value,...)")
    agent_parser.add_argument("--headless", action="store_true", help="Run the browser headless")
    agent_parser.add_argument("--log", action="store_true", help="Write a Markdown run log")
    agent_parser.add_argument("--output", "-o", help="Output file for the JSON result")
    agent_parser.add_argument("--verbose", action="store_true", help="Verbose output")
    agent_parser.set_defaults(func=cmd_agent)

    targets_parser = subparsers.add_parser("targets", help="List bundled targets")
    targets_parser.set_defaults(func=cmd_targets)

    cleanup_parser = subparsers.add_parser("cleanup", help="Delete old screenshot runs")
    cleanup_parser.add_argument("--days", type=int, default=7, help="Keep runs newer than this many days")
    cleanup_parser.set_defaults(func=cmd_cleanup)

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
