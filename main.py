#!/usr/bin/env python3
"""
AuthForms: validation and submission engine for the auth screens.

Usage:
  python main.py strength 'Abcdefg1!'
  python main.py validate email a@b.co
  python main.py validate password hunter2 --screen login
  python main.py submit forgot-password --set email=jane@example.com
  python main.py submit login --set email=jane@example.com --set password=secret --set remember_me=true
  python main.py submit login --provider google
  python main.py serve --port 8000

Environment variables:
  SIMULATED_LATENCY_SECONDS   Delay of the simulated backend (default 2.0).
  SUBMIT_TIMEOUT_SECONDS      Bound on one backend call, 0 disables (default 30).
  See core/config.py for the full list.
"""

import argparse
import asyncio
from typing import Optional

from auth.backend import SimulatedAuthBackend
from auth.screens import build_controller
from core.config import get_settings
from core.models import FieldValue, Screen, SubmissionPhase
from core.strength import score
from core.validation import FormSchema, get_schema, validate

_TRUE_WORDS = {"1", "true", "yes", "on"}


def _parse_assignments(schema: FormSchema, pairs: list[str]) -> dict[str, FieldValue]:
    """Turn ['email=a@b.co', 'remember_me=true'] into typed field values.

    Checkbox fields (bool defaults) accept 1/true/yes/on as checked.
    Raises ValueError on a malformed pair or a field the screen lacks.
    """
    values: dict[str, FieldValue] = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected FIELD=VALUE, got {pair!r}")
        spec = schema.field(name.strip())
        values[spec.name] = raw.strip().lower() in _TRUE_WORDS if isinstance(spec.default, bool) else raw
    return values


def _print_state(state: dict) -> None:
    print(f"  Phase: {state['phase']}")
    for name, error in state["errors"].items():
        print(f"  [!] {name}: {error['message']}")
    if state["submission_error"]:
        print(f"  [!] {state['submission_error']}")
    if state["strength"]:
        print(f"  Password strength: {state['strength']['label']} ({state['strength']['value']}/100)")
    if state["confirmation_shown"]:
        print(f"  Reset link sent to {state['confirmed_email']}.")


async def _run_submit(screen: Screen, values: dict[str, FieldValue], provider: Optional[str], latency: float) -> dict:
    cfg = get_settings()
    backend = SimulatedAuthBackend(latency=latency, rejected_emails=cfg.simulated_rejected_emails)
    controller = build_controller(screen, backend, cfg)
    for name, value in values.items():
        controller.set_value(name, value)
    if provider:
        await controller.submit_with_provider(provider)
    else:
        await controller.submit()
    return controller.state()


def cmd_strength(args: argparse.Namespace) -> None:
    result = score(args.password)
    print(f"  {result.label.value} ({result.value}/100)")
    for hint in result.unmet:
        print(f"  - add {hint}")


def cmd_validate(args: argparse.Namespace) -> None:
    schema = get_schema(Screen(args.screen)) if args.screen else None
    try:
        result = validate(args.field, args.value, schema)
    except ValueError as e:
        print(f"  [!] {e}")
        raise SystemExit(2) from None
    if result.ok:
        print("  valid")
        return
    print(f"  [!] {result.code.value}: {result.message}")
    raise SystemExit(1)


def cmd_submit(args: argparse.Namespace) -> None:
    screen = Screen(args.screen)
    try:
        values = _parse_assignments(get_schema(screen), args.set or [])
    except ValueError as e:
        print(f"  [!] {e}")
        raise SystemExit(2) from None

    latency = args.latency if args.latency is not None else get_settings().simulated_latency_seconds
    print(f"\nSubmitting {screen.value}...", flush=True)
    try:
        state = asyncio.run(_run_submit(screen, values, args.provider, latency))
    except ValueError as e:
        print(f"  [!] {e}")
        raise SystemExit(2) from None
    _print_state(state)
    if state["phase"] != SubmissionPhase.succeeded.value:
        raise SystemExit(1)


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="authforms",
        description="Validate, score, and submit the sign-in, sign-up, and password reset forms.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p = sub.add_parser("strength", help="Score a password (0-100) and label it")
    p.add_argument("password", help="Password to score")
    p.set_defaults(func=cmd_strength)

    p = sub.add_parser("validate", help="Validate one field value")
    p.add_argument("field", help="Field name: email, password, full_name, remember_me")
    p.add_argument("value", help="Raw value to check")
    p.add_argument(
        "--screen",
        choices=[s.value for s in Screen],
        default=None,
        help="Apply this screen's rules (default: sign-up rules)",
    )
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("submit", help="Fill a screen and submit it to the simulated backend")
    p.add_argument("screen", choices=[s.value for s in Screen], help="Screen to submit")
    p.add_argument("--set", action="append", metavar="FIELD=VALUE", help="Set a field (repeatable)")
    p.add_argument("--provider", metavar="NAME", help="Use an external identity provider instead")
    p.add_argument(
        "--latency",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Simulated backend delay (default: SIMULATED_LATENCY_SECONDS)",
    )
    p.set_defaults(func=cmd_submit)

    p = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
