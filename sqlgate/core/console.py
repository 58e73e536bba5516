"""Interactive terminal for sending statements through the gateway.

Input follows the ``SQL ~ arg1, arg2;`` convention: the statement runs up to
an optional ``~``, positional arguments follow as a comma-separated list, and a
trailing ``;`` submits the line. Lines without ``;`` are buffered and joined
with the next line.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, field
from typing import Any, Callable

from sqlgate.core.config import load_settings
from sqlgate.core.dependencies import build_dependencies
from sqlgate.core.envelope import QUERY_EXEC, ResponseEnvelope
from sqlgate.core.gateway import QueryRequest, SQLGateway

_exit_commands = {"/exit", "exit", "quit", ":q"}

ARGS_SEPARATOR = "~"
STATEMENT_TERMINATOR = ";"


def parse_console_input(text: str) -> QueryRequest:
    """Split console input into statement text and string arguments."""

    candidate = text.strip()
    if candidate.endswith(STATEMENT_TERMINATOR):
        candidate = candidate[: -len(STATEMENT_TERMINATOR)]
    sql, separator, raw_args = candidate.strip().partition(ARGS_SEPARATOR)
    args: list[Any] = []
    if separator and raw_args.strip():
        args = [arg.strip() for arg in raw_args.split(",")]
    return QueryRequest(sql=sql.strip(), args=args)


def render_envelope(envelope: ResponseEnvelope) -> str:
    rendered = envelope.to_dict()
    if not envelope.ok:
        return f"error: {rendered['error']['message']}"
    payload = rendered.get("data") or {}
    if payload.get("query_type") == QUERY_EXEC:
        return f"{payload.get('rows_affected', 0)} row(s) affected"
    return json.dumps(payload.get("data", []), ensure_ascii=False)


@dataclass
class SQLConsole:
    """Read-eval-print loop on top of ``SQLGateway``."""

    gateway: SQLGateway
    input_func: Callable[[str], str] = field(default=input)
    output_func: Callable[[str], None] = field(default=print)
    history: list[str] = field(default_factory=list)

    def start(self) -> None:
        self.output_func(
            "Enter SQL terminated by ';'. Bind arguments with '~', e.g."
            " SELECT * FROM users WHERE id = ? ~ 2;  Use '/exit' to leave."
        )
        buffered: list[str] = []
        while True:
            prompt = "...> " if buffered else "sql> "
            try:
                raw = self.input_func(prompt)
            except EOFError:
                self.output_func("\nSession ended.")
                break

            line = raw.strip()
            if not line:
                continue
            if not buffered and line.lower() in _exit_commands:
                self.output_func("Session ended.")
                break

            buffered.append(line)
            if not line.endswith(STATEMENT_TERMINATOR):
                continue

            text = " ".join(buffered)
            buffered = []
            self.history.append(text)
            self.output_func(self.submit(text))

    def submit(self, text: str) -> str:
        request = parse_console_input(text)
        return render_envelope(self.gateway.handle_request(request))


def main() -> None:
    parser = argparse.ArgumentParser(description="Interactive SQL console")
    parser.add_argument("--config", default="configs/dev.yaml", help="Path to the YAML config file")
    parser.add_argument("--db", default=None, help="Override the database path")
    args = parser.parse_args()

    settings = load_settings(args.config)
    dependencies = build_dependencies(settings, db_path=args.db)
    console = SQLConsole(
        gateway=dependencies.build_gateway(verbose_errors=settings.verbose_errors),
    )
    try:
        console.start()
    finally:
        dependencies.close()


if __name__ == "__main__":
    main()
