"""Operator CLI for issuing and inspecting gateway credentials."""

from __future__ import annotations

import argparse
import json
from collections.abc import Sequence

from glass_gateway.application.token_registry import TokenRegistry
from glass_gateway.errors import GatewayError
from glass_gateway.runtime.bootstrap import build_token_store
from glass_gateway.runtime.settings import TokenSettings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Issue and inspect glass gateway credentials.")
    commands = parser.add_subparsers(dest="command", required=True)

    issue = commands.add_parser("issue", help="Print the credential for an identity, minting one if needed.")
    issue.add_argument("identity", help="Identity (user id) the credential belongs to.")

    resolve = commands.add_parser("resolve", help="Print the identity a credential resolves to.")
    resolve.add_argument("credential", help="Credential to look up.")

    commands.add_parser("list", help="Print every stored credential row as JSON.")
    return parser


def main(argv: Sequence[str] | None = None, *, settings: TokenSettings | None = None) -> None:
    args = _build_parser().parse_args(list(argv) if argv is not None else None)
    resolved = settings or TokenSettings()

    try:
        store = build_token_store(resolved)
        store.init()
        registry = TokenRegistry(store)
        match args.command:
            case "issue":
                print(registry.issue_or_get_token(args.identity))
            case "resolve":
                identity = registry.resolve_identity(args.credential)
                if identity is None:
                    raise SystemExit("unknown credential")
                print(identity)
            case "list":
                rows = [
                    {"identity": row.identity, "token": row.token, "created_at": row.created_at}
                    for row in registry.list_all()
                ]
                print(json.dumps(rows, indent=2))
    except (GatewayError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc


__all__ = ["main"]
