#!/usr/bin/env python3
"""
Armory -- command-line entry point.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 5000 --reload
  python main.py create-user --username root --name "Ops Admin" --base HQ --role admin
  python main.py create-user --username alice --name Alice --base Alpha   # prompts for password

create-user writes straight to the database named by DATABASE_URL. It is
the way to bootstrap the first admin: public registration only ever creates
officers.

Environment variables:
  SECRET_KEY     Required unless DEBUG=true. At least 32 characters.
  DATABASE_URL   SQLAlchemy URL. Defaults to armory.db next to this file.
"""

import argparse
import getpass
import sys

from auth.credentials import CredentialStore
from auth.models import ROLE_OFFICER, ROLES
from auth.store import UserStore
from core.config import get_settings
from core.errors import ArmoryError


def _create_user(args: argparse.Namespace) -> int:
    password = args.password
    if password is None:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat password: "):
            print("  [!] Passwords do not match.", file=sys.stderr)
            return 1

    store = UserStore(get_settings().database_url)
    try:
        user = CredentialStore(store).create(args.username, password, args.name, args.base, args.role)
    except ArmoryError as exc:
        print(f"  [!] {exc.message}", file=sys.stderr)
        return 1
    finally:
        store.close()

    print(f"  Created {user.role} '{user.username}' at base {user.base} (id {user.id})")
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="armory", description="Armory asset tracking service.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development).")
    serve.set_defaults(func=_serve)

    create = sub.add_parser("create-user", help="Create a user directly in the database.")
    create.add_argument("--username", required=True)
    create.add_argument("--name", required=True)
    create.add_argument("--base", required=True)
    create.add_argument("--role", choices=ROLES, default=ROLE_OFFICER)
    create.add_argument("--password", help="Omit to be prompted (keeps it out of shell history).")
    create.set_defaults(func=_create_user)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
