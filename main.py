#!/usr/bin/env python3
"""
SSO -- credential login, token issuance and user roles.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py add-app web "<signing secret>"

Configuration comes from environment variables or .env (see core/config.py):
  ENV                      local | dev | prod
  TOKEN_TTL_SECONDS        token lifetime, default 3600
  DATABASE_URL             SQLAlchemy URL, default sqlite file sso.db
  BCRYPT_ROUNDS            bcrypt cost factor, default 12
  REQUEST_TIMEOUT_SECONDS  per-request deadline, default 5
"""

import argparse
import sys

from core.config import get_settings
from core.log import configure_logging


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "api.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
    )
    return 0


def _add_app(args: argparse.Namespace) -> int:
    from auth.storage import AlreadyExistsError
    from auth.store import SQLStore

    if not args.secret:
        print("  [!] secret must be non-empty.")
        return 1
    store = SQLStore(get_settings().database_url)
    try:
        app_id = store.save_app(args.name, args.secret)
    except AlreadyExistsError:
        print(f"  [!] An app named '{args.name}' already exists.")
        return 1
    finally:
        store.close()
    print(app_id)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sso", description="SSO authentication service")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=_serve)

    add_app = sub.add_parser("add-app", help="register a client application and print its ID")
    add_app.add_argument("name")
    add_app.add_argument("secret")
    add_app.set_defaults(func=_add_app)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().env)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
