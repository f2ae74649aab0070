"""
Command-line entry point.

Usage:
    order-desk login admin@example.com
    order-desk dashboard
    order-desk orders --status pending --sort total --direction asc
    order-desk clients --search cairo
    order-desk route /clients
    order-desk logout

The session is kept in durable storage between invocations.
"""
import argparse
import asyncio
import getpass
import logging
import sys

from .app import App, create_app
from .core.config import get_settings
from .services.forms import FormValidationError
from .services.route_guard import check_access
from .services.stats import ALL_STATUSES
from .shared.api_errors import ApiError


def _require_login(app: App) -> None:
    if not app.session.is_authenticated:
        print("Not logged in. Run 'order-desk login <email>' first.")
        raise SystemExit(1)


def _require_route(app: App, path: str) -> None:
    decision = app.guard.check(path)
    if not decision.allowed:
        print(f"Access to {path} denied ({decision.reason}); redirected to {decision.redirect_to}.")
        raise SystemExit(1)


async def _login(app: App, args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass("Password: ")
    user = await app.session.login(args.email, password)
    print(f"Logged in as {user.name} ({user.role}).")


async def _logout(app: App, args: argparse.Namespace) -> None:  # noqa: ARG001
    await app.session.logout()
    print("Logged out.")


async def _whoami(app: App, args: argparse.Namespace) -> None:  # noqa: ARG001
    user = app.session.user
    if user is None:
        print("Not logged in.")
        return
    print(f"{user.name} <{user.email}> role={user.role} access={app.guard.state}")


async def _dashboard(app: App, args: argparse.Namespace) -> None:  # noqa: ARG001
    _require_route(app, "/dashboard")
    summary = await app.dashboard.load()
    a = summary.analytics
    print(f"Total orders:      {a.total_orders}")
    print(f"Delivered orders:  {a.delivered_orders}")
    print(f"Pending orders:    {a.pending_orders}")
    print(f"Returned orders:   {a.returned_orders}")
    print(f"Revenue (no fees): {summary.revenue_without_delivery:,.2f}")
    print(f"Net profit:        {a.net_profit:,.2f}")
    print("Top clients:")
    for client in summary.top_clients:
        print(f"  {client.name} (rating {client.rating:.1f})")
    print("Recent orders:")
    for order in summary.recent_orders:
        print(f"  {order.order_id} {order.status} {order.total:,.2f}")


async def _orders(app: App, args: argparse.Namespace) -> None:
    _require_route(app, "/orders")
    page = await app.orders.load(args.search, args.status, args.sort, args.direction)
    print(f"{len(page.orders)} of {page.total_count} orders")
    for order in page.orders:
        print(f"  {order.order_id}\t{order.track_id}\t{order.status}\t{order.total:,.2f}")


async def _clients(app: App, args: argparse.Namespace) -> None:
    _require_route(app, "/clients")
    page = await app.clients.load(args.search)
    print(
        f"{page.total_clients} clients, {page.total_orders} orders, "
        f"{page.total_value:,.2f} delivered value",
    )
    for row in page.clients:
        print(f"  {row.client.name}\torders={row.total_orders}\tvalue={row.total_value:,.2f}")


async def _route(app: App, args: argparse.Namespace) -> None:
    decision = check_access(args.path, app.session.user)
    if decision.allowed:
        print(f"{args.path}: allowed")
    else:
        print(f"{args.path}: redirect to {app.guard.resolve(args.path)} ({decision.reason})")


async def _language(app: App, args: argparse.Namespace) -> None:
    if args.code:
        app.preferences.set_language(args.code)
    lang = app.preferences.language
    print(f"{lang.code} ({lang.name}, {lang.direction})")


async def _theme(app: App, args: argparse.Namespace) -> None:
    if args.value == "toggle":
        app.preferences.toggle_theme()
    elif args.value:
        app.preferences.set_theme(args.value)
    print(app.preferences.theme)


COMMANDS = {
    "login": _login,
    "logout": _logout,
    "whoami": _whoami,
    "dashboard": _dashboard,
    "orders": _orders,
    "clients": _clients,
    "route": _route,
    "language": _language,
    "theme": _theme,
}

# Commands that read backend data
_AUTHENTICATED = {"logout", "dashboard", "orders", "clients"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="order-desk", description="Order management dashboard client.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    login_parser = subparsers.add_parser("login", help="Log in and store the session")
    login_parser.add_argument("email")
    login_parser.add_argument("--password", help="Prompted for when omitted")

    subparsers.add_parser("logout", help="Log out and clear the stored session")
    subparsers.add_parser("whoami", help="Show the stored session")
    subparsers.add_parser("dashboard", help="Show dashboard statistics")

    orders_parser = subparsers.add_parser("orders", help="List orders")
    orders_parser.add_argument("--search", default="")
    orders_parser.add_argument("--status", default=ALL_STATUSES)
    orders_parser.add_argument("--sort", default="created_at")
    orders_parser.add_argument("--direction", choices=["asc", "desc"], default="desc")

    clients_parser = subparsers.add_parser("clients", help="List clients by importance (admin)")
    clients_parser.add_argument("--search", default="")

    route_parser = subparsers.add_parser("route", help="Check whether a view is reachable")
    route_parser.add_argument("path")

    language_parser = subparsers.add_parser("language", help="Show or set the UI language")
    language_parser.add_argument("code", nargs="?", choices=["ar", "en"])

    theme_parser = subparsers.add_parser("theme", help="Show or set the UI theme")
    theme_parser.add_argument("value", nargs="?", choices=["light", "dark", "toggle"])
    return parser


async def run(args: argparse.Namespace) -> None:
    async with create_app() as app:
        if args.command in _AUTHENTICATED:
            _require_login(app)
        await COMMANDS[args.command](app, args)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        asyncio.run(run(args))
    except (ApiError, FormValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
