"""Command line dashboard for the barbershop API."""
from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import Iterable, Optional

from . import pages
from .context import DataContext
from .notifications import Notice, Notifier
from .session import ApiClient, SessionStore


def _print_notice(notice: Notice) -> None:
    stream = sys.stderr if notice.level == "error" else sys.stdout
    print(f"[{notice.level}] {notice.message}", file=stream)


def _confirm(assume_yes: bool):
    def ask(question: str) -> bool:
        if assume_yes:
            return True
        answer = input(f"{question} [s/N] ").strip().lower()
        return answer in {"s", "si", "sí", "y", "yes"}

    return ask


def _print_table(rows: Iterable[dict], columns: list[tuple[str, str]]) -> None:
    rows = list(rows)
    headers = [title for _, title in columns]
    cells = [[str(row.get(key) if row.get(key) is not None else "-") for key, _ in columns] for row in rows]
    widths = [max([len(h)] + [len(c[i]) for c in cells]) for i, h in enumerate(headers)]
    print("  ".join(h.ljust(w) for h, w in zip(headers, widths)))
    print("  ".join("-" * w for w in widths))
    for line in cells:
        print("  ".join(c.ljust(w) for c, w in zip(line, widths)))


def _print_page(table: pages.TableView, columns: list[tuple[str, str]], shape) -> None:
    _print_table([shape(row) for row in table.page()], columns)
    print(f"\nPágina {table.page_index + 1} de {table.page_count} ({len(table.rows)} registros)")


def _fields(args: argparse.Namespace, names: Iterable[str]) -> dict:
    return {name: getattr(args, name) for name in names if getattr(args, name, None) is not None}


def _report_errors(errors: dict[str, str]) -> int:
    for field, message in errors.items():
        print(f"{field}: {message}", file=sys.stderr)
    return 1


def _apply_table_args(table: pages.TableView, args: argparse.Namespace) -> None:
    if args.search:
        table.set_filter(args.search)
    if args.sort:
        table.sort_by(args.sort, descending=args.desc)
    table.go_to(args.page - 1)


# --- commands ---

def cmd_login(ctx: DataContext, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Contraseña: ")
    return 0 if ctx.login(args.username, password) else 1


def cmd_logout(ctx: DataContext, args: argparse.Namespace) -> int:
    ctx.logout()
    return 0


def cmd_whoami(ctx: DataContext, args: argparse.Namespace) -> int:
    if not ctx.api.session.authenticated:
        print("No hay sesión activa", file=sys.stderr)
        return 1
    user = ctx.user or {}
    print(f"{user.get('username')} ({user.get('role')})")
    return 0


def cmd_clients(ctx: DataContext, args: argparse.Namespace) -> int:
    if args.action == "list":
        ctx.fetch_clients()
        table = pages.clients_table(ctx.clients)
        _apply_table_args(table, args)
        columns = [("id", "ID"), ("name", "Nombre"), ("alias", "Alias"), ("phone", "Teléfono"), ("email", "Email")]
        _print_page(table, columns, lambda row: row)
        return 0

    if args.action == "show":
        ctx.load_all()
        detail = pages.client_detail(ctx, args.id)
        if detail is None:
            print("Cliente no encontrado", file=sys.stderr)
            return 1
        client = detail["client"]
        print(f"{client['name']}  tel: {client.get('phone') or '-'}  email: {client.get('email') or '-'}")
        if client.get("notes"):
            print(f"Notas: {client['notes']}")
        favorite = detail["favoriteBarber"]
        if favorite:
            print(f"Barbero favorito: {favorite['name']} ({favorite['count']} cortes)")
        _print_table(
            [{"date": pages.format_date(c.get("date")), "service": c.get("service"),
              "barber": (c.get("Barber") or {}).get("name")} for c in detail["history"]],
            [("date", "Fecha"), ("service", "Servicio"), ("barber", "Barbero")],
        )
        return 0

    if args.action in ("add", "edit"):
        data = _fields(args, ("name", "phone", "email", "notes"))
        if args.action == "edit":
            ctx.fetch_clients()
            current = next((c for c in ctx.clients if c["id"] == args.id), None)
            if current is None:
                print("Cliente no encontrado", file=sys.stderr)
                return 1
            data = {**{k: current.get(k) or "" for k in ("name", "phone", "email", "notes")}, **data}
        result, errors = pages.save_client(ctx, data, args.id if args.action == "edit" else None)
        if errors:
            return _report_errors(errors)
        return 0 if result is not None else 1

    if args.action == "delete":
        ctx.load_all()
        return 0 if pages.delete_client(ctx, args.id, _confirm(args.yes)) else 1
    return 2


def cmd_barbers(ctx: DataContext, args: argparse.Namespace) -> int:
    if args.action == "list":
        ctx.fetch_barbers()
        table = pages.barbers_table(ctx.barbers)
        _apply_table_args(table, args)
        _print_page(table, [("id", "ID"), ("name", "Nombre")], lambda row: row)
        return 0

    if args.action in ("add", "edit"):
        barber_id = args.id if args.action == "edit" else None
        result, errors = pages.save_barber(ctx, {"name": args.name}, barber_id)
        if errors:
            return _report_errors(errors)
        return 0 if result is not None else 1

    if args.action == "delete":
        ctx.load_all()
        return 0 if pages.delete_barber(ctx, args.id, _confirm(args.yes)) else 1
    return 2


def _cut_row(cut: dict) -> dict:
    return {
        "id": cut.get("id"),
        "date": pages.format_date(cut.get("date")),
        "client": (cut.get("Client") or {}).get("name"),
        "barber": (cut.get("Barber") or {}).get("name"),
        "service": cut.get("service"),
        "photos": pages.format_photo_count(len(cut.get("photos") or [])),
    }


def cmd_cuts(ctx: DataContext, args: argparse.Namespace) -> int:
    if args.action == "list":
        ctx.fetch_cuts(date=args.date, service=args.service)
        table = pages.cuts_table(ctx.cuts)
        _apply_table_args(table, args)
        columns = [("id", "ID"), ("date", "Fecha"), ("client", "Cliente"), ("barber", "Barbero"),
                   ("service", "Servicio"), ("photos", "Fotos")]
        _print_page(table, columns, _cut_row)
        return 0

    if args.action == "show":
        ctx.fetch_cuts()
        cut = pages.find_cut(ctx, args.id)
        if cut is None:
            print("Corte no encontrado", file=sys.stderr)
            return 1
        row = _cut_row(cut)
        print(f"#{row['id']} {row['date']}  {row['client']} con {row['barber']}")
        print(f"Servicio: {cut.get('service')}  Pago: {cut.get('metodoPago') or '-'}")
        if cut.get("detail"):
            print(f"Detalle: {cut['detail']}")
        if cut.get("nota"):
            print(f"Nota: {cut['nota']}")
        for photo in cut.get("photos") or []:
            print(f"  foto {photo['id']}: {ctx.api.base_url.rsplit('/api', 1)[0]}{photo['path']}")
        return 0

    if args.action == "add":
        ctx.load_all()
        data = {
            "clientName": args.client,
            "phone": args.phone or "",
            "barberId": args.barber,
            "service": args.service,
            "metodoPago": args.payment,
            "detail": args.detail or "",
            "nota": args.nota or "",
        }
        photos = args.photo or []
        cut, errors = pages.register_cut(ctx, data, photos, allow_new_client=args.new_client)
        if errors.get("clientName", "").startswith(pages.SUGGESTION_PREFIX):
            print(errors["clientName"], file=sys.stderr)
            if not _confirm(False)(f"¿Registrar a '{args.client.strip()}' como cliente nuevo?"):
                return 1
            cut, errors = pages.register_cut(ctx, data, photos, allow_new_client=True)
        if errors:
            return _report_errors(errors)
        print(f"Corte #{cut['id']} registrado")
        return 0

    if args.action == "edit":
        ctx.fetch_cuts()
        cut = pages.find_cut(ctx, args.id)
        if cut is None:
            print("Corte no encontrado", file=sys.stderr)
            return 1
        data = {
            "service": args.service if args.service is not None else cut.get("service"),
            "metodoPago": args.payment if args.payment is not None else cut.get("metodoPago"),
            "detail": args.detail if args.detail is not None else cut.get("detail"),
            "nota": args.nota if args.nota is not None else cut.get("nota"),
        }
        ok, errors = pages.edit_cut(ctx, args.id, data)
        if errors:
            return _report_errors(errors)
        return 0 if ok else 1

    if args.action == "delete":
        return 0 if pages.delete_cut(ctx, args.id, _confirm(args.yes)) else 1
    return 2


def cmd_photos(ctx: DataContext, args: argparse.Namespace) -> int:
    if args.action == "add":
        failures = sum(1 for path in args.paths if ctx.add_cut_photo(args.cut_id, path) is None)
        return 1 if failures else 0
    if args.action == "delete":
        return 0 if pages.delete_photo(ctx, args.cut_id, args.photo_id, _confirm(args.yes)) else 1
    return 2


def cmd_users(ctx: DataContext, args: argparse.Namespace) -> int:
    if args.action == "list":
        _print_table(ctx.list_users(), [("id", "ID"), ("username", "Usuario"), ("role", "Rol")])
        return 0
    if args.action == "add":
        password = args.password or getpass.getpass("Contraseña: ")
        return 0 if ctx.register_user({"username": args.username, "password": password, "role": args.role}) else 1
    if args.action == "edit":
        update = _fields(args, ("username", "password", "role"))
        return 0 if ctx.update_user(args.id, update) else 1
    if args.action == "delete":
        if not _confirm(args.yes)("¿Eliminar este usuario?"):
            return 1
        return 0 if ctx.delete_user(args.id) else 1
    return 2


# --- parser ---

def _table_options(parser: argparse.ArgumentParser, sort_choices: Iterable[str]) -> None:
    parser.add_argument("--search", help="Filtro global (sin distinguir mayúsculas)")
    parser.add_argument("--sort", choices=list(sort_choices))
    parser.add_argument("--desc", action="store_true", help="Orden descendente")
    parser.add_argument("--page", type=int, default=1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="barbershop-cli", description="Barbershop dashboard client.")
    parser.add_argument("--api", help="API base URL (default: $BARBERSHOP_API or http://localhost:5000/api)")
    parser.add_argument("--session-file", help="Where the session token is stored")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login")
    login.add_argument("username")
    login.add_argument("--password")
    login.set_defaults(handler=cmd_login)
    sub.add_parser("logout").set_defaults(handler=cmd_logout)
    sub.add_parser("whoami").set_defaults(handler=cmd_whoami)

    clients = sub.add_parser("clients").add_subparsers(dest="action", required=True)
    _table_options(clients.add_parser("list"), pages.CLIENT_COLUMNS)
    clients.add_parser("show").add_argument("id", type=int)
    for action in ("add", "edit"):
        p = clients.add_parser(action)
        if action == "edit":
            p.add_argument("id", type=int)
        p.add_argument("--name", required=action == "add")
        p.add_argument("--phone")
        p.add_argument("--email")
        p.add_argument("--notes")
    p = clients.add_parser("delete")
    p.add_argument("id", type=int)
    p.add_argument("-y", "--yes", action="store_true")

    barbers = sub.add_parser("barbers").add_subparsers(dest="action", required=True)
    _table_options(barbers.add_parser("list"), pages.BARBER_COLUMNS)
    barbers.add_parser("add").add_argument("--name", required=True)
    p = barbers.add_parser("edit")
    p.add_argument("id", type=int)
    p.add_argument("--name", required=True)
    p = barbers.add_parser("delete")
    p.add_argument("id", type=int)
    p.add_argument("-y", "--yes", action="store_true")

    cuts = sub.add_parser("cuts").add_subparsers(dest="action", required=True)
    p = cuts.add_parser("list")
    _table_options(p, [c for c in pages.CUT_COLUMNS if c != "photos"])
    p.add_argument("--date")
    p.add_argument("--service")
    cuts.add_parser("show").add_argument("id", type=int)
    p = cuts.add_parser("add")
    p.add_argument("--client", required=True, help="Nombre del cliente (se crea si no existe)")
    p.add_argument("--phone")
    p.add_argument("--barber", required=True, help="ID del barbero")
    p.add_argument("--service", required=True)
    p.add_argument("--payment", required=True, help="efectivo o transferencia")
    p.add_argument("--detail")
    p.add_argument("--nota")
    p.add_argument("--photo", action="append", help="Ruta de una foto (repetible)")
    p.add_argument("--new-client", action="store_true", help="Crear el cliente aunque haya nombres parecidos")
    p = cuts.add_parser("edit")
    p.add_argument("id", type=int)
    p.add_argument("--service")
    p.add_argument("--payment")
    p.add_argument("--detail")
    p.add_argument("--nota")
    p = cuts.add_parser("delete")
    p.add_argument("id", type=int)
    p.add_argument("-y", "--yes", action="store_true")

    photos = sub.add_parser("photos").add_subparsers(dest="action", required=True)
    p = photos.add_parser("add")
    p.add_argument("cut_id", type=int)
    p.add_argument("paths", nargs="+")
    p = photos.add_parser("delete")
    p.add_argument("cut_id", type=int)
    p.add_argument("photo_id", type=int)
    p.add_argument("-y", "--yes", action="store_true")

    users = sub.add_parser("users").add_subparsers(dest="action", required=True)
    users.add_parser("list")
    p = users.add_parser("add")
    p.add_argument("username")
    p.add_argument("--password")
    p.add_argument("--role", default="admin")
    p = users.add_parser("edit")
    p.add_argument("id", type=int)
    p.add_argument("--username")
    p.add_argument("--password")
    p.add_argument("--role")
    p = users.add_parser("delete")
    p.add_argument("id", type=int)
    p.add_argument("-y", "--yes", action="store_true")

    for name, handler in (("clients", cmd_clients), ("barbers", cmd_barbers), ("cuts", cmd_cuts),
                          ("photos", cmd_photos), ("users", cmd_users)):
        sub.choices[name].set_defaults(handler=handler)
    return parser


def main(argv: Optional[list[str]] = None, ctx: Optional[DataContext] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if ctx is None:
        api = ApiClient(args.api, SessionStore(args.session_file), Notifier(sink=_print_notice))
        ctx = DataContext(api)

    if args.command not in {"login", "logout", "whoami"} and not ctx.api.session.authenticated:
        print("Inicie sesión primero: barbershop-cli login <usuario>", file=sys.stderr)
        return 1
    return args.handler(ctx, args)


if __name__ == "__main__":
    sys.exit(main())
