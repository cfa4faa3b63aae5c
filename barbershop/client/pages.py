"""Page logic for the dashboard: tables, suggestions, detail views and workflows."""
from __future__ import annotations

import difflib
import math
from collections import Counter
from datetime import date as date_cls
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from .context import DataContext, PhotoSource
from .forms import AddCutForm, BarberForm, ClientForm, EditCutForm, validate_form

Accessor = Callable[[dict], object]
Confirm = Callable[[str], bool]

_WEEKDAYS = ("lun", "mar", "mié", "jue", "vie", "sáb", "dom")
_MONTHS = ("ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sept", "oct", "nov", "dic")
SUGGESTION_PREFIX = "¿Quiso decir"


def format_date(value: str | None) -> str:
    """``2024-01-01`` -> ``lun, 1 ene 2024``; anything unparsable is shown as is."""
    if not value:
        return "-"
    try:
        parsed = date_cls.fromisoformat(value[:10])
    except ValueError:
        return value
    return f"{_WEEKDAYS[parsed.weekday()]}, {parsed.day} {_MONTHS[parsed.month - 1]} {parsed.year}"


def format_photo_count(count: int) -> str:
    return f"{count} foto{'' if count == 1 else 's'}"


class TableView:
    """Global filter, single-column sort and fixed-size pages over a list of rows."""

    def __init__(self, rows: Iterable[dict], columns: dict[str, Accessor], page_size: int = 10,
                 sortable: Iterable[str] | None = None) -> None:
        self.source = list(rows)
        self.columns = columns
        self.page_size = page_size
        self.sortable = set(sortable) if sortable is not None else set(columns)
        self.global_filter = ""
        self.sort_column: Optional[str] = None
        self.sort_descending = False
        self.page_index = 0

    def set_filter(self, text: str) -> None:
        self.global_filter = (text or "").strip().lower()
        self.page_index = 0

    def sort_by(self, column: Optional[str], descending: bool = False) -> None:
        if column is not None and column not in self.sortable:
            raise KeyError(f"column {column!r} is not sortable")
        self.sort_column = column
        self.sort_descending = descending

    def toggle_sort(self, column: str) -> None:
        """Cycle a header click: ascending, descending, unsorted."""
        if self.sort_column != column:
            self.sort_by(column)
        elif not self.sort_descending:
            self.sort_by(column, descending=True)
        else:
            self.sort_by(None)

    def _cell(self, row: dict, column: str) -> object:
        return self.columns[column](row)

    @property
    def rows(self) -> list[dict]:
        rows = self.source
        if self.global_filter:
            rows = [
                row for row in rows
                if any(self.global_filter in str(self._cell(row, col) or "").lower() for col in self.columns)
            ]
        if self.sort_column:
            column = self.sort_column

            def key(row: dict):
                value = self._cell(row, column)
                # Empty cells sort last in ascending order.
                if value is None or value == "":
                    return (1, "")
                return (0, value.lower() if isinstance(value, str) else value)

            rows = sorted(rows, key=key, reverse=self.sort_descending)
        return rows

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(len(self.rows) / self.page_size))

    def can_previous(self) -> bool:
        return self.page_index > 0

    def can_next(self) -> bool:
        return self.page_index + 1 < self.page_count

    def go_to(self, index: int) -> list[dict]:
        self.page_index = min(max(index, 0), self.page_count - 1)
        return self.page()

    def next_page(self) -> list[dict]:
        return self.go_to(self.page_index + 1)

    def previous_page(self) -> list[dict]:
        return self.go_to(self.page_index - 1)

    def page(self) -> list[dict]:
        start = self.page_index * self.page_size
        return self.rows[start:start + self.page_size]


def _nested_name(key: str) -> Accessor:
    return lambda row: (row.get(key) or {}).get("name")


CUT_COLUMNS: dict[str, Accessor] = {
    "date": lambda row: row.get("date"),
    "client": _nested_name("Client"),
    "barber": _nested_name("Barber"),
    "service": lambda row: row.get("service"),
    "photos": lambda row: len(row.get("photos") or []),
}

CLIENT_COLUMNS: dict[str, Accessor] = {
    "name": lambda row: row.get("name"),
    "alias": lambda row: row.get("alias"),
    "phone": lambda row: row.get("phone"),
    "email": lambda row: row.get("email"),
}

BARBER_COLUMNS: dict[str, Accessor] = {
    "name": lambda row: row.get("name"),
}


def cuts_table(cuts: Iterable[dict]) -> TableView:
    sortable = [name for name in CUT_COLUMNS if name != "photos"]
    return TableView(cuts, CUT_COLUMNS, page_size=20, sortable=sortable)


def clients_table(clients: Iterable[dict]) -> TableView:
    return TableView(clients, CLIENT_COLUMNS, page_size=20)


def barbers_table(barbers: Iterable[dict]) -> TableView:
    return TableView(barbers, BARBER_COLUMNS, page_size=20)


# --- Cuts page ---

def suggest_clients(clients: Iterable[dict], text: str, limit: int = 5, cutoff: float = 0.7) -> list[dict]:
    """Fuzzy name suggestions for the add-cut form, best match first."""
    needle = (text or "").strip().lower()
    if not needle:
        return []

    scored = []
    for position, client in enumerate(clients):
        name = (client.get("name") or "").lower()
        if not name:
            continue
        if needle in name:
            score = 1.0 + len(needle) / len(name)
        else:
            candidates = [name, *name.split()]
            score = max(difflib.SequenceMatcher(None, needle, candidate).ratio() for candidate in candidates)
        if score >= cutoff:
            scored.append((-score, position, client))

    scored.sort(key=lambda item: (item[0], item[1]))
    return [client for _, _, client in scored[:limit]]


def find_client_by_name(clients: Iterable[dict], name: str) -> Optional[dict]:
    wanted = (name or "").strip().lower()
    for client in clients:
        if (client.get("name") or "").strip().lower() == wanted:
            return client
    return None


def register_cut(ctx: DataContext, data: dict, photos: Iterable[PhotoSource] = (),
                 today: date_cls | None = None,
                 allow_new_client: bool = False) -> tuple[Optional[dict], dict[str, str]]:
    """Add-cut workflow: validate, find or create the client, record the cut, upload photos.

    An unknown name that resembles existing clients is answered with a
    ``clientName`` error listing them, unless ``allow_new_client`` is set.
    Photos go up one at a time; a failed upload leaves earlier ones in place.
    The cut is dated with the current UTC day.
    """
    form, errors = validate_form(AddCutForm, data)
    if form is None:
        return None, errors

    client = find_client_by_name(ctx.clients, form.client_name)
    if client is None:
        similar = suggest_clients(ctx.clients, form.client_name)
        if similar and not allow_new_client:
            names = ", ".join(c["name"] for c in similar)
            return None, {"clientName": f"{SUGGESTION_PREFIX}: {names}?"}
        client = ctx.add_client({"name": form.client_name.strip(), "phone": (form.phone or "").strip()})
        if not client or not client.get("id"):
            return None, {"clientName": "Error creando cliente"}

    cut_date = (today or datetime.now(timezone.utc).date()).isoformat()
    cut = ctx.add_cut(form.cut_payload(client["id"], cut_date))
    if cut is None:
        return None, {"form": "Error registrando corte"}

    photos = list(photos)
    for photo in photos:
        ctx.add_cut_photo(cut["id"], photo)
    if photos:
        ctx.fetch_cuts()
    return cut, {}


def find_cut(ctx: DataContext, cut_id: int) -> Optional[dict]:
    return next((cut for cut in ctx.cuts if cut.get("id") == cut_id), None)


def edit_cut(ctx: DataContext, cut_id: int, data: dict) -> tuple[bool, dict[str, str]]:
    form, errors = validate_form(EditCutForm, data)
    if form is None:
        return False, errors
    return ctx.update_cut(cut_id, form.payload()) is not None, {}


def delete_cut(ctx: DataContext, cut_id: int, confirm: Confirm) -> bool:
    if not confirm("¿Eliminar este corte y sus fotos?"):
        return False
    return ctx.delete_cut(cut_id) is not None


def delete_photo(ctx: DataContext, cut_id: int, photo_id: int, confirm: Confirm) -> bool:
    if not confirm("¿Eliminar esta foto?"):
        return False
    return ctx.delete_cut_photo(cut_id, photo_id)


# --- Clients page ---

def save_client(ctx: DataContext, data: dict, client_id: int | None = None) -> tuple[Optional[dict], dict[str, str]]:
    form, errors = validate_form(ClientForm, data)
    if form is None:
        return None, errors
    if client_id is None:
        return ctx.add_client(form.payload()), {}
    return ctx.update_client(client_id, form.payload()), {}


def delete_client(ctx: DataContext, client_id: int, confirm: Confirm) -> bool:
    if not confirm("¿Eliminar este cliente y todo su historial?"):
        return False
    return ctx.delete_client(client_id) is not None


def client_history(cuts: Iterable[dict], client_id: int) -> list[dict]:
    """Cuts of one client, latest date first."""
    own = [cut for cut in cuts if str(cut.get("clientId")) == str(client_id)]
    return sorted(own, key=lambda cut: cut.get("date") or "", reverse=True)


def favorite_barber(cuts: Iterable[dict]) -> Optional[dict]:
    """The barber who appears most often; ties go to the lowest barber id."""
    counts: Counter = Counter()
    names: dict[int, str] = {}
    for cut in cuts:
        barber = cut.get("Barber") or {}
        if barber.get("id") is None:
            continue
        counts[barber["id"]] += 1
        names.setdefault(barber["id"], barber.get("name"))
    if not counts:
        return None
    barber_id = min(counts, key=lambda key: (-counts[key], key))
    return {"id": barber_id, "name": names.get(barber_id), "count": counts[barber_id]}


def client_detail(ctx: DataContext, client_id: int) -> Optional[dict]:
    client = next((c for c in ctx.clients if str(c.get("id")) == str(client_id)), None)
    if client is None:
        return None
    history = client_history(ctx.cuts, client_id)
    return {"client": client, "history": history, "favoriteBarber": favorite_barber(history)}


# --- Barbers page ---

def save_barber(ctx: DataContext, data: dict, barber_id: int | None = None) -> tuple[Optional[dict], dict[str, str]]:
    form, errors = validate_form(BarberForm, data)
    if form is None:
        return None, errors
    if barber_id is None:
        return ctx.add_barber(form.payload()), {}
    return ctx.update_barber(barber_id, form.payload()), {}


def delete_barber(ctx: DataContext, barber_id: int, confirm: Confirm) -> bool:
    if not confirm("¿Eliminar este barbero y sus cortes?"):
        return False
    return ctx.delete_barber(barber_id) is not None
