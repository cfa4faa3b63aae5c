"""Cached dashboard data and the mutation helpers used by every page."""
from __future__ import annotations

import logging
import os
from typing import BinaryIO, Callable, Optional, Union

from .session import ApiClient, ApiRequestError

logger = logging.getLogger(__name__)

PhotoSource = Union[str, "os.PathLike[str]", tuple[str, BinaryIO]]


class DataContext:
    """Holds clients, barbers and cuts for a logged-in session.

    Mutations never raise: they notify success or the server's error and
    return the response body, or ``None`` on failure. After a successful
    mutation the affected collection is fetched again.
    """

    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self.notifier = api.notifier
        self.clients: list[dict] = []
        self.barbers: list[dict] = []
        self.cuts: list[dict] = []
        api.on_session_cleared(self.reset)

    @property
    def user(self) -> Optional[dict]:
        return self.api.session.user

    def reset(self) -> None:
        self.clients = []
        self.barbers = []
        self.cuts = []

    # --- session ---

    def login(self, username: str, password: str) -> bool:
        if not self.api.login(username, password):
            return False
        self.load_all()
        return True

    def logout(self) -> None:
        self.api.logout()

    def load_all(self) -> None:
        if not self.api.session.authenticated:
            return
        self.fetch_clients()
        self.fetch_barbers()
        self.fetch_cuts()

    # --- fetching ---

    def _fetch(self, endpoint: str, attr: str, error_message: str, params: dict | None = None) -> list[dict]:
        try:
            data = self.api.get(endpoint, params=params)
        except ApiRequestError as exc:
            logger.debug("Fetching %s failed: %s", endpoint, exc)
            # Stay quiet once the session is gone; the expiry notice already fired.
            if self.api.session.authenticated:
                self.notifier.error(error_message)
            return getattr(self, attr)
        setattr(self, attr, data or [])
        return getattr(self, attr)

    def fetch_clients(self, query: str | None = None) -> list[dict]:
        return self._fetch("/clients", "clients", "Error cargando clientes", {"query": query})

    def fetch_barbers(self) -> list[dict]:
        return self._fetch("/barbers", "barbers", "Error cargando barberos")

    def fetch_cuts(self, date: str | None = None, service: str | None = None) -> list[dict]:
        return self._fetch("/cuts", "cuts", "Error cargando cortes", {"date": date, "service": service})

    # --- mutations ---

    def _mutate(
        self,
        method: str,
        endpoint: str,
        payload: dict | None,
        refetch: Optional[Callable[[], object]],
        error_message: str,
        success_message: str = "Operación exitosa",
    ) -> Optional[object]:
        try:
            data = self.api.request(method, endpoint, json=payload)
        except ApiRequestError as exc:
            self.notifier.error(exc.message if exc.status else error_message)
            return None
        if refetch is not None:
            refetch()
        self.notifier.success(success_message)
        return data

    def add_client(self, client: dict) -> Optional[dict]:
        return self._mutate("POST", "/clients", client, self.fetch_clients, "Error creando cliente")

    def update_client(self, client_id: int, update: dict) -> Optional[dict]:
        return self._mutate(
            "PUT", f"/clients/{client_id}", update, self.fetch_clients, "Error actualizando cliente"
        )

    def delete_client(self, client_id: int) -> Optional[dict]:
        # Cuts of the client disappear with it.
        result = self._mutate(
            "DELETE", f"/clients/{client_id}", None, self.fetch_clients, "Error eliminando cliente"
        )
        if result is not None:
            self.cuts = [cut for cut in self.cuts if cut.get("clientId") != client_id]
        return result

    def add_barber(self, barber: dict) -> Optional[dict]:
        return self._mutate("POST", "/barbers", barber, self.fetch_barbers, "Error creando barbero")

    def update_barber(self, barber_id: int, update: dict) -> Optional[dict]:
        return self._mutate(
            "PUT", f"/barbers/{barber_id}", update, self.fetch_barbers, "Error actualizando barbero"
        )

    def delete_barber(self, barber_id: int) -> Optional[dict]:
        result = self._mutate(
            "DELETE", f"/barbers/{barber_id}", None, self.fetch_barbers, "Error eliminando barbero"
        )
        if result is not None:
            self.cuts = [cut for cut in self.cuts if cut.get("barberId") != barber_id]
        return result

    def add_cut(self, cut: dict) -> Optional[dict]:
        return self._mutate("POST", "/cuts", cut, self.fetch_cuts, "Error registrando corte")

    def update_cut(self, cut_id: int, update: dict) -> Optional[dict]:
        return self._mutate("PUT", f"/cuts/{cut_id}", update, self.fetch_cuts, "Error actualizando corte")

    def delete_cut(self, cut_id: int) -> Optional[dict]:
        return self._mutate("DELETE", f"/cuts/{cut_id}", None, self.fetch_cuts, "Error eliminando corte")

    def add_cut_photo(self, cut_id: int, photo: PhotoSource) -> Optional[dict]:
        """Upload one photo; ``photo`` is a path or a ``(filename, fileobj)`` pair."""
        try:
            if isinstance(photo, tuple):
                filename, fileobj = photo
                data = self.api.post(f"/cuts/{cut_id}/photo", files={"photo": (filename, fileobj)})
            else:
                with open(photo, "rb") as fileobj:
                    data = self.api.post(
                        f"/cuts/{cut_id}/photo",
                        files={"photo": (os.path.basename(os.fspath(photo)), fileobj)},
                    )
        except (ApiRequestError, OSError) as exc:
            logger.warning("Photo upload for cut %s failed: %s", cut_id, exc)
            self.notifier.error("Error subiendo foto")
            return None
        self.notifier.success("Foto subida")
        return data

    def delete_cut_photo(self, cut_id: int, photo_id: int) -> bool:
        try:
            self.api.delete(f"/cuts/{cut_id}/photos/{photo_id}")
        except ApiRequestError:
            self.notifier.error("Error eliminando foto")
            return False
        self.notifier.success("Foto eliminada")
        self.fetch_cuts()
        return True

    # --- users ---

    def list_users(self) -> list[dict]:
        try:
            return self.api.get("/users") or []
        except ApiRequestError:
            self.notifier.error("Error cargando usuarios")
            return []

    def register_user(self, user: dict) -> Optional[dict]:
        return self._mutate("POST", "/users", user, None, "Error registrando usuario", "Usuario registrado")

    def update_user(self, user_id: int, update: dict) -> bool:
        result = self._mutate(
            "PUT", f"/users/{user_id}", update, None, "Error actualizando usuario", "Usuario actualizado"
        )
        return result is not None

    def delete_user(self, user_id: int) -> bool:
        result = self._mutate(
            "DELETE", f"/users/{user_id}", None, None, "Error eliminando usuario", "Usuario eliminado"
        )
        return result is not None
