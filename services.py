"""
Regras do pátio: numeração de registro, cadastro, filtros, estatísticas e
exportação. Nada aqui conhece Flask; o banco entra sempre como `VehicleStore`.
"""
from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Iterable, NamedTuple

from config import CITY_ALL, REGISTRATION_SEED
from models import City, State, Vehicle, VehicleType, label
from store import DESC, VehicleStore

_logger = logging.getLogger(__name__)

COLLECTION = "vehicles"
ORDER_FIELD = "registrationNumber"

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidDraftError(ValueError):
    """Rascunho com campo obrigatório vazio ou fora do conjunto permitido."""


class SubmissionInProgressError(RuntimeError):
    pass


# ---------------- Numeração ----------------

def next_registration_number(store: VehicleStore, collection: str = COLLECTION) -> int:
    """
    Próximo número de registro: maior número gravado + 1, ou a semente
    REGISTRATION_SEED quando a coleção está vazia.

    Leitura seguida de escrita, sem transação: dois cadastros simultâneos
    podem ler o mesmo máximo e gravar números repetidos.
    Erros do banco sobem para quem chamou; não há nova tentativa.
    """
    docs = store.fetch_all(collection, ORDER_FIELD, DESC, limit=1)
    if not docs:
        return REGISTRATION_SEED
    return int(docs[0][ORDER_FIELD]) + 1


# ---------------- Cadastro ----------------

DEFAULT_DRAFT: dict[str, Any] = {
    "plate": "",
    "state": State.PR.value,
    "inspection_date": "",
    "brand": "",
    "model": "",
    "vehicle_type": VehicleType.AUTOMOVEL.value,
    "has_key": False,
    "chassis_observation": "",
    "release_date": "",
    "city": City.MEDIANEIRA.value,
}

REQUIRED_TEXT = ("plate", "inspection_date", "brand", "model", "release_date")

TRUE_VALUES = {"sim", "true", "1", "on"}


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def validate_draft(draft: dict[str, Any]) -> dict[str, Any]:
    """Converte o rascunho em campos de `Vehicle`; levanta InvalidDraftError."""
    missing = [name for name in REQUIRED_TEXT if not str(draft.get(name) or "").strip()]
    if missing:
        raise InvalidDraftError(f"Campos obrigatórios: {', '.join(missing)}")

    try:
        state = State(draft.get("state"))
        vehicle_type = VehicleType(draft.get("vehicle_type"))
        city = City(draft.get("city"))
    except ValueError as exc:
        raise InvalidDraftError(str(exc)) from exc

    return {
        "plate": draft["plate"],
        "state": state,
        "inspection_date": draft["inspection_date"],
        "brand": draft["brand"],
        "model": draft["model"],
        "vehicle_type": vehicle_type,
        "has_key": parse_bool(draft.get("has_key", False)),
        "chassis_observation": draft.get("chassis_observation") or "",
        "release_date": draft["release_date"],
        "city": city,
    }


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecordIntake:
    """Rascunho do formulário de cadastro de um operador."""

    def __init__(self, store: VehicleStore, collection: str = COLLECTION, clock=utc_now_iso):
        self.store = store
        self.collection = collection
        self.clock = clock
        self.busy = False
        self.draft = dict(DEFAULT_DRAFT)

    def reset(self) -> None:
        self.draft = dict(DEFAULT_DRAFT)

    def update(self, form) -> None:
        for name in DEFAULT_DRAFT:
            if name == "has_key":
                continue
            if name in form:
                self.draft[name] = form.get(name)
        if "has_key" in form:
            self.draft["has_key"] = parse_bool(form.get("has_key"))

    def submit(self) -> Vehicle:
        if self.busy:
            raise SubmissionInProgressError("Cadastro anterior ainda em andamento")

        fields = validate_draft(self.draft)

        self.busy = True
        try:
            number = next_registration_number(self.store, self.collection)
            vehicle = Vehicle(registration_number=number, created_at=self.clock(), **fields)
            vehicle.id = self.store.insert(self.collection, vehicle.to_document())
        finally:
            self.busy = False

        _logger.info("Veículo %s cadastrado com registro %s", vehicle.plate, number)
        self.reset()
        return vehicle


# ---------------- Consulta / filtros ----------------

class DateRange(NamedTuple):
    start: str = ""
    end: str = ""


def _text(value: Any) -> str:
    # Mesma conversão para texto de um documento exibido: booleanos minúsculos.
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return label(value)


def searchable_values(vehicle: Vehicle) -> list[str]:
    doc = vehicle.to_document()
    doc["id"] = vehicle.id
    return [_text(v) for v in doc.values()]


def matches_search(vehicle: Vehicle, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    return any(needle in value.lower() for value in searchable_values(vehicle))


def matches_date_range(vehicle: Vehicle, date_range: DateRange) -> bool:
    # Datas ISO comparam em ordem cronológica como texto.
    start, end = date_range
    if start and vehicle.inspection_date < start:
        return False
    if end and vehicle.inspection_date > end:
        return False
    return True


def filter_vehicles(vehicles: Iterable[Vehicle], term: str = "", date_range: DateRange | None = None) -> list[Vehicle]:
    date_range = date_range or DateRange()
    return [v for v in vehicles if matches_search(v, term) and matches_date_range(v, date_range)]


class VehicleListing:
    """
    Lista de veículos de um operador.

    Só a troca do filtro de cidade busca no banco; busca por texto e
    período filtram em memória o conjunto já carregado.
    """

    def __init__(self, store: VehicleStore, collection: str = COLLECTION):
        self.store = store
        self.collection = collection
        self.city_filter: str | None = None
        self.records: list[Vehicle] = []
        self.loaded = False

    def invalidate(self) -> None:
        self.loaded = False

    def load(self, city_filter: str) -> None:
        if city_filter == CITY_ALL:
            docs = self.store.fetch_all(self.collection, ORDER_FIELD, DESC)
        else:
            docs = self.store.fetch_filtered(self.collection, "city", city_filter, ORDER_FIELD, DESC)
        # só troca o conjunto visível depois da leitura completa
        self.records = [Vehicle.from_document(d) for d in docs]
        self.city_filter = city_filter
        self.loaded = True
        _logger.debug("Carregados %d veículos (cidade=%s)", len(self.records), city_filter)

    def list_visible(
        self,
        city_filter: str = CITY_ALL,
        search_term: str = "",
        date_range: DateRange | None = None,
        reload: bool = False,
    ) -> list[Vehicle]:
        """`reload` força nova leitura (abertura ou atualização da página)."""
        if reload or not self.loaded or city_filter != self.city_filter:
            self.load(city_filter)
        return filter_vehicles(self.records, search_term, date_range)


# ---------------- Estatísticas ----------------

@dataclass
class Stats:
    total: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_key: dict[str, int] = field(default_factory=lambda: {"yes": 0, "no": 0})
    by_state: dict[str, int] = field(default_factory=dict)
    by_city: dict[str, int] = field(default_factory=dict)

    @property
    def cities_served(self) -> int:
        return len(self.by_city)


def summarize(vehicles: Iterable[Vehicle]) -> Stats:
    stats = Stats()
    for v in vehicles:
        stats.total += 1
        t = label(v.vehicle_type)
        stats.by_type[t] = stats.by_type.get(t, 0) + 1
        stats.by_key["yes" if v.has_key else "no"] += 1
        s = label(v.state)
        stats.by_state[s] = stats.by_state.get(s, 0) + 1
        c = label(v.city)
        stats.by_city[c] = stats.by_city.get(c, 0) + 1
    return stats


# ---------------- Exportação ----------------

KEY_YES = "Sim"
KEY_NO = "Não"

EXPORT_COLUMNS = [
    "Número de Registro",
    "Placa",
    "UF",
    "Data de Vistoria",
    "Marca",
    "Modelo",
    "Tipo",
    "Chave",
    "Observação Chassi",
    "Data de Liberação",
    "Cidade",
]


def format_date(value: str | None) -> str:
    """YYYY-MM-DD -> DD/MM/YYYY. Texto fora do formato sai como veio."""
    if not value or not ISO_DATE_RE.match(value):
        return value or ""
    try:
        return datetime.strptime(value, "%Y-%m-%d").strftime("%d/%m/%Y")
    except ValueError:
        return value


def to_export_rows(vehicles: Iterable[Vehicle]) -> list[dict[str, str]]:
    rows = []
    for v in vehicles:
        values = [
            str(v.registration_number),
            v.plate,
            label(v.state),
            format_date(v.inspection_date),
            v.brand,
            v.model,
            label(v.vehicle_type),
            KEY_YES if v.has_key else KEY_NO,
            v.chassis_observation or "",
            format_date(v.release_date),
            label(v.city),
        ]
        rows.append(dict(zip(EXPORT_COLUMNS, values)))
    return rows


def export_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"veiculos-{today:%d-%m-%Y}.csv"


def export_csv(rows: list[dict[str, str]]) -> str:
    f = io.StringIO()
    # BOM para o Excel reconhecer UTF-8
    f.write("\ufeff")
    writer = csv.DictWriter(f, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    writer.writerows(rows)
    return f.getvalue()
