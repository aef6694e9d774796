from __future__ import annotations

import itertools
import logging
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter
from sqlalchemy.exc import SQLAlchemyError

from models import VehicleDocument, db

_logger = logging.getLogger(__name__)

ASC = "asc"
DESC = "desc"


class StoreError(Exception):
    """Falha de transporte ou permissão ao falar com o banco de documentos."""


class VehicleStore:
    """Operações do banco de documentos usadas pelo sistema.

    Documentos trafegam como dicts com as chaves camelCase da coleção.
    Os métodos de leitura devolvem o id do documento na chave "id".
    """

    def insert(self, collection: str, document: dict[str, Any]) -> str:
        raise NotImplementedError

    def fetch_all(
        self, collection: str, order_by: str, direction: str = DESC, limit: int | None = None
    ) -> list[dict[str, Any]]:
        raise NotImplementedError

    def fetch_filtered(
        self, collection: str, field: str, value: Any, order_by: str, direction: str = DESC
    ) -> list[dict[str, Any]]:
        raise NotImplementedError


# ---------------- SQL (Flask-SQLAlchemy) ----------------

class SqlVehicleStore(VehicleStore):
    def __init__(self, models=None):
        # nome da coleção -> tabela
        self.models = models or {"vehicles": VehicleDocument}

    def _model(self, collection: str):
        try:
            return self.models[collection]
        except KeyError:
            raise StoreError(f"Coleção desconhecida: {collection}") from None

    def _ordered(self, model, query, order_by: str, direction: str):
        col = model.column(order_by)
        return query.order_by(col.desc() if direction == DESC else col.asc())

    def insert(self, collection, document):
        model = self._model(collection)
        row = model(**{model.FIELDS[k]: v for k, v in document.items() if k in model.FIELDS})
        try:
            db.session.add(row)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(str(exc)) from exc
        return str(row.id)

    def fetch_all(self, collection, order_by, direction=DESC, limit=None):
        model = self._model(collection)
        query = self._ordered(model, model.query, order_by, direction)
        if limit is not None:
            query = query.limit(limit)
        try:
            return [r.to_document() for r in query.all()]
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(str(exc)) from exc

    def fetch_filtered(self, collection, field, value, order_by, direction=DESC):
        model = self._model(collection)
        query = model.query.filter(model.column(field) == value)
        query = self._ordered(model, query, order_by, direction)
        try:
            return [r.to_document() for r in query.all()]
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(str(exc)) from exc


# ---------------- Firestore ----------------

class FirestoreVehicleStore(VehicleStore):
    def __init__(self, client):
        self.client = client

    @staticmethod
    def _direction(direction: str):
        return firestore.Query.DESCENDING if direction == DESC else firestore.Query.ASCENDING

    @staticmethod
    def _documents(snapshots) -> list[dict[str, Any]]:
        return [{"id": snap.id, **snap.to_dict()} for snap in snapshots]

    def insert(self, collection, document):
        try:
            _, ref = self.client.collection(collection).add(document)
        except google_exceptions.GoogleAPIError as exc:
            raise StoreError(str(exc)) from exc
        return ref.id

    def fetch_all(self, collection, order_by, direction=DESC, limit=None):
        query = self.client.collection(collection).order_by(order_by, direction=self._direction(direction))
        if limit is not None:
            query = query.limit(limit)
        try:
            return self._documents(query.stream())
        except google_exceptions.GoogleAPIError as exc:
            raise StoreError(str(exc)) from exc

    def fetch_filtered(self, collection, field, value, order_by, direction=DESC):
        query = (
            self.client.collection(collection)
            .where(filter=FieldFilter(field, "==", value))
            .order_by(order_by, direction=self._direction(direction))
        )
        try:
            return self._documents(query.stream())
        except google_exceptions.GoogleAPIError as exc:
            raise StoreError(str(exc)) from exc


def firestore_client(config: dict):
    try:
        firebase_admin.get_app()
    except ValueError:
        cred = credentials.Certificate({
            "type": "service_account",
            "project_id": config["FIREBASE_PROJECT_ID"],
            "private_key": (config["FIREBASE_PRIVATE_KEY"] or "").replace("\\n", "\n"),
            "client_email": config["FIREBASE_CLIENT_EMAIL"],
            "token_uri": "https://oauth2.googleapis.com/token",
        })
        firebase_admin.initialize_app(cred)
    return firestore.client()


# ---------------- Memória ----------------

class MemoryVehicleStore(VehicleStore):
    """Coleções em memória do processo. Útil para desenvolvimento e testes."""

    def __init__(self):
        self.collections: dict[str, list[dict[str, Any]]] = {}
        self._ids = itertools.count(1)

    def insert(self, collection, document):
        doc_id = str(next(self._ids))
        self.collections.setdefault(collection, []).append({**document, "id": doc_id})
        return doc_id

    def _sorted(self, docs, order_by, direction):
        return sorted(docs, key=lambda d: d[order_by], reverse=direction == DESC)

    def fetch_all(self, collection, order_by, direction=DESC, limit=None):
        docs = self._sorted(self.collections.get(collection, []), order_by, direction)
        if limit is not None:
            docs = docs[:limit]
        return [dict(d) for d in docs]

    def fetch_filtered(self, collection, field, value, order_by, direction=DESC):
        docs = [d for d in self.collections.get(collection, []) if d.get(field) == value]
        return [dict(d) for d in self._sorted(docs, order_by, direction)]


def create_store(config: dict) -> VehicleStore:
    backend = config.get("STORE_BACKEND", "sql")
    _logger.info("Banco de veículos: %s", backend)
    if backend == "firestore":
        return FirestoreVehicleStore(firestore_client(config))
    if backend == "memory":
        return MemoryVehicleStore()
    if backend == "sql":
        return SqlVehicleStore({config.get("VEHICLES_COLLECTION", "vehicles"): VehicleDocument})
    raise ValueError(f"STORE_BACKEND inválido: {backend}")
