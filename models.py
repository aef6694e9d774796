from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class State(str, Enum):
    AC = "AC"
    AL = "AL"
    AP = "AP"
    AM = "AM"
    BA = "BA"
    CE = "CE"
    DF = "DF"
    ES = "ES"
    GO = "GO"
    MA = "MA"
    MT = "MT"
    MS = "MS"
    MG = "MG"
    PA = "PA"
    PB = "PB"
    PR = "PR"
    PE = "PE"
    PI = "PI"
    RJ = "RJ"
    RN = "RN"
    RS = "RS"
    RO = "RO"
    RR = "RR"
    SC = "SC"
    SP = "SP"
    SE = "SE"
    TO = "TO"
    EX = "EX"  # exterior


class VehicleType(str, Enum):
    AUTOMOVEL = "Automóvel"
    MOTOCICLETA = "Motocicleta"
    CAMIONETA = "Camioneta"
    CAMINHONETE = "Caminhonete"
    CAMINHAO = "Caminhão"
    ONIBUS = "Ônibus"
    CAM_TRATOR = "Cam. Trator"
    TRICICLO = "Triciclo"
    QUADRICICLO = "Quadriciclo"
    TRATOR_DE_RODAS = "Trator de Rodas"
    SEMI_REBOQUE = "Semi-Reboque"
    MOTONETA = "Motoneta"
    MICROONIBUS = "Microônibus"
    REBOQUE = "Reboque"
    CICLOMOTOR = "Ciclomotor"
    UTILITARIO = "Utilitário"


class City(str, Enum):
    MEDIANEIRA = "Medianeira"
    SMI = "SMI"
    MISSAL = "Missal"
    ITAIPULANDIA = "Itaipulândia"
    SERRANOPOLIS = "Serranópolis"


def label(value: Any) -> str:
    """Texto exibido para um valor de conjunto fechado (ou texto cru legado)."""
    return value.value if isinstance(value, Enum) else str(value)


def _coerce(enum_cls, value):
    # Documentos antigos podem ter valores fora do conjunto; mantém o texto cru.
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass
class Vehicle:
    registration_number: int
    plate: str
    state: State
    inspection_date: str
    brand: str
    model: str
    vehicle_type: VehicleType
    has_key: bool
    release_date: str
    city: City
    chassis_observation: str = ""
    created_at: str | None = None
    id: str | None = None

    def to_document(self) -> dict[str, Any]:
        """Documento como gravado na coleção (chaves camelCase, sem id)."""
        return {
            "registrationNumber": self.registration_number,
            "plate": self.plate,
            "state": label(self.state),
            "inspectionDate": self.inspection_date,
            "brand": self.brand,
            "model": self.model,
            "vehicleType": label(self.vehicle_type),
            "hasKey": self.has_key,
            "chassisObservation": self.chassis_observation,
            "releaseDate": self.release_date,
            "city": label(self.city),
            "createdAt": self.created_at,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Vehicle":
        return cls(
            id=doc.get("id"),
            registration_number=int(doc["registrationNumber"]),
            plate=doc.get("plate") or "",
            state=_coerce(State, doc.get("state") or ""),
            inspection_date=doc.get("inspectionDate") or "",
            brand=doc.get("brand") or "",
            model=doc.get("model") or "",
            vehicle_type=_coerce(VehicleType, doc.get("vehicleType") or ""),
            has_key=bool(doc.get("hasKey", False)),
            chassis_observation=doc.get("chassisObservation") or "",
            release_date=doc.get("releaseDate") or "",
            city=_coerce(City, doc.get("city") or ""),
            created_at=doc.get("createdAt"),
        )


class VehicleDocument(db.Model):
    __tablename__ = "vehicles"
    id = db.Column(db.Integer, primary_key=True)
    registration_number = db.Column(db.Integer, nullable=False, index=True)
    plate = db.Column(db.String(20), nullable=False)
    state = db.Column(db.String(2), nullable=False)
    inspection_date = db.Column(db.String(10), nullable=False)
    brand = db.Column(db.String(60), nullable=False)
    model = db.Column(db.String(80), nullable=False)
    vehicle_type = db.Column(db.String(30), nullable=False)
    has_key = db.Column(db.Boolean, nullable=False, default=False)
    chassis_observation = db.Column(db.String(500), nullable=True)
    release_date = db.Column(db.String(10), nullable=False)
    city = db.Column(db.String(30), nullable=False, index=True)
    created_at = db.Column(db.String(40), nullable=True)

    # chave do documento -> coluna
    FIELDS = {
        "registrationNumber": "registration_number",
        "plate": "plate",
        "state": "state",
        "inspectionDate": "inspection_date",
        "brand": "brand",
        "model": "model",
        "vehicleType": "vehicle_type",
        "hasKey": "has_key",
        "chassisObservation": "chassis_observation",
        "releaseDate": "release_date",
        "city": "city",
        "createdAt": "created_at",
    }

    @classmethod
    def column(cls, field: str):
        return getattr(cls, cls.FIELDS[field])

    def to_document(self) -> dict[str, Any]:
        doc = {key: getattr(self, attr) for key, attr in self.FIELDS.items()}
        doc["id"] = str(self.id)
        return doc
