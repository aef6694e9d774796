from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
import threading
import uuid

from cachetools import TTLCache
import click
from flask import Flask, Response, flash, redirect, render_template, request, session, url_for

from config import Config, CITY_ALL
from data import VEICULOS
from models import db, City, State, VehicleType, label
from services import (
    DateRange,
    InvalidDraftError,
    RecordIntake,
    SubmissionInProgressError,
    VehicleListing,
    export_csv,
    export_filename,
    filter_vehicles,
    summarize,
    to_export_rows,
)
from store import StoreError, VehicleStore, create_store

# ---------------- Utils ----------------

def norm(s: str | None) -> str:
    return (s or "").strip()


CIDADES = {c.value for c in City}


def list_filters(args) -> dict:
    """Filtros da lista vindos da query string (cidade, busca, inicio, fim)."""
    cidade = norm(args.get("cidade")) or CITY_ALL
    if cidade != CITY_ALL and cidade not in CIDADES:
        cidade = CITY_ALL
    return {
        "cidade": cidade,
        "busca": args.get("busca", ""),
        "inicio": norm(args.get("inicio")),
        "fim": norm(args.get("fim")),
    }


@dataclass
class OperatorSession:
    intake: RecordIntake
    listing: VehicleListing
    # busca/período da última página exibida
    last_view: tuple | None = None


def operator_session(app: Flask) -> OperatorSession:
    # Cada navegador tem seu próprio rascunho e sua própria lista carregada.
    sid = session.get("sid")
    if not sid:
        sid = session["sid"] = uuid.uuid4().hex
    sessions = app.extensions["patio_sessions"]
    with app.extensions["patio_sessions_lock"]:
        op = sessions.get(sid)
        if op is None:
            store = app.extensions["vehicle_store"]
            collection = app.config["VEHICLES_COLLECTION"]
            op = OperatorSession(RecordIntake(store, collection), VehicleListing(store, collection))
        # regrava para renovar o prazo da sessão
        sessions[sid] = op
    return op


def visible_vehicles(op: OperatorSession, filtros: dict, reload: bool = False):
    return op.listing.list_visible(
        filtros["cidade"], filtros["busca"], DateRange(filtros["inicio"], filtros["fim"]), reload=reload
    )


# ---------------- App Factory ----------------

def create_app(test_config: dict | None = None, store: VehicleStore | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)

    if app.config["STORE_BACKEND"] == "sql":
        with app.app_context():
            db.create_all()

    app.extensions["vehicle_store"] = store if store is not None else create_store(app.config)
    app.extensions["patio_sessions"] = TTLCache(
        maxsize=app.config["OPERATOR_SESSIONS_MAX"], ttl=app.config["OPERATOR_SESSION_TTL"]
    )
    app.extensions["patio_sessions_lock"] = threading.Lock()
    app.add_template_filter(label)

    @app.context_processor
    def inject_year():
        return {"ano": date.today().year}

    # ---------- Navegação ----------
    @app.get("/")
    def index():
        return redirect(url_for("veiculos"))

    # ---------- Lista ----------
    @app.get("/veiculos")
    def veiculos():
        filtros = list_filters(request.args)
        op = operator_session(app)

        # Mesma busca e período da página anterior: abertura ou atualização
        # da página, relê o banco. Só edição de busca/período usa o cache.
        view = (filtros["busca"], filtros["inicio"], filtros["fim"])
        reload = bool(request.args.get("atualizar")) or view == op.last_view
        op.last_view = view

        try:
            rows = visible_vehicles(op, filtros, reload=reload)
        except StoreError:
            app.logger.exception("Erro ao buscar veículos (cidade=%s)", filtros["cidade"])
            flash("Erro ao carregar veículos.", "err")
            # mantém o último conjunto carregado
            rows = filter_vehicles(op.listing.records, filtros["busca"], DateRange(filtros["inicio"], filtros["fim"]))

        return render_template(
            "veiculos.html",
            veiculos=rows,
            stats=summarize(rows),
            filtros=filtros,
            draft=op.intake.draft,
            busy=op.intake.busy,
            estados=[s.value for s in State],
            tipos=[t.value for t in VehicleType],
            cidades=[c.value for c in City],
            city_all=CITY_ALL,
        )

    # ---------- Cadastro ----------
    @app.post("/veiculos")
    def veiculos_add():
        filtros = list_filters(request.args)
        op = operator_session(app)

        try:
            if op.intake.busy:
                # não mexe no rascunho do cadastro em andamento
                raise SubmissionInProgressError("Cadastro anterior ainda em andamento")
            op.intake.update(request.form)
            vehicle = op.intake.submit()
        except SubmissionInProgressError:
            flash("Aguarde: o cadastro anterior ainda está em andamento.", "err")
        except InvalidDraftError as exc:
            app.logger.warning("Cadastro recusado: %s", exc)
            flash("Preencha Placa, Marca, Modelo, Data de Vistoria e Data de Liberação.", "err")
        except StoreError:
            app.logger.exception("Erro ao cadastrar veículo")
            flash("Erro ao cadastrar veículo.", "err")
        else:
            op.listing.invalidate()
            flash(f"Veículo cadastrado com sucesso! Registro {vehicle.registration_number}.", "ok")

        return redirect(url_for("veiculos", **filtros))

    # ---------- Exportar ----------
    @app.get("/veiculos/exportar")
    def veiculos_exportar():
        filtros = list_filters(request.args)
        op = operator_session(app)

        try:
            rows = visible_vehicles(op, filtros)
        except StoreError:
            app.logger.exception("Erro ao buscar veículos para exportação")
            flash("Erro ao carregar veículos.", "err")
            return redirect(url_for("veiculos", **filtros))

        return Response(
            export_csv(to_export_rows(rows)),
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
        )

    # ---------- CLI ----------
    @app.cli.command("seed-vehicles")
    def seed_vehicles():
        """Cadastra os veículos de exemplo (data.py)."""
        intake = RecordIntake(app.extensions["vehicle_store"], app.config["VEHICLES_COLLECTION"])
        count = 0
        for row in VEICULOS:
            intake.update(row)
            intake.submit()
            count += 1
        click.echo(f"Veículos cadastrados: {count}")

    return app


# Para rodar local: python app.py
if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
