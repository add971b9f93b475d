from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from typing import Literal

from ..config.loader import StatusMarkers, TrackerConfig
from ..models.delivery import DeliveryData
from ..models.status import FleetStatus, StatusEntry, StatusObservation, StatusSchema
from .cells import ImportedRow, lookup, parse_int, percentage
from .dates import parse_datetime
from .detector import detect_status_schema

"""Status reconciliation.

A status sheet updates previously imported records in one of two ways,
chosen by detect_status_schema():

FLEET: per load id, "Entregues" (AI) delivered and "Baixas" (AJ) returned
counts overwrite the record's counts.

ROUTE: per service code, the most recent status row decides whether the
code was delivered ("sucesso") or failed ("sem sucesso"). Codes without a
status row stay pending.

Records whose id (fleet) or codes (route) do not appear in the sheet are
returned unchanged / with empty classification respectively.
"""

__all__ = [
    "reconcile",
    "reconcile_fleet",
    "reconcile_route",
    "build_fleet_status_map",
    "build_route_status_map",
    "classify_status",
    "mark_code",
]

logger = logging.getLogger(__name__)

NOT_SPECIFIED = "Não especificado"

# Column aliases, tried in order
LOAD_ID_KEYS = ("A", "ID Carga", "Id Carga", "id carga")
DRIVER_KEYS = ("F", "Motorista", "motorista")
DELIVERED_KEYS = ("AI", "Entregues", "entregues")
RETURNED_KEYS = ("AJ", "Baixas", "baixas")

CODE_KEYS = ("Código", "Codigo", "Code")
TITLE_KEYS = ("H", "Título", "Titulo", "Title")
STATUS_KEYS = ("Situação - Finalizado", "Situacao - Finalizado", "Status")
SENDER_KEYS = ("F", "Remetente")
DATE_KEYS = ("Horários (execução) - Concluído", "Horarios (execucao) - Concluido", "Timestamp")
AGENT_KEYS = ("Agente", "Agent")

Outcome = Literal["success", "unsuccessful"]


# --- fleet style -----------------------------------------------------------

def build_fleet_status_map(status_rows: Sequence[ImportedRow]) -> dict[str, FleetStatus]:
    """load id -> FleetStatus. Later rows overwrite earlier ones."""
    status_map: dict[str, FleetStatus] = {}
    for row in status_rows:
        load_id = lookup(row, *LOAD_ID_KEYS)
        delivered = parse_int(lookup(row, *DELIVERED_KEYS) or "0")
        if not load_id or delivered is None:
            continue
        returned = parse_int(lookup(row, *RETURNED_KEYS) or "0") or 0
        status_map[load_id] = FleetStatus(
            delivered=delivered,
            failed_or_returned=returned,
            driver=lookup(row, *DRIVER_KEYS) or None,
        )
    logger.debug(f"fleet status entries: {len(status_map)}")
    return status_map


def _apply_fleet_status(record: DeliveryData, status: FleetStatus) -> DeliveryData:
    total = record.total_orders
    delivered = status.delivered
    returned = status.failed_or_returned

    if returned == delivered:
        unsuccessful = 0
        pending = max(0, total - returned)
    elif returned > delivered:
        unsuccessful = returned - delivered
        pending = max(0, total - returned)
    else:
        # fewer returns than deliveries: anomalous, treat the rest as pending
        unsuccessful = 0
        pending = max(0, total - delivered)

    if delivered + unsuccessful + pending != total:
        logger.warning(
            f"load {record.id}: delivered={delivered} unsuccessful={unsuccessful} "
            f"pending={pending} do not add up to total={total}"
        )

    return replace(
        record,
        delivered=delivered,
        unsuccessful=unsuccessful,
        pending=pending,
        delivery_percentage=percentage(delivered, total),
        route_percentage=percentage(delivered + unsuccessful, total),
        successful_codes=[],
        unsuccessful_codes=[],
        sender_map={},
    )


def reconcile_fleet(records: Sequence[DeliveryData], status_rows: Sequence[ImportedRow]) -> list[DeliveryData]:
    """Overwrite the counts of records whose load id appears in the status sheet.

    Args:
        records: previously imported records
        status_rows: fleet status rows (load id, delivered AI, returned AJ)

    Returns:
        Records in input order; unmatched ones unchanged
    """
    status_map = build_fleet_status_map(status_rows)
    updated: list[DeliveryData] = []
    matched = 0
    for record in records:
        status = status_map.get(record.id)
        if status is None:
            updated.append(record)
            continue
        matched += 1
        logger.debug(
            f"load {record.id}: record driver={record.driver} sheet driver={status.driver or '-'} "
            f"delivered={status.delivered} returned={status.failed_or_returned}"
        )
        updated.append(_apply_fleet_status(record, status))
    logger.info(f"fleet status: entries={len(status_map)} matched_records={matched}")
    return updated


# --- route style -----------------------------------------------------------

def build_route_status_map(status_rows: Sequence[ImportedRow], config: TrackerConfig) -> dict[str, StatusEntry]:
    """service code -> latest StatusEntry.

    Broker agents are keyed by title. A later row replaces the entry only when
    its timestamp is strictly newer, so ties keep the first row seen.
    """
    status_map: dict[str, StatusEntry] = {}
    for row in status_rows:
        title = lookup(row, *TITLE_KEYS)
        code = lookup(row, *CODE_KEYS) or title
        raw_date = lookup(row, *DATE_KEYS)
        agent = lookup(row, *AGENT_KEYS) or NOT_SPECIFIED

        final_code = title if config.is_broker(agent) else code
        if not final_code:
            continue

        observation = StatusObservation(
            timestamp=parse_datetime(raw_date),
            status=lookup(row, *STATUS_KEYS).lower(),
            raw_date=raw_date,
            agent=agent,
            title=title,
            sender=lookup(row, *SENDER_KEYS) or NOT_SPECIFIED,
        )
        entry = status_map.get(final_code)
        if entry is None:
            status_map[final_code] = StatusEntry(
                status=observation.status,
                timestamp=observation.timestamp,
                sender=observation.sender,
                history=[observation],
            )
        else:
            entry.observe(observation)

    _log_duplicates(status_map)
    return status_map


def _log_duplicates(status_map: dict[str, StatusEntry]) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    for code, entry in status_map.items():
        if len(entry.history) < 2:
            continue
        logger.debug(f"code {code}: {len(entry.history)} status rows, using {entry.status!r} @ {entry.timestamp}")
        for obs in sorted(entry.history, key=lambda o: o.timestamp, reverse=True):
            logger.debug(
                f"  {obs.raw_date or '-'} status={obs.status!r} agent={obs.agent} "
                f"title={obs.title or 'N/A'} sender={obs.sender}"
            )


def classify_status(status: str, markers: StatusMarkers) -> Outcome | None:
    """Negative marker first: "sem sucesso" contains "sucesso"."""
    if markers.negative in status:
        return "unsuccessful"
    if markers.positive in status and markers.negative not in status:
        return "success"
    return None


def reconcile_route(
    records: Sequence[DeliveryData],
    status_rows: Sequence[ImportedRow],
    config: TrackerConfig,
) -> list[DeliveryData]:
    """Classify each record's service codes from the latest status per code.

    Codes without a status row, or whose status matches neither marker, stay
    pending. Counts and percentages are recomputed from the code lists.
    """
    status_map = build_route_status_map(status_rows, config)
    updated: list[DeliveryData] = []
    for record in records:
        successful: list[str] = []
        unsuccessful: list[str] = []
        senders: dict[str, str] = {}

        for code in record.service_codes:
            entry = status_map.get(code)
            if entry is None:
                continue
            outcome = classify_status(entry.status, config.status_markers)
            if outcome == "success":
                successful.append(code)
            elif outcome == "unsuccessful":
                unsuccessful.append(code)
            else:
                continue
            senders[code] = entry.sender

        updated.append(_recount(record, successful, unsuccessful, senders))

    logger.info(f"route status: codes={len(status_map)} records={len(updated)}")
    return updated


def _recount(
    record: DeliveryData,
    successful: list[str],
    unsuccessful: list[str],
    senders: dict[str, str],
) -> DeliveryData:
    total = record.total_orders
    delivered = len(successful)
    failed = len(unsuccessful)
    pending = max(0, total - delivered - failed)
    return replace(
        record,
        delivered=delivered,
        unsuccessful=failed,
        pending=pending,
        delivery_percentage=percentage(delivered, total),
        route_percentage=percentage(total - pending, total),
        successful_codes=successful,
        unsuccessful_codes=unsuccessful,
        sender_map=senders,
    )


# --- entry points ----------------------------------------------------------

def reconcile(
    records: Sequence[DeliveryData],
    status_rows: Sequence[ImportedRow],
    config: TrackerConfig,
) -> list[DeliveryData]:
    """Apply one status sheet to the record set.

    Args:
        records: previously imported records
        status_rows: decoded status sheet
        config: broker list and status markers (route sheets only)

    Returns:
        Updated records, same order and ids as ``records``
    """
    schema = detect_status_schema(status_rows)
    logger.info(f"status sheet schema: {schema.value}")
    if schema is StatusSchema.FLEET:
        return reconcile_fleet(records, status_rows)
    return reconcile_route(records, status_rows, config)


def mark_code(
    records: Sequence[DeliveryData],
    record_id: str,
    code: str,
    outcome: Outcome,
) -> list[DeliveryData]:
    """Manually classify one code of one record, moving it out of the other list.

    Only codes listed in the record's service_codes can be marked. Fleet
    records carry no codes, so their counts stay owned by fleet status sheets.

    Args:
        records: current record set
        record_id: id of the record to update
        code: one of the record's service codes
        outcome: "success" or "unsuccessful"

    Returns:
        A new record list with the target record recounted

    Raises:
        ValueError: if outcome is unknown, or code is not a service code of the record
    """
    if outcome not in ("success", "unsuccessful"):
        raise ValueError(f"unknown outcome: {outcome!r}")

    updated: list[DeliveryData] = []
    for record in records:
        if record.id != record_id:
            updated.append(record)
            continue
        if code not in record.service_codes:
            raise ValueError(f"record {record_id} has no service code {code!r}")
        successful = [c for c in record.successful_codes if c != code]
        unsuccessful = [c for c in record.unsuccessful_codes if c != code]
        if outcome == "success":
            successful.append(code)
        else:
            unsuccessful.append(code)
        updated.append(_recount(record, successful, unsuccessful, dict(record.sender_map)))
    return updated
