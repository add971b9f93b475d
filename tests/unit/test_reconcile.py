from __future__ import annotations

import logging

import pytest

from conftest import BROKER
from delivery_tracker.config.loader import StatusMarkers
from delivery_tracker.models.delivery import DeliveryData, Region
from delivery_tracker.pipeline import reconcile_status
from delivery_tracker.pipeline.reconcile import (
    build_route_status_map,
    classify_status,
    mark_code,
    reconcile_fleet,
    reconcile_route,
)


def _fleet_record(load_id: str = "L1", total: int = 50) -> DeliveryData:
    return DeliveryData(id=load_id, driver="Ana", region=Region.SAO_PAULO, total_orders=total, routes=1, pending=total)


def _route_record(codes: list[str], driver: str = "Maria", record_id: str = "r1") -> DeliveryData:
    return DeliveryData(
        id=record_id,
        driver=driver,
        region=Region.SAO_PAULO,
        total_orders=len(codes),
        routes=1,
        pending=len(codes),
        service_codes=list(codes),
    )


def _status(code: str, status: str, when: str, **extra: str) -> dict[str, str]:
    row = {
        "Código": code,
        "Situação - Finalizado": status,
        "Horários (execução) - Concluído": when,
        "Agente": "Maria",
        "F": "Loja X",
    }
    row.update(extra)
    return row


# --- fleet -----------------------------------------------------------------

@pytest.mark.parametrize(
    "delivered, returned, expected_unsuccessful, expected_pending",
    [
        (50, 50, 0, 0),
        (40, 45, 5, 5),
        (45, 40, 0, 5),
        (0, 0, 0, 50),
    ],
)
def test_fleet_counts(delivered, returned, expected_unsuccessful, expected_pending):
    rows = [{"A": "L1", "AI": delivered, "AJ": returned}]
    [record] = reconcile_fleet([_fleet_record()], rows)
    assert record.delivered == delivered
    assert record.unsuccessful == expected_unsuccessful
    assert record.pending == expected_pending


def test_fleet_percentages_round_half_up():
    rows = [{"A": "L1", "AI": 37, "AJ": 40}]
    [record] = reconcile_fleet([_fleet_record(total=120)], rows)
    # 37 / 120 = 30.83 -> 31; (37 + 3) / 120 = 33.3 -> 33
    assert record.delivery_percentage == 31
    assert record.route_percentage == 33


def test_fleet_header_keyed_rows_and_unmatched_records():
    rows = [
        {"ID Carga": "ID Carga", "Entregues": "Entregues"},
        {"ID Carga": "L2", "Entregues": "10", "Baixas": "10"},
    ]
    records = [_fleet_record("L1"), _fleet_record("L2", total=10)]
    l1, l2 = reconcile_fleet(records, rows)
    assert l1 == records[0]
    assert (l2.delivered, l2.pending, l2.delivery_percentage, l2.route_percentage) == (10, 0, 100, 100)


def test_fleet_delivered_above_total_is_kept_and_pending_clamped():
    rows = [{"A": "L1", "AI": 60, "AJ": 0}]
    [record] = reconcile_fleet([_fleet_record()], rows)
    assert record.delivered == 60
    assert record.pending == 0
    assert record.delivery_percentage == 100


def test_reconcile_status_dispatches_fleet(config):
    rows = [{"ID Carga": "L1", "Entregues": 50, "Baixas": 50}]
    [record] = reconcile_status([_fleet_record()], rows, config)
    assert record.delivered == 50


# --- route -----------------------------------------------------------------

def test_classify_status_negative_wins():
    markers = StatusMarkers()
    assert classify_status("sem sucesso", markers) == "unsuccessful"
    assert classify_status("entregue com sucesso", markers) == "success"
    assert classify_status("em rota", markers) is None
    assert classify_status("", markers) is None


def test_route_codes_are_classified(config):
    record = _route_record(["C1", "C2", "C3", "C4"])
    rows = [
        _status("C1", "Sucesso", "15/03/2024 10:00"),
        _status("C2", "Sem Sucesso", "15/03/2024 10:05"),
        _status("C3", "Em rota", "15/03/2024 10:10"),
    ]
    [updated] = reconcile_route([record], rows, config)

    assert updated.successful_codes == ["C1"]
    assert updated.unsuccessful_codes == ["C2"]
    assert updated.delivered == 1
    assert updated.unsuccessful == 1
    assert updated.pending == 2
    assert updated.delivery_percentage == 25
    assert updated.route_percentage == 50
    assert updated.sender_map == {"C1": "Loja X", "C2": "Loja X"}


def test_latest_timestamp_wins_regardless_of_row_order(config):
    record = _route_record(["C1"])
    rows = [
        _status("C1", "Sucesso", "16/03/2024 09:00"),
        _status("C1", "Sem sucesso", "15/03/2024 18:00"),
    ]
    [updated] = reconcile_route([record], rows, config)
    assert updated.successful_codes == ["C1"]
    assert updated.unsuccessful_codes == []


def test_unparseable_date_loses_to_real_date(config):
    rows = [
        _status("C1", "Sem sucesso", "01/01/2020 00:00"),
        _status("C1", "Sucesso", "amanhã"),
    ]
    status_map = build_route_status_map(rows, config)
    assert status_map["C1"].status == "sem sucesso"
    assert len(status_map["C1"].history) == 2


def test_timestamp_tie_keeps_first_row(config):
    rows = [
        _status("C1", "Sucesso", "15/03/2024 10:00"),
        _status("C1", "Sem sucesso", "15/03/2024 10:00"),
    ]
    assert build_route_status_map(rows, config)["C1"].status == "sucesso"


def test_broker_status_keyed_by_title(config):
    record = _route_record(["Pedido 7"], driver=BROKER)
    rows = [_status("X-999", "Sucesso", "15/03/2024 10:00", Agente=BROKER, H="Pedido 7")]
    [updated] = reconcile_route([record], rows, config)
    assert updated.successful_codes == ["Pedido 7"]


def test_missing_code_falls_back_to_title(config):
    rows = [{"Título": "Pedido 8", "Situação - Finalizado": "Sucesso"}]
    status_map = build_route_status_map(rows, config)
    assert set(status_map) == {"Pedido 8"}
    assert status_map["Pedido 8"].sender == "Não especificado"


def test_accent_insensitive_headers(config):
    record = _route_record(["C1"])
    rows = [{"Codigo": "C1", "Situacao - Finalizado": "SUCESSO", "Horarios (execucao) - Concluido": "15/03/2024 10:00"}]
    [updated] = reconcile_route([record], rows, config)
    assert updated.delivered == 1


def test_record_without_matches_is_reset_to_pending(config):
    record = _route_record(["C1", "C2"])
    [updated] = reconcile_route([record], [_status("Z9", "Sucesso", "15/03/2024 10:00")], config)
    assert updated.delivered == 0
    assert updated.pending == 2
    assert updated.successful_codes == []


def test_reconcile_status_dispatches_route(config):
    rows = [_status("C1", "Sucesso", "15/03/2024 10:00")]
    [record] = reconcile_status([_route_record(["C1"])], rows, config)
    assert record.delivery_percentage == 100
    assert record.route_percentage == 100


# --- manual override -------------------------------------------------------

def test_mark_code_moves_code_between_lists(config):
    rows = [_status("C1", "Sem sucesso", "15/03/2024 10:00")]
    records = reconcile_route([_route_record(["C1", "C2"])], rows, config)

    [marked] = mark_code(records, "r1", "C1", "success")
    assert marked.successful_codes == ["C1"]
    assert marked.unsuccessful_codes == []
    assert marked.delivered == 1
    assert marked.pending == 1
    assert marked.delivery_percentage == 50


def test_mark_code_leaves_other_records_untouched():
    a = _route_record(["C1"], record_id="a")
    b = _route_record(["C1"], record_id="b")
    out = mark_code([a, b], "b", "C1", "unsuccessful")
    assert out[0] is a
    assert out[1].unsuccessful_codes == ["C1"]


def test_mark_code_rejects_unknown_outcome():
    with pytest.raises(ValueError):
        mark_code([_route_record(["C1"])], "r1", "C1", "maybe")  # type: ignore[arg-type]


def test_mark_code_rejects_code_outside_record():
    records = mark_code([_route_record(["C1"])], "r1", "C1", "success")
    with pytest.raises(ValueError, match="no service code"):
        mark_code(records, "r1", "ZZ", "success")
    [record] = records
    assert record.delivered + record.unsuccessful + record.pending == record.total_orders == 1


def test_mark_code_refuses_fleet_record():
    [record] = reconcile_fleet([_fleet_record()], [{"A": "L1", "AI": 40, "AJ": 45}])
    assert (record.delivered, record.unsuccessful, record.pending) == (40, 5, 5)
    with pytest.raises(ValueError):
        mark_code([record], "L1", "NOT-A-CODE", "success")


def test_fleet_match_logs_sheet_driver(caplog):
    rows = [{"A": "L1", "F": "Ana Souza", "AI": 40, "AJ": 40}]
    with caplog.at_level(logging.DEBUG, logger="delivery_tracker"):
        reconcile_fleet([_fleet_record()], rows)
    assert "load L1: record driver=Ana sheet driver=Ana Souza" in caplog.text
