#!/usr/bin/env python3
"""Sample export generator for manual runs and performance checks.

Writes two workbooks in the layouts the tracker reads:
- <prefix>-rotas.xlsx: a route export (letter-keyed; "Agente:" / "Veículo:" /
  "Início:" marker rows, then one row per stop with code in G, title in H)
- <prefix>-situacao.xlsx: a matching status sheet (header row, one row per
  observed stop, some stops observed twice with different timestamps)

Example:
  %(prog)s out/sample --drivers 40 --stops 25
  delivery-tracker import out/sample-rotas.xlsx
  delivery-tracker status out/sample-situacao.xlsx
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

VEHICLES = ["Van SP {n:02d}", "Fiorino RJ {n:02d}", "NESPRESSO {n:02d}", "Barueri {n:02d}"]
ORIGINS = ["CD Pari", "Base RJ", "Hub Nespresso", "CD Barueri"]
STATUSES = ["Sucesso", "Sem sucesso", "Em rota"]
STATUS_HEADER = [
    "Código",
    "Título",
    "Situação - Finalizado",
    "Horários (execução) - Concluído",
    "Agente",
    "Remetente",
]


def _stop_row(seq: int, code: str, title: str) -> list[Any]:
    return [str(seq), None, None, None, None, None, code, title]


def generate_route_rows(drivers: int, stops: int, seed: int = 42) -> tuple[list[list[Any]], list[list[Any]]]:
    """Build (route export rows, status sheet rows).

    Args:
        drivers: Number of drivers, one leg each
        stops: Stops per leg
        seed: Random seed for reproducible data

    Returns:
        Rows for the route export and rows (header first) for the status sheet
    """
    rng = np.random.default_rng(seed)
    route: list[list[Any]] = [["Relatório de rotas"]]
    status: list[list[Any]] = [list(STATUS_HEADER)]
    base = pd.Timestamp("2024-03-15 08:00")

    for d in range(drivers):
        driver = f"Entregador {d + 1:03d}"
        kind = int(rng.integers(0, len(VEHICLES)))
        route.append(["Agente:", driver])
        route.append(["Veículo:", VEHICLES[kind].format(n=d + 1)])
        route.append(["Início:", ORIGINS[kind]])

        for s in range(stops):
            code = f"SV{d + 1:03d}{s + 1:04d}"
            title = f"Pedido {d + 1}-{s + 1}"
            route.append(_stop_row(s + 1, code, title))

            observed = base + pd.Timedelta(minutes=int(rng.integers(0, 600)))
            outcome = STATUSES[int(rng.choice(3, p=[0.85, 0.1, 0.05]))]
            status.append([code, title, outcome, observed.strftime("%d/%m/%Y %H:%M"), driver, f"Loja {s % 7}"])
            if rng.random() < 0.05:
                # an older, superseded observation of the same stop
                earlier = observed - pd.Timedelta(hours=2)
                status.append([code, title, "Em rota", earlier.strftime("%d/%m/%Y %H:%M"), driver, f"Loja {s % 7}"])

    return route, status


def write_workbook(path: Path, rows: list[list[Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Sheet1", header=False, index=False)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic route export and matching status sheet",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("prefix", type=Path, help="Output path prefix (e.g. out/sample)")
    parser.add_argument("--drivers", type=int, default=40, help="Number of drivers (default: 40)")
    parser.add_argument("--stops", type=int, default=25, help="Stops per driver (default: 25)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.drivers <= 0 or args.stops <= 0:
        print("Error: --drivers and --stops must be positive", file=sys.stderr)
        return 1

    route, status = generate_route_rows(args.drivers, args.stops, args.seed)
    route_path = args.prefix.with_name(f"{args.prefix.name}-rotas.xlsx")
    status_path = args.prefix.with_name(f"{args.prefix.name}-situacao.xlsx")
    write_workbook(route_path, route)
    write_workbook(status_path, status)

    print(f"Created route export: {route_path} ({args.drivers} drivers x {args.stops} stops)")
    print(f"Created status sheet: {status_path} ({len(status) - 1} status rows)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
