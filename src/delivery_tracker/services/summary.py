from __future__ import annotations

from ..models.processing_result import RunResult

"""SUMMARY line rendering.

Format:
SUMMARY files={ok}/{total} records={n} orders={n} delivered={n} pending={n}
unsuccessful={n} delivery_pct={n} elapsed_sec={s}
"""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from delivery_tracker.models.processing_result import DeliveryTotals
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> totals = DeliveryTotals(records=2, total_orders=120, delivered=37,
        ...                         pending=80, unsuccessful=3, delivery_percentage=31)
        >>> render_summary_line(RunResult(1, 0, totals, t, t, 2.0))
        'SUMMARY files=1/1 records=2 orders=120 delivered=37 pending=80 unsuccessful=3 delivery_pct=31 elapsed_sec=2'
    """
    t = result.totals
    return (
        f"SUMMARY files={result.success_files}/{result.total_files} "
        f"records={t.records} "
        f"orders={t.total_orders} "
        f"delivered={t.delivered} "
        f"pending={t.pending} "
        f"unsuccessful={t.unsuccessful} "
        f"delivery_pct={t.delivery_percentage} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
