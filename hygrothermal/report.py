"""Generate HTML reports with charts and monthly result tables."""

from __future__ import annotations

import base64
import html
from io import BytesIO
from typing import Iterable, List

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from .dataclasses import AnalysisResult, MonthlyAnalysis, SurfaceCondensationMonth  # noqa: E402


def _encode_fig(fig) -> str:
    buf = BytesIO()
    fig.savefig(buf, format="png", bbox_inches="tight")
    plt.close(fig)
    return base64.b64encode(buf.getvalue()).decode("ascii")


def _plot_temperature(xs: Iterable[float], ys: Iterable[float]) -> str:
    fig, ax = plt.subplots()
    ax.plot(list(xs), list(ys), marker="o")
    ax.set_xlabel("Position from internal surface [mm]")
    ax.set_ylabel("θ [°C]")
    ax.set_title("Temperature profile")
    return _encode_fig(fig)


def _plot_glaser(xs: Iterable[float], p: Iterable[float], ps: Iterable[float]) -> str:
    xs = list(xs)
    p = list(p)
    ps = list(ps)
    fig, ax = plt.subplots()
    ax.plot(xs, p, marker="o", label="p")
    ax.plot(xs, ps, marker="s", label="p_sat")
    ax.fill_between(xs, p, ps, where=[a > b for a, b in zip(p, ps)], alpha=0.3, color="tab:red")
    ax.set_xlabel("Position from internal surface [mm]")
    ax.set_ylabel("p [Pa]")
    ax.set_title("Glaser diagram")
    ax.legend()
    return _encode_fig(fig)


def _plot_accumulation(monthly: List[MonthlyAnalysis]) -> str:
    labels = [m.month[:3] for m in monthly]
    fig, ax = plt.subplots()
    ax.bar(labels, [m.condensation for m in monthly], label="Condensation")
    ax.bar(labels, [-m.evaporation for m in monthly], label="Evaporation")
    ax.plot(labels, [m.cumulative for m in monthly], color="black", marker="o", label="Cumulative")
    ax.set_ylabel("Moisture [g/m²]")
    ax.set_title("Monthly moisture accumulation")
    ax.legend()
    return _encode_fig(fig)


def _monthly_table(monthly: Iterable[MonthlyAnalysis]) -> str:
    trs = "".join(
        f"<tr><td>{html.escape(m.month)}</td><td>{m.condensation:.2f}</td>"
        f"<td>{m.evaporation:.2f}</td><td>{m.net:.2f}</td><td>{m.cumulative:.2f}</td></tr>"
        for m in monthly
    )
    return (
        "<table id='monthly'>"
        "<tr><th>Month</th><th>Condensation (g/m²)</th><th>Evaporation (g/m²)</th>"
        "<th>Net (g/m²)</th><th>Cumulative (g/m²)</th></tr>"
        f"{trs}</table>"
    )


def _surface_table(surface: Iterable[SurfaceCondensationMonth]) -> str:
    trs = "".join(
        f"<tr><td>{html.escape(s.month)}</td><td>{s.theta_e:.1f}</td><td>{s.phi_e:.0f}</td>"
        f"<td>{s.theta_i:.1f}</td><td>{s.phi_i:.0f}</td><td>{s.min_temperature_factor:.3f}</td>"
        f"<td>{s.min_tsi:.1f}</td><td>{s.tsi:.1f}</td><td>{'Pass' if s.passes else 'Fail'}</td></tr>"
        for s in surface
    )
    return (
        "<table id='surface'>"
        "<tr><th>Month</th><th>θe (°C)</th><th>φe (%)</th><th>θi (°C)</th><th>φi (%)</th>"
        "<th>fRsi,min</th><th>min θsi (°C)</th><th>θsi (°C)</th><th>Result</th></tr>"
        f"{trs}</table>"
    )


def report(result: AnalysisResult) -> str:
    """Generate an HTML report from an analysis result with charts and tables."""

    c = result.construction
    lis = [
        f"<li>Construction: {html.escape(c.name or 'Unnamed')} ({c.element_type}, "
        f"{len(c.layers)} layers, {c.total_thickness:g} mm)</li>",
        f"<li>U-value: {result.u_value:.3f} W/m²K</li>",
        f"<li>U-value without bridging: {result.u_value_without_bridging:.3f} W/m²K</li>",
        f"<li>Result: {result.overall_result.upper()}</li>",
    ]
    if result.failure_reason:
        lis.append(f"<li>Reason: {html.escape(result.failure_reason)}</li>")
    for check in result.checks:
        lis.append(
            f"<li>{html.escape(check.name)}: {'Pass' if check.passed else 'Fail'}"
            f" ({html.escape(check.detail)})</li>"
        )

    temp_chart = _plot_temperature(
        [p.position for p in result.temperature_gradient],
        [p.temperature for p in result.temperature_gradient],
    )
    glaser_chart = _plot_glaser(
        [p.position for p in result.vapour_pressure_gradient],
        [p.pressure for p in result.vapour_pressure_gradient],
        [p.saturation for p in result.vapour_pressure_gradient],
    )
    monthly_chart = _plot_accumulation(list(result.monthly))

    parts = [
        "<h2>Condensation Risk Report</h2>",
        "<ul>",
        *lis,
        "</ul>",
        f"<h3>Profiles ({html.escape(result.design_month)})</h3>",
        f"<img src='data:image/png;base64,{temp_chart}' alt='Temperature chart' />",
        f"<img src='data:image/png;base64,{glaser_chart}' alt='Glaser diagram' />",
        "<h3>Monthly accumulation</h3>",
        f"<img src='data:image/png;base64,{monthly_chart}' alt='Monthly accumulation chart' />",
        _monthly_table(result.monthly),
        "<h3>Surface condensation</h3>",
        _surface_table(result.surface_condensation),
    ]
    return "\n".join(parts)
