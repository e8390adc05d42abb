"""Typer CLI entrypoint for candidate ranking and rate composition."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import create_container
from .core import InvalidInputError, compose as compose_rate
from .dates import parse_date
from .logging import configure_logging
from .pipeline import AuditLogger
from .schemas import (
    AbsolutePremium,
    EngineContext,
    PercentagePremium,
    RankingOptions,
    RateOverride,
    RatePolicy,
)
from .schemas.config import load_config

app = typer.Typer(help="Candidate fit ranking and rate composition CLI.")


@app.command()
def rank(
    request: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Staffing request JSON path."),
    candidates: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Candidates JSONL path."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    tenant: str = typer.Option(..., help="Tenant identifier recorded with the ranking."),
    as_of: Optional[str] = typer.Option(None, help="Reference date (YYYY-MM-DD) for recency and availability."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    sort_by: str = typer.Option("fitScore", help="fitScore, rate, availability or experience."),
    sort_order: Optional[str] = typer.Option(None, help="asc or desc; defaults depend on --sort-by."),
    max_results: Optional[int] = typer.Option(None, min=1, help="Truncate after sorting."),
    include_rate_preview: bool = typer.Option(False, help="Attach a composed rate to each result."),
    policy: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="Rate policy JSON path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    json_logs: bool = typer.Option(True, "--json-logs/--console-logs", help="Render log events as JSON or for a console."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Rank candidates for a staffing request."""
    settings: dict[str, Any] = {}
    if config:
        with config.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        try:
            settings = load_config(loaded).to_settings()
        except ValidationError as exc:
            raise typer.BadParameter(f"Invalid config: {exc}", param_name="config") from exc

    rate_policy = None
    if policy:
        try:
            rate_policy = RatePolicy.model_validate(json.loads(policy.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise typer.BadParameter(f"Invalid rate policy: {exc}", param_name="policy") from exc

    reference_date = None
    if as_of:
        reference_date = parse_date(as_of)
        if reference_date is None:
            raise typer.BadParameter(f"Unrecognized date {as_of!r}", param_name="as_of")

    try:
        options = RankingOptions(
            sort_by=sort_by,
            sort_order=sort_order,
            max_results=max_results,
            include_rate_preview=include_rate_preview,
            rate_policy=rate_policy,
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    configure_logging(log_level, json_output=json_logs)

    container = create_container(settings=settings)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    result = pipeline.run(
        request_path=request,
        candidates_path=candidates,
        output_path=output,
        context=EngineContext(tenant_id=tenant, as_of=reference_date),
        options=options,
        audit_logger=audit_logger,
    )
    typer.echo(
        f"Ranked {len(result.results)} of {result.total} candidates "
        f"({len(result.errors)} errors). Results saved to {output}."
    )


@app.command()
def compose(
    base: float = typer.Option(..., help="Base hourly rate."),
    abs_premium: List[str] = typer.Option([], "--abs", help="Flat premium as SOURCE=AMOUNT; repeatable."),
    pct_premium: List[str] = typer.Option([], "--pct", help="Percentage premium as SOURCE=PERCENT; repeatable."),
    scarcity: float = typer.Option(1.0, help="Scarcity multiplier."),
    currency: str = typer.Option("USD", help="Currency code."),
    override: Optional[float] = typer.Option(None, help="Manually approved final rate."),
    override_source: Optional[str] = typer.Option(None, help="Who or what approved the override."),
) -> None:
    """Compose a rate and print its breakdown as JSON."""
    if (override is None) != (override_source is None):
        raise typer.BadParameter("--override and --override-source must be given together")

    absolute = [AbsolutePremium(source=source, amount=value) for source, value in _parse_pairs(abs_premium, "--abs")]
    percentage = [
        PercentagePremium(source=source, percentage=value) for source, value in _parse_pairs(pct_premium, "--pct")
    ]
    manual = RateOverride(value=override, source=override_source) if override is not None else None

    try:
        breakdown = compose_rate(base, absolute, percentage, scarcity, manual, currency=currency)
    except InvalidInputError as exc:
        typer.echo(f"Invalid input: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    payload = breakdown.model_dump(mode="json", by_alias=True)
    payload["roundedTotal"] = str(breakdown.rounded_total())
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _parse_pairs(values: List[str], option: str) -> list[tuple[str, float]]:
    pairs: list[tuple[str, float]] = []
    for value in values:
        source, sep, amount = value.rpartition("=")
        if not sep or not source.strip():
            raise typer.BadParameter(f"Expected SOURCE=NUMBER, got {value!r}", param_name=option)
        try:
            pairs.append((source.strip(), float(amount)))
        except ValueError as exc:
            raise typer.BadParameter(f"Expected a number in {value!r}", param_name=option) from exc
    return pairs


def main() -> None:
    app()


if __name__ == "__main__":
    main()
