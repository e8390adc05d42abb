"""File-based ranking pipeline."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pendulum
import structlog
from pydantic import ValidationError

from . import __version__
from .core import RankingAggregator, RankingResult
from .schemas import EngineContext, RankingOptions, StaffingRequest


class CandidateLoadError(ValueError):
    """Raised when candidate loading encounters unreadable records.

    ``lines`` holds the source line number of each record in ``partial``.
    """

    def __init__(
        self,
        errors: list[str],
        partial: list[dict[str, Any]],
        lines: list[int] | None = None,
    ):
        super().__init__("Candidate loading failed")
        self.errors = errors
        self.partial = partial
        self.lines = lines if lines is not None else list(range(1, len(partial) + 1))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Candidate loading failed: {self.errors}"


class CandidateLoader:
    """Load raw candidate records from JSON lines.

    Records are returned unvalidated so that per-candidate validation errors
    surface in the ranking result with the candidate's id.
    """

    def load(self, path: Path) -> list[dict[str, Any]]:
        return self.load_numbered(path)[0]

    def load_numbered(self, path: Path) -> tuple[list[dict[str, Any]], list[int]]:
        """Return the records together with the file line each came from."""
        candidates: list[dict[str, Any]] = []
        lines: list[int] = []
        errors: list[str] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                if not isinstance(record, dict):
                    errors.append(f"line {idx}: expected a JSON object")
                    continue
                candidates.append(record.get("person", record))
                lines.append(idx)
        if errors:
            raise CandidateLoadError(errors, candidates, lines)
        return candidates, lines


class RequestLoader:
    """Load a staffing request document."""

    def load(self, path: Path) -> StaffingRequest:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid request JSON: {exc}") from exc
        try:
            return StaffingRequest.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid staffing request: {exc}") from exc


class OutputWriter:
    """Persist ranking envelopes."""

    def write(self, path: Path, payload: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict[str, Any]) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")


class RankingPipeline:
    """Load inputs, rank, and write the response envelope."""

    def __init__(
        self,
        *,
        aggregator: RankingAggregator,
        candidate_loader: CandidateLoader | None = None,
        request_loader: RequestLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._candidates = candidate_loader or CandidateLoader()
        self._requests = request_loader or RequestLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        request_path: Path,
        candidates_path: Path,
        output_path: Path,
        context: EngineContext,
        options: RankingOptions | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> RankingResult:
        request = self._requests.load(request_path)
        load_errors: list[str] = []
        try:
            candidates, lines = self._candidates.load_numbered(candidates_path)
        except CandidateLoadError as exc:
            candidates, lines = exc.partial, exc.lines
            load_errors.extend(exc.errors)
            self._logger.warning("candidates.partial_load", errors=exc.errors)

        result = self._aggregator.rank(request, candidates, options, context=context)

        for rank, fit in enumerate(result.results, start=1):
            rate_total = fit.rate_preview.total if fit.rate_preview else None
            self._logger.info(
                "ranking.result",
                tenant_id=context.tenant_id,
                request_id=request.id,
                person_id=fit.person_id,
                rank=rank,
                fit_score=fit.fit_score,
                confidence=fit.confidence,
                disqualified=fit.disqualified,
                rate_total=rate_total,
            )
            if audit_logger:
                audit_logger.append(
                    {
                        "tenant_id": context.tenant_id,
                        "request_id": request.id,
                        "person_id": fit.person_id,
                        "rank": rank,
                        "fit_score": fit.fit_score,
                        "confidence": fit.confidence,
                        "disqualified": fit.disqualified,
                        "reasoning": [
                            reason.model_dump(mode="json") for reason in fit.reasoning
                        ],
                        "rate_total": rate_total,
                        "rate_computed_total": (
                            fit.rate_preview.computed_total if fit.rate_preview else None
                        ),
                        "rate_override_source": (
                            fit.rate_preview.override_source if fit.rate_preview else None
                        ),
                    }
                )

        envelope = result.to_envelope()
        # Ranking errors index into the loaded pool; map them back to file lines.
        for entry in envelope["meta"]["errors"]:
            entry["line"] = lines[entry["index"]]
        envelope["meta"].update(
            {
                "request_id": request.id,
                "load_errors": load_errors,
                "timestamp": pendulum.now("UTC").to_iso8601_string(),
                "app_version": __version__,
            }
        )
        if load_errors:
            envelope["status"] = "partial"

        self._writer.write(output_path, envelope)
        return result
