"""
Evidence pack — the JSON mirror of a run, for report and memo layers.

The pack is a structural copy of MonteCarloResult (and optionally Verdict):
same field names, full-precision floats, enums as their string values. No
display rounding happens here; formatting is the consumer's job.

    {
      "result":  {... MonteCarloResult ...},
      "verdict": {... Verdict ...}          # only when a verdict is passed
    }

Serialization and parsing go through pydantic TypeAdapters built over the
dataclasses themselves, so the schema never drifts from the data model.
"""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import TypeAdapter

from core.schema import MonteCarloResult

from .decisions import Verdict

_RESULT_ADAPTER = TypeAdapter(MonteCarloResult)
_VERDICT_ADAPTER = TypeAdapter(Verdict)

Payload = Union[str, bytes, Mapping[str, Any]]


def _without_trajectories(result: MonteCarloResult) -> MonteCarloResult:
    """Keep every simulation's summary but drop the month-by-month paths.
    The representative scenarios keep their paths."""
    return replace(
        result,
        all_simulations=tuple(replace(s, monthly_snapshots=()) for s in result.all_simulations),
    )


def to_evidence_pack(
    result: MonteCarloResult,
    verdict: Optional[Verdict] = None,
    *,
    include_trajectories: bool = True,
) -> Dict[str, Any]:
    """JSON-ready dict. include_trajectories=False strips snapshots from all_simulations."""
    if not include_trajectories:
        result = _without_trajectories(result)
    pack: Dict[str, Any] = {"result": _RESULT_ADAPTER.dump_python(result, mode="json")}
    if verdict is not None:
        pack["verdict"] = _VERDICT_ADAPTER.dump_python(verdict, mode="json")
    return pack


def dump_evidence_pack(
    result: MonteCarloResult,
    verdict: Optional[Verdict] = None,
    *,
    include_trajectories: bool = True,
    indent: Optional[int] = None,
) -> str:
    pack = to_evidence_pack(result, verdict, include_trajectories=include_trajectories)
    return json.dumps(pack, indent=indent)


def _as_mapping(payload: Payload) -> Mapping[str, Any]:
    if isinstance(payload, (str, bytes)):
        return json.loads(payload)
    return payload


def load_monte_carlo_result(payload: Payload) -> MonteCarloResult:
    """
    Rebuild a MonteCarloResult from a pack (or from its bare "result" object).

    Raises pydantic.ValidationError when the payload does not match the model.
    """
    data = _as_mapping(payload)
    return _RESULT_ADAPTER.validate_python(data.get("result", data))


def load_verdict(payload: Payload) -> Verdict:
    data = _as_mapping(payload)
    return _VERDICT_ADAPTER.validate_python(data.get("verdict", data))
