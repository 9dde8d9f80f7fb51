import json

import pytest
from pydantic import ValidationError

from analysis.decisions import generate_verdict
from analysis.evidence import (
    dump_evidence_pack,
    load_monte_carlo_result,
    load_verdict,
    to_evidence_pack,
)


@pytest.fixture
def verdict(small_result):
    return generate_verdict(small_result)


def test_pack_mirrors_the_data_model(small_result, verdict):
    pack = to_evidence_pack(small_result, verdict)
    assert set(pack) == {"result", "verdict"}
    assert pack["result"]["arr_percentiles"]["p50"] == small_result.arr_percentiles.p50
    assert len(pack["result"]["all_simulations"]) == small_result.iterations
    assert pack["verdict"]["overall_rating"] == verdict.overall_rating.value
    assert pack["result"]["config"]["iterations"] == 60


def test_json_round_trip_is_lossless(small_result, verdict):
    text = dump_evidence_pack(small_result, verdict)
    assert json.loads(text) == to_evidence_pack(small_result, verdict)
    assert load_monte_carlo_result(text) == small_result
    assert load_verdict(text) == verdict


def test_result_only_pack(small_result):
    pack = to_evidence_pack(small_result)
    assert "verdict" not in pack
    assert load_monte_carlo_result(pack["result"]) == small_result


def test_pack_without_trajectories(small_result):
    pack = to_evidence_pack(small_result, include_trajectories=False)
    sims = pack["result"]["all_simulations"]
    assert len(sims) == small_result.iterations
    assert all(s["monthly_snapshots"] == [] for s in sims)
    assert len(pack["result"]["best_case"]["monthly_snapshots"]) == 12


def test_malformed_payload_is_rejected():
    with pytest.raises(ValidationError):
        load_monte_carlo_result({"result": {"iterations": "lots"}})
