"""
정렬 기반 필터 테스트: keys = [2, 0, 2, 1, 2], query = 2 시나리오.
"""

import pytest

from zkgadgets.config import CircuitConfig
from zkgadgets.errors import CircuitBuildError
from zkgadgets.gadgets.filter import filter_matches
from zkgadgets.iop.witness import PartialWitness
from zkgadgets.plonk.circuit_builder import CircuitBuilder
from zkgadgets.plonk.prover import prove
from zkgadgets.plonk.verifier import verify

N = 5
INDEX_BITS = 7
VALUE_BITS = 16


@pytest.fixture(scope="module")
def filter_circuit():
    """filter_matches 회로. 출력: [num_matches, matches..., keys..., vals...]"""
    b = CircuitBuilder(CircuitConfig.testing_config())
    query = b.add_virtual_target()
    keys = b.add_virtual_targets(N)
    vals = b.add_virtual_targets(N)
    result = filter_matches(b, keys, vals, query, INDEX_BITS, VALUE_BITS)
    b.register_public_input(result.num_matches)
    b.register_public_inputs([m.target for m in result.matches])
    b.register_public_inputs(result.keys)
    b.register_public_inputs(result.vals)
    return b.build(), query, keys, vals


def run_filter(circuit, query_val, key_vals, val_vals):
    data, query, keys, vals = circuit
    pw = PartialWitness()
    pw.set_target(query, query_val)
    pw.set_target_arr(keys, key_vals)
    pw.set_target_arr(vals, val_vals)
    proof = prove(data, pw)
    assert verify(proof, data)
    out = proof.public_input_ints()
    return {
        "num_matches": out[0],
        "matches": out[1:1 + N],
        "keys": out[1 + N:1 + 2 * N],
        "vals": out[1 + 2 * N:],
    }


class TestFilterScenario:
    @pytest.fixture(scope="class")
    def result(self, filter_circuit):
        return run_filter(filter_circuit, 2, [2, 0, 2, 1, 2], [i + N for i in range(N)])

    def test_num_matches(self, result):
        assert result["num_matches"] == 3

    def test_matches_first(self, result):
        assert result["matches"] == [1, 1, 1, 0, 0]

    def test_keys(self, result):
        assert result["keys"] == [2, 2, 2, 0, 0]

    def test_vals_keep_original_order(self, result):
        assert result["vals"] == [5, 7, 9, 0, 0]


class TestFilterReuse:
    def test_no_matches(self, filter_circuit):
        out = run_filter(filter_circuit, 7, [2, 0, 2, 1, 2], [10, 11, 12, 13, 14])
        assert out["num_matches"] == 0
        assert out["keys"] == [0] * N
        assert out["vals"] == [0] * N

    def test_all_match(self, filter_circuit):
        out = run_filter(filter_circuit, 4, [4] * N, [50, 40, 30, 20, 10])
        assert out["num_matches"] == N
        assert out["vals"] == [50, 40, 30, 20, 10]

    def test_zero_values_still_counted(self, filter_circuit):
        out = run_filter(filter_circuit, 1, [0, 1, 0, 0, 1], [0, 0, 0, 0, 65535])
        assert out["num_matches"] == 2
        assert out["matches"] == [1, 1, 0, 0, 0]
        assert out["vals"] == [0, 65535, 0, 0, 0]


class TestFilterErrors:
    def test_length_mismatch(self):
        b = CircuitBuilder(CircuitConfig.testing_config())
        query = b.add_virtual_target()
        with pytest.raises(CircuitBuildError):
            filter_matches(b, b.add_virtual_targets(3), b.add_virtual_targets(2),
                           query, INDEX_BITS, VALUE_BITS)

    def test_index_bits_too_small(self):
        b = CircuitBuilder(CircuitConfig.testing_config())
        query = b.add_virtual_target()
        with pytest.raises(CircuitBuildError):
            filter_matches(b, b.add_virtual_targets(4), b.add_virtual_targets(4),
                           query, 2, VALUE_BITS)

    def test_key_too_wide(self):
        b = CircuitBuilder(CircuitConfig.testing_config())
        query = b.add_virtual_target()
        with pytest.raises(CircuitBuildError):
            filter_matches(b, b.add_virtual_targets(2), b.add_virtual_targets(2),
                           query, 8, 250)
