"""
검증 가능한 정렬(sort)과 SortGenerator 테스트.
"""

import pytest

from zkgadgets.config import CircuitConfig
from zkgadgets.errors import CircuitBuildError, UnsatisfiedConstraintError
from zkgadgets.gadgets.permutation_check import SortGenerator, sort
from zkgadgets.iop.generator import GENERATOR_REGISTRY, deserialize_generator
from zkgadgets.iop.target import Target
from zkgadgets.iop.witness import GeneratedValues, PartialWitness, PartitionWitness
from zkgadgets.plonk.circuit_builder import CircuitBuilder
from zkgadgets.plonk.field import MAX_SAFE_BITS
from zkgadgets.plonk.prover import prove
from zkgadgets.plonk.verifier import verify

N = 8
K = 3
BITS = 16


def build_sort(n, bit_width=BITS):
    b = CircuitBuilder(CircuitConfig.testing_config())
    original = b.add_virtual_targets(n)
    sorted_seq = sort(b, original, bit_width)
    b.register_public_inputs(sorted_seq)
    return b.build(), original


def sorted_outputs(circuit, values):
    data, original = circuit
    pw = PartialWitness()
    pw.set_target_arr(original, values)
    proof = prove(data, pw)
    assert verify(proof, data)
    return proof.public_input_ints()


@pytest.fixture(scope="module")
def sort_circuit():
    return build_sort(N)


class TestSort:
    def test_rotated_input(self, sort_circuit):
        values = [(i + K) % N for i in range(N)]
        assert sorted_outputs(sort_circuit, values) == sorted(values, reverse=True)

    def test_duplicates(self, sort_circuit):
        values = [3, 1, 4, 1, 5, 9, 2, 6]
        assert sorted_outputs(sort_circuit, values) == [9, 6, 5, 4, 3, 2, 1, 1]

    def test_idempotent(self, sort_circuit):
        values = [9, 6, 5, 4, 3, 2, 1, 1]
        assert sorted_outputs(sort_circuit, values) == values

    def test_width_boundary(self, sort_circuit):
        values = [0, (1 << BITS) - 1, 7, 0, 0, 1, 2, (1 << BITS) - 1]
        assert sorted_outputs(sort_circuit, values) == sorted(values, reverse=True)

    def test_value_beyond_width_not_provable(self, sort_circuit):
        values = [1 << BITS, 0, 0, 0, 0, 0, 0, 0]
        data, original = sort_circuit
        pw = PartialWitness()
        pw.set_target_arr(original, values)
        with pytest.raises(UnsatisfiedConstraintError):
            prove(data, pw)

    def test_single_element(self):
        assert sorted_outputs(build_sort(1), [42]) == [42]

    def test_empty(self):
        assert sorted_outputs(build_sort(0), []) == []

    def test_zero_width(self):
        assert sorted_outputs(build_sort(3, bit_width=0), [0, 0, 0]) == [0, 0, 0]

    def test_registers_one_generator(self):
        b = CircuitBuilder(CircuitConfig.testing_config())
        sort(b, b.add_virtual_targets(4), BITS)
        assert sum(isinstance(g, SortGenerator) for g in b.generators) == 1

    @pytest.mark.parametrize("width", [-1, MAX_SAFE_BITS + 1])
    def test_bad_width(self, width):
        b = CircuitBuilder(CircuitConfig.testing_config())
        with pytest.raises(CircuitBuildError):
            sort(b, b.add_virtual_targets(2), width)

    def test_unallocated_input(self):
        b = CircuitBuilder(CircuitConfig.testing_config())
        with pytest.raises(CircuitBuildError):
            sort(b, [Target(0)], BITS)


class TestSortGenerator:
    def _generator(self):
        return SortGenerator([Target(0), Target(1), Target(2)],
                             [Target(3), Target(4), Target(5)], BITS)

    def test_dependencies_and_outputs(self):
        g = self._generator()
        assert g.dependencies() == [Target(0), Target(1), Target(2)]
        assert g.outputs() == [Target(3), Target(4), Target(5)]

    def test_run_once_sorts_descending(self):
        g = self._generator()
        w = PartitionWitness(6)
        w.set_target(Target(0), 2)
        w.set_target(Target(1), 7)
        w.set_target(Target(2), 5)
        buf = GeneratedValues()
        g.run_once(w, buf)
        assert [(t.index, int(v)) for t, v in buf] == [(3, 7), (4, 5), (5, 2)]

    def test_serialize_has_no_witness_data(self):
        assert self._generator().serialize() == {
            "original": [0, 1, 2],
            "sorted": [3, 4, 5],
            "bit_width": BITS,
        }

    def test_restore_through_registry(self):
        g = self._generator()
        assert GENERATOR_REGISTRY["SortGenerator"] is SortGenerator
        restored = deserialize_generator({"id": g.id(), "data": g.serialize()})
        assert isinstance(restored, SortGenerator)
        assert restored == g

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            SortGenerator([Target(0)], [], BITS)
