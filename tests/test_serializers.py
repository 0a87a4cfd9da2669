"""
직렬화 테스트: JSON으로 저장한 회로를 복원해 새 witness로 다시 증명한다.
"""

import json

import pytest

from zkgadgets.config import CircuitConfig
from zkgadgets.errors import SerializationError
from zkgadgets.gadgets.permutation_check import SortGenerator, sort
from zkgadgets.iop.generator import ArithmeticGenerator
from zkgadgets.iop.target import Target
from zkgadgets.iop.witness import PartialWitness
from zkgadgets.plonk.circuit_builder import CircuitBuilder
from zkgadgets.plonk.field import FR
from zkgadgets.plonk.prover import prove
from zkgadgets.plonk.verifier import verify
from zkgadgets.serializers import (
    deserialize_circuit_data,
    deserialize_fr,
    deserialize_gate,
    deserialize_generator,
    deserialize_proof,
    serialize_circuit_data,
    serialize_fr,
    serialize_generator,
    serialize_proof,
)

N = 4


@pytest.fixture(scope="module")
def sort_circuit():
    b = CircuitBuilder(CircuitConfig.testing_config())
    original = b.add_virtual_targets(N)
    b.register_public_inputs(sort(b, original, 8))
    return b.build(), original


@pytest.fixture(scope="module")
def restored(sort_circuit):
    data, _ = sort_circuit
    text = json.dumps(serialize_circuit_data(data))
    return deserialize_circuit_data(json.loads(text))


def prove_sorted(data, original, values):
    pw = PartialWitness()
    pw.set_target_arr(original, values)
    return prove(data, pw)


class TestScalars:
    def test_fr_round_trip(self):
        assert serialize_fr(FR(-1)) == str(FR(-1).n)
        assert deserialize_fr(serialize_fr(FR(12345))) == FR(12345)

    def test_bad_gate(self):
        with pytest.raises(SerializationError):
            deserialize_gate(["1", "2"])


class TestGenerators:
    def test_sort_generator(self):
        g = SortGenerator([Target(0), Target(1)], [Target(2), Target(3)], 8)
        data = serialize_generator(g)
        assert data == {"id": "SortGenerator",
                        "data": {"original": [0, 1], "sorted": [2, 3], "bit_width": 8}}
        assert deserialize_generator(data) == g

    def test_arithmetic_generator_keeps_selectors(self):
        g = ArithmeticGenerator(Target(0), None, Target(1), q_l=-1, q_c=1)
        assert deserialize_generator(json.loads(json.dumps(serialize_generator(g)))) == g

    def test_unknown_id(self):
        with pytest.raises(SerializationError):
            deserialize_generator({"id": "NoSuchGenerator", "data": {}})

    def test_missing_fields(self):
        with pytest.raises(SerializationError):
            deserialize_generator({"id": "SortGenerator", "data": {"original": []}})
        with pytest.raises(SerializationError):
            deserialize_generator({"data": {}})


class TestCircuitData:
    def test_structure_preserved(self, sort_circuit, restored):
        data, _ = sort_circuit
        assert restored.n == data.n
        assert restored.num_targets == data.num_targets
        assert restored.gates == data.gates
        assert restored.wires == data.wires
        assert restored.gate_kinds == data.gate_kinds
        assert restored.public_inputs == data.public_inputs
        assert restored.sigma == data.sigma
        assert restored.config == data.config
        assert restored.generators == data.generators

    @pytest.mark.parametrize("values", [[3, 1, 2, 0], [255, 255, 0, 7]])
    def test_restored_circuit_proves_fresh_witness(self, sort_circuit, restored, values):
        data, original = sort_circuit
        proof = prove_sorted(restored, original, values)
        assert proof.public_input_ints() == sorted(values, reverse=True)
        assert verify(proof, restored)
        assert verify(proof, data)

    def test_missing_field(self, sort_circuit):
        data, _ = sort_circuit
        broken = serialize_circuit_data(data)
        del broken["gates"]
        with pytest.raises(SerializationError):
            deserialize_circuit_data(broken)

    def test_row_count_mismatch(self, sort_circuit):
        data, _ = sort_circuit
        broken = serialize_circuit_data(data)
        broken["n"] = data.n * 2
        with pytest.raises(SerializationError):
            deserialize_circuit_data(broken)


class TestProof:
    def test_round_trip(self, sort_circuit):
        data, original = sort_circuit
        proof = prove_sorted(data, original, [1, 2, 3, 4])
        text = json.dumps(serialize_proof(proof))
        loaded = deserialize_proof(json.loads(text))
        assert loaded == proof
        assert verify(loaded, data)

    def test_malformed(self):
        with pytest.raises(SerializationError):
            deserialize_proof({"public_inputs": ["x"], "a_vals": [], "b_vals": [], "c_vals": []})
