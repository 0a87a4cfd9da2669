"""
회로 내부 챌린저 테스트: 회로 안에서 계산한 챌린지가 회로 밖 계산과 같은지 확인한다.
"""

import pytest

from zkgadgets.config import CircuitConfig
from zkgadgets.iop.challenger import (
    Challenger,
    RecursiveChallenger,
    mimc_permutation,
    mimc_round_constant,
    mimc_round_constants,
)
from zkgadgets.iop.witness import PartialWitness
from zkgadgets.plonk.circuit_builder import CircuitBuilder
from zkgadgets.plonk.field import FR
from zkgadgets.plonk.prover import prove
from zkgadgets.plonk.verifier import verify

ROUNDS = CircuitConfig.testing_config().challenge_rounds


def in_circuit_challenges(inputs, count):
    b = CircuitBuilder(CircuitConfig.testing_config())
    targets = b.add_virtual_targets(len(inputs))
    challenger = RecursiveChallenger(b)
    challenger.observe_elements(targets)
    b.register_public_inputs(challenger.get_challenges(count))
    data = b.build()
    pw = PartialWitness()
    pw.set_target_arr(targets, inputs)
    proof = prove(data, pw)
    assert verify(proof, data)
    return proof.public_inputs


class TestPermutation:
    def test_first_constant_is_zero(self):
        assert mimc_round_constant(0) == FR(0)

    def test_constants_deterministic_and_distinct(self):
        constants = mimc_round_constants(8)
        assert constants == mimc_round_constants(8)
        assert len({int(c) for c in constants}) == 8

    def test_single_round_is_fifth_power(self):
        assert mimc_permutation(2, 1) == FR(32)

    def test_injective_on_samples(self):
        outputs = {int(mimc_permutation(v, ROUNDS)) for v in range(20)}
        assert len(outputs) == 20


class TestNativeChallenger:
    def test_deterministic(self):
        c1, c2 = Challenger(ROUNDS), Challenger(ROUNDS)
        c1.observe_elements([3, 7])
        c2.observe_elements([3, 7])
        assert c1.get_challenge() == c2.get_challenge()

    def test_order_matters(self):
        c1, c2 = Challenger(ROUNDS), Challenger(ROUNDS)
        c1.observe_elements([3, 7])
        c2.observe_elements([7, 3])
        assert c1.get_challenge() != c2.get_challenge()

    def test_successive_challenges_differ(self):
        c = Challenger(ROUNDS)
        c.observe_element(5)
        first, second = c.get_challenges(2)
        assert first != second

    def test_no_observation(self):
        assert Challenger(ROUNDS).get_challenge() == mimc_permutation(0, ROUNDS)


class TestRecursiveChallenger:
    @pytest.mark.parametrize("inputs", [[3, 7], [0], [1, 2, 3, 4, 5]])
    def test_matches_native(self, inputs):
        native = Challenger(ROUNDS)
        native.observe_elements(inputs)
        assert in_circuit_challenges(inputs, 2) == native.get_challenges(2)

    def test_matches_native_without_observation(self):
        assert in_circuit_challenges([], 1) == [Challenger(ROUNDS).get_challenge()]

    def test_gate_cost_per_round(self):
        b = CircuitBuilder(CircuitConfig.testing_config())
        x = b.add_virtual_target()
        challenger = RecursiveChallenger(b)
        challenger.observe_element(x)
        challenger.get_challenge()
        assert b.gate_kinds.count("challenger") == 3 * ROUNDS
