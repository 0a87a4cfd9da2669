"""
기반 모듈 테스트: field.py, config.py, target.py, transcript.py
"""
import pytest

from zkgadgets.config import CircuitConfig
from zkgadgets.iop.target import BoolTarget, Target, unwrap
from zkgadgets.plonk.field import (
    FR, CURVE_ORDER, FIELD_BITS, MAX_SAFE_BITS,
    get_root_of_unity, get_roots_of_unity, neg_one, to_canonical, to_field,
)
from zkgadgets.plonk.transcript import Transcript


# =====================================================================
# FR
# =====================================================================

class TestFR:
    def test_bit_capacity(self):
        """2^FIELD_BITS ≤ p < 2^(FIELD_BITS+1)."""
        assert FIELD_BITS == 253
        assert (1 << FIELD_BITS) <= CURVE_ORDER < (1 << (FIELD_BITS + 1))
        assert MAX_SAFE_BITS == FIELD_BITS - 1

    def test_wrapped_difference_leaves_safe_range(self):
        """MAX_SAFE_BITS 폭에서 음수 차이는 범위 밖으로 떨어진다."""
        w = MAX_SAFE_BITS
        worst = to_canonical(FR(0) - FR((1 << w) - 1))
        assert worst >= (1 << w)

    def test_to_field(self):
        assert to_field(5) == FR(5)
        x = FR(7)
        assert to_field(x) is x

    def test_to_canonical_negative(self):
        assert to_canonical(FR(-1)) == CURVE_ORDER - 1
        assert to_canonical(neg_one()) == CURVE_ORDER - 1

    def test_root_of_unity(self):
        omega = get_root_of_unity(8)
        assert omega ** 8 == FR(1)
        assert omega ** 4 != FR(1)

    def test_roots_of_unity_distinct(self):
        roots = get_roots_of_unity(16)
        assert len({int(r) for r in roots}) == 16

    def test_root_of_unity_rejects_non_power_of_two(self):
        with pytest.raises(ValueError):
            get_root_of_unity(6)


# =====================================================================
# CircuitConfig
# =====================================================================

class TestCircuitConfig:
    def test_standard(self):
        config = CircuitConfig.standard_config()
        assert config.challenge_rounds == 110
        assert config.num_challenges == 1

    def test_testing_is_lighter(self):
        assert CircuitConfig.testing_config().challenge_rounds < 110

    def test_rejects_zero_rounds(self):
        with pytest.raises(ValueError):
            CircuitConfig(challenge_rounds=0)

    def test_rejects_zero_challenges(self):
        with pytest.raises(ValueError):
            CircuitConfig(num_challenges=0)

    def test_dict_round_trip(self):
        config = CircuitConfig(challenge_rounds=7, num_challenges=3)
        assert CircuitConfig.from_dict(config.to_dict()) == config


# =====================================================================
# Target
# =====================================================================

class TestTarget:
    def test_equality_by_index(self):
        assert Target(3) == Target(3)
        assert Target(3) != Target(4)
        assert len({Target(1), Target(1), Target(2)}) == 2

    def test_bool_target_unwrap(self):
        t = Target(5)
        assert unwrap(BoolTarget(t)) == t
        assert unwrap(t) is t

    def test_bool_target_not_equal_to_target(self):
        assert BoolTarget(Target(1)) != Target(1)


# =====================================================================
# Transcript
# =====================================================================

class TestTranscript:
    def test_deterministic(self):
        t1, t2 = Transcript(), Transcript()
        t1.append_scalars(b"a", [FR(1), FR(2)])
        t2.append_scalars(b"a", [FR(1), FR(2)])
        assert t1.challenge_scalar(b"beta") == t2.challenge_scalar(b"beta")

    def test_sensitive_to_values(self):
        t1, t2 = Transcript(), Transcript()
        t1.append_scalars(b"a", [FR(1), FR(2)])
        t2.append_scalars(b"a", [FR(1), FR(3)])
        assert t1.challenge_scalar(b"beta") != t2.challenge_scalar(b"beta")

    def test_chained_challenges_differ(self):
        t = Transcript()
        t.append_scalar(b"x", FR(42))
        beta = t.challenge_scalar(b"beta")
        gamma = t.challenge_scalar(b"gamma")
        assert beta != gamma
