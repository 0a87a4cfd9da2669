"""
투명 증명 백엔드: Prover
=========================

witness를 채우고 모든 제약을 직접 검사한 뒤, 배선 열을 그대로 담은
Proof를 만든다. 다항식 커밋먼트나 블라인딩은 하지 않으므로
간결(succinct)하지도 영지식(zero-knowledge)이지도 않다.
회로와 gadget의 건전성을 끝까지 확인하기 위한 백엔드이다.

**증명 단계**:
  ── 1. witness 생성 ──
      PartialWitness + generator 실행 → PartitionWitness
  ── 2. 배선 열 구성 ──
      각 행의 (a, b, c) 칸 값 → a_vals, b_vals, c_vals
  ── 3. 게이트 검사 ──
      q_L·a + q_R·b + q_O·c + q_M·ab + q_C + PI = 0 (모든 행)
  ── 4. 복사 제약 검사 ──
      Transcript(공개 입력, 열) → β, γ → grand product 분자 == 분모

사용 예시:
    >>> proof = prove(data, pw)
    >>> verify(proof, data)
    True
"""

import logging

from zkgadgets.errors import UnsatisfiedConstraintError
from zkgadgets.iop.generator import generate_partial_witness
from zkgadgets.plonk.permutation import grand_product
from zkgadgets.plonk.transcript import Transcript

logger = logging.getLogger(__name__)


class Proof:
    """증명 객체.

    속성:
        public_inputs: 공개 입력 값 리스트 (FR)
        a_vals, b_vals, c_vals: 배선 열 (각 길이 n)
    """

    def __init__(self, public_inputs, a_vals, b_vals, c_vals):
        self.public_inputs = list(public_inputs)
        self.a_vals = list(a_vals)
        self.b_vals = list(b_vals)
        self.c_vals = list(c_vals)

    def public_input_ints(self):
        return [int(v) for v in self.public_inputs]

    def __eq__(self, other):
        if not isinstance(other, Proof):
            return False
        return (
            self.public_inputs == other.public_inputs
            and self.a_vals == other.a_vals
            and self.b_vals == other.b_vals
            and self.c_vals == other.c_vals
        )


def derive_permutation_challenges(public_inputs, a_vals, b_vals, c_vals):
    """공개 입력과 배선 열로부터 β, γ를 유도한다 (Prover/Verifier 공용)."""
    transcript = Transcript()
    transcript.append_scalars(b"public_inputs", public_inputs)
    transcript.append_scalars(b"a", a_vals)
    transcript.append_scalars(b"b", b_vals)
    transcript.append_scalars(b"c", c_vals)
    beta = transcript.challenge_scalar(b"beta")
    gamma = transcript.challenge_scalar(b"gamma")
    return beta, gamma


def prove(circuit_data, partial_witness):
    """증명을 생성한다.

    Args:
        circuit_data: CircuitData
        partial_witness: 호출자 입력이 담긴 PartialWitness

    Returns:
        Proof

    Raises:
        WitnessError: 입력이 부족하거나 값이 충돌할 때
        UnsatisfiedConstraintError: 게이트 또는 복사 제약이 만족되지 않을 때
    """
    # ── 1. witness 생성 ──
    witness = generate_partial_witness(partial_witness, circuit_data)

    # ── 2. 배선 열 구성 ──
    a_vals, b_vals, c_vals = circuit_data.wire_values(witness)
    public_values = circuit_data.public_input_values(witness)

    # ── 3. 게이트 검사 ──
    row = circuit_data.first_failing_row(a_vals, b_vals, c_vals, public_values)
    if row is not None:
        kind = circuit_data.gate_kinds[row]
        raise UnsatisfiedConstraintError(
            f"{row}번 행({kind}) 게이트 제약이 만족되지 않습니다: "
            f"a={int(a_vals[row])}, b={int(b_vals[row])}, c={int(c_vals[row])}",
            row=row,
            kind=kind,
        )

    # ── 4. 복사 제약 검사 ──
    beta, gamma = derive_permutation_challenges(public_values, a_vals, b_vals, c_vals)
    num, den = grand_product(
        a_vals, b_vals, c_vals, circuit_data.sigma, circuit_data.n, beta, gamma
    )
    if num != den:
        raise UnsatisfiedConstraintError(
            "복사 제약(connect)이 만족되지 않습니다", kind="copy"
        )

    logger.debug("증명 생성 완료: 행 %d, 공개 입력 %d개", circuit_data.n, len(public_values))
    return Proof(public_values, a_vals, b_vals, c_vals)
