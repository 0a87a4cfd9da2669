"""
투명 증명 백엔드: Verifier
===========================

Proof에 담긴 배선 열과 공개 입력을 회로에 대해 다시 검사한다.
Prover와 같은 순서로 트랜스크립트를 재생하므로 β, γ도 같게 나온다.

  1. 길이 검사 (열 길이 == n, 공개 입력 수 일치)
  2. 게이트 검사 (공개 입력 행은 PI = -value)
  3. 복사 제약 grand product 검사

잘못된 증명에 대해서는 예외 없이 False를 반환한다.
"""

import logging

from zkgadgets.plonk.field import FR
from zkgadgets.plonk.permutation import grand_product
from zkgadgets.plonk.prover import derive_permutation_challenges

logger = logging.getLogger(__name__)


def verify(proof, circuit_data):
    """증명을 검증한다.

    Args:
        proof: Proof
        circuit_data: CircuitData

    Returns:
        bool: 검증 성공 여부
    """
    n = circuit_data.n
    if not (len(proof.a_vals) == len(proof.b_vals) == len(proof.c_vals) == n):
        logger.debug("검증 실패: 열 길이가 %d가 아닙니다", n)
        return False
    if len(proof.public_inputs) != circuit_data.num_public_inputs:
        logger.debug("검증 실패: 공개 입력 수 불일치")
        return False
    values = proof.public_inputs + proof.a_vals + proof.b_vals + proof.c_vals
    if not all(isinstance(v, FR) for v in values):
        logger.debug("검증 실패: FR이 아닌 값이 있습니다")
        return False

    row = circuit_data.first_failing_row(
        proof.a_vals, proof.b_vals, proof.c_vals, proof.public_inputs
    )
    if row is not None:
        logger.debug("검증 실패: %d번 행(%s)", row, circuit_data.gate_kinds[row])
        return False

    beta, gamma = derive_permutation_challenges(
        proof.public_inputs, proof.a_vals, proof.b_vals, proof.c_vals
    )
    num, den = grand_product(
        proof.a_vals, proof.b_vals, proof.c_vals, circuit_data.sigma, n, beta, gamma
    )
    if num != den:
        logger.debug("검증 실패: 복사 제약")
        return False
    return True
