"""
순열 동등성 검사와 검증 가능한 정렬
=====================================

**순열 동등성 (permutation_check)**:
  두 배선 시퀀스 a, b가 같은 다중집합(multiset)인지 검사한다.
  a, b 전체를 회로 내부 챌린저에 흡수해 챌린지 α를 얻고

    ∏ (aᵢ - α)  ==  ∏ (bᵢ - α)

  를 복사 제약으로 강제한다. 양변은 α에서 평가한 다항식 ∏(X - aᵢ), ∏(X - bᵢ)
  이므로, 다중집합이 다르면 두 다항식이 다르고 일치할 확률은 N/p 이하이다.
  α는 값이 정해진 뒤에 유도되므로 Prover가 미리 맞출 수 없다.

**순서 검사 (assert_leq)**:
  smaller ≤ larger  ⇔  larger - smaller ∈ [0, 2^w)
  두 값이 모두 w비트 이하이고 w ≤ MAX_SAFE_BITS 이면,
  smaller > larger 일 때의 차이는 p - d ≥ 2^w 로 감싸져 범위 검사에 걸린다.

**검증 가능한 정렬 (sort)**:
  정렬 자체는 회로 밖 SortGenerator가 계산하고,
  회로는 결과가 내림차순이며 원본의 순열임만 검사한다.

    original ──[SortGenerator: 내림차순 정렬]──> sorted
       │                                           │
       └──────── sorted_check(sorted, original) ───┘

  모든 원소가 bit_width 비트 이하여야 한다는 전제는 회로가 검사하지 않는다.
  전제를 어긴 입력은 증명 단계에서 범위 검사 실패로 드러나거나,
  (음수 차이가 감싸져) 검사를 통과할 수도 있다.
"""

import logging

from zkgadgets.errors import CircuitBuildError
from zkgadgets.plonk.field import MAX_SAFE_BITS, to_canonical
from zkgadgets.iop.challenger import RecursiveChallenger
from zkgadgets.iop.generator import (
    SimpleGenerator,
    indices_to_targets,
    register_generator,
    targets_to_indices,
)
from zkgadgets.iop.target import unwrap

logger = logging.getLogger(__name__)


def _check_lengths(a, b, what):
    if len(a) != len(b):
        raise CircuitBuildError(f"{what}: 두 시퀀스의 길이가 다릅니다 ({len(a)} != {len(b)})")


def _product_of_differences(builder, values, alpha):
    """∏ (vᵢ - α). 빈 시퀀스이면 상수 1."""
    if not values:
        return builder.one()
    acc = builder.sub(values[0], alpha)
    for v in values[1:]:
        acc = builder.mul(acc, builder.sub(v, alpha))
    return acc


def permutation_check(builder, a, b):
    """a가 b의 순열(같은 다중집합)임을 강제한다.

    Args:
        builder: CircuitBuilder
        a, b: 같은 길이의 배선 리스트

    Raises:
        CircuitBuildError: 길이가 다르거나 할당되지 않은 배선이 있을 때
    """
    a = [unwrap(t) for t in a]
    b = [unwrap(t) for t in b]
    _check_lengths(a, b, "permutation_check")
    builder.check_targets(a + b)

    challenger = RecursiveChallenger(builder)
    challenger.observe_elements(a)
    challenger.observe_elements(b)
    for alpha in challenger.get_challenges(builder.config.num_challenges):
        a_eval = _product_of_differences(builder, a, alpha)
        b_eval = _product_of_differences(builder, b, alpha)
        builder.connect(a_eval, b_eval)


def assert_leq(builder, smaller, larger, bit_width):
    """smaller ≤ larger 를 강제한다 (두 값 모두 bit_width 비트 이하 전제)."""
    builder.check_bit_width(bit_width, MAX_SAFE_BITS)
    diff = builder.sub(larger, smaller)
    builder.range_check(diff, bit_width)


def sorted_check(builder, sorted_seq, original, bit_width):
    """sorted_seq가 original의 내림차순 정렬임을 강제한다."""
    _check_lengths(sorted_seq, original, "sorted_check")
    builder.check_bit_width(bit_width, MAX_SAFE_BITS)
    for i in range(1, len(sorted_seq)):
        assert_leq(builder, sorted_seq[i], sorted_seq[i - 1], bit_width)
    permutation_check(builder, sorted_seq, original)


def sort(builder, original, bit_width):
    """original을 내림차순으로 정렬한 새 배선 리스트를 반환한다.

    Args:
        builder: CircuitBuilder
        original: 배선 리스트 (각 값은 bit_width 비트 이하여야 함)
        bit_width: 원소 비트 폭 (0 ≤ bit_width ≤ MAX_SAFE_BITS)

    Returns:
        list[Target]: 정렬 결과 배선 (값은 SortGenerator가 채운다)
    """
    builder.check_bit_width(bit_width, MAX_SAFE_BITS)
    original = [unwrap(t) for t in original]
    builder.check_targets(original)
    sorted_seq = builder.add_virtual_targets(len(original))
    sorted_check(builder, sorted_seq, original, bit_width)
    builder.add_simple_generator(SortGenerator(original, sorted_seq, bit_width))
    return sorted_seq


@register_generator
class SortGenerator(SimpleGenerator):
    """original의 값을 정규 정수로 읽어 내림차순으로 sorted에 기록한다."""

    generator_id = "SortGenerator"

    def __init__(self, original, sorted_seq, bit_width):
        if len(original) != len(sorted_seq):
            raise ValueError("original과 sorted의 길이가 다릅니다")
        self.original = list(original)
        self.sorted = list(sorted_seq)
        self.bit_width = bit_width

    def dependencies(self):
        return list(self.original)

    def outputs(self):
        return list(self.sorted)

    def run_once(self, witness, out_buffer):
        values = [to_canonical(v) for v in witness.get_targets(self.original)]
        too_wide = [v for v in values if v >> self.bit_width]
        if too_wide:
            logger.debug(
                "SortGenerator: %d비트를 넘는 값 %d개 (최댓값 %d비트)",
                self.bit_width, len(too_wide), max(too_wide).bit_length(),
            )
        values.sort(reverse=True)
        out_buffer.set_target_arr(self.sorted, values)

    def serialize(self):
        return {
            "original": targets_to_indices(self.original),
            "sorted": targets_to_indices(self.sorted),
            "bit_width": self.bit_width,
        }

    @classmethod
    def deserialize(cls, data):
        return cls(
            indices_to_targets(data["original"]),
            indices_to_targets(data["sorted"]),
            int(data["bit_width"]),
        )
