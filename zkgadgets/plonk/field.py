"""
기반 모듈: 유한체(Finite Field) FR
===================================

회로의 모든 배선 값, 셀렉터, 챌린지가 속하는 소수체를 정의한다.

**유한체 FR**:
  bn128 타원곡선의 스칼라 필드 (scalar field).
  - 위수(order) p ≈ 2^254, 소수체(prime field)
  - p - 1 = 2^28 × m (m은 홀수) → 최대 2^28차 단위근(root of unity)을 지원

**비트 용량 (bit capacity)**:
  2^k ≤ p 를 만족하는 가장 큰 k. bn128에서는 253이다.
  비트 분해(bit decomposition)와 키 패킹(packing)의 폭 제한은 모두
  이 값을 기준으로 한다.

  - FIELD_BITS    = 253: k비트 분해가 유일(unique)하게 되는 최대 k
  - MAX_SAFE_BITS = 252: 음수 차이(p - d)가 [0, 2^w) 밖으로 반드시 떨어지는
                         최대 w. 순서 검사(assert_leq)와 키 패킹은 이 값을 넘을 수 없다.

사용 예시:
    >>> from zkgadgets.plonk.field import FR, to_canonical
    >>> a = FR(3)
    >>> to_canonical(a - FR(5))   # p - 2
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 등의 필드 연산을 제공한다.

    예시:
        >>> x = FR(3)
        >>> x * x          # FR(9)
        >>> FR(1) / FR(3)   # 3의 모듈러 역원
    """
    field_modulus = bn128.curve_order


# 곡선 위수 (필드 크기)
CURVE_ORDER = bn128.curve_order

# 2^k ≤ p 인 최대 k
FIELD_BITS = CURVE_ORDER.bit_length() - 1

# p - 2^w ≥ 2^w 가 보장되는 최대 폭
MAX_SAFE_BITS = FIELD_BITS - 1


def to_field(value):
    """정수 또는 FR 값을 FR 원소로 변환한다."""
    if isinstance(value, FR):
        return value
    return FR(value)


def to_canonical(value):
    """FR 원소의 정규 표현(0 ≤ x < p 인 정수)을 반환한다.

    정렬처럼 순서 비교가 필요한 회로 밖 계산은 이 정수 표현 위에서 이루어진다.
    """
    return int(value) % CURVE_ORDER


def neg_one():
    """-1 mod p."""
    return FR(CURVE_ORDER - 1)


# ─────────────────────────────────────────────────────────────────────
# 단위근 (Roots of Unity)
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """n차 원시 단위근(primitive n-th root of unity) ω를 반환한다.

    bn128 곡선의 경우 p - 1 = 2^28 × m 이므로 최대 2^28차 단위근까지 지원한다.
    생성자 g = FR(5)를 사용하여 ω = g^((p-1)/n)으로 계산한다.

    Args:
        n: 단위근의 차수 (2의 거듭제곱이어야 하며, ≤ 2^28)

    Returns:
        FR: n차 원시 단위근

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^28을 초과할 때
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << 28):
        raise ValueError(f"n은 2^28 이하여야 합니다: {n}")
    if n == 1:
        return FR(1)

    g = FR(5)
    return g ** ((CURVE_ORDER - 1) // n)


def get_roots_of_unity(n):
    """n개의 단위근 리스트 [1, ω, ω², ..., ω^(n-1)]을 반환한다.

    순열 인자에서 배선 위치의 식별 값(identity label)으로 사용된다.
    """
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots
