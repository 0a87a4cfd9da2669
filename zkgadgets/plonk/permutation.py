"""
복사 제약 순열 인자 (Permutation Argument)
============================================

같은 값을 가져야 하는 배선 위치들을 순열 σ의 순환(cycle)으로 묶고,
grand product 한 번으로 "모든 순환 안의 값이 같다"를 검사한다.

**위치와 식별 값**:
  3n개의 위치 (a₀..a_{n-1}, b₀..b_{n-1}, c₀..c_{n-1}) 각각에
  서로 다른 FR 값(label)을 붙인다.
  - a 열: ωⁱ
  - b 열: K1·ωⁱ
  - c 열: K2·ωⁱ
  K1, K2는 세 코셋 H, K1·H, K2·H가 겹치지 않도록 고른 상수이다.

**Grand Product**:
  β, γ 챌린지에 대해

    ∏ (wⱼ + β·id(j) + γ)  ==  ∏ (wⱼ + β·id(σ(j)) + γ)

  각 순환 안의 값이 모두 같으면 양변은 같은 인수들의 재배열이므로 일치하고,
  그렇지 않으면 높은 확률로 다르다.
  나눗셈 없이 분자와 분모를 따로 누적해 비교한다.
"""

from zkgadgets.plonk.field import FR, get_roots_of_unity

K1 = FR(2)
K2 = FR(3)


def position_labels(n):
    """3n개 위치의 식별 값 [ω⁰..ω^{n-1}, K1·ω⁰.., K2·ω⁰..]."""
    domain = get_roots_of_unity(n)
    return domain + [K1 * w for w in domain] + [K2 * w for w in domain]


def grand_product(a_vals, b_vals, c_vals, sigma, n, beta, gamma):
    """복사 제약 grand product의 분자와 분모를 계산한다.

    Args:
        a_vals, b_vals, c_vals: 배선 열 (각 길이 n)
        sigma: 길이 3n 순열 배열
        n: 행 수 (2의 거듭제곱)
        beta, gamma: 챌린지

    Returns:
        tuple: (numerator, denominator), 복사 제약이 만족되면 둘은 같다
    """
    labels = position_labels(n)
    values = list(a_vals) + list(b_vals) + list(c_vals)

    num = FR(1)
    den = FR(1)
    for j in range(3 * n):
        num = num * (values[j] + beta * labels[j] + gamma)
        den = den * (values[j] + beta * labels[sigma[j]] + gamma)
    return num, den
