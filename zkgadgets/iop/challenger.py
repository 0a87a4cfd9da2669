"""
회로 내부 Fiat-Shamir 챌린저 (Algebraic Sponge)
================================================

순열 동등성 검사에 쓰이는 챌린지 α는 검사 대상 배선 값 전체로부터
결정론적으로 유도되어야 한다. 배선 값은 증명 시점에야 정해지므로,
해시 자체를 회로 안의 게이트로 표현한다.

**순열 P (MiMC 형태)**:
  라운드 상수 c₀ = 0, c₁, ..., c_{r-1} 에 대해

    x ↦ (x + cᵢ)^5     (i = 0, ..., r-1)

  gcd(5, p - 1) = 1 이므로 x^5 는 FR 위의 전단사이다.
  라운드 하나는 산술 게이트 3개로 표현된다:

    | 게이트 | 계산                  | q_M | q_L | q_C  |
    |--------|-----------------------|-----|-----|------|
    | 1      | t₂ = x² + 2c·x + c²   |  1  | 2c  | c²   |
    | 2      | t₄ = t₂ · t₂          |  1  |  0  |  0   |
    | 3      | t₅ = t₄·x + c·t₄      |  1  |  c  |  0   |

**흡수/추출 규칙**:
  - observe: 입력 버퍼에 쌓기만 한다
  - get_challenge: 버퍼가 비어 있지 않으면 state ← P(state + x) 를 원소마다 반복
                   (첫 원소는 P(x)), 비어 있으면 state ← P(state) 로 새 값을 뽑는다.
                   아무것도 관찰하지 않았으면 P(0).

Challenger(회로 밖)와 RecursiveChallenger(회로 안)는 같은 값을 계산한다.

사용 예시:
    >>> challenger = RecursiveChallenger(builder)
    >>> challenger.observe_elements(a)
    >>> alpha = challenger.get_challenge()
"""

import hashlib
from functools import lru_cache

from zkgadgets.plonk.field import FR, CURVE_ORDER, to_field

MIMC_DOMAIN = b"zkgadgets.mimc"


@lru_cache(maxsize=None)
def mimc_round_constant(i):
    """i번째 라운드 상수. c₀ = 0, 나머지는 SHA-256(도메인 || i) mod p."""
    if i == 0:
        return FR(0)
    h = hashlib.sha256(MIMC_DOMAIN + i.to_bytes(4, "big")).digest()
    return FR(int.from_bytes(h, "big") % CURVE_ORDER)


def mimc_round_constants(rounds):
    return [mimc_round_constant(i) for i in range(rounds)]


def mimc_permutation(x, rounds):
    """회로 밖에서 순열 P를 계산한다."""
    x = to_field(x)
    for c in mimc_round_constants(rounds):
        x = (x + c) ** 5
    return x


class Challenger:
    """회로 밖 챌린저. RecursiveChallenger와 같은 규칙으로 값을 계산한다."""

    def __init__(self, rounds):
        self.rounds = rounds
        self.state = None
        self.input_buffer = []

    def observe_element(self, value):
        self.input_buffer.append(to_field(value))

    def observe_elements(self, values):
        for value in values:
            self.observe_element(value)

    def _absorb(self, x):
        if self.state is not None:
            x = self.state + x
        self.state = mimc_permutation(x, self.rounds)

    def get_challenge(self):
        if self.input_buffer:
            for x in self.input_buffer:
                self._absorb(x)
            self.input_buffer = []
        elif self.state is None:
            self.state = mimc_permutation(FR(0), self.rounds)
        else:
            self.state = mimc_permutation(self.state, self.rounds)
        return self.state

    def get_challenges(self, n):
        return [self.get_challenge() for _ in range(n)]


class RecursiveChallenger:
    """회로 안에서 챌린지를 유도하는 챌린저.

    상태는 배선(Target)이며, 흡수할 때마다 빌더에 게이트가 추가된다.
    라운드 수는 builder.config.challenge_rounds 를 따른다.
    """

    def __init__(self, builder):
        self.builder = builder
        self.rounds = builder.config.challenge_rounds
        self.state = None
        self.input_buffer = []

    def observe_element(self, target):
        self.builder.check_targets([target])
        self.input_buffer.append(target)

    def observe_elements(self, targets):
        for target in targets:
            self.observe_element(target)

    def _permute(self, x):
        builder = self.builder
        for c in mimc_round_constants(self.rounds):
            t2 = builder.arithmetic(x, x, q_l=c + c, q_m=1, q_c=c * c, kind="challenger")
            t4 = builder.arithmetic(t2, t2, q_m=1, kind="challenger")
            x = builder.arithmetic(t4, x, q_l=c, q_m=1, kind="challenger")
        return x

    def _absorb(self, x):
        if self.state is not None:
            x = self.builder.add(self.state, x)
        self.state = self._permute(x)

    def get_challenge(self):
        if self.input_buffer:
            for x in self.input_buffer:
                self._absorb(x)
            self.input_buffer = []
        elif self.state is None:
            self.state = self._permute(self.builder.zero())
        else:
            self.state = self._permute(self.state)
        return self.state

    def get_challenges(self, n):
        return [self.get_challenge() for _ in range(n)]
