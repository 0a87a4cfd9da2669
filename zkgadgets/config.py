"""
회로 설정 (CircuitConfig)
==========================

회로 구성 전반에 영향을 주는 파라미터를 담는다.

**challenge_rounds**:
  회로 내부 Fiat-Shamir 스펀지(sponge)의 순열 라운드 수.
  x ↦ (x + cᵢ)^5 형태의 라운드를 사용하며, 254비트 필드에서
  ⌈log₅ p⌉ = 110 라운드가 표준값이다.
  라운드당 게이트 3개가 추가되므로 테스트/데모에서는 작은 값을 쓴다.

**num_challenges**:
  순열 동등성 검사를 서로 다른 챌린지로 반복하는 횟수.
  오류 확률은 (N / p)^num_challenges 로 줄어든다.

사용 예시:
    >>> config = CircuitConfig.standard_config()
    >>> builder = CircuitBuilder(config)
"""


class CircuitConfig:
    """회로 구성 파라미터.

    속성:
        challenge_rounds: 스펀지 순열의 라운드 수 (≥ 1)
        num_challenges: 순열 검사 반복 횟수 (≥ 1)
    """

    STANDARD_CHALLENGE_ROUNDS = 110

    def __init__(self, challenge_rounds=STANDARD_CHALLENGE_ROUNDS, num_challenges=1):
        if challenge_rounds < 1:
            raise ValueError(f"challenge_rounds는 1 이상이어야 합니다: {challenge_rounds}")
        if num_challenges < 1:
            raise ValueError(f"num_challenges는 1 이상이어야 합니다: {num_challenges}")
        self.challenge_rounds = challenge_rounds
        self.num_challenges = num_challenges

    @classmethod
    def standard_config(cls):
        """표준 설정: 110 라운드, 챌린지 1개."""
        return cls()

    @classmethod
    def testing_config(cls):
        """테스트/데모용 경량 설정 (건전성보다 속도 우선)."""
        return cls(challenge_rounds=4, num_challenges=1)

    def to_dict(self):
        return {
            "challenge_rounds": self.challenge_rounds,
            "num_challenges": self.num_challenges,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data["challenge_rounds"], data["num_challenges"])

    def __eq__(self, other):
        if not isinstance(other, CircuitConfig):
            return False
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (
            f"CircuitConfig(challenge_rounds={self.challenge_rounds}, "
            f"num_challenges={self.num_challenges})"
        )
