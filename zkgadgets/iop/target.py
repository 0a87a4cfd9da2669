"""
배선 핸들 (Target)
===================

Target은 회로 구성 시점에 할당되는 배선(wire) 변수의 불투명한 핸들이다.
값을 직접 갖지 않으며, witness 단계에서 비로소 구체적인 FR 값과 연결된다.

  - 식별자는 빌더 안에서의 할당 순번(index) 하나뿐이다.
  - 같은 index를 가진 Target은 같은 배선이다 (동등 비교/해시 가능).
  - 직렬화 시에는 index만 기록하면 된다.

BoolTarget은 0 또는 1임이 (다른 제약에 의해) 보장된 Target을 표시한다.
"""


class Target:
    """회로 배선 변수 핸들."""

    __slots__ = ("index",)

    def __init__(self, index):
        self.index = index

    def __eq__(self, other):
        return isinstance(other, Target) and self.index == other.index

    def __hash__(self):
        return hash(("Target", self.index))

    def __repr__(self):
        return f"Target({self.index})"


class BoolTarget:
    """불리언(0/1) 값을 갖는 배선.

    속성:
        target: 내부 Target
    """

    __slots__ = ("target",)

    def __init__(self, target):
        self.target = target

    def __eq__(self, other):
        return isinstance(other, BoolTarget) and self.target == other.target

    def __hash__(self):
        return hash(("BoolTarget", self.target.index))

    def __repr__(self):
        return f"BoolTarget({self.target.index})"


def unwrap(target):
    """BoolTarget이면 내부 Target을, 아니면 그대로 반환한다."""
    if isinstance(target, BoolTarget):
        return target.target
    return target
