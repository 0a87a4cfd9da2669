"""
Witness 저장소
===============

배선(Target)에 구체적인 FR 값을 할당하는 세 가지 컨테이너.

  PartialWitness: 호출자가 직접 넣는 입력 값 (회로 밖에서 알고 있는 값)
  PartitionWitness: witness 생성 과정에서 확정된 전체 값 테이블
  GeneratedValues: generator 한 번의 실행 결과를 담는 출력 버퍼

**쓰기 규칙**:
  각 배선은 정확히 한 번 값을 갖는다. 같은 값을 다시 쓰는 것은 허용되지만,
  다른 값을 쓰면 WitnessError가 발생한다.
"""

from zkgadgets.errors import WitnessError
from zkgadgets.plonk.field import to_field
from zkgadgets.iop.target import BoolTarget, Target, unwrap


class PartialWitness:
    """호출자가 제공하는 부분 witness.

    예시:
        >>> pw = PartialWitness()
        >>> pw.set_target(x, 3)
        >>> pw.set_target_arr(keys, [2, 0, 2, 1, 2])
    """

    def __init__(self):
        self.target_values = {}

    def set_target(self, target, value):
        target = unwrap(target)
        value = to_field(value)
        existing = self.target_values.get(target)
        if existing is not None and existing != value:
            raise WitnessError(
                f"{target}에 서로 다른 값을 두 번 할당했습니다: "
                f"{int(existing)} != {int(value)}"
            )
        self.target_values[target] = value

    def set_target_arr(self, targets, values):
        targets = list(targets)
        values = list(values)
        if len(targets) != len(values):
            raise WitnessError(
                f"배선 수와 값의 수가 다릅니다: {len(targets)} != {len(values)}"
            )
        for target, value in zip(targets, values):
            self.set_target(target, value)

    def set_bool_target(self, target, value):
        self.set_target(target, 1 if value else 0)

    def try_get_target(self, target):
        return self.target_values.get(unwrap(target))

    def items(self):
        return self.target_values.items()

    def __len__(self):
        return len(self.target_values)


class PartitionWitness:
    """witness 생성 중/후의 전체 값 테이블.

    Target.index로 색인되는 고정 길이 테이블이며,
    generator는 이 객체를 통해서만 의존 값을 읽는다.
    """

    def __init__(self, num_targets):
        self.values = [None] * num_targets

    def _check_index(self, target):
        if not 0 <= target.index < len(self.values):
            raise WitnessError(f"이 회로에 할당되지 않은 배선입니다: {target}")

    def set_target(self, target, value):
        """값을 기록한다. 새로 기록되었으면 True를 반환한다."""
        target = unwrap(target)
        self._check_index(target)
        value = to_field(value)
        existing = self.values[target.index]
        if existing is None:
            self.values[target.index] = value
            return True
        if existing != value:
            raise WitnessError(
                f"{target}의 값이 충돌합니다: 기존 {int(existing)}, 새 값 {int(value)}"
            )
        return False

    def contains(self, target):
        target = unwrap(target)
        self._check_index(target)
        return self.values[target.index] is not None

    def try_get_target(self, target):
        target = unwrap(target)
        self._check_index(target)
        return self.values[target.index]

    def get_target(self, target):
        value = self.try_get_target(target)
        if value is None:
            raise WitnessError(f"{unwrap(target)}의 값이 아직 정해지지 않았습니다")
        return value

    def get_targets(self, targets):
        return [self.get_target(t) for t in targets]

    def get_bool_target(self, target):
        value = self.get_target(target)
        return int(value) == 1

    def missing_targets(self):
        """값이 정해지지 않은 배선 목록."""
        return [Target(i) for i, v in enumerate(self.values) if v is None]


class GeneratedValues:
    """generator 실행 결과 버퍼.

    generator는 witness를 직접 수정하지 않고 이 버퍼에 (배선, 값) 쌍을 쌓는다.
    스케줄러가 버퍼를 witness에 반영하면서 충돌을 검사한다.
    """

    def __init__(self):
        self.target_values = []

    def set_target(self, target, value):
        self.target_values.append((unwrap(target), to_field(value)))

    def set_target_arr(self, targets, values):
        targets = list(targets)
        values = list(values)
        if len(targets) != len(values):
            raise WitnessError(
                f"배선 수와 값의 수가 다릅니다: {len(targets)} != {len(values)}"
            )
        for target, value in zip(targets, values):
            self.set_target(target, value)

    def set_bool_target(self, target, value):
        if isinstance(target, BoolTarget):
            target = target.target
        self.set_target(target, 1 if value else 0)

    def __iter__(self):
        return iter(self.target_values)

    def __len__(self):
        return len(self.target_values)
