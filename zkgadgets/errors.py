"""
오류 분류 (Error taxonomy)
===========================

회로 구성, witness 생성, 증명 단계의 실패를 서로 구분한다.
모두 ValueError의 하위 클래스이므로 기존의 ``except ValueError`` 처리와 호환된다.

  | 예외                        | 시점          | 예                                   |
  |-----------------------------|---------------|--------------------------------------|
  | CircuitBuildError           | 회로 구성     | 길이 불일치, 미할당 배선, 폭 초과     |
  | WitnessError                | witness 생성  | 값 충돌, 실행되지 못한 generator      |
  | UnsatisfiedConstraintError  | 증명          | 게이트/복사 제약 불만족              |
  | SerializationError          | 직렬화 복원   | 알 수 없는 generator id             |
"""


class CircuitBuildError(ValueError):
    """회로 구성 시점에 즉시 거부되는 오류."""


class WitnessError(ValueError):
    """witness 할당이 불완전하거나 서로 충돌할 때의 오류."""


class UnsatisfiedConstraintError(ValueError):
    """제약을 만족하지 않아 증명을 생성할 수 없을 때의 오류.

    속성:
        row: 실패한 게이트 행 번호 (복사 제약 실패이면 None)
        kind: 실패한 게이트의 종류 라벨
    """

    def __init__(self, message, row=None, kind=None):
        super().__init__(message)
        self.row = row
        self.kind = kind


class SerializationError(ValueError):
    """직렬화된 회로/증명을 복원할 수 없을 때의 오류."""
