"""
지연 계산 (Witness Generator)
==============================

회로 구성 시점에 "나중에 실행할 계산"을 등록해 두고,
증명 시점에 입력 값이 주어지면 그 계산을 실행해 나머지 배선 값을 채운다.

**SimpleGenerator 계약**:
  - dependencies(): 실행 전에 값이 정해져 있어야 하는 배선 목록
  - outputs():      실행 결과로 값이 기록되는 배선 목록
  - run_once(witness, out_buffer): 의존 값을 읽어 출력 값을 버퍼에 쓴다
  - serialize() / deserialize(data): 배선 인덱스와 파라미터만 기록한다
                                     (witness 값은 절대 포함하지 않는다)

**레지스트리**:
  generator_id → 클래스. 직렬화된 회로를 복원할 때 이 표에서 클래스를 찾는다.
  새 generator 클래스는 @register_generator 로 등록한다.

**스케줄링** (generate_partial_witness):
  의존 값이 모두 준비된 generator부터 FIFO 순서로 한 번씩만 실행한다.

    PartialWitness ─┐
                    ├─> PartitionWitness ─> [준비된 generator 실행] ─> 출력 기록 ─┐
    generators ─────┘            ^                                               │
                                 └───────── 새 값을 기다리던 generator 깨우기 ───┘

  끝까지 실행되지 못한 generator가 남으면 WitnessError.
"""

import logging
from collections import defaultdict, deque

from zkgadgets.errors import SerializationError, WitnessError
from zkgadgets.plonk.field import FR, to_canonical, to_field
from zkgadgets.iop.target import Target, unwrap
from zkgadgets.iop.witness import GeneratedValues, PartitionWitness

logger = logging.getLogger(__name__)


GENERATOR_REGISTRY = {}


def register_generator(cls):
    """generator 클래스를 레지스트리에 등록하는 데코레이터."""
    if not cls.generator_id:
        raise ValueError(f"{cls.__name__}에 generator_id가 없습니다")
    existing = GENERATOR_REGISTRY.get(cls.generator_id)
    if existing is not None and existing is not cls:
        raise ValueError(f"이미 등록된 generator_id입니다: {cls.generator_id}")
    GENERATOR_REGISTRY[cls.generator_id] = cls
    return cls


def deserialize_generator(data):
    """{"id": ..., "data": ...} 형태의 딕셔너리에서 generator를 복원한다.

    Raises:
        SerializationError: 등록되지 않은 id이거나 필드가 빠졌을 때
    """
    try:
        generator_id = data["id"]
        payload = data["data"]
    except (KeyError, TypeError) as e:
        raise SerializationError(f"generator 데이터 형식이 잘못되었습니다: {data!r}") from e
    cls = GENERATOR_REGISTRY.get(generator_id)
    if cls is None:
        raise SerializationError(f"알 수 없는 generator id: {generator_id}")
    try:
        return cls.deserialize(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise SerializationError(f"{generator_id} 복원 실패: {e}") from e


def targets_to_indices(targets):
    return [unwrap(t).index for t in targets]


def indices_to_targets(indices):
    return [Target(int(i)) for i in indices]


class SimpleGenerator:
    """지연 계산의 기본 클래스.

    하위 클래스는 generator_id를 정하고
    dependencies, outputs, run_once, serialize, deserialize를 구현한다.
    """

    generator_id = None

    def id(self):
        return self.generator_id

    def dependencies(self):
        raise NotImplementedError

    def outputs(self):
        raise NotImplementedError

    def run_once(self, witness, out_buffer):
        raise NotImplementedError

    def serialize(self):
        raise NotImplementedError

    @classmethod
    def deserialize(cls, data):
        raise NotImplementedError

    def __eq__(self, other):
        return type(self) is type(other) and self.serialize() == other.serialize()

    def __hash__(self):
        return hash((self.generator_id, repr(self.serialize())))

    def __repr__(self):
        return f"{type(self).__name__}({self.serialize()})"


# ─────────────────────────────────────────────────────────────────────
# 회로 빌더가 사용하는 기본 generator들
# ─────────────────────────────────────────────────────────────────────

@register_generator
class ArithmeticGenerator(SimpleGenerator):
    """산술 게이트 한 행의 출력 계산: c = q_L·a + q_R·b + q_M·a·b + q_C.

    b가 None이면 단항 게이트로 보고 b = 0으로 계산한다.
    """

    generator_id = "ArithmeticGenerator"

    def __init__(self, a, b, c, q_l=0, q_r=0, q_m=0, q_c=0):
        self.a = a
        self.b = b
        self.c = c
        self.q_l = to_field(q_l)
        self.q_r = to_field(q_r)
        self.q_m = to_field(q_m)
        self.q_c = to_field(q_c)

    def dependencies(self):
        if self.b is None:
            return [self.a]
        return [self.a, self.b]

    def outputs(self):
        return [self.c]

    def run_once(self, witness, out_buffer):
        a = witness.get_target(self.a)
        b = FR(0) if self.b is None else witness.get_target(self.b)
        out_buffer.set_target(
            self.c, self.q_l * a + self.q_r * b + self.q_m * a * b + self.q_c
        )

    def serialize(self):
        return {
            "a": self.a.index,
            "b": None if self.b is None else self.b.index,
            "c": self.c.index,
            "q_l": str(int(self.q_l)),
            "q_r": str(int(self.q_r)),
            "q_m": str(int(self.q_m)),
            "q_c": str(int(self.q_c)),
        }

    @classmethod
    def deserialize(cls, data):
        b = None if data["b"] is None else Target(int(data["b"]))
        return cls(
            Target(int(data["a"])), b, Target(int(data["c"])),
            int(data["q_l"]), int(data["q_r"]), int(data["q_m"]), int(data["q_c"]),
        )


@register_generator
class ConstantGenerator(SimpleGenerator):
    """상수 배선에 고정 값을 기록한다 (의존 배선 없음)."""

    generator_id = "ConstantGenerator"

    def __init__(self, target, value):
        self.target = target
        self.value = to_field(value)

    def dependencies(self):
        return []

    def outputs(self):
        return [self.target]

    def run_once(self, witness, out_buffer):
        out_buffer.set_target(self.target, self.value)

    def serialize(self):
        return {"target": self.target.index, "value": str(int(self.value))}

    @classmethod
    def deserialize(cls, data):
        return cls(Target(int(data["target"])), int(data["value"]))


@register_generator
class SplitGenerator(SimpleGenerator):
    """x의 하위 비트들을 little-endian 순서로 bits에 기록한다.

    x가 비트 수를 넘는 값이어도 여기서는 오류를 내지 않는다.
    상위 비트가 버려지므로 재조합 제약이 증명 단계에서 실패한다.
    """

    generator_id = "SplitGenerator"

    def __init__(self, x, bits):
        self.x = x
        self.bits = list(bits)

    def dependencies(self):
        return [self.x]

    def outputs(self):
        return list(self.bits)

    def run_once(self, witness, out_buffer):
        value = to_canonical(witness.get_target(self.x))
        out_buffer.set_target_arr(
            self.bits, [(value >> i) & 1 for i in range(len(self.bits))]
        )

    def serialize(self):
        return {"x": self.x.index, "bits": targets_to_indices(self.bits)}

    @classmethod
    def deserialize(cls, data):
        return cls(Target(int(data["x"])), indices_to_targets(data["bits"]))


@register_generator
class LowHighGenerator(SimpleGenerator):
    """x = low + high·2^n_log 이 되도록 low, high를 기록한다."""

    generator_id = "LowHighGenerator"

    def __init__(self, x, n_log, low, high):
        self.x = x
        self.n_log = n_log
        self.low = low
        self.high = high

    def dependencies(self):
        return [self.x]

    def outputs(self):
        return [self.low, self.high]

    def run_once(self, witness, out_buffer):
        value = to_canonical(witness.get_target(self.x))
        out_buffer.set_target(self.low, value & ((1 << self.n_log) - 1))
        out_buffer.set_target(self.high, value >> self.n_log)

    def serialize(self):
        return {
            "x": self.x.index,
            "n_log": self.n_log,
            "low": self.low.index,
            "high": self.high.index,
        }

    @classmethod
    def deserialize(cls, data):
        return cls(
            Target(int(data["x"])), int(data["n_log"]),
            Target(int(data["low"])), Target(int(data["high"])),
        )


@register_generator
class EqualityGenerator(SimpleGenerator):
    """영 판정(zero test)의 보조 값.

    x ≠ 0 이면 inv = 1/x, is_zero = 0
    x = 0 이면 inv = 0,   is_zero = 1
    """

    generator_id = "EqualityGenerator"

    def __init__(self, x, inv, is_zero):
        self.x = x
        self.inv = inv
        self.is_zero = is_zero

    def dependencies(self):
        return [self.x]

    def outputs(self):
        return [self.inv, self.is_zero]

    def run_once(self, witness, out_buffer):
        x = witness.get_target(self.x)
        if x == FR(0):
            out_buffer.set_target(self.inv, 0)
            out_buffer.set_target(self.is_zero, 1)
        else:
            out_buffer.set_target(self.inv, FR(1) / x)
            out_buffer.set_target(self.is_zero, 0)

    def serialize(self):
        return {
            "x": self.x.index,
            "inv": self.inv.index,
            "is_zero": self.is_zero.index,
        }

    @classmethod
    def deserialize(cls, data):
        return cls(
            Target(int(data["x"])), Target(int(data["inv"])),
            Target(int(data["is_zero"])),
        )


# ─────────────────────────────────────────────────────────────────────
# 스케줄러
# ─────────────────────────────────────────────────────────────────────

def generate_partial_witness(partial_witness, circuit_data):
    """호출자 입력과 generator들로 전체 witness를 채운다.

    Args:
        partial_witness: 호출자가 값을 넣은 PartialWitness
        circuit_data: build()로 만든 CircuitData

    Returns:
        PartitionWitness: 모든 generator가 실행된 뒤의 witness

    Raises:
        WitnessError: 값이 충돌하거나, 의존 값이 끝내 정해지지 않아
                      실행되지 못한 generator가 남았을 때
    """
    witness = PartitionWitness(circuit_data.num_targets)
    for target, value in partial_witness.items():
        witness.set_target(target, value)

    generators = circuit_data.generators
    pending = [0] * len(generators)
    watchers = defaultdict(list)
    queue = deque()

    for i, generator in enumerate(generators):
        missing = {
            t.index for t in map(unwrap, generator.dependencies())
            if not witness.contains(t)
        }
        pending[i] = len(missing)
        for index in missing:
            watchers[index].append(i)
        if not missing:
            queue.append(i)

    done = [False] * len(generators)
    while queue:
        i = queue.popleft()
        out_buffer = GeneratedValues()
        generators[i].run_once(witness, out_buffer)
        done[i] = True
        for target, value in out_buffer:
            if not witness.set_target(target, value):
                continue
            for j in watchers.pop(target.index, ()):
                pending[j] -= 1
                if pending[j] == 0:
                    queue.append(j)

    stalled = [g for g, ran in zip(generators, done) if not ran]
    if stalled:
        waiting = sorted({
            t.index for g in stalled for t in map(unwrap, g.dependencies())
            if not witness.contains(t)
        })
        raise WitnessError(
            f"실행되지 못한 generator {len(stalled)}개 "
            f"(첫 번째: {stalled[0].id()}), 값이 없는 배선: {waiting[:10]}"
        )

    logger.debug(
        "witness 생성 완료: 입력 %d개, generator %d개 실행",
        len(partial_witness), len(generators),
    )
    return witness
