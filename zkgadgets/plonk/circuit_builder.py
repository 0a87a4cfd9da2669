"""
회로 빌더 (CircuitBuilder)
===========================

배선을 할당하고 게이트, 복사 제약, 공개 입력, 지연 계산(generator)을 쌓아
최종적으로 CircuitData를 만든다.

**게이트 유형별 셀렉터 설정** (c는 새로 할당되는 출력 배선):
  | 연산         | q_L | q_R | q_O | q_M | q_C | 의미                  |
  |--------------|-----|-----|-----|-----|-----|-----------------------|
  | add          |  1  |  1  | -1  |  0  |  0  | a + b = c             |
  | sub          |  1  | -1  | -1  |  0  |  0  | a - b = c             |
  | mul          |  0  |  0  | -1  |  1  |  0  | a · b = c             |
  | add_const    |  1  |  0  | -1  |  0  |  k  | a + k = c             |
  | mul_const    |  k  |  0  | -1  |  0  |  0  | k · a = c             |
  | or           |  1  |  1  | -1  | -1  |  0  | a + b - ab = c        |
  | not          | -1  |  0  | -1  |  0  |  1  | 1 - a = c             |
  | constant     |  1  |  0  |  0  |  0  | -k  | a = k                 |
  | bool         | -1  |  0  |  0  |  1  |  0  | a² - a = 0 (a=b)      |
  | assert_zero  |  1  |  0  |  0  |  0  |  0  | a = 0                 |

**영 판정 (is_zero)**:
  회로 밖에서 역원 m을 구하고 두 제약으로 y = [x == 0] 을 강제한다.
    x·m + y - 1 = 0
    x·y = 0
  x ≠ 0 이면 둘째 식에서 y = 0, x = 0 이면 첫째 식에서 y = 1.

**비트 분해 (split_le)**:
  비트 bᵢ마다 bool 제약을 걸고, 누적합 Σ 2ⁱ·bᵢ 를 x와 connect한다.
  num_bits ≤ FIELD_BITS 이면 분해가 유일하다.

사용 예시:
    >>> builder = CircuitBuilder(CircuitConfig.testing_config())
    >>> x = builder.add_virtual_target()
    >>> y = builder.mul(x, x)
    >>> builder.register_public_input(y)
    >>> data = builder.build()
"""

import logging
from collections import Counter, deque

from zkgadgets.config import CircuitConfig
from zkgadgets.errors import CircuitBuildError
from zkgadgets.plonk.field import FIELD_BITS, FR, to_canonical, to_field
from zkgadgets.plonk.circuit import CircuitData, Gate, next_power_of_2
from zkgadgets.iop.target import BoolTarget, Target, unwrap
from zkgadgets.iop.generator import (
    ArithmeticGenerator,
    ConstantGenerator,
    EqualityGenerator,
    LowHighGenerator,
    SplitGenerator,
)

logger = logging.getLogger(__name__)


class CircuitBuilder:
    """회로 구성기.

    속성:
        config: CircuitConfig
        num_targets: 지금까지 할당한 배선 수
        gates, wires, gate_kinds: 게이트 행 (공개 입력 행 제외)
        public_inputs: 공개 입력 배선 리스트
        copy_constraints: connect 쌍 리스트
        generators: 등록된 generator 리스트
    """

    def __init__(self, config=None):
        self.config = config if config is not None else CircuitConfig.standard_config()
        self.num_targets = 0
        self.gates = []
        self.wires = []
        self.gate_kinds = []
        self.public_inputs = []
        self.copy_constraints = []
        self.generators = []
        self.constants = {}

    # ─────────────────────────────────────────────────────────────────
    # 배선 할당
    # ─────────────────────────────────────────────────────────────────

    def check_targets(self, targets):
        """모든 배선이 이 빌더에서 할당된 것인지 확인한다."""
        for target in targets:
            t = unwrap(target)
            if not isinstance(t, Target):
                raise CircuitBuildError(f"배선이 아닙니다: {target!r}")
            if not 0 <= t.index < self.num_targets:
                raise CircuitBuildError(f"이 빌더에서 할당되지 않은 배선입니다: {t}")

    def add_virtual_target(self):
        target = Target(self.num_targets)
        self.num_targets += 1
        return target

    def add_virtual_targets(self, n):
        if n < 0:
            raise CircuitBuildError(f"배선 수는 0 이상이어야 합니다: {n}")
        return [self.add_virtual_target() for _ in range(n)]

    def add_virtual_bool_target(self):
        """새 배선을 할당하고 bool 제약을 건다."""
        target = self.add_virtual_target()
        self.assert_bool(target)
        return BoolTarget(target)

    def constant(self, value):
        """상수 배선. 같은 값은 한 번만 할당된다."""
        key = to_canonical(to_field(value))
        target = self.constants.get(key)
        if target is None:
            target = self.add_virtual_target()
            self._add_gate(Gate(1, 0, 0, 0, -key), target, None, None, "constant")
            self.add_simple_generator(ConstantGenerator(target, key))
            self.constants[key] = target
        return target

    def zero(self):
        return self.constant(0)

    def one(self):
        return self.constant(1)

    # ─────────────────────────────────────────────────────────────────
    # 산술 게이트
    # ─────────────────────────────────────────────────────────────────

    def _add_gate(self, gate, a, b, c, kind):
        self.check_targets([t for t in (a, b, c) if t is not None])
        self.gates.append(gate)
        self.wires.append(tuple(None if t is None else unwrap(t).index for t in (a, b, c)))
        self.gate_kinds.append(kind)
        return len(self.gates) - 1

    def arithmetic(self, a, b, q_l=0, q_r=0, q_m=0, q_c=0, kind="arithmetic"):
        """범용 한 행 게이트: c = q_L·a + q_R·b + q_M·a·b + q_C.

        b가 None이면 단항 게이트 (q_R, q_M은 0이어야 한다).

        Returns:
            Target: 새로 할당된 출력 배선 c
        """
        a = unwrap(a)
        b = None if b is None else unwrap(b)
        if b is None and (to_field(q_r) != FR(0) or to_field(q_m) != FR(0)):
            raise CircuitBuildError("단항 게이트에는 q_R, q_M을 쓸 수 없습니다")
        self.check_targets([a] if b is None else [a, b])
        c = self.add_virtual_target()
        self._add_gate(Gate(q_l, q_r, -1, q_m, q_c), a, b, c, kind)
        self.add_simple_generator(ArithmeticGenerator(a, b, c, q_l, q_r, q_m, q_c))
        return c

    def add(self, x, y):
        return self.arithmetic(x, y, q_l=1, q_r=1, kind="add")

    def sub(self, x, y):
        return self.arithmetic(x, y, q_l=1, q_r=-1, kind="sub")

    def mul(self, x, y):
        return self.arithmetic(x, y, q_m=1, kind="mul")

    def mul_add(self, x, y, z):
        """x·y + z"""
        return self.add(self.mul(x, y), z)

    def add_const(self, x, k):
        return self.arithmetic(x, None, q_l=1, q_c=k, kind="add_const")

    def mul_const(self, x, k):
        return self.arithmetic(x, None, q_l=k, kind="mul_const")

    def neg(self, x):
        return self.mul_const(x, -1)

    def add_many(self, terms):
        terms = list(terms)
        if not terms:
            return self.zero()
        acc = terms[0]
        for t in terms[1:]:
            acc = self.add(acc, t)
        return unwrap(acc)

    # ─────────────────────────────────────────────────────────────────
    # 불리언 게이트
    # ─────────────────────────────────────────────────────────────────

    def assert_bool(self, x):
        """x ∈ {0, 1} 제약: x·x - x = 0."""
        self._add_gate(Gate(-1, 0, 0, 1, 0), x, x, None, "bool")

    def not_(self, x):
        return BoolTarget(self.arithmetic(x, None, q_l=-1, q_c=1, kind="not"))

    def and_(self, x, y):
        return BoolTarget(self.mul(x, y))

    def or_(self, x, y):
        return BoolTarget(self.arithmetic(x, y, q_l=1, q_r=1, q_m=-1, kind="or"))

    def select(self, b, x, y):
        """b ? x : y  =  b·(x - y) + y"""
        return self.mul_add(b, self.sub(x, y), y)

    # ─────────────────────────────────────────────────────────────────
    # 동등성 / 복사 제약
    # ─────────────────────────────────────────────────────────────────

    def is_zero(self, x):
        x = unwrap(x)
        self.check_targets([x])
        inv = self.add_virtual_target()
        y = self.add_virtual_target()
        self.add_simple_generator(EqualityGenerator(x, inv, y))
        self._add_gate(Gate(0, 0, 1, 1, -1), x, inv, y, "is_zero")
        self._add_gate(Gate(0, 0, 0, 1, 0), x, y, None, "is_zero")
        return BoolTarget(y)

    def is_equal(self, x, y):
        return self.is_zero(self.sub(x, y))

    def assert_zero(self, x):
        self._add_gate(Gate(1, 0, 0, 0, 0), x, None, None, "assert_zero")

    def connect(self, x, y):
        """복사 제약: x와 y는 같은 값을 가져야 한다.

        값을 전파하지 않으므로 x, y 각각 입력이거나 generator로 계산되어야 한다.
        """
        self.check_targets([x, y])
        self.copy_constraints.append((unwrap(x).index, unwrap(y).index))

    # ─────────────────────────────────────────────────────────────────
    # 비트 분해
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def check_bit_width(num_bits, limit=FIELD_BITS):
        if isinstance(num_bits, bool) or not isinstance(num_bits, int):
            raise CircuitBuildError(f"비트 폭은 정수여야 합니다: {num_bits!r}")
        if not 0 <= num_bits <= limit:
            raise CircuitBuildError(f"비트 폭은 0 이상 {limit} 이하여야 합니다: {num_bits}")

    def le_sum(self, bits):
        """Σ 2ⁱ·bᵢ (little-endian 재조합)."""
        bits = [unwrap(b) for b in bits]
        if not bits:
            return self.zero()
        acc = bits[0]
        for i, bit in enumerate(bits[1:], start=1):
            acc = self.arithmetic(acc, bit, q_l=1, q_r=1 << i, kind="le_sum")
        return acc

    def split_le(self, x, num_bits):
        """x를 num_bits개의 비트로 분해한다 (little-endian).

        x ≥ 2^num_bits 이면 재조합 제약이 만족되지 않는다.

        Returns:
            list[BoolTarget]: 하위 비트부터의 비트 배선
        """
        self.check_bit_width(num_bits)
        x = unwrap(x)
        self.check_targets([x])
        bits = self.add_virtual_targets(num_bits)
        if bits:
            self.add_simple_generator(SplitGenerator(x, bits))
        for bit in bits:
            self.assert_bool(bit)
        self.connect(self.le_sum(bits), x)
        return [BoolTarget(b) for b in bits]

    def range_check(self, x, num_bits):
        """0 ≤ x < 2^num_bits 제약."""
        self.split_le(x, num_bits)

    def split_low_high(self, x, n_log, num_bits):
        """x = low + high·2^n_log 분해 (low < 2^n_log, high < 2^(num_bits - n_log)).

        Returns:
            tuple: (low, high)
        """
        self.check_bit_width(num_bits)
        self.check_bit_width(n_log, num_bits)
        x = unwrap(x)
        self.check_targets([x])
        low = self.add_virtual_target()
        high = self.add_virtual_target()
        self.add_simple_generator(LowHighGenerator(x, n_log, low, high))
        self.range_check(low, n_log)
        self.range_check(high, num_bits - n_log)
        recombined = self.arithmetic(low, high, q_l=1, q_r=1 << n_log, kind="low_high")
        self.connect(recombined, x)
        return low, high

    # ─────────────────────────────────────────────────────────────────
    # 공개 입력 / generator
    # ─────────────────────────────────────────────────────────────────

    def register_public_input(self, target):
        self.check_targets([target])
        self.public_inputs.append(unwrap(target))

    def register_public_inputs(self, targets):
        for target in targets:
            self.register_public_input(target)

    def add_simple_generator(self, generator):
        self.check_targets(generator.dependencies())
        self.check_targets(generator.outputs())
        self.generators.append(generator)

    # ─────────────────────────────────────────────────────────────────
    # 통계 / 빌드
    # ─────────────────────────────────────────────────────────────────

    def num_gates(self):
        return len(self.gates)

    def print_gate_counts(self):
        """게이트 종류별 개수를 DEBUG 로그로 남긴다."""
        counts = Counter(self.gate_kinds)
        logger.debug("게이트 총 %d개", len(self.gates))
        for kind, count in counts.most_common():
            logger.debug("  %-14s %d", kind, count)
        return counts

    def _check_generators(self):
        """출력 배선이 겹치거나 generator 간 순환 의존이 있으면 거부한다."""
        producer = {}
        for i, generator in enumerate(self.generators):
            for t in generator.outputs():
                index = unwrap(t).index
                if index in producer and producer[index] != i:
                    raise CircuitBuildError(f"두 generator가 같은 배선을 출력합니다: {unwrap(t)}")
                producer[index] = i

        consumers = [[] for _ in self.generators]
        indegree = [0] * len(self.generators)
        for i, generator in enumerate(self.generators):
            upstream = {producer[unwrap(t).index] for t in generator.dependencies()
                        if unwrap(t).index in producer}
            upstream.discard(i)
            indegree[i] = len(upstream)
            for j in upstream:
                consumers[j].append(i)

        queue = deque(i for i, d in enumerate(indegree) if d == 0)
        visited = 0
        while queue:
            i = queue.popleft()
            visited += 1
            for j in consumers[i]:
                indegree[j] -= 1
                if indegree[j] == 0:
                    queue.append(j)
        if visited != len(self.generators):
            raise CircuitBuildError(
                f"generator 간 순환 의존이 있습니다 ({len(self.generators) - visited}개 관련)"
            )

    def build(self):
        """회로를 확정해 CircuitData를 만든다.

        행 배치: 공개 입력 → 빌더 게이트 → 고정 행 → 패딩.
        """
        self._check_generators()

        gates, wires, kinds = [], [], []
        for t in self.public_inputs:
            gates.append(Gate(0, 0, 1, 0, 0))
            wires.append((None, None, t.index))
            kinds.append("public_input")
        gates.extend(self.gates)
        wires.extend(self.wires)
        kinds.extend(self.gate_kinds)

        # 어떤 칸에도 놓이지 않은 connect 배선은 σ에 포함되도록 고정 행을 만든다
        placed = {i for row in wires for i in row if i is not None}
        connected = {i for pair in self.copy_constraints for i in pair}
        for index in sorted(connected - placed):
            gates.append(Gate(0, 0, 0, 0, 0))
            wires.append((index, None, None))
            kinds.append("copy_anchor")

        n = next_power_of_2(len(gates))
        padding = n - len(gates)
        gates.extend(Gate(0, 0, 0, 0, 0) for _ in range(padding))
        wires.extend((None, None, None) for _ in range(padding))
        kinds.extend("padding" for _ in range(padding))

        data = CircuitData(
            config=self.config,
            gates=gates,
            wires=wires,
            gate_kinds=kinds,
            num_targets=self.num_targets,
            public_inputs=[t.index for t in self.public_inputs],
            copy_constraints=self.copy_constraints,
            generators=self.generators,
        )
        logger.info(
            "회로 빌드 완료: 게이트 %d개, 공개 입력 %d개, 행 %d, 배선 %d, generator %d개",
            len(self.gates), len(self.public_inputs), n, self.num_targets,
            len(self.generators),
        )
        return data
