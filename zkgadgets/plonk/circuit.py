"""
컴파일된 회로 (Gate, CircuitData)
==================================

CircuitBuilder.build()의 결과물. 한 번 만들어지면 읽기 전용이며,
여러 witness에 대해 반복해서 증명/검증에 사용할 수 있다.

**게이트 방정식** (행마다 하나):

    q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C + PI = 0

  PI는 공개 입력 행에서만 0이 아니다.

**행 배치**:
  | 행 구간                | 내용                                      |
  |------------------------|-------------------------------------------|
  | 0 .. k-1               | 공개 입력 행 (q_O=1, c = 공개 입력 배선)   |
  | k .. k+m-1             | 빌더가 추가한 게이트                      |
  | 이후                   | 게이트에 쓰이지 않은 복사 제약 배선의 고정 행 |
  | 나머지 .. n-1          | 0 게이트 (2의 거듭제곱으로 패딩)          |

  공개 입력 행에서 PI = -value 이므로 c + PI = 0 → c = value.

**배선 칸(slot)**:
  각 행의 a, b, c 칸은 배선 인덱스 또는 None(빈 칸, 값 0)이다.
  같은 배선이 여러 칸에 나타나거나 connect로 묶인 배선들이 놓인 칸들은
  순열 σ의 한 순환으로 묶인다.
"""

from zkgadgets.plonk.field import FR
from zkgadgets.iop.target import Target


class Gate:
    """PLONK 산술 게이트 (셀렉터 5개)."""

    def __init__(self, q_l, q_r, q_o, q_m, q_c):
        self.q_l = q_l if isinstance(q_l, FR) else FR(q_l)
        self.q_r = q_r if isinstance(q_r, FR) else FR(q_r)
        self.q_o = q_o if isinstance(q_o, FR) else FR(q_o)
        self.q_m = q_m if isinstance(q_m, FR) else FR(q_m)
        self.q_c = q_c if isinstance(q_c, FR) else FR(q_c)

    def check(self, a, b, c, pi=FR(0)):
        """q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C + PI == 0 ?"""
        result = (
            self.q_l * a
            + self.q_r * b
            + self.q_o * c
            + self.q_m * (a * b)
            + self.q_c
            + pi
        )
        return result == FR(0)

    def selectors(self):
        return (self.q_l, self.q_r, self.q_o, self.q_m, self.q_c)

    def __eq__(self, other):
        return isinstance(other, Gate) and self.selectors() == other.selectors()

    def __repr__(self):
        q = ", ".join(str(int(s)) for s in self.selectors())
        return f"Gate({q})"


def next_power_of_2(n):
    """n 이상인 가장 작은 2의 거듭제곱 (최소 1)."""
    size = 1
    while size < n:
        size *= 2
    return size


class CircuitData:
    """빌드가 끝난 회로.

    속성:
        config: CircuitConfig
        gates: Gate 리스트 (길이 n)
        wires: (a, b, c) 배선 인덱스 튜플 리스트 (길이 n, 빈 칸은 None)
        gate_kinds: 행마다의 게이트 종류 라벨 (진단용)
        num_targets: 할당된 배선 수
        public_inputs: 공개 입력 배선 인덱스 리스트 (행 0..k-1 에 대응)
        copy_constraints: connect로 추가된 (배선, 배선) 인덱스 쌍 리스트
        generators: SimpleGenerator 리스트
        n: 행 수 (2의 거듭제곱)
        sigma: 길이 3n 순열 배열
    """

    def __init__(self, config, gates, wires, gate_kinds, num_targets,
                 public_inputs, copy_constraints, generators):
        if not (len(gates) == len(wires) == len(gate_kinds)):
            raise ValueError("gates, wires, gate_kinds의 길이가 서로 다릅니다")
        n = len(gates)
        if n == 0 or (n & (n - 1)) != 0:
            raise ValueError(f"행 수는 2의 거듭제곱이어야 합니다: {n}")
        if len(public_inputs) > n:
            raise ValueError("공개 입력 수가 행 수보다 많습니다")

        self.config = config
        self.gates = list(gates)
        self.wires = [tuple(w) for w in wires]
        self.gate_kinds = list(gate_kinds)
        self.num_targets = num_targets
        self.public_inputs = list(public_inputs)
        self.copy_constraints = [tuple(pair) for pair in copy_constraints]
        self.generators = list(generators)
        self.n = n
        self.sigma = self.build_copy_constraints()

    @property
    def num_public_inputs(self):
        return len(self.public_inputs)

    def slot(self, position):
        """순열 위치 → 배선 인덱스 (a_i = i, b_i = n+i, c_i = 2n+i)."""
        column, row = divmod(position, self.n)
        return self.wires[row][column]

    def build_copy_constraints(self):
        """배선 순열 σ를 구성한다.

        connect 쌍으로 배선들을 합집합-찾기(union-find)로 묶은 뒤,
        같은 묶음의 배선이 놓인 칸들을 하나의 순환으로 잇는다.

        Returns:
            list[int]: 길이 3n 순열 배열
        """
        parent = {}

        def find(x):
            root = x
            while parent.get(root, root) != root:
                root = parent[root]
            while parent.get(x, x) != root:
                parent[x], x = root, parent[x]
            return root

        for x, y in self.copy_constraints:
            rx, ry = find(x), find(y)
            if rx != ry:
                parent[rx] = ry

        cycles = {}
        for position in range(3 * self.n):
            target = self.slot(position)
            if target is None:
                continue
            cycles.setdefault(find(target), []).append(position)

        sigma = list(range(3 * self.n))
        for positions in cycles.values():
            for j, position in enumerate(positions):
                sigma[position] = positions[(j + 1) % len(positions)]
        return sigma

    def wire_values(self, witness):
        """witness로부터 a, b, c 열 값을 만든다. 빈 칸은 0."""
        columns = ([], [], [])
        for row in self.wires:
            for column, target in zip(columns, row):
                if target is None:
                    column.append(FR(0))
                else:
                    column.append(witness.get_target(Target(target)))
        return columns

    def public_input_values(self, witness):
        return [witness.get_target(Target(t)) for t in self.public_inputs]

    def first_failing_row(self, a_vals, b_vals, c_vals, public_values):
        """게이트 제약을 만족하지 않는 첫 행 번호. 모두 만족하면 None."""
        for i, gate in enumerate(self.gates):
            pi = -public_values[i] if i < len(public_values) else FR(0)
            if not gate.check(a_vals[i], b_vals[i], c_vals[i], pi):
                return i
        return None

    def gate_counts(self):
        counts = {}
        for kind in self.gate_kinds:
            counts[kind] = counts.get(kind, 0) + 1
        return counts
