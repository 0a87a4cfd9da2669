"""
복합 키 코덱 (Compound Key Codec)
==================================

(flag, index, value) 세 값을 정렬 가능한 하나의 필드 원소로 묶는다.

    packed = value + index·2^v + flag·2^(v+i)

    비트 배치 (little-endian):
    ┌──────────── v ────────────┬───────── i ─────────┬─ 1 ─┐
    │           value           │        index        │flag │
    └───────────────────────────┴─────────────────────┴─────┘
    0                           v                   v+i   v+i

  - flag = 1 인 레코드는 내림차순 정렬에서 항상 앞에 온다.
  - 같은 flag 안에서는 index가 큰 레코드가 앞에 온다.
  - 각 성분이 선언한 폭을 넘으면 이웃 성분과 섞인다 (조용한 충돌).
    encode(check_ranges=True) 또는 호출자의 범위 검사로 막아야 한다.

**폭 제한**: v + i + 1 ≤ MAX_SAFE_BITS
  패킹된 키를 sort의 bit_width로 그대로 쓰기 때문이다.

사용 예시:
    >>> layout = KeyLayout(index_bits=7, value_bits=16)
    >>> packed = encode(builder, flag, index, value, layout)
    >>> decode_flag(builder, packed, layout)
"""

from zkgadgets.errors import CircuitBuildError
from zkgadgets.plonk.field import MAX_SAFE_BITS


class KeyLayout:
    """패킹 비트 폭.

    속성:
        index_bits: i
        value_bits: v
        total_bits: v + i + 1
    """

    def __init__(self, index_bits, value_bits):
        for name, bits in (("index_bits", index_bits), ("value_bits", value_bits)):
            if isinstance(bits, bool) or not isinstance(bits, int) or bits < 0:
                raise CircuitBuildError(f"{name}는 0 이상의 정수여야 합니다: {bits!r}")
        total_bits = value_bits + index_bits + 1
        if total_bits > MAX_SAFE_BITS:
            raise CircuitBuildError(
                f"키 폭 v + i + 1 = {total_bits}이 {MAX_SAFE_BITS}비트를 넘습니다"
            )
        self.index_bits = index_bits
        self.value_bits = value_bits
        self.total_bits = total_bits

    @property
    def index_shift(self):
        return 1 << self.value_bits

    @property
    def flag_shift(self):
        return 1 << (self.value_bits + self.index_bits)

    def __eq__(self, other):
        return (
            isinstance(other, KeyLayout)
            and self.index_bits == other.index_bits
            and self.value_bits == other.value_bits
        )

    def __repr__(self):
        return f"KeyLayout(index_bits={self.index_bits}, value_bits={self.value_bits})"


class DecodedKey:
    """decode 결과. flag는 BoolTarget, index와 value는 Target."""

    def __init__(self, flag, index, value):
        self.flag = flag
        self.index = index
        self.value = value


# ─────────────────────────────────────────────────────────────────────
# 회로 안 인코딩/디코딩
# ─────────────────────────────────────────────────────────────────────

def encode(builder, flag, index, value, layout, check_ranges=False):
    """(flag, index, value)를 하나의 배선으로 묶는다.

    Args:
        builder: CircuitBuilder
        flag: 0/1 배선 (BoolTarget 또는 Target)
        index: index_bits 비트 이하 배선
        value: value_bits 비트 이하 배선
        layout: KeyLayout
        check_ranges: True이면 flag bool 제약과 index, value 범위 검사를 추가한다

    Returns:
        Target: 패킹된 키
    """
    if check_ranges:
        builder.assert_bool(flag)
        builder.range_check(index, layout.index_bits)
        builder.range_check(value, layout.value_bits)
    low = builder.arithmetic(index, value, q_l=layout.index_shift, q_r=1, kind="key_pack")
    return builder.arithmetic(flag, low, q_l=layout.flag_shift, q_r=1, kind="key_pack")


def decode(builder, packed, layout):
    """비트 분해 한 번으로 세 성분을 모두 꺼낸다."""
    bits = builder.split_le(packed, layout.total_bits)
    v, i = layout.value_bits, layout.index_bits
    value = builder.le_sum(bits[:v])
    index = builder.le_sum(bits[v:v + i])
    return DecodedKey(bits[v + i], index, value)


def decode_flag(builder, packed, layout):
    """최상위 비트(flag)만 꺼낸다."""
    bits = builder.split_le(packed, layout.total_bits)
    return bits[-1]


def decode_value(builder, packed, layout):
    """하위 value_bits 비트(value)만 꺼낸다."""
    low, _ = builder.split_low_high(packed, layout.value_bits, layout.total_bits)
    return low


def decode_bits(builder, packed, layout, start, stop):
    """[start, stop) 비트 구간을 정수로 재조합한다."""
    if not 0 <= start <= stop <= layout.total_bits:
        raise CircuitBuildError(
            f"비트 구간 [{start}, {stop})이 0..{layout.total_bits} 범위를 벗어납니다"
        )
    bits = builder.split_le(packed, layout.total_bits)
    return builder.le_sum(bits[start:stop])


# ─────────────────────────────────────────────────────────────────────
# 회로 밖 헬퍼
# ─────────────────────────────────────────────────────────────────────

def pack_key(flag, index, value, layout):
    """정수 (flag, index, value) → 패킹된 정수."""
    if flag not in (0, 1):
        raise ValueError(f"flag는 0 또는 1이어야 합니다: {flag}")
    if not 0 <= index < (1 << layout.index_bits):
        raise ValueError(f"index가 {layout.index_bits}비트를 넘습니다: {index}")
    if not 0 <= value < (1 << layout.value_bits):
        raise ValueError(f"value가 {layout.value_bits}비트를 넘습니다: {value}")
    return value + index * layout.index_shift + flag * layout.flag_shift


def unpack_key(packed, layout):
    """패킹된 정수 → (flag, index, value)."""
    packed = int(packed)
    value = packed & (layout.index_shift - 1)
    index = (packed >> layout.value_bits) & ((1 << layout.index_bits) - 1)
    flag = (packed >> (layout.value_bits + layout.index_bits)) & 1
    return flag, index, value
