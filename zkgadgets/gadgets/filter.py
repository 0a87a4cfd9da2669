"""
정렬 기반 필터 (Sort-based Filter)
===================================

keys 중 query와 같은 레코드의 vals만 골라 결과의 앞쪽에 모은다.
어느 위치가 일치했는지는 결과에 드러나지 않는다.

**절차**:
  ── 1. 일치 판정 ──    matchᵢ = [keyᵢ == query],  num_matches = Σ matchᵢ
  ── 2. 패킹 ──         packedᵢ = encode(matchᵢ, N - i, valᵢ)
  ── 3. 정렬 ──         sort(packed, 1 + value_bits + index_bits)
  ── 4. 디코딩 ──       flag = 최상위 비트, val = 하위 value_bits 비트
  ── 5. 마스킹 ──       key_out = flag·query,  val_out = flag·val

  index = N - i 이므로 일치한 레코드들은 원래 순서대로 앞에 온다.

예시 (query = 2):
  | i | key | val | match | index |
  |---|-----|-----|-------|-------|
  | 0 |  2  |  5  |   1   |   5   |
  | 1 |  0  |  6  |   0   |   4   |
  | 2 |  2  |  7  |   1   |   3   |
  | 3 |  1  |  8  |   0   |   2   |
  | 4 |  2  |  9  |   1   |   1   |

  → keys [2, 2, 2, 0, 0], vals [5, 7, 9, 0, 0], num_matches = 3
"""

from zkgadgets.errors import CircuitBuildError
from zkgadgets.gadgets.compound_key import KeyLayout, decode_flag, decode_value, encode
from zkgadgets.gadgets.permutation_check import sort


class FilterResult:
    """filter_matches 결과 배선.

    속성:
        num_matches: 일치 개수
        matches: 정렬 후 위치별 일치 여부 (BoolTarget)
        keys: 정렬 후 키 (일치하면 query, 아니면 0)
        vals: 정렬 후 값 (일치하면 원래 값, 아니면 0)
    """

    def __init__(self, num_matches, matches, keys, vals):
        self.num_matches = num_matches
        self.matches = matches
        self.keys = keys
        self.vals = vals


def filter_matches(builder, keys, vals, query, index_bits, value_bits):
    """query와 일치하는 레코드를 앞으로 모으는 회로를 구성한다.

    Args:
        builder: CircuitBuilder
        keys, vals: 같은 길이 N의 배선 리스트
        query: 찾을 키 배선
        index_bits: 위치 인덱스 폭 (N < 2^index_bits)
        value_bits: 값 폭 (vals는 이 폭으로 범위 검사된다)

    Returns:
        FilterResult

    Raises:
        CircuitBuildError: 길이 불일치, 인덱스 폭 부족, 키 폭 초과
    """
    if len(keys) != len(vals):
        raise CircuitBuildError(f"keys와 vals의 길이가 다릅니다 ({len(keys)} != {len(vals)})")
    layout = KeyLayout(index_bits, value_bits)
    n = len(keys)
    if n >= 1 << index_bits:
        raise CircuitBuildError(f"레코드 {n}개는 {index_bits}비트 인덱스로 표현할 수 없습니다")

    # ── 1. 일치 판정 ──
    matches = [builder.is_equal(k, query) for k in keys]
    num_matches = builder.add_many(m.target for m in matches)

    # ── 2. 패킹 ──
    packed = []
    for i, (match, val) in enumerate(zip(matches, vals)):
        builder.range_check(val, value_bits)
        index = builder.constant(n - i)
        packed.append(encode(builder, match, index, val, layout))

    # ── 3. 정렬 ──
    sorted_packed = sort(builder, packed, layout.total_bits)

    # ── 4, 5. 디코딩과 마스킹 ──
    sorted_matches = [decode_flag(builder, p, layout) for p in sorted_packed]
    sorted_keys = [builder.mul(m, query) for m in sorted_matches]
    sorted_vals = [
        builder.mul(decode_value(builder, p, layout), m)
        for p, m in zip(sorted_packed, sorted_matches)
    ]
    return FilterResult(num_matches, sorted_matches, sorted_keys, sorted_vals)
