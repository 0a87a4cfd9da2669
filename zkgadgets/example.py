"""
정렬 기반 필터 데모
====================

keys = [2, 0, 2, 1, 2] 에서 query = 2 와 일치하는 레코드의 vals만 골라낸다.

실행:
    python -m zkgadgets.example

흐름:
    1. 회로 구성 (filter_matches + 공개 입력 등록)
    2. 빌드
    3. witness 입력
    4. 증명 생성 (witness 생성 + 제약 검사)
    5. 검증
"""

import logging

from zkgadgets.config import CircuitConfig
from zkgadgets.iop.witness import PartialWitness
from zkgadgets.plonk.circuit_builder import CircuitBuilder
from zkgadgets.plonk.prover import prove
from zkgadgets.plonk.verifier import verify
from zkgadgets.gadgets.filter import filter_matches

N = 5
INDEX_BITS = 7
VALUE_BITS = 16


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("  Verifiable Sort Demo: 정렬 기반 필터")
    print(f"  레코드 {N}개, 인덱스 {INDEX_BITS}비트, 값 {VALUE_BITS}비트")
    print("=" * 60)

    # ── 1. 회로 구성 ──
    print("\n[1] 회로 구성...")
    builder = CircuitBuilder(CircuitConfig.testing_config())
    query = builder.add_virtual_target()
    keys = builder.add_virtual_targets(N)
    vals = builder.add_virtual_targets(N)
    result = filter_matches(builder, keys, vals, query, INDEX_BITS, VALUE_BITS)

    builder.register_public_input(query)
    builder.register_public_inputs(keys)
    builder.register_public_inputs(vals)
    num_inputs = 1 + 2 * N
    builder.register_public_input(result.num_matches)
    builder.register_public_inputs(result.keys)
    builder.register_public_inputs(result.vals)

    counts = builder.print_gate_counts()
    print(f"    게이트 수: {builder.num_gates()}")
    for kind, count in counts.most_common(5):
        print(f"      {kind:<14} {count}")

    # ── 2. 빌드 ──
    print("\n[2] 빌드...")
    data = builder.build()
    print(f"    행 수 n: {data.n}")
    print(f"    복사 제약 수: {len(data.copy_constraints)}")

    # ── 3. witness 입력 ──
    print("\n[3] witness 입력...")
    key_vals = [2, 0, 2, 1, 2]
    val_vals = [i + N for i in range(N)]
    pw = PartialWitness()
    pw.set_target(query, 2)
    pw.set_target_arr(keys, key_vals)
    pw.set_target_arr(vals, val_vals)
    print("    query: 2")
    print(f"    keys:  {key_vals}")
    print(f"    vals:  {val_vals}")

    # ── 4. 증명 생성 ──
    print("\n[4] 증명 생성...")
    proof = prove(data, pw)
    outputs = proof.public_input_ints()[num_inputs:]
    print(f"    일치 개수: {outputs[0]}")
    for key, val in zip(outputs[1:1 + N], outputs[1 + N:]):
        print(f"      {key} {val}")

    # ── 5. 검증 ──
    print("\n[5] 검증...")
    ok = verify(proof, data)
    print(f"    결과: {'✓ 성공' if ok else '✗ 실패'}")
    return ok


if __name__ == "__main__":
    main()
