"""
회로/증명 직렬화 헬퍼
======================

CircuitData와 Proof를 JSON으로 저장 가능한 딕셔너리로 변환한다.
FR 원소는 10진수 문자열(str(int))로 기록한다.

회로 직렬화에는 generator도 포함되며, 각 generator는
{"id": generator_id, "data": 배선 인덱스와 파라미터} 형태로 기록된다.
witness 값은 어디에도 들어가지 않으므로, 복원한 회로로 새 입력에 대해
다시 증명할 수 있다.
"""

from zkgadgets.config import CircuitConfig
from zkgadgets.errors import SerializationError
from zkgadgets.plonk.field import FR
from zkgadgets.plonk.circuit import CircuitData, Gate
from zkgadgets.plonk.prover import Proof
from zkgadgets.iop.generator import deserialize_generator as _deserialize_generator

# SortGenerator를 레지스트리에 등록한다
import zkgadgets.gadgets.permutation_check  # noqa: F401


# ─── FR ───

def serialize_fr(val):
    """FR → str(int)"""
    return str(int(val))


def deserialize_fr(s):
    """str(int) → FR"""
    return FR(int(s))


def serialize_fr_list(vals):
    return [serialize_fr(v) for v in vals]


def deserialize_fr_list(data):
    return [deserialize_fr(s) for s in data]


# ─── Gate ───

def serialize_gate(gate):
    """Gate → [q_L, q_R, q_O, q_M, q_C] 문자열 리스트"""
    return serialize_fr_list(gate.selectors())


def deserialize_gate(data):
    if len(data) != 5:
        raise SerializationError(f"게이트 셀렉터는 5개여야 합니다: {data!r}")
    return Gate(*deserialize_fr_list(data))


# ─── Generator ───

def serialize_generator(generator):
    return {"id": generator.id(), "data": generator.serialize()}


def deserialize_generator(data):
    return _deserialize_generator(data)


# ─── CircuitData ───

def serialize_circuit_data(circuit_data):
    return {
        "config": circuit_data.config.to_dict(),
        "n": circuit_data.n,
        "num_targets": circuit_data.num_targets,
        "gates": [serialize_gate(g) for g in circuit_data.gates],
        "wires": [list(w) for w in circuit_data.wires],
        "gate_kinds": list(circuit_data.gate_kinds),
        "public_inputs": list(circuit_data.public_inputs),
        "copy_constraints": [list(pair) for pair in circuit_data.copy_constraints],
        "generators": [serialize_generator(g) for g in circuit_data.generators],
    }


def deserialize_circuit_data(data):
    """딕셔너리 → CircuitData.

    Raises:
        SerializationError: 필드가 빠졌거나 형식이 맞지 않을 때
    """
    try:
        config = CircuitConfig.from_dict(data["config"])
        gates = [deserialize_gate(g) for g in data["gates"]]
        wires = [tuple(None if i is None else int(i) for i in w) for w in data["wires"]]
        generators = [deserialize_generator(g) for g in data["generators"]]
        circuit_data = CircuitData(
            config=config,
            gates=gates,
            wires=wires,
            gate_kinds=data["gate_kinds"],
            num_targets=int(data["num_targets"]),
            public_inputs=[int(i) for i in data["public_inputs"]],
            copy_constraints=[(int(x), int(y)) for x, y in data["copy_constraints"]],
            generators=generators,
        )
        expected_n = int(data["n"])
    except SerializationError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise SerializationError(f"회로 데이터를 복원할 수 없습니다: {e}") from e
    if circuit_data.n != expected_n:
        raise SerializationError(f"행 수 불일치: {circuit_data.n} != {expected_n}")
    return circuit_data


# ─── Proof ───

def serialize_proof(proof):
    return {
        "public_inputs": serialize_fr_list(proof.public_inputs),
        "a_vals": serialize_fr_list(proof.a_vals),
        "b_vals": serialize_fr_list(proof.b_vals),
        "c_vals": serialize_fr_list(proof.c_vals),
    }


def deserialize_proof(data):
    try:
        return Proof(
            deserialize_fr_list(data["public_inputs"]),
            deserialize_fr_list(data["a_vals"]),
            deserialize_fr_list(data["b_vals"]),
            deserialize_fr_list(data["c_vals"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SerializationError(f"증명 데이터를 복원할 수 없습니다: {e}") from e
