"""
백엔드 Fiat-Shamir Transcript
==============================

증명 백엔드가 복사 제약의 grand product 검사에 쓰는 챌린지 β, γ를 만든다.

회로 내부 챌린저(iop/challenger.py)와 달리 이쪽은 회로 밖에서만 동작하므로
게이트로 표현할 필요가 없고, SHA-256으로 충분하다.

  공개 입력 → a 열 → b 열 → c 열 → β → γ

Prover와 Verifier가 같은 순서로 같은 값을 추가하면 같은 챌린지를 얻는다.
배선 값이 하나라도 바뀌면 β, γ도 바뀐다.

사용 예시:
    >>> t = Transcript()
    >>> t.append_scalars(b"a", a_vals)
    >>> beta = t.challenge_scalar(b"beta")
"""

import hashlib

from zkgadgets.plonk.field import FR, CURVE_ORDER


class Transcript:
    """SHA-256 기반 Fiat-Shamir 트랜스크립트.

    속성:
        state: 현재까지 누적된 해시 입력 바이트열
    """

    def __init__(self, label=b"zkgadgets"):
        self.state = bytearray()
        self.state.extend(label)

    def append_scalar(self, label, scalar):
        """FR 스칼라를 32바이트 빅엔디안으로 추가한다."""
        self.state.extend(label)
        val = int(scalar) % CURVE_ORDER
        self.state.extend(val.to_bytes(32, "big"))

    def append_scalars(self, label, scalars):
        """스칼라 목록을 추가한다. 길이도 함께 기록해 경계를 구분한다."""
        scalars = list(scalars)
        self.state.extend(label)
        self.state.extend(len(scalars).to_bytes(8, "big"))
        for s in scalars:
            val = int(s) % CURVE_ORDER
            self.state.extend(val.to_bytes(32, "big"))

    def challenge_scalar(self, label):
        """현재 상태를 해싱해 챌린지를 만들고, 해시를 상태에 다시 추가한다."""
        self.state.extend(label)
        h = hashlib.sha256(bytes(self.state)).digest()
        challenge = FR(int.from_bytes(h, "big") % CURVE_ORDER)
        self.state.extend(h)
        return challenge
