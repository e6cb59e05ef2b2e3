"""
원자적 작업 실행

한 작업 안에서 발생한 모든 상태 변경(볼트 상태, 토큰 잔고, 풀 상태)을
실패 시 통째로 되돌립니다. 보상 트랜잭션은 없으며 부분 성공도 없습니다.
"""

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from ..interfaces import Journaled

logger = logging.getLogger(__name__)


@contextmanager
def atomic(participants: Iterable[object]) -> Iterator[None]:
    """참여자 전체를 스냅샷하고, 예외가 빠져나가면 복원 후 다시 던짐

    Journaled 프로토콜(snapshot/restore)을 구현하지 않은 참여자는 건너뜁니다.
    """
    journaled = []
    seen = set()
    for participant in participants:
        if participant is None or id(participant) in seen:
            continue
        seen.add(id(participant))
        if isinstance(participant, Journaled):
            journaled.append(participant)

    snapshots = [(p, p.snapshot()) for p in journaled]
    try:
        yield
    except BaseException as e:
        for participant, snap in reversed(snapshots):
            participant.restore(snap)
        logger.debug("작업 롤백: %s (%s)", type(e).__name__, e)
        raise
