"""
Range Vault 오류 정의

모든 오류는 현재 작업에 치명적입니다. 엔진 내부에서 재시도하지 않으며,
작업 전체가 원자적으로 롤백됩니다. 호출자는 `kind` 값으로
재시도 / 파라미터 조정 / 대기 여부를 판단합니다.
"""


class VaultError(Exception):
    """볼트 작업 실패의 기본 클래스"""
    kind: str = "vault_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class AuthorizationFailure(VaultError):
    """특정 호출자에게만 허용된 작업을 다른 호출자가 실행"""
    kind = "authorization_failure"


class InvalidArgument(VaultError):
    """0 수량, 지원하지 않는 토큰, 잘못된 설정"""
    kind = "invalid_argument"


class StalenessViolation(VaultError):
    """관측 틱과 실행 시점 틱의 차이가 허용 범위 초과"""
    kind = "staleness_violation"


class PreconditionNotMet(VaultError):
    """최소 재배치 간격 미경과 또는 재배치 불필요"""
    kind = "precondition_not_met"


class ExecutionShortfall(VaultError):
    """요청한 유동성이 0이 아닌데 풀이 0 유동성을 민트함"""
    kind = "execution_shortfall"


class GraphClientError(Exception):
    """Graph API 오류"""
    pass
