"""
예외 모듈: 정리 작업 중 발생하는 오류 유형 정의

각 예외는 MoveResult에 기록되는 사유 코드(reason)를 가진다.
"""

from pathlib import Path
from typing import Optional


class SortifyError(Exception):
    """Sortify 오류 기본 클래스"""
    reason = "Error"


class DirectoryNotFound(SortifyError):
    """대상 디렉토리가 없거나 디렉토리가 아님"""
    reason = "NotFound"

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"디렉토리를 찾을 수 없습니다: {self.path}")


class PermissionDenied(SortifyError):
    """읽기/쓰기 권한 없음"""
    reason = "PermissionDenied"

    def __init__(self, path: Path, detail: Optional[str] = None):
        self.path = Path(path)
        message = f"접근 권한이 없습니다: {self.path}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class SourceVanished(SortifyError):
    """스캔 이후 원본 파일이 사라짐"""
    reason = "NotFound"

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"원본 파일이 사라졌습니다: {self.path}")


class RelocationIOError(SortifyError):
    """이동/폴더 생성 중 발생한 기타 파일시스템 오류"""
    reason = "IOError"


class ConfigError(SortifyError):
    """잘못된 설정 값"""
    reason = "ConfigError"
