"""
파일 이동 모듈: 카테고리 폴더로의 안전한 파일 이동 (덮어쓰기 없음)
"""

import shutil
import time
import logging
from pathlib import Path
from typing import List, Optional, Set
from dataclasses import dataclass
from enum import Enum

from .errors import PermissionDenied, RelocationIOError, SortifyError, SourceVanished
from .scanner import FileEntry

logger = logging.getLogger(__name__)

# 번호 붙이기 최대 시도 횟수 (초과 시 타임스탬프 사용)
MAX_COUNTER = 9999


class MoveOutcome(Enum):
    """파일 처리 결과 유형"""
    MOVED = "moved"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class MoveResult:
    """파일 하나의 처리 결과"""
    source: Path
    destination: Optional[Path]
    outcome: MoveOutcome
    reason: str = ""
    category: Optional[str] = None
    dry_run: bool = False

    @property
    def moved(self) -> bool:
        return self.outcome is MoveOutcome.MOVED

    @property
    def failed(self) -> bool:
        return self.outcome is MoveOutcome.FAILED


class FileRelocator:
    """
    파일 이동 클래스

    한 번의 정리 작업(pass) 동안 이미 배정한 대상 경로를 기억해서
    같은 이름이 두 번 배정되지 않게 한다.
    """

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self._claimed: Set[Path] = set()
        self._history: List[MoveResult] = []

    def reset(self):
        """새 작업 시작 전 배정 기록 초기화"""
        self._claimed.clear()
        self._history = []

    def _is_taken(self, path: Path) -> bool:
        return path in self._claimed or path.exists() or path.is_symlink()

    def _get_unique_path(self, path: Path) -> Path:
        """
        충돌 방지를 위한 고유 경로 생성

        a.jpg → a_1.jpg → a_2.jpg ... 순으로 시도하고, 모두 사용 중이면
        유닉스 타임스탬프를 붙인다.

        Args:
            path: 원래 대상 경로

        Returns:
            사용되지 않은 경로
        """
        if not self._is_taken(path):
            return path

        name = path.name
        stem, dot, suffix = name.rpartition(".")
        if not dot or not stem:
            stem, suffix = name, ""
        else:
            suffix = f".{suffix}"
        parent = path.parent

        for counter in range(1, MAX_COUNTER + 1):
            new_path = parent / f"{stem}_{counter}{suffix}"
            if not self._is_taken(new_path):
                return new_path

        timestamp = int(time.time())
        new_path = parent / f"{stem}_{timestamp}{suffix}"
        while self._is_taken(new_path):
            timestamp += 1
            new_path = parent / f"{stem}_{timestamp}{suffix}"
        return new_path

    def _ensure_directory(self, path: Path):
        """
        디렉토리 존재 확인 및 생성

        Args:
            path: 디렉토리 경로
        """
        try:
            path.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise PermissionDenied(path, e.strerror)
        except OSError as e:
            raise RelocationIOError(f"디렉토리 생성 실패: {path} - {e}")

    def _execute_move(self, source: Path, destination: Path):
        """실제 파일 이동 수행"""
        if not source.exists() and not source.is_symlink():
            raise SourceVanished(source)

        try:
            shutil.move(str(source), str(destination))
        except FileNotFoundError:
            if not source.exists():
                raise SourceVanished(source)
            raise RelocationIOError(f"이동 실패: {source} -> {destination}")
        except PermissionError as e:
            raise PermissionDenied(destination.parent, e.strerror)
        except (shutil.Error, OSError) as e:
            raise RelocationIOError(f"이동 실패: {source} -> {destination} - {e}")

    def relocate(self, entry: FileEntry, category: str, base_directory: Path) -> MoveResult:
        """
        파일을 base_directory/category 폴더로 이동

        실패해도 예외를 던지지 않고 FAILED 결과를 반환한다.

        Args:
            entry: 이동할 파일
            category: 대상 카테고리 (하위 폴더 이름)
            base_directory: 카테고리 폴더를 만들 기준 폴더

        Returns:
            MoveResult
        """
        target_dir = Path(base_directory) / category
        destination: Optional[Path] = None

        try:
            if self.dry_run:
                if not entry.path.exists() and not entry.path.is_symlink():
                    raise SourceVanished(entry.path)
                destination = self._get_unique_path(target_dir / entry.name)
            else:
                self._ensure_directory(target_dir)
                destination = self._get_unique_path(target_dir / entry.name)
                if destination.name != entry.name:
                    logger.info("이미 존재하는 파일: %s → %s", target_dir / entry.name, destination.name)
                self._execute_move(entry.path, destination)

        except SortifyError as e:
            result = MoveResult(
                source=entry.path,
                destination=destination,
                outcome=MoveOutcome.FAILED,
                reason=f"{e.reason}: {e}",
                category=category,
                dry_run=self.dry_run,
            )
            logger.error("이동 실패: %s - %s", entry.path, result.reason)
            self._history.append(result)
            return result
        except OSError as e:
            # 대상 경로 검사 중 오류 (이름이 너무 긴 경우, 폴더 접근 불가 등)
            return self.fail(entry, e, category)

        self._claimed.add(destination)
        result = MoveResult(
            source=entry.path,
            destination=destination,
            outcome=MoveOutcome.MOVED,
            category=category,
            dry_run=self.dry_run,
        )
        if self.dry_run:
            logger.info("[DRY RUN] 이동 예정: %s -> %s", entry.path, destination)
        else:
            logger.info("이동 완료: %s -> %s", entry.path, destination)
        self._history.append(result)
        return result

    def skip(self, entry: FileEntry, reason: str, category: Optional[str] = None) -> MoveResult:
        """건너뛴 파일의 결과 생성"""
        result = MoveResult(
            source=entry.path,
            destination=None,
            outcome=MoveOutcome.SKIPPED,
            reason=reason,
            category=category,
            dry_run=self.dry_run,
        )
        logger.info("건너뜀: %s (%s)", entry.path, reason)
        self._history.append(result)
        return result

    def fail(self, entry: FileEntry, error: Exception, category: Optional[str] = None) -> MoveResult:
        """예상치 못한 오류를 FAILED 결과로 변환"""
        if isinstance(error, SortifyError):
            reason = f"{error.reason}: {error}"
        elif isinstance(error, FileNotFoundError):
            reason = f"NotFound: {error}"
        elif isinstance(error, PermissionError):
            reason = f"PermissionDenied: {error}"
        else:
            reason = f"IOError: {error}"

        result = MoveResult(
            source=entry.path,
            destination=None,
            outcome=MoveOutcome.FAILED,
            reason=reason,
            category=category,
            dry_run=self.dry_run,
        )
        logger.error("처리 실패: %s - %s", entry.path, reason)
        self._history.append(result)
        return result

    def get_history(self) -> List[MoveResult]:
        """처리 이력 반환"""
        return self._history
