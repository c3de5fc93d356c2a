"""
정리 작업 모듈: 스캔 → 분류 → 이동을 하나의 작업(pass)으로 묶는 SortPass 클래스
"""

import sys
import fnmatch
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional
from dataclasses import dataclass, field
from enum import Enum

from .config import SorterConfig
from .errors import SortifyError
from .scanner import DirectoryScanner, FileEntry
from .classifier import ExtensionClassifier
from .detector import is_binary, resolve_extension
from .file_mover import FileRelocator, MoveOutcome, MoveResult
from .logger import SortLogger

logger = logging.getLogger(__name__)

# 바이너리 파일 처리 여부를 묻는 콜백. BINARY_ANSWERS 중 하나를 반환
BinaryDecider = Callable[[FileEntry], str]

BINARY_ANSWERS = ("skip", "skip_all", "process", "process_all")

# 시그니처/확장자 불일치 처리 방법을 묻는 콜백. (파일, 시그니처 확장자) → MISMATCH_ANSWERS 중 하나
MismatchDecider = Callable[[FileEntry, str], str]

MISMATCH_ANSWERS = ("skip", "signature", "extension", "manual")


class PassState(Enum):
    """정리 작업 상태"""
    IDLE = "idle"
    SCANNING = "scanning"
    CLASSIFYING = "classifying"
    RELOCATING = "relocating"
    DONE = "done"


@dataclass
class SortReport:
    """정리 작업 결과"""
    directory: Path
    results: List[MoveResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    dry_run: bool = False

    def _count(self, outcome: MoveOutcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def moved(self) -> int:
        return self._count(MoveOutcome.MOVED)

    @property
    def skipped(self) -> int:
        return self._count(MoveOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(MoveOutcome.FAILED)

    @property
    def total(self) -> int:
        return len(self.results)

    def failures(self) -> List[MoveResult]:
        return [r for r in self.results if r.outcome is MoveOutcome.FAILED]

    def by_category(self) -> Dict[str, int]:
        """카테고리별 이동 파일 수"""
        counts: Dict[str, int] = {}
        for r in self.results:
            if r.outcome is MoveOutcome.MOVED:
                counts[r.category] = counts.get(r.category, 0) + 1
        return counts

    def summary(self) -> Dict:
        return {
            "directory": str(self.directory),
            "total": self.total,
            "moved": self.moved,
            "skipped": self.skipped,
            "failed": self.failed,
            "warnings": len(self.warnings),
            "dry_run": self.dry_run,
        }


class SortPass:
    """
    한 디렉토리에 대한 정리 작업

    상태 전이: IDLE → SCANNING → (CLASSIFYING → RELOCATING)* → DONE.
    스캔 단계의 오류는 그대로 전파되고, 파일 단위 오류는 해당 파일의
    MoveResult에 기록된 뒤 다음 파일로 넘어간다.
    """

    def __init__(self, config: SorterConfig = None, sort_logger: SortLogger = None,
                 binary_decider: Optional[BinaryDecider] = None,
                 mismatch_decider: Optional[MismatchDecider] = None):
        """
        Args:
            config: 설정 객체 (None이면 기본 설정 사용)
            sort_logger: 세션 로거 (None이면 JSON 세션 기록 없음)
            binary_decider: binary_policy가 'ask'일 때 호출되는 콜백
            mismatch_decider: mismatch_policy가 'ask'일 때 호출되는 콜백
        """
        self.config = config or SorterConfig()
        self.sort_logger = sort_logger
        self.binary_decider = binary_decider
        self.mismatch_decider = mismatch_decider

        self.scanner = DirectoryScanner()
        self.classifier = ExtensionClassifier(self.config.table)
        self.relocator = FileRelocator(dry_run=self.config.dry_run)

        self.state = PassState.IDLE
        self._results: List[MoveResult] = []
        self._warnings: List[str] = []
        # 'ask' 응답 중 "모두 적용"을 선택하면 이후 파일에 재사용
        self._binary_choice: Optional[bool] = None

    def _protected_paths(self) -> set:
        """이동하면 안 되는 파일 경로들 (실행 중인 스크립트, 설정, 로그)"""
        paths = set()
        for p in self.config.protected_paths:
            paths.add(self._resolve(p))

        if sys.argv and sys.argv[0]:
            paths.add(self._resolve(Path(sys.argv[0])))

        if self.sort_logger is not None:
            for p in self.sort_logger.get_log_paths().values():
                if p is not None:
                    paths.add(self._resolve(p))

        return paths

    @staticmethod
    def _resolve(path: Path) -> Path:
        try:
            return Path(path).resolve()
        except (OSError, RuntimeError):
            return Path(path).absolute()

    def _is_excluded(self, entry: FileEntry) -> bool:
        return any(fnmatch.fnmatch(entry.name, pattern)
                   for pattern in self.config.excluded_patterns)

    def _should_process_binary(self, entry: FileEntry) -> bool:
        policy = self.config.binary_policy
        if policy == "process":
            return True
        if policy == "skip":
            return False

        if self._binary_choice is not None:
            return self._binary_choice
        if self.binary_decider is None or self.config.dry_run:
            # 물어볼 수 없으면 처리하지 않는다
            self._warnings.append(f"바이너리 파일 감지: {entry.path}")
            return False

        answer = self.binary_decider(entry)
        if answer not in BINARY_ANSWERS:
            raise ValueError(f"알 수 없는 응답: {answer!r}")

        if answer.endswith("_all"):
            self._binary_choice = answer == "process_all"
        return answer.startswith("process")

    def _ask_mismatch(self, entry: FileEntry, signature: str) -> str:
        """불일치 처리 방법 결정 (물어볼 수 없으면 수동 확인 폴더)"""
        if self.mismatch_decider is None or self.config.dry_run:
            return "manual"

        answer = self.mismatch_decider(entry, signature)
        if answer not in MISMATCH_ANSWERS:
            raise ValueError(f"알 수 없는 응답: {answer!r}")
        return answer

    def _choose_category(self, entry: FileEntry) -> Optional[str]:
        """
        파일의 카테고리 결정

        Returns:
            카테고리 이름, 건너뛸 파일이면 None
        """
        if not self.config.detect_signatures:
            category = self.classifier.classify(entry)
            return category or self.config.fallback_category

        resolution = resolve_extension(entry.path, entry.extension)

        if resolution.mismatch:
            self._warnings.append(
                f"시그니처/확장자 불일치: {entry.path} "
                f"(시그니처: .{resolution.signature}, 확장자: .{entry.extension})"
            )
            policy = self.config.mismatch_policy
            if policy == "ask":
                policy = self._ask_mismatch(entry, resolution.signature)
            if policy == "skip":
                return None
            if policy == "manual":
                return self.config.mismatch_category
            if policy == "signature":
                resolution.extension = resolution.signature

        if is_binary(entry.path) and not self._should_process_binary(entry):
            return None

        category = self.classifier.classify_extension(resolution.extension)
        return category or self.config.fallback_category

    def _process_entry(self, entry: FileEntry, base_directory: Path,
                       protected: set) -> MoveResult:
        """파일 하나 처리"""
        if self._resolve(entry.path) in protected:
            return self.relocator.skip(entry, "보호된 파일")
        if self._is_excluded(entry):
            return self.relocator.skip(entry, "제외 패턴")

        self.state = PassState.CLASSIFYING
        try:
            category = self._choose_category(entry)
        except OSError as e:
            return self.relocator.fail(entry, e)

        if category is None:
            return self.relocator.skip(entry, "시그니처 검사로 제외")

        self.state = PassState.RELOCATING
        try:
            return self.relocator.relocate(entry, category, base_directory)
        except OSError as e:
            return self.relocator.fail(entry, e, category)

    def run(self, directory: Path = None,
            progress: Optional[Callable[[Iterable[FileEntry]], Iterable[FileEntry]]] = None
            ) -> SortReport:
        """
        정리 작업 실행

        Args:
            directory: 대상 폴더 (None이면 config에서 가져옴)
            progress: 항목 목록을 감싸는 진행률 표시 함수 (예: tqdm)

        Returns:
            SortReport
        """
        if directory is None:
            directory = self.config.resolve_target()
        directory = Path(directory)

        self.relocator.reset()
        self._results = []
        self._warnings = []
        self._binary_choice = None

        self.state = PassState.SCANNING
        try:
            entries = list(self.scanner.scan(directory))
        except SortifyError:
            self.state = PassState.IDLE
            raise

        protected = self._protected_paths()
        logger.debug("스캔 완료: %s (파일 %d개)", directory, len(entries))

        if self.sort_logger is not None:
            self.sort_logger.info("디렉토리 스캔 완료",
                                  details={"path": str(directory), "files": len(entries)})

        iterable: Iterable[FileEntry] = progress(entries) if progress else entries
        for entry in iterable:
            result = self._process_entry(entry, directory, protected)
            self._results.append(result)
            if self.sort_logger is not None:
                self.sort_logger.log_result(result)

        self.state = PassState.DONE

        report = SortReport(
            directory=directory,
            results=list(self._results),
            warnings=list(self._warnings),
            dry_run=self.config.dry_run,
        )

        if self.sort_logger is not None:
            for warning in report.warnings:
                self.sort_logger.info("경고", details={"message": warning})
            self.sort_logger.log_summary(report.summary())

        return report


def sort_directory(directory: Path, config: SorterConfig = None) -> SortReport:
    """
    빠른 정리 유틸리티 함수

    Args:
        directory: 정리할 디렉토리
        config: 설정 (None이면 기본 설정, 파일 로그 없음)

    Returns:
        SortReport
    """
    if config is None:
        config = SorterConfig(target_directory=directory, log_dir=None)
    return SortPass(config).run(directory)
