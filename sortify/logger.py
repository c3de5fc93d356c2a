"""
로깅 모듈: 정리 작업의 상세 로깅 (텍스트 로그 + JSON 세션 로그)
"""

import logging
import json
from pathlib import Path
from datetime import datetime
from typing import Dict, List, Optional
from dataclasses import dataclass, asdict

from .file_mover import MoveOutcome, MoveResult

# 패키지 로거: 각 모듈의 logging.getLogger(__name__) 로그가 여기로 모인다
PACKAGE_LOGGER = "sortify"

FILE_LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(message)s'


@dataclass
class LogEntry:
    """JSON 세션 로그 항목"""
    timestamp: str
    level: str
    action: str
    source: Optional[str] = None
    destination: Optional[str] = None
    status: str = ""
    details: Optional[Dict] = None
    error: Optional[str] = None


class SortLogger:
    """
    정리 작업 세션 로거

    패키지 로거에 콘솔/파일 핸들러를 붙이고, 파일별 처리 결과를
    LogEntry로 모아 finalize() 시점에 JSON으로 저장한다.
    """

    def __init__(self, log_dir: Optional[Path] = None, verbose: bool = False):
        """
        Args:
            log_dir: 로그 파일 저장 디렉토리 (None이면 파일 로그 없음)
            verbose: True면 콘솔에 INFO 로그까지 출력
        """
        self.log_dir = Path(log_dir) if log_dir is not None else None
        self.verbose = verbose
        self.session_id = datetime.now().strftime("%Y%m%d_%H%M%S")

        self.log_file: Optional[Path] = None
        self.json_log_file: Optional[Path] = None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.log_dir / f"sortify_{self.session_id}.log"
            self.json_log_file = self.log_dir / f"sortify_{self.session_id}.json"

        self.entries: List[LogEntry] = []
        self.summary: Optional[Dict] = None

        self._setup_logger()
        self.info("세션 시작", details={"session_id": self.session_id})

    def _setup_logger(self):
        self.logger = logging.getLogger(PACKAGE_LOGGER)
        self.logger.setLevel(logging.DEBUG)
        self._close_handlers()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO if self.verbose else logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        self.logger.addHandler(console_handler)

        if self.log_file is not None:
            file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
            self.logger.addHandler(file_handler)

    def _close_handlers(self):
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

    def _log(self, level: int, action: str, details: Dict = None, error: str = None):
        """JSON 항목을 남기고 같은 내용을 패키지 로거로 출력"""
        self.entries.append(LogEntry(
            timestamp=datetime.now().isoformat(),
            level=logging.getLevelName(level),
            action=action,
            details=details,
            error=error,
        ))

        msg = action
        if details:
            msg += " | " + ", ".join(f"{k}={v}" for k, v in details.items())
        if error:
            msg += f" | 오류: {error}"
        self.logger.log(level, msg)

    def debug(self, action: str, details: Dict = None):
        self._log(logging.DEBUG, action, details)

    def info(self, action: str, details: Dict = None):
        self._log(logging.INFO, action, details)

    def error(self, action: str, error: str = None, details: Dict = None):
        self._log(logging.ERROR, action, details, error)

    def log_result(self, result: MoveResult):
        """
        파일 처리 결과 기록

        텍스트 로그는 file_mover 모듈 로거가 이미 남기므로 여기서는
        JSON 항목만 쌓는다.
        """
        if result.outcome is MoveOutcome.FAILED:
            level, action = "ERROR", "파일 이동 실패"
        elif result.outcome is MoveOutcome.SKIPPED:
            level, action = "INFO", "파일 건너뜀"
        else:
            level = "INFO"
            action = "[DRY RUN] 파일 이동 예정" if result.dry_run else "파일 이동"

        details = {"category": result.category}
        if result.reason and result.outcome is not MoveOutcome.FAILED:
            details["reason"] = result.reason

        self.entries.append(LogEntry(
            timestamp=datetime.now().isoformat(),
            level=level,
            action=action,
            source=str(result.source),
            destination=str(result.destination) if result.destination else None,
            status=result.outcome.value,
            details=details,
            error=result.reason if result.outcome is MoveOutcome.FAILED else None,
        ))

    def log_summary(self, summary: Dict):
        """작업 요약 기록 (JSON 로그 최상위에도 저장)"""
        self.summary = summary
        self.debug("작업 요약", details=summary)

    def save_json_log(self):
        """JSON 세션 로그 저장"""
        if self.json_log_file is None:
            return

        log_data = {
            "session_id": self.session_id,
            "start_time": self.entries[0].timestamp if self.entries else None,
            "end_time": datetime.now().isoformat(),
            "summary": self.summary,
            "total_entries": len(self.entries),
            "entries": [asdict(entry) for entry in self.entries],
        }

        try:
            with open(self.json_log_file, 'w', encoding='utf-8') as f:
                json.dump(log_data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            self.logger.error(f"JSON 로그 저장 실패: {e}")
            return

        self.logger.debug(f"JSON 로그 저장: {self.json_log_file}")

    def finalize(self):
        """세션 종료: JSON 로그 저장 후 핸들러 정리"""
        self.info("세션 종료", details={"total_entries": len(self.entries)})
        self.save_json_log()
        self._close_handlers()

    def get_log_paths(self) -> Dict[str, Optional[Path]]:
        """로그 파일 경로 반환"""
        return {
            "text_log": self.log_file,
            "json_log": self.json_log_file,
        }


def create_session_logger(log_dir: Optional[Path] = None, verbose: bool = False) -> SortLogger:
    """
    새 세션 로거 생성 헬퍼 함수

    Args:
        log_dir: 로그 디렉토리 (None이면 콘솔 로그만)
        verbose: 콘솔에 INFO 로그 출력 여부

    Returns:
        SortLogger 인스턴스
    """
    return SortLogger(log_dir=log_dir, verbose=verbose)
