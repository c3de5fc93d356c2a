"""
Sortify - 파일 정리 도구 핵심 모듈

제공 기능:
- SorterConfig: 설정 클래스
- ClassificationTable: 확장자 → 카테고리 분류 테이블
- DirectoryScanner: 대상 폴더 스캔
- ExtensionClassifier: 확장자 분류
- FileRelocator: 안전한 파일 이동
- SortPass: 스캔 → 분류 → 이동 통합 작업
"""

__version__ = "0.4.0"

from .config import SorterConfig, ClassificationTable, build_classification_table
from .scanner import DirectoryScanner, FileEntry
from .classifier import ExtensionClassifier
from .file_mover import FileRelocator, MoveOutcome, MoveResult
from .organizer import SortPass, SortReport, PassState, sort_directory

__all__ = [
    'SorterConfig',
    'ClassificationTable',
    'build_classification_table',
    'DirectoryScanner',
    'FileEntry',
    'ExtensionClassifier',
    'FileRelocator',
    'MoveOutcome',
    'MoveResult',
    'SortPass',
    'SortReport',
    'PassState',
    'sort_directory',
]
