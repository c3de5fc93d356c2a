"""
설정 모듈: 애플리케이션 설정, 기본 분류 테이블 및 상수 정의
"""

import collections.abc
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Set
from dataclasses import dataclass, field

from .errors import ConfigError


# 확장자 → 카테고리 기본 매핑 (카테고리 이름이 곧 하위 폴더 이름)
DEFAULT_CATEGORIES: Dict[str, List[str]] = {
    "Video": [
        "mp4", "m4v", "mov", "mkv", "avi", "webm", "flv", "wmv",
        "mpg", "mpeg", "3gp", "ogv", "ts", "vob",
    ],
    "Audio": [
        "mp3", "wav", "flac", "ogg", "m4a", "aac", "opus",
        "wma", "ape", "alac", "aiff", "dsf", "dsd",
    ],
    "Pictures": [
        "png", "jpg", "jpeg", "gif", "bmp", "webp", "tiff", "tif",
        "svg", "ico", "heic", "heif", "raw", "cr2", "nef",
        "arw", "dng", "psd", "ai", "eps",
    ],
    "Documents": [
        "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
        "txt", "md", "rtf", "odt", "ods", "odp",
        "csv", "epub", "mobi", "djvu",
    ],
    "Archives": [
        "zip", "7z", "rar", "gz", "tar", "tgz", "bz2",
        "xz", "zst", "lz4", "cab", "iso", "dmg",
    ],
    "Executables": [
        "exe", "msi", "elf", "app", "mach-o", "wasm",
        "dll", "so", "dylib", "bin",
    ],
    "Code": [
        "rs", "py", "js", "jsx", "tsx", "c", "cpp", "h", "hpp",
        "java", "go", "rb", "php", "swift", "kt", "cs", "html", "css",
        "scss", "sass", "less", "vue", "svelte", "sh", "bash", "zsh",
        "fish", "ps1", "bat", "cmd", "yaml", "yml", "json", "toml",
        "xml", "ini", "conf", "config", "env", "gitignore",
        "dockerfile", "makefile", "cmake", "sql",
    ],
}

# 분류되지 않은 파일이 이동할 폴더
DEFAULT_FALLBACK_CATEGORY = "Uncategorized"

# 시그니처와 확장자가 다른 파일을 모아두는 폴더
DEFAULT_MISMATCH_CATEGORY = "Check manually"

MISMATCH_POLICIES = ("manual", "signature", "extension", "skip", "ask")
BINARY_POLICIES = ("process", "skip", "ask")


def normalize_extension(ext: str) -> str:
    """확장자 정규화: 앞의 점 제거 + 소문자"""
    return ext.strip().lstrip(".").lower()


def validate_category(category: str) -> str:
    """
    카테고리 이름 검증

    Args:
        category: 카테고리(폴더) 이름

    Returns:
        앞뒤 공백이 제거된 카테고리 이름
    """
    if not isinstance(category, str) or not category.strip():
        raise ConfigError(f"카테고리 이름이 비어 있습니다: {category!r}")

    category = category.strip()
    if category in (".", "..") or "/" in category or "\\" in category:
        raise ConfigError(f"카테고리 이름에 경로를 쓸 수 없습니다: {category!r}")

    return category


class ClassificationTable(collections.abc.Mapping):
    """
    확장자 → 카테고리 읽기 전용 매핑

    키는 정규화된 확장자(소문자, 점 없음). 생성 후에는 변경할 수 없다.
    """

    def __init__(self, mapping: Mapping[str, str]):
        table: Dict[str, str] = {}
        for ext, category in mapping.items():
            if not isinstance(ext, str):
                raise ConfigError(f"확장자는 문자열이어야 합니다: {ext!r}")
            key = normalize_extension(ext)
            if not key:
                raise ConfigError(f"빈 확장자는 등록할 수 없습니다: {ext!r}")
            table[key] = validate_category(category)

        self._table = MappingProxyType(table)

    def __getitem__(self, ext: str) -> str:
        return self._table[normalize_extension(ext)]

    def __contains__(self, ext) -> bool:
        return isinstance(ext, str) and normalize_extension(ext) in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"ClassificationTable({len(self._table)} extensions)"

    @property
    def categories(self) -> Set[str]:
        """등록된 카테고리 이름들"""
        return set(self._table.values())

    @classmethod
    def from_categories(cls, categories: Mapping[str, Iterable[str]]) -> "ClassificationTable":
        """카테고리 → 확장자 리스트 형태에서 생성"""
        mapping: Dict[str, str] = {}
        for category, extensions in categories.items():
            if isinstance(extensions, str) or not isinstance(extensions, collections.abc.Iterable):
                raise ConfigError(
                    f"카테고리 '{category}'의 확장자는 리스트여야 합니다: {extensions!r}"
                )
            for ext in extensions:
                mapping[ext] = category
        return cls(mapping)


def build_classification_table(categories: Optional[Mapping[str, Iterable[str]]] = None,
                               replace: bool = False) -> ClassificationTable:
    """
    기본 테이블에 사용자 카테고리를 덮어써서 분류 테이블 생성

    Args:
        categories: 카테고리 → 확장자 리스트 (None이면 기본값만 사용)
        replace: True면 기본 테이블을 버리고 사용자 카테고리만 사용

    Returns:
        ClassificationTable 인스턴스
    """
    merged: Dict[str, str] = {}

    if not replace:
        for category, extensions in DEFAULT_CATEGORIES.items():
            for ext in extensions:
                merged[ext] = category

    if categories:
        # 나중에 등록된 카테고리가 같은 확장자를 가져간다
        override = ClassificationTable.from_categories(categories)
        merged.update(override)

    return ClassificationTable(merged)


@dataclass
class SorterConfig:
    """파일 정렬 도구 설정 클래스"""

    # 정리 대상 폴더 (None이면 현재 작업 디렉토리)
    target_directory: Optional[Path] = None

    # 분류 테이블 (None이면 기본 테이블)
    table: ClassificationTable = field(default=None)

    # 분류되지 않은 파일의 대상 폴더
    fallback_category: str = DEFAULT_FALLBACK_CATEGORY

    # 시그니처 불일치 파일의 대상 폴더
    mismatch_category: str = DEFAULT_MISMATCH_CATEGORY

    # 드라이 런 모드 (실제 파일 이동 없이 미리보기)
    dry_run: bool = False

    # 파일 시그니처(매직 넘버) 검사 여부
    detect_signatures: bool = False

    # 시그니처/확장자 불일치 처리: manual, signature, extension, skip, ask
    mismatch_policy: str = "manual"

    # 바이너리 파일 처리: process, skip, ask
    binary_policy: str = "process"

    # 이동하지 않을 파일 패턴들
    excluded_patterns: Set[str] = field(default_factory=lambda: {
        '.DS_Store', 'Thumbs.db', 'desktop.ini', '~$*',
    })

    # 이동하지 않을 파일 경로들 (실행 스크립트, 설정 파일 등)
    protected_paths: Set[Path] = field(default_factory=set)

    # 로그 디렉토리 (None이면 파일 로그 없음)
    log_dir: Optional[Path] = field(default_factory=lambda: Path.home() / ".sortify" / "logs")

    # 진행률 표시 여부
    show_progress: bool = True

    def __post_init__(self):
        """초기화 후 처리"""
        if self.table is None:
            self.table = build_classification_table()
        elif not isinstance(self.table, ClassificationTable):
            self.table = ClassificationTable(self.table)

        if self.target_directory is not None:
            self.target_directory = Path(self.target_directory)
        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir)

        self.fallback_category = validate_category(self.fallback_category)
        self.mismatch_category = validate_category(self.mismatch_category)

        if self.mismatch_policy not in MISMATCH_POLICIES:
            raise ConfigError(
                f"알 수 없는 mismatch_policy: {self.mismatch_policy!r} "
                f"(가능한 값: {', '.join(MISMATCH_POLICIES)})"
            )
        if self.binary_policy not in BINARY_POLICIES:
            raise ConfigError(
                f"알 수 없는 binary_policy: {self.binary_policy!r} "
                f"(가능한 값: {', '.join(BINARY_POLICIES)})"
            )

        self.excluded_patterns = set(self.excluded_patterns)
        for pattern in self.excluded_patterns:
            if not isinstance(pattern, str):
                raise ConfigError(f"제외 패턴은 문자열이어야 합니다: {pattern!r}")
        self.protected_paths = {Path(p) for p in self.protected_paths}

    def resolve_target(self) -> Path:
        """대상 폴더 반환 (미지정 시 현재 작업 디렉토리)"""
        if self.target_directory is None:
            return Path.cwd()
        return self.target_directory
