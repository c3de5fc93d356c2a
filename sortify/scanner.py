"""
디렉토리 스캔 모듈: 대상 폴더의 직속 파일 목록 생성 (하위 폴더는 탐색하지 않음)
"""

import os
import logging
from pathlib import Path
from typing import Iterator, List
from dataclasses import dataclass

from .errors import DirectoryNotFound, PermissionDenied

logger = logging.getLogger(__name__)


def split_extension(name: str) -> str:
    """
    파일명에서 확장자 추출

    마지막 '.' 뒤의 문자열을 소문자로 반환한다. '.'이 없거나
    맨 앞의 '.'뿐인 이름(.bashrc), '.'으로 끝나는 이름은 빈 문자열.

    Args:
        name: 파일 이름

    Returns:
        점 없는 소문자 확장자 또는 ""
    """
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return ""
    return ext.lower()


@dataclass(frozen=True)
class FileEntry:
    """스캔된 파일 정보"""
    name: str
    path: Path
    extension: str

    @classmethod
    def from_path(cls, path: Path) -> "FileEntry":
        path = Path(path)
        return cls(name=path.name, path=path, extension=split_extension(path.name))


class DirectoryScanner:
    """디렉토리 스캔 클래스"""

    def _check_directory(self, directory: Path):
        """스캔 가능한 디렉토리인지 확인"""
        if not directory.exists() or not directory.is_dir():
            raise DirectoryNotFound(directory)
        if not os.access(directory, os.R_OK | os.X_OK):
            raise PermissionDenied(directory, "읽기 권한 없음")

    def _snapshot(self, directory: Path) -> List[os.DirEntry]:
        """호출 시점의 디렉토리 목록 (이름순)"""
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except FileNotFoundError:
            raise DirectoryNotFound(directory)
        except NotADirectoryError:
            raise DirectoryNotFound(directory)
        except PermissionError as e:
            raise PermissionDenied(directory, e.strerror)

        return sorted(entries, key=lambda e: e.name)

    def scan(self, directory: Path) -> Iterator[FileEntry]:
        """
        디렉토리의 일반 파일을 FileEntry로 순회

        디렉토리 검사와 목록 스냅샷은 호출 즉시 수행되므로 오류는
        순회 전에 발생한다. 다시 호출하면 새 스냅샷으로 시작한다.

        Args:
            directory: 스캔할 디렉토리

        Returns:
            FileEntry 이터레이터
        """
        directory = Path(directory)
        self._check_directory(directory)
        entries = self._snapshot(directory)

        logger.debug("스냅샷 %s: 항목 %d개", directory, len(entries))

        return self._iter_files(entries)

    def _iter_files(self, entries: List[os.DirEntry]) -> Iterator[FileEntry]:
        for entry in entries:
            try:
                is_file = entry.is_file()
            except OSError as e:
                logger.debug("파일 정보 확인 실패: %s - %s", entry.path, e)
                continue

            if is_file:
                yield FileEntry.from_path(Path(entry.path))
