"""
확장자 분류 모듈: 분류 테이블을 이용해 파일을 카테고리로 매핑
"""

from typing import Optional

from .config import ClassificationTable, normalize_extension
from .scanner import FileEntry, split_extension


class ExtensionClassifier:
    """
    확장자 기반 분류 클래스

    테이블에 없는 확장자는 None(미분류)을 반환한다.
    대체 카테고리 적용은 호출하는 쪽(SortPass)의 몫.
    """

    def __init__(self, table: ClassificationTable):
        self.table = table

    def classify_extension(self, ext: str) -> Optional[str]:
        """확장자로 카테고리 조회"""
        ext = normalize_extension(ext)
        if not ext:
            return None
        return self.table.get(ext)

    def classify_name(self, name: str) -> Optional[str]:
        """파일 이름으로 카테고리 조회"""
        return self.classify_extension(split_extension(name))

    def classify(self, entry: FileEntry) -> Optional[str]:
        """
        FileEntry 분류

        Args:
            entry: 스캔된 파일

        Returns:
            카테고리 이름 또는 None (미분류)
        """
        return self.classify_extension(entry.extension)
