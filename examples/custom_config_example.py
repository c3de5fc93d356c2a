#!/usr/bin/env python3
"""
사용자 맞춤 설정 예제

이 파일을 복사하여 본인의 환경에 맞게 수정하세요.
"""

import sys
from pathlib import Path

# 상위 디렉토리 모듈 import
sys.path.insert(0, str(Path(__file__).parent.parent))

from sortify import SorterConfig, SortPass, build_classification_table
from sortify.cli import format_report

# ============================================================
# 사용자 맞춤 설정 - 아래 값들을 본인의 환경에 맞게 수정하세요
# ============================================================

# 정리 대상 폴더
TARGET_DIR = Path.home() / "Downloads"

# 기본 테이블에 추가/덮어쓸 카테고리
CUSTOM_CATEGORIES = {
    "Ebooks": ["epub", "mobi", "djvu", "azw3"],
    "Fonts": ["ttf", "otf", "woff", "woff2"],
    "Spreadsheets": ["xls", "xlsx", "ods", "csv"],
}

# 분류되지 않은 파일의 폴더
FALLBACK = "Other"

# True면 미리보기만
DRY_RUN = True


def main():
    config = SorterConfig(
        target_directory=TARGET_DIR,
        table=build_classification_table(CUSTOM_CATEGORIES),
        fallback_category=FALLBACK,
        dry_run=DRY_RUN,
        log_dir=None,
    )

    report = SortPass(config).run()
    print(format_report(report))


if __name__ == "__main__":
    main()
