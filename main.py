#!/usr/bin/env python3
"""
Sortify - 메인 진입점

사용법:
    # 현재 폴더 정리
    python main.py

    # 지정 폴더 미리보기
    python main.py ~/Downloads --dry-run

    # 설정 파일 사용
    python main.py ~/Downloads --config sortify.yaml

기능:
    1. 폴더의 파일(하위 폴더 제외)을 확장자별로 분류
    2. 카테고리 폴더로 이동 (같은 이름은 _1, _2 ... 로 구분)
    3. 선택적으로 파일 시그니처 검사
"""

import sys

from sortify.cli import main


if __name__ == "__main__":
    sys.exit(main())
