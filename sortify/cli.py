"""
CLI 인터페이스 모듈: 명령줄 인터페이스, 결과 보고서 출력
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from . import __version__
from .config import BINARY_POLICIES, MISMATCH_POLICIES, SorterConfig, validate_category
from .config_loader import create_config_from_yaml
from .errors import SortifyError
from .file_mover import MoveOutcome
from .logger import create_session_logger
from .organizer import SortPass, SortReport
from .scanner import FileEntry


def print_banner():
    """프로그램 배너 출력"""
    print(f"[ Sortify ] v{__version__}")
    print("→ 파일을 종류별 폴더로 정리하는 도구")
    print("-" * 45)


def prompt_user(message: str, choices: List[str] = None, default: str = None) -> str:
    """
    사용자 입력 프롬프트

    Args:
        message: 표시할 메시지
        choices: 선택지 리스트
        default: 기본값

    Returns:
        사용자 입력
    """
    while True:
        prompt = message
        if choices:
            prompt += f" [{'/'.join(choices)}]"
        if default:
            prompt += f" (기본: {default})"
        response = input(f"{prompt}: ").strip()

        if not response and default:
            return default

        if not choices or response.lower() in [c.lower() for c in choices]:
            return response.lower() if choices else response

        print(f"  잘못된 선택입니다. {choices} 중에서 선택하세요.")


def ask_binary_action(entry: FileEntry) -> str:
    """바이너리 파일 처리 방법을 사용자에게 묻기"""
    print(f"\n바이너리 파일 감지: {entry.path}")
    answer = prompt_user(
        "  s: 이 파일 건너뛰기\n"
        "  sa: 모든 바이너리 파일 건너뛰기\n"
        "  p: 이 파일 처리 (다음에 다시 묻기)\n"
        "  pa: 모든 바이너리 파일 처리\n"
        "선택",
        choices=["s", "sa", "p", "pa"],
        default="s",
    )
    return {"s": "skip", "sa": "skip_all", "p": "process", "pa": "process_all"}[answer]


def ask_mismatch_action(entry: FileEntry, signature: str) -> str:
    """시그니처/확장자 불일치 파일 처리 방법을 사용자에게 묻기"""
    print(f"\n확장자와 파일 시그니처가 다릅니다: {entry.path}")
    print(f"  확장자: .{entry.extension}")
    print(f"  시그니처: .{signature}")
    answer = prompt_user(
        "  s: 이 파일 건너뛰기\n"
        f"  g: 시그니처 형식(.{signature})으로 분류\n"
        f"  e: 확장자(.{entry.extension})로 분류\n"
        "  m: 수동 확인 폴더로 이동\n"
        "선택",
        choices=["s", "g", "e", "m"],
        default="s",
    )
    return {"s": "skip", "g": "signature", "e": "extension", "m": "manual"}[answer]


def format_report(report: SortReport) -> str:
    """
    정리 결과 보고서 생성

    Args:
        report: SortReport

    Returns:
        포맷된 보고서
    """
    lines = []
    lines.append("정리 완료")
    lines.append("")
    lines.append("드라이 런 미리보기:" if report.dry_run else "이동한 파일:")

    moved = [r for r in report.results if r.outcome is MoveOutcome.MOVED]
    if not moved:
        lines.append("  (없음)")
    for r in moved:
        dest = r.destination.relative_to(report.directory) if r.destination else r.category
        lines.append(f"  {r.source.name} → {dest}")

    skipped = [r for r in report.results if r.outcome is MoveOutcome.SKIPPED]
    if skipped:
        lines.append("")
        lines.append("건너뛴 파일:")
        for r in skipped:
            lines.append(f"  {r.source.name} ({r.reason})")

    if report.warnings:
        lines.append("")
        lines.append("경고:")
        for warning in report.warnings:
            lines.append(f"  {warning}")

    failures = report.failures()
    if failures:
        lines.append("")
        lines.append(f"실패 ({len(failures)}개):")
        for r in failures:
            lines.append(f"  {r.source.name}")
            lines.append(f"    오류: {r.reason}")

    lines.append("")
    lines.append("요약:")
    if report.dry_run:
        lines.append(f"  이동 예정: {report.moved}")
        lines.append(f"  건너뜀 예정: {report.skipped}")
    else:
        lines.append(f"  이동: {report.moved}")
        lines.append(f"  건너뜀: {report.skipped}")
    lines.append(f"  실패: {report.failed}")
    if report.warnings:
        lines.append(f"  경고: {len(report.warnings)}")

    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    """명령행 파서 생성"""
    parser = argparse.ArgumentParser(
        prog="sortify",
        description="폴더의 파일을 확장자별 하위 폴더(Pictures, Documents, ...)로 정리합니다.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
사용 예시:
    # 현재 폴더 정리
    sortify

    # 미리보기 (실제 이동 없음)
    sortify ~/Downloads --dry-run

    # 사용자 설정 파일 사용
    sortify ~/Downloads --config sortify.yaml
        """
    )

    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="정리 대상 폴더 (기본: 현재 폴더)"
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="YAML 설정 파일 경로"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="실제로 이동하지 않고 결과만 미리보기"
    )
    parser.add_argument(
        "--detect-signatures",
        action="store_true",
        help="파일 시그니처(매직 넘버)로 실제 형식 확인"
    )
    parser.add_argument(
        "--mismatch",
        choices=MISMATCH_POLICIES,
        default=None,
        help="시그니처/확장자 불일치 처리 (기본: manual, ask는 파일마다 질문)"
    )
    parser.add_argument(
        "--binary",
        choices=BINARY_POLICIES,
        default=None,
        help="바이너리 파일 처리 (기본: process)"
    )
    parser.add_argument(
        "--fallback",
        type=str,
        default=None,
        help="분류되지 않은 파일의 폴더 이름 (기본: Uncategorized)"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="로그 저장 폴더 (기본: ~/.sortify/logs)"
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="로그 파일을 남기지 않음"
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="진행률 표시 끄기"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="상세 로그 출력"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def create_config(args: argparse.Namespace) -> SorterConfig:
    """
    명령행 인자와 설정 파일로 SorterConfig 생성 (명령행 값이 우선)

    Args:
        args: 파싱된 인자

    Returns:
        SorterConfig 인스턴스
    """
    if args.config:
        config = create_config_from_yaml(Path(args.config))
    else:
        config = SorterConfig()

    if args.target:
        config.target_directory = Path(args.target)
    if args.dry_run:
        config.dry_run = True
    if args.detect_signatures:
        config.detect_signatures = True
    if args.mismatch:
        config.mismatch_policy = args.mismatch
    if args.binary:
        config.binary_policy = args.binary
    if args.fallback:
        config.fallback_category = validate_category(args.fallback)
    if args.log_dir:
        config.log_dir = Path(args.log_dir)
    if args.no_log_file:
        config.log_dir = None
    if args.no_progress:
        config.show_progress = False

    return config


def _progress(entries: List[FileEntry]):
    return tqdm(entries, desc="파일 처리 중", unit="file", leave=False)


def main(argv: Optional[List[str]] = None) -> int:
    """
    메인 함수

    Returns:
        종료 코드 (작업이 시작되지 못한 경우에만 1)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    print_banner()

    try:
        config = create_config(args)
    except SortifyError as e:
        print(f"오류: {e}", file=sys.stderr)
        return 1

    try:
        sort_logger = create_session_logger(config.log_dir, verbose=args.verbose)
    except OSError as e:
        print(f"오류: 로그 폴더를 만들 수 없습니다: {e}", file=sys.stderr)
        return 1

    interactive = sys.stdin.isatty()
    sort_pass = SortPass(
        config,
        sort_logger=sort_logger,
        binary_decider=ask_binary_action if interactive and config.binary_policy == "ask" else None,
        mismatch_decider=ask_mismatch_action if interactive and config.mismatch_policy == "ask" else None,
    )

    try:
        report = sort_pass.run(
            config.resolve_target(),
            progress=_progress if config.show_progress else None,
        )
    except SortifyError as e:
        sort_logger.error("작업 시작 실패", error=str(e))
        sort_logger.finalize()
        return 1

    if not report.total:
        print("대상 폴더에 파일이 없습니다.")
    else:
        print(format_report(report))

    sort_logger.finalize()
    return 0


if __name__ == "__main__":
    sys.exit(main())
