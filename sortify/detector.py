"""
파일 시그니처 검사 모듈: 파일 앞부분의 매직 넘버로 실제 형식 추정
"""

from pathlib import Path
from typing import Optional, Tuple
from dataclasses import dataclass

HEADER_CAP = 64

# (패턴, 오프셋, 확장자)
FIXED_SIGNATURES: Tuple[Tuple[bytes, int, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", 0, "png"),
    (b"\xFF\xD8\xFF", 0, "jpg"),
    (b"GIF87a", 0, "gif"),
    (b"GIF89a", 0, "gif"),
    (b"BM", 0, "bmp"),
    (b"%PDF", 0, "pdf"),
    (b"%!PS-Adobe-", 0, "ps"),
    (b"PK\x03\x04", 0, "zip"),
    (b"\x1F\x8B\x08", 0, "gz"),
    (b"\x1A\x45\xDF\xA3", 0, "mkv"),
    (b"WEBP", 8, "webp"),
    (b"ID3", 0, "mp3"),
    (b"OggS", 0, "ogg"),
    (b"fLaC", 0, "flac"),
    (b"\x00\x00\x01\x00", 0, "ico"),
    (b"II*\x00", 0, "tif"),
    (b"MM\x00*", 0, "tif"),
    (b"Rar!\x1A\x07\x00", 0, "rar"),
    (b"7z\xBC\xAF\x27\x1C", 0, "7z"),
)

# 실행 파일 시그니처
BINARY_SIGNATURES: Tuple[Tuple[bytes, int, str], ...] = (
    (b"MZ", 0, "exe"),
    (b"\x7FELF", 0, "elf"),
    (b"\xCA\xFE\xBA\xBE", 0, "mach-o"),
    (b"\xCF\xFA\xED\xFE", 0, "mach-o"),
    (b"\xFE\xED\xFA\xCF", 0, "mach-o"),
    (b"\xFE\xED\xFA\xCE", 0, "mach-o"),
    (b"\x00asm", 0, "wasm"),
)

# 바이너리로 취급하는 컨테이너 형식
BINARY_FORMATS = {
    "png", "jpg", "gif", "bmp", "pdf", "ps", "webp", "mkv", "ico", "tif",
    "gz", "rar", "7z", "mp3", "ogg", "flac", "zip",
}

_MP4_BRANDS = {
    b"isom": "mp4", b"iso2": "mp4", b"mp41": "mp4", b"mp42": "mp4",
    b"avc1": "mp4", b"MSNV": "mp4", b"mp71": "mp4",
    b"M4V ": "m4v", b"M4A ": "m4a", b"M4B ": "m4b", b"qt  ": "mov",
}

_RIFF_TYPES = {b"WEBP": "webp", b"WAVE": "wav", b"AVI ": "avi"}

_TEXT_BYTES = frozenset([0x09, 0x0A, 0x0D]) | frozenset(range(0x20, 0x7F))


@dataclass
class Resolution:
    """확장자 판정 결과"""
    extension: str
    signature: Optional[str] = None
    mismatch: bool = False


def read_prefix(path: Path, cap: int = HEADER_CAP) -> bytes:
    """파일 앞부분 읽기"""
    with open(path, "rb") as f:
        return f.read(cap)


def _starts_with_at(buf: bytes, offset: int, pattern: bytes) -> bool:
    return buf[offset:offset + len(pattern)] == pattern


def _detect_mp4_like(buf: bytes) -> Optional[str]:
    if len(buf) < 12 or not _starts_with_at(buf, 4, b"ftyp"):
        return None
    return _MP4_BRANDS.get(buf[8:12], "mp4")


def _detect_riff(buf: bytes) -> Optional[str]:
    if len(buf) < 12 or not buf.startswith(b"RIFF"):
        return None
    return _RIFF_TYPES.get(buf[8:12])


def _detect_zip_like(buf: bytes) -> Optional[str]:
    """ZIP 기반 형식 구분 (오피스 문서, apk, jar)"""
    if not buf.startswith(b"PK\x03\x04"):
        return None

    if b"word/" in buf:
        return "docx"
    if b"xl/" in buf:
        return "xlsx"
    if b"ppt/" in buf:
        return "pptx"
    if b"[Content_Types].xml" in buf:
        # 첫 항목만으로는 docx/xlsx/pptx를 구분할 수 없다
        return "docx"
    if b"AndroidManifest.xml" in buf:
        return "apk"
    if b"META-INF/" in buf:
        return "jar"
    return "zip"


def _detect_json(buf: bytes) -> Optional[str]:
    if buf.startswith(b"\xEF\xBB\xBF"):
        buf = buf[3:]

    stripped = buf.lstrip()
    if not stripped or stripped[:1] not in (b"{", b"["):
        return None

    if any(ch in stripped for ch in (b'"', b":", b",")):
        return "json"
    return None


def _detect_fixed(buf: bytes) -> Optional[str]:
    for pattern, offset, ext in FIXED_SIGNATURES:
        if _starts_with_at(buf, offset, pattern):
            return ext
    return None


def _looks_binary(buf: bytes) -> bool:
    """NUL 바이트가 있거나 출력 불가 문자가 30%를 넘으면 바이너리"""
    if not buf:
        return False
    if b"\x00" in buf:
        return True

    non_text = sum(1 for b in buf if b not in _TEXT_BYTES)
    return non_text / len(buf) > 0.30


def detect_signature(buf: bytes) -> Optional[str]:
    """
    버퍼에서 형식 추정

    Args:
        buf: 파일 앞부분 바이트

    Returns:
        추정 확장자 또는 None
    """
    if not buf:
        return None

    for sniffer in (_detect_mp4_like, _detect_riff, _detect_zip_like, _detect_json):
        ext = sniffer(buf)
        if ext:
            return ext

    return _detect_fixed(buf)


def detect_file_signature(path: Path) -> Optional[str]:
    """파일 시그니처로 형식 추정"""
    return detect_signature(read_prefix(path))


def is_binary_buffer(buf: bytes) -> bool:
    """버퍼가 바이너리 데이터인지 판정"""
    if not buf:
        return False

    for pattern, offset, _ in BINARY_SIGNATURES:
        if _starts_with_at(buf, offset, pattern):
            return True

    if (_detect_mp4_like(buf) or _detect_riff(buf) or _detect_zip_like(buf)
            or _detect_fixed(buf) in BINARY_FORMATS):
        return True

    if _detect_json(buf):
        return False

    return _looks_binary(buf)


def is_binary(path: Path) -> bool:
    """파일이 바이너리인지 판정"""
    return is_binary_buffer(read_prefix(path))


def resolve_extension(path: Path, declared: str) -> Resolution:
    """
    선언된 확장자와 시그니처를 비교해 확장자 판정

    Args:
        path: 파일 경로
        declared: 파일명의 확장자 (정규화된 값, 없으면 "")

    Returns:
        Resolution (시그니처가 없으면 선언된 확장자 사용)
    """
    signature = detect_file_signature(path)

    if signature is None:
        return Resolution(extension=declared)

    if not declared:
        return Resolution(extension=signature, signature=signature)

    if _same_format(declared, signature):
        return Resolution(extension=declared, signature=signature)

    return Resolution(extension=declared, signature=signature, mismatch=True)


# 시그니처로는 구분할 수 없는 동일 형식의 확장자들
_EQUIVALENT = {
    "jpg": {"jpeg", "jpe", "jfif"},
    "tif": {"tiff"},
    "mp4": {"m4v", "m4a", "m4b", "mov", "3gp"},
    "gz": {"tgz"},
    "docx": {"xlsx", "pptx", "docm", "xlsm", "pptm"},
    "zip": {"docx", "xlsx", "pptx", "odt", "ods", "odp", "epub", "apk", "jar"},
    "mkv": {"webm"},
    "ogg": {"ogv", "oga", "opus"},
}


def _same_format(declared: str, signature: str) -> bool:
    if declared == signature:
        return True
    return declared in _EQUIVALENT.get(signature, set())
