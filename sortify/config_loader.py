"""
YAML 설정 파일 로더
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from .config import SorterConfig, build_classification_table
from .errors import ConfigError

# YAML에서 허용하는 최상위 키
KNOWN_KEYS = {
    'target_directory', 'fallback_category', 'mismatch_category', 'dry_run',
    'detect_signatures', 'mismatch_policy', 'binary_policy', 'excluded_patterns',
    'log_dir', 'categories', 'replace_default_categories',
}


def load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """
    YAML 설정 파일 로드

    Args:
        config_path: YAML 파일 경로

    Returns:
        설정 딕셔너리
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise ConfigError(f"설정 파일을 찾을 수 없습니다: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"설정 파일 형식 오류: {config_path} - {e}")
    except OSError as e:
        raise ConfigError(f"설정 파일을 읽을 수 없습니다: {config_path} - {e}")

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ConfigError(f"설정 파일 최상위는 매핑이어야 합니다: {config_path}")

    unknown = set(config_data) - KNOWN_KEYS
    if unknown:
        raise ConfigError(f"알 수 없는 설정 키: {', '.join(sorted(map(str, unknown)))}")

    return config_data


def _get_bool(data: Dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' 값은 true/false 여야 합니다: {value!r}")
    return value


def get_custom_categories(data: Dict[str, Any]) -> Dict[str, list]:
    """
    설정에서 사용자 정의 카테고리 추출

    Returns:
        카테고리 → 확장자 리스트
    """
    categories = data.get('categories') or {}
    if not isinstance(categories, dict):
        raise ConfigError("'categories'는 카테고리 → 확장자 리스트 매핑이어야 합니다")

    for category, extensions in categories.items():
        if not isinstance(extensions, list):
            raise ConfigError(f"카테고리 '{category}'의 확장자는 리스트여야 합니다")
        for ext in extensions:
            if not isinstance(ext, str):
                raise ConfigError(f"카테고리 '{category}'에 문자열이 아닌 확장자가 있습니다: {ext!r}")

    return categories


def create_config_from_dict(data: Dict[str, Any], base_dir: Optional[Path] = None) -> SorterConfig:
    """
    설정 딕셔너리에서 SorterConfig 생성

    Args:
        data: load_yaml_config 결과
        base_dir: 상대 경로의 기준 폴더 (None이면 현재 디렉토리)

    Returns:
        SorterConfig 인스턴스
    """
    def _path(value: str) -> Path:
        if not isinstance(value, str):
            raise ConfigError(f"경로는 문자열이어야 합니다: {value!r}")
        path = Path(value).expanduser()
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return path.resolve()

    table = build_classification_table(
        get_custom_categories(data),
        replace=_get_bool(data, 'replace_default_categories', False),
    )

    kwargs: Dict[str, Any] = {
        'table': table,
        'dry_run': _get_bool(data, 'dry_run', False),
        'detect_signatures': _get_bool(data, 'detect_signatures', False),
    }

    for key in ('fallback_category', 'mismatch_category', 'mismatch_policy', 'binary_policy'):
        if key in data:
            kwargs[key] = data[key]

    if data.get('target_directory'):
        kwargs['target_directory'] = _path(data['target_directory'])

    if 'log_dir' in data:
        kwargs['log_dir'] = _path(data['log_dir']) if data['log_dir'] else None

    if 'excluded_patterns' in data:
        patterns = data['excluded_patterns'] or []
        if not isinstance(patterns, list):
            raise ConfigError("'excluded_patterns'는 리스트여야 합니다")
        for pattern in patterns:
            if not isinstance(pattern, str):
                raise ConfigError(f"'excluded_patterns'에 문자열이 아닌 패턴이 있습니다: {pattern!r}")
        kwargs['excluded_patterns'] = set(patterns)

    return SorterConfig(**kwargs)


def create_config_from_yaml(yaml_path: Path) -> SorterConfig:
    """
    YAML 파일에서 SorterConfig 생성

    상대 경로는 설정 파일이 있는 폴더 기준으로 해석한다.
    설정 파일 자신은 이동 대상에서 제외된다.

    Args:
        yaml_path: YAML 설정 파일 경로

    Returns:
        SorterConfig 인스턴스
    """
    yaml_path = Path(yaml_path)
    data = load_yaml_config(yaml_path)

    config = create_config_from_dict(data, base_dir=yaml_path.resolve().parent)
    config.protected_paths.add(yaml_path.resolve())

    return config
