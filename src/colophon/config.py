"""Colophonサーバーの設定管理。"""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

_PACKAGE_ROOT = Path(__file__).parent
_REPO_ROOT = _PACKAGE_ROOT.parent.parent


class ServerConfig(BaseSettings):
    """サーバー設定。環境変数から読み込み可能。"""

    model_config = {"env_prefix": "COLOPHON_"}

    data_dir: Path = _REPO_ROOT / ".colophon"
    config_dir: Path = _REPO_ROOT / "config"
    store_backend: Literal["memory", "filesystem"] = "filesystem"
    seed_templates: bool = True
    # user_idが設定されたバリデータ枠は、そのユーザーのみ判定できる
    enforce_targeted_assignments: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # 判定記録時の楽観的排他制御
    max_write_attempts: int = 3
    retry_backoff_seconds: float = 0.05
