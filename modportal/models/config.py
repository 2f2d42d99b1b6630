"""
配置模型

ModPortal 的运行配置与认证凭据。配置作为显式的上下文对象传入各组件，不使用全局状态。
"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import toml
import yaml

from modportal.exceptions import (
    ConfigParseError,
    ConfigValidationError,
    ValidationError,
)
from modportal.models.version import Version


PORTAL_URL = "https://mods.factorio.com"
AUTH_URL = "https://auth.factorio.com/api-login"
MATCHMAKING_URL = "https://multiplayer.factorio.com"


@dataclass
class Credentials:
    """门户认证凭据"""

    username: str
    token: str

    def as_params(self) -> Dict[str, str]:
        return {"username": self.username, "token": self.token}


@dataclass
class ModPortalConfig:
    """ModPortal 配置"""

    mod_path: str = "mods"
    save_path: str = "saves"
    game_version: str = "0.0.0"
    allow_multiple_versions: bool = False
    include_optional: bool = False
    portal_url: str = PORTAL_URL
    auth_url: str = AUTH_URL
    matchmaking_url: str = MATCHMAKING_URL
    username: Optional[str] = None
    token: Optional[str] = None
    password: Optional[str] = None
    require_ownership: bool = False

    def __post_init__(self):
        try:
            self.game_version = str(Version.parse(self.game_version))
        except ValidationError as e:
            raise ConfigValidationError(
                f"game_version 无效: {self.game_version}",
                context={"game_version": self.game_version},
            ) from e

        for name in ("allow_multiple_versions", "include_optional", "require_ownership"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigValidationError(
                    f"{name} 必须为布尔值", context={name: getattr(self, name)}
                )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModPortalConfig":
        """
        从字典创建配置

        支持扁平字典，或嵌套在 "modportal" 表下的字典。
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("配置必须是字典")

        section = data.get("modportal", data)
        if not isinstance(section, dict):
            raise ConfigValidationError("modportal 配置段必须是字典")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(section) - known)
        if unknown:
            raise ConfigValidationError(
                f"未知的配置项: {', '.join(unknown)}", context={"keys": unknown}
            )

        return cls(**section)

    @property
    def target_game_version(self) -> Version:
        return Version.parse(self.game_version)


def load_config(config_path: str) -> ModPortalConfig:
    """加载配置文件（toml / json / yaml）"""
    path = Path(config_path)

    if not path.exists():
        raise ConfigParseError(f"配置文件不存在: {config_path}")

    suffix = path.suffix.lower()

    try:
        if suffix == ".toml":
            data = toml.load(config_path)
        elif suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        else:
            raise ConfigParseError(f"不支持的配置文件格式: {suffix}")
    except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(
            f"配置文件解析失败: {e}", context={"path": config_path}
        ) from e

    return ModPortalConfig.from_dict(data or {})
