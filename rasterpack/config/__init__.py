"""
Config 模块 - 配置加载

default.yaml 随包发布，可选的覆盖文件按 OmegaConf 规则合并。
"""

from pathlib import Path

from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import OmegaConfBaseException

from ..errors import ConfigError

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"

_REQUIRED_KEYS = (
    "global.max_image_size",
    "preprocess.gamma",
    "preprocess.brightness",
    "preprocess.saturation",
    "preprocess.median_radius",
    "preprocess.sharpen_sigma",
    "preprocess.png_compress_level",
    "crop_pack.default_prefix",
    "crop_pack.png_compress_level",
    "crop_pack.zip_compress_level",
)


def load_config(override_path: str | Path | None = None) -> DictConfig:
    """
    加载配置

    Args:
        override_path: 可选覆盖文件，与 default.yaml 合并

    Returns:
        合并后的 DictConfig

    Raises:
        ConfigError: 文件缺失、无法解析或缺少必需键
    """
    try:
        cfg = OmegaConf.load(DEFAULT_CONFIG_PATH)
        if override_path is not None:
            cfg = OmegaConf.merge(cfg, OmegaConf.load(override_path))
    except (OSError, OmegaConfBaseException) as exc:
        raise ConfigError(f"无法加载配置: {exc}") from exc

    validate_config(cfg)
    return cfg


def validate_config(cfg: DictConfig) -> None:
    """检查必需键存在且压缩级别合法"""
    for key in _REQUIRED_KEYS:
        if OmegaConf.select(cfg, key) is None:
            raise ConfigError(f"配置缺少必需项: {key}")

    # 'global' 是 Python 保留字，只能用 getattr 访问
    if getattr(cfg, "global").max_image_size <= 0:
        raise ConfigError("global.max_image_size 必须为正数")

    for key in (
        "preprocess.png_compress_level",
        "crop_pack.png_compress_level",
        "crop_pack.zip_compress_level",
    ):
        level = OmegaConf.select(cfg, key)
        if not 0 <= level <= 9:
            raise ConfigError(f"{key} 必须在 0~9 之间，当前: {level}")


__all__ = ["DEFAULT_CONFIG_PATH", "load_config", "validate_config"]
