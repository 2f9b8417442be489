"""
Crop catalog - 固定输出规格目录

顺序即归档成员顺序；导入时校验一次。
"""

from typing import Iterable

from ..context import OutputSpec
from ..errors import ConfigError


CROP_SPECS: tuple[OutputSpec, ...] = (
    # Google Business Profile
    OutputSpec("gbp", "gbp-4x3-1200x900.png", 1200, 900),
    OutputSpec("gbp", "gbp-1x1-1200x1200.png", 1200, 1200),

    # Instagram
    OutputSpec("instagram", "instagram-1x1-1080x1080.png", 1080, 1080),
    OutputSpec("instagram", "instagram-4x5-1080x1350.png", 1080, 1350),

    # Stories / Reels
    OutputSpec("stories-reels", "stories-reels-9x16-1080x1920.png", 1080, 1920),

    # Meta ads
    OutputSpec("meta-ads", "meta-ads-1x1-1080x1080.png", 1080, 1080),
    OutputSpec("meta-ads", "meta-ads-4x5-1080x1350.png", 1080, 1350),

    # Delivery apps
    OutputSpec("delivery-apps", "delivery-1x1-1200x1200.png", 1200, 1200),
)


def validate_specs(specs: Iterable[OutputSpec]) -> tuple[OutputSpec, ...]:
    """
    校验输出规格目录

    Args:
        specs: 有序的 OutputSpec 序列

    Returns:
        不可变的 tuple（保持原顺序）

    Raises:
        ConfigError: 目录为空、尺寸非正或文件名重复
    """
    specs = tuple(specs)
    if not specs:
        raise ConfigError("输出规格目录不能为空")

    filenames: set[str] = set()
    for spec in specs:
        if not spec.group or not spec.filename:
            raise ConfigError(f"group / filename 不能为空: {spec}")
        if spec.width <= 0 or spec.height <= 0:
            raise ConfigError(
                f"{spec.filename}: 尺寸必须为正数，当前 {spec.width}x{spec.height}"
            )
        # 文件名唯一 => 归档路径唯一，解压时不会互相覆盖
        if spec.filename in filenames:
            raise ConfigError(f"文件名重复: {spec.filename}")
        filenames.add(spec.filename)

    return specs


CROP_SPECS = validate_specs(CROP_SPECS)
