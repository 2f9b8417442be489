"""
CropPack 模块 - 多平台裁剪包

职责：
- 固定输出规格目录（顺序、唯一性集中校验）
- 逐个 cover 裁剪 + PNG 编码
- 流式写出 ZIP 归档
"""

from .catalog import CROP_SPECS, validate_specs
from .packager import (
    CropPack,
    CropPackager,
    build_crop_pack,
    decode_payload,
    sanitize_prefix,
)

__all__ = [
    "CROP_SPECS",
    "validate_specs",
    "CropPack",
    "CropPackager",
    "build_crop_pack",
    "decode_payload",
    "sanitize_prefix"
]
