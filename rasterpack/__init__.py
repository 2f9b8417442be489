"""
rasterpack - 确定性栅格处理

模块结构：
- codec: 解码 / 摆正 / 缩放 / PNG 编码原语
- preprocess: 固定参数的自动清理 (Preprocessor)
- croppack: 多平台裁剪 + 流式 ZIP 打包 (CropPackager)
- pipeline.py: 配置加载与组合入口
- cli.py: 命令行

使用方式：
    from rasterpack import load_pipeline
    pipe = load_pipeline()
    cleaned = pipe.clean(image_bytes)
    with pipe.crop_pack(cleaned.data, prefix="acme") as pack:
        for chunk in pack:
            ...
"""

from .context import EncodedOutput, OutputSpec, PreprocessResult, RasterImage
from .croppack import CROP_SPECS, CropPack, CropPackager, build_crop_pack, sanitize_prefix
from .errors import ConfigError, DecodeError, EncodeError, RasterPackError
from .pipeline import RasterPipeline, load_pipeline
from .preprocess import Preprocessor, preprocess

__all__ = [
    "EncodedOutput",
    "OutputSpec",
    "PreprocessResult",
    "RasterImage",
    "CROP_SPECS",
    "CropPack",
    "CropPackager",
    "build_crop_pack",
    "sanitize_prefix",
    "ConfigError",
    "DecodeError",
    "EncodeError",
    "RasterPackError",
    "RasterPipeline",
    "load_pipeline",
    "Preprocessor",
    "preprocess",
]
