"""
Codec 模块 - 栅格编解码原语

职责：
- 解码输入字节并按 EXIF 摆正
- 等比缩小与 cover 裁剪缩放
- PNG 编码
"""

from .raster import decode_image, encode_png, resize_cover, resize_inside

__all__ = [
    "decode_image",
    "encode_png",
    "resize_cover",
    "resize_inside"
]
