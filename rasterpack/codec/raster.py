"""
Raster codec - 解码 / 摆正 / 缩放 / 编码原语

Preprocessor 与 CropPackager 共用：
- decode_image: Pillow 解码 + EXIF 方向摆正
- resize_inside: 按边界等比缩小（不放大）
- resize_cover: 铺满目标尺寸并居中裁剪
- encode_png: OpenCV PNG 编码
"""

import io

import cv2
import numpy as np
from PIL import Image, ImageOps

from ..context import RasterImage
from ..errors import DecodeError, EncodeError


def decode_image(data: bytes) -> RasterImage:
    """
    解码图像字节并按 EXIF 方向摆正

    Args:
        data: 原始图像字节（JPEG / PNG / WebP 等 Pillow 支持的格式）

    Returns:
        RasterImage，RGB 或 RGBA（有透明信息时）

    Raises:
        DecodeError: 空输入、无法识别或数据截断
    """
    if not data:
        raise DecodeError("输入图像不能为空")

    try:
        with Image.open(io.BytesIO(data)) as im:
            im.load()
            # 旋转 / 翻转像素，使存储方向 = 显示方向；Orientation 标记随之丢弃
            oriented = ImageOps.exif_transpose(im)
            mode = "RGBA" if oriented.has_transparency_data else "RGB"
            pixels = np.array(oriented.convert(mode), dtype=np.uint8)
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        # UnidentifiedImageError 是 OSError 的子类
        raise DecodeError(f"输入不是可解码的图像: {exc}") from exc

    return RasterImage(pixels=pixels, mode=mode)


def resize_inside(pixels: np.ndarray, max_size: int) -> np.ndarray:
    """
    等比缩小，使宽、高都不超过 max_size

    已在范围内的图像原样返回（不放大）。

    Args:
        pixels: uint8 (H,W,C)
        max_size: 宽、高上限

    Returns:
        缩放后的图像
    """
    h, w = pixels.shape[:2]
    if w <= max_size and h <= max_size:
        return pixels

    scale = min(max_size / w, max_size / h)
    new_w = min(max_size, max(1, round(w * scale)))
    new_h = min(max_size, max(1, round(h * scale)))

    return _resize(pixels, new_w, new_h, cv2.INTER_AREA)


def resize_cover(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Cover 适配：铺满 width x height，居中裁掉溢出部分

    先在源图坐标里按目标长宽比取居中裁剪框，再把裁剪块直接缩放到目标尺寸，
    中间结果不超过 源图 + width x height，极端长宽比的输入也不会放大内存。
    溢出像素为奇数时，多出的 1 px 从尾边（右 / 下）裁掉。

    Args:
        pixels: uint8 (H,W,C)
        width: 目标宽度
        height: 目标高度

    Returns:
        精确为 (height, width, C) 的新数组
    """
    h, w = pixels.shape[:2]
    crop_w = min(w, max(1, round(h * width / height)))
    crop_h = min(h, max(1, round(w * height / width)))

    left = (w - crop_w) // 2
    top = (h - crop_h) // 2
    cropped = pixels[top:top + crop_h, left:left + crop_w]

    if (crop_w, crop_h) != (width, height):
        # 缩小用 INTER_AREA，放大用 LANCZOS4
        interpolation = cv2.INTER_AREA if crop_w > width else cv2.INTER_LANCZOS4
        cropped = _resize(np.ascontiguousarray(cropped), width, height, interpolation)

    return np.ascontiguousarray(cropped)


def encode_png(pixels: np.ndarray, compress_level: int = 9) -> bytes:
    """
    编码为 PNG

    逐行自适应滤波：OpenCV 提供 IMWRITE_PNG_FILTER 时显式要求 ALL_FILTERS，
    更早的版本在显式指定压缩级别时保留 libpng 默认的全滤波器选择。

    Args:
        pixels: uint8 (H,W,3) RGB 或 (H,W,4) RGBA
        compress_level: zlib 压缩级别 0~9

    Returns:
        PNG 字节

    Raises:
        EncodeError: 编码失败
    """
    try:
        if pixels.ndim == 3 and pixels.shape[2] == 4:
            bgr = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)
        else:
            bgr = cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)
        ok, buf = cv2.imencode(".png", bgr, _png_params(compress_level))
    except cv2.error as exc:
        raise EncodeError(f"PNG 编码失败: {exc}") from exc

    if not ok:
        raise EncodeError("PNG 编码失败")
    return buf.tobytes()


def _png_params(compress_level: int) -> list[int]:
    params = [cv2.IMWRITE_PNG_COMPRESSION, int(compress_level)]
    # IMWRITE_PNG_FILTER 自 OpenCV 4.11 起提供
    if hasattr(cv2, "IMWRITE_PNG_FILTER") and hasattr(cv2, "IMWRITE_PNG_ALL_FILTERS"):
        params += [cv2.IMWRITE_PNG_FILTER, cv2.IMWRITE_PNG_ALL_FILTERS]
    return params


def _resize(pixels: np.ndarray, width: int, height: int, interpolation: int) -> np.ndarray:
    try:
        # cv2.resize 使用 (width, height)
        return cv2.resize(pixels, (width, height), interpolation=interpolation)
    except cv2.error as exc:
        raise EncodeError(f"缩放到 {width}x{height} 失败: {exc}") from exc
