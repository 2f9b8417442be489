"""
测试公共 fixture
"""

import io
import sys
from pathlib import Path

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest
from PIL import Image


EXIF_ORIENTATION_TAG = 0x0112


def _encode(array: np.ndarray, fmt: str = "PNG", orientation: int | None = None) -> bytes:
    img = Image.fromarray(array)
    buf = io.BytesIO()
    kwargs = {}
    if orientation is not None:
        exif = Image.Exif()
        exif[EXIF_ORIENTATION_TAG] = orientation
        kwargs["exif"] = exif.tobytes()
    if fmt == "JPEG":
        kwargs["quality"] = 95
    img.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


def _gradient(width: int, height: int) -> np.ndarray:
    """平滑的 RGB 渐变，压缩快且各通道有对比度"""
    xs = np.linspace(30, 220, width, dtype=np.float32)
    ys = np.linspace(40, 200, height, dtype=np.float32)
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, :, 0] = xs[None, :].astype(np.uint8)
    img[:, :, 1] = ys[:, None].astype(np.uint8)
    img[:, :, 2] = ((xs[None, :] + ys[:, None]) / 2).astype(np.uint8)
    return img


@pytest.fixture
def encode_image():
    """把 numpy 图像编码为字节：encode_image(array, fmt="PNG", orientation=None)"""
    return _encode


@pytest.fixture
def gradient_image():
    """生成渐变图像：gradient_image(width, height) -> uint8 (H,W,3)"""
    return _gradient


@pytest.fixture
def png_bytes():
    """300x200 渐变 PNG"""
    return _encode(_gradient(300, 200))


@pytest.fixture
def garbage_bytes():
    """5 个随机字节，不是图像"""
    return np.random.default_rng(7).integers(0, 256, 5, dtype=np.uint8).tobytes()


def decode_size(data: bytes) -> tuple[int, int]:
    """返回 (width, height)"""
    with Image.open(io.BytesIO(data)) as im:
        return im.size


@pytest.fixture
def image_size():
    """读取编码后图像的 (width, height)"""
    return decode_size
