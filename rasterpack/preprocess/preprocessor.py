"""
Preprocessor - 确定性自动清理

处理顺序固定（每一步都依赖上一步建立的前提）：
1. auto-orient: 按 EXIF 方向摆正
2. resize_inside: 宽、高不超过 max_image_size（只缩小）
3. normalize: 逐通道对比度拉伸到 0~255
4. gamma: out = in ** (1 / gamma)
5. modulate: HSV 亮度 / 饱和度倍率
6. despeckle: 中值滤波
7. sharpen: 反锐化掩模
8. encode: PNG（最大压缩，自适应行滤波）

所有常数来自配置，同一输入 + 同一配置 => 字节级一致的输出。
"""

import cv2
import numpy as np
from omegaconf import DictConfig

from ..codec import decode_image, encode_png, resize_inside
from ..config import load_config
from ..context import PreprocessResult
from ..errors import EncodeError


class Preprocessor:
    """确定性图像预处理器"""

    def __init__(self, cfg: DictConfig | None = None):
        """
        初始化预处理器

        Args:
            cfg: 配置对象，需包含 global.max_image_size 和 preprocess.*；
                 为 None 时使用随包发布的 default.yaml
        """
        if cfg is None:
            cfg = load_config()

        # 使用 getattr 访问 'global' 因为它是 Python 保留字
        global_cfg = getattr(cfg, 'global')
        self.max_image_size = int(global_cfg.max_image_size)
        self.verbose = bool(global_cfg.get("verbose", False))

        pre_cfg = cfg.preprocess
        self.gamma = float(pre_cfg.gamma)
        self.brightness = float(pre_cfg.brightness)
        self.saturation = float(pre_cfg.saturation)
        self.median_radius = int(pre_cfg.median_radius)
        self.sharpen_sigma = float(pre_cfg.sharpen_sigma)
        self.sharpen_amount = float(pre_cfg.get("sharpen_amount", 1.0))
        self.png_compress_level = int(pre_cfg.png_compress_level)

        self._gamma_lut = self._build_gamma_lut(self.gamma)

    def process(self, data: bytes) -> PreprocessResult:
        """
        预处理输入图像

        Args:
            data: 原始图像字节

        Returns:
            PreprocessResult（PNG 字节 + "image/png"）

        Raises:
            DecodeError: 输入不是可解码的图像
            EncodeError: 中间步骤或 PNG 编码失败
        """
        # 1. 解码 + 摆正
        image = decode_image(data)

        # 2. 边界缩放（alpha 一起缩放）
        pixels = resize_inside(image.pixels, self.max_image_size)

        rgb = pixels[:, :, :3]
        alpha = pixels[:, :, 3] if image.has_alpha else None

        try:
            rgb = self._normalize(rgb)
            rgb = self._apply_gamma(rgb)
            rgb = self._modulate(rgb)
            rgb = self._despeckle(rgb)
            rgb = self._sharpen(rgb)
        except cv2.error as exc:
            raise EncodeError(f"预处理失败: {exc}") from exc

        out = np.dstack([rgb, alpha]) if alpha is not None else rgb
        encoded = encode_png(out, self.png_compress_level)

        out_h, out_w = out.shape[:2]
        if self.verbose:
            print(
                f"[Preprocessor] {image.width}x{image.height} -> {out_w}x{out_h}, "
                f"{len(encoded)} bytes"
            )

        return PreprocessResult(data=encoded, width=out_w, height=out_h)

    @staticmethod
    def _normalize(rgb: np.ndarray) -> np.ndarray:
        """
        逐通道线性拉伸，使每个通道占满 0~255

        单值通道（max == min）保持不变。
        """
        result = np.empty_like(rgb)
        levels = np.arange(256, dtype=np.float64)
        for c in range(rgb.shape[2]):
            channel = rgb[:, :, c]
            lo, hi = int(channel.min()), int(channel.max())
            if hi <= lo:
                result[:, :, c] = channel
                continue
            lut = np.clip(np.round((levels - lo) * 255.0 / (hi - lo)), 0, 255).astype(np.uint8)
            result[:, :, c] = lut[channel]
        return result

    @staticmethod
    def _build_gamma_lut(gamma: float) -> np.ndarray:
        levels = np.arange(256, dtype=np.float64) / 255.0
        lut = np.round(np.power(levels, 1.0 / gamma) * 255.0)
        return np.clip(lut, 0, 255).astype(np.uint8)

    def _apply_gamma(self, rgb: np.ndarray) -> np.ndarray:
        """gamma > 1 时提亮中间调"""
        return cv2.LUT(rgb, self._gamma_lut)

    def _modulate(self, rgb: np.ndarray) -> np.ndarray:
        """在 HSV 空间按倍率调整亮度(V)与饱和度(S)"""
        # float32 HSV: H [0,360), S/V [0,1]，避免 uint8 HSV 的量化损失
        hsv = cv2.cvtColor(rgb.astype(np.float32) / 255.0, cv2.COLOR_RGB2HSV)
        hsv[:, :, 1] = np.clip(hsv[:, :, 1] * self.saturation, 0.0, 1.0)
        hsv[:, :, 2] = np.clip(hsv[:, :, 2] * self.brightness, 0.0, 1.0)
        out = cv2.cvtColor(hsv, cv2.COLOR_HSV2RGB)
        return np.clip(np.round(out * 255.0), 0, 255).astype(np.uint8)

    def _despeckle(self, rgb: np.ndarray) -> np.ndarray:
        """中值滤波去除孤立噪点"""
        if self.median_radius < 1:
            return rgb
        return cv2.medianBlur(np.ascontiguousarray(rgb), 2 * self.median_radius + 1)

    def _sharpen(self, rgb: np.ndarray) -> np.ndarray:
        """反锐化掩模：rgb + amount * (rgb - blur(rgb))"""
        if self.sharpen_amount <= 0:
            return rgb
        blurred = cv2.GaussianBlur(rgb, (0, 0), sigmaX=self.sharpen_sigma)
        return cv2.addWeighted(rgb, 1.0 + self.sharpen_amount, blurred, -self.sharpen_amount, 0)


def create_preprocessor(cfg: DictConfig | None = None) -> Preprocessor:
    """
    便捷函数：创建预处理器

    Args:
        cfg: 配置对象，None 时使用默认配置

    Returns:
        Preprocessor 实例
    """
    return Preprocessor(cfg)


def preprocess(data: bytes, cfg: DictConfig | None = None) -> PreprocessResult:
    """便捷函数：用（默认）配置预处理一张图像"""
    return Preprocessor(cfg).process(data)
