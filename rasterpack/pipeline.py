"""
RasterPipeline - 主入口

Preprocessor 与 CropPackager 彼此独立，这里只负责加载配置和按需组合。
"""

from pathlib import Path

from omegaconf import DictConfig

from .config import load_config
from .context import PreprocessResult
from .croppack import CropPack


class RasterPipeline:
    """确定性栅格处理 Pipeline"""

    def __init__(self, config_path: str | Path | None = None):
        """
        初始化 Pipeline

        Args:
            config_path: 覆盖配置文件路径，与随包的 default.yaml 合并
        """
        self.cfg: DictConfig = load_config(config_path)

        # 初始化各模块（延迟加载）
        self._preprocessor = None
        self._packager = None

    # ==================== 模块懒加载 ====================

    @property
    def preprocessor(self):
        """预处理模块（懒加载）"""
        if self._preprocessor is None:
            from .preprocess import Preprocessor
            self._preprocessor = Preprocessor(self.cfg)
        return self._preprocessor

    @property
    def packager(self):
        """裁剪打包模块（懒加载）"""
        if self._packager is None:
            from .croppack import CropPackager
            self._packager = CropPackager(self.cfg)
        return self._packager

    # ==================== 主处理流程 ====================

    def clean(self, data: bytes) -> PreprocessResult:
        """确定性自动清理，输出 PNG"""
        return self.preprocessor.process(data)

    def crop_pack(self, data: bytes, prefix: str | None = None) -> CropPack:
        """直接对原图生成裁剪包"""
        return self.packager.build(data, prefix)

    def clean_and_pack(self, data: bytes, prefix: str | None = None) -> CropPack:
        """先清理再打包：裁剪基于清理后的 PNG"""
        cleaned = self.clean(data)
        return self.packager.build(cleaned.data, prefix)


def load_pipeline(config_path: str | Path | None = None) -> RasterPipeline:
    """
    便捷函数：加载 Pipeline

    Args:
        config_path: 覆盖配置文件路径

    Returns:
        RasterPipeline 实例
    """
    return RasterPipeline(config_path)
