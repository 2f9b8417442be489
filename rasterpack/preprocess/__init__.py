"""
Preprocess 模块 - 确定性预处理

职责：
- 摆正、限制尺寸、轻度对比度 / 色调调整、去噪、锐化
- 统一输出为 PNG，结果可复现、可审计
"""

from .preprocessor import Preprocessor, create_preprocessor, preprocess

__all__ = ["Preprocessor", "create_preprocessor", "preprocess"]
