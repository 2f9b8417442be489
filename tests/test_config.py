"""
Config 模块单元测试
"""

import pytest
from omegaconf import OmegaConf

from rasterpack.config import DEFAULT_CONFIG_PATH, load_config, validate_config
from rasterpack.errors import ConfigError


class TestLoadConfig:
    """load_config 测试类"""

    def test_default_file_exists(self):
        """测试默认配置随包发布"""
        assert DEFAULT_CONFIG_PATH.is_file()

    def test_default_values(self):
        """测试默认固定常数"""
        cfg = load_config()

        assert getattr(cfg, "global").max_image_size == 2048
        assert cfg.preprocess.gamma == pytest.approx(1.05)
        assert cfg.preprocess.brightness == pytest.approx(1.03)
        assert cfg.preprocess.saturation == pytest.approx(1.03)
        assert cfg.preprocess.median_radius == 1
        assert cfg.preprocess.sharpen_sigma == pytest.approx(1.0)
        assert cfg.crop_pack.default_prefix == "nano-banana"
        assert cfg.crop_pack.zip_compress_level == 9

    def test_override_merge(self, tmp_path):
        """测试覆盖文件只替换指定项"""
        override = tmp_path / "override.yaml"
        override.write_text("crop_pack:\n  default_prefix: export\n", encoding="utf-8")

        cfg = load_config(override)

        assert cfg.crop_pack.default_prefix == "export"
        assert cfg.preprocess.gamma == pytest.approx(1.05)

    def test_missing_override_file(self, tmp_path):
        """测试覆盖文件不存在"""
        with pytest.raises(ConfigError, match="无法加载配置"):
            load_config(tmp_path / "missing.yaml")


class TestValidateConfig:
    """validate_config 测试类"""

    def test_missing_key(self):
        """测试缺少必需项"""
        cfg = OmegaConf.create({"global": {"max_image_size": 2048}})
        with pytest.raises(ConfigError, match="缺少必需项"):
            validate_config(cfg)

    def test_bad_compress_level(self):
        """测试压缩级别越界"""
        cfg = load_config()
        cfg.crop_pack.zip_compress_level = 12
        with pytest.raises(ConfigError, match="0~9"):
            validate_config(cfg)

    def test_non_positive_max_size(self):
        """测试尺寸上限非正"""
        cfg = load_config()
        getattr(cfg, "global").max_image_size = 0
        with pytest.raises(ConfigError, match="必须为正数"):
            validate_config(cfg)
