"""
配置管理 - 读取 YAML 配置文件并支持环境变量覆盖
"""
import os
from pathlib import Path
from typing import Any

import yaml


class Config:
    """配置管理类 - 单例模式"""

    _instance = None
    _config: dict = {}
    _loaded: bool = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """初始化配置（仅在第一次创建时执行）"""
        if not self._loaded:
            self.reload()

    def reload(self, config_path: str | Path | None = None):
        """
        重新加载配置文件

        Args:
            config_path: 配置文件路径，默认为 configs/pipeline.yaml
                         默认文件不存在时使用空配置（全部取默认值）

        Raises:
            FileNotFoundError: 显式指定的配置文件不存在
        """
        if config_path is None:
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / "configs" / "pipeline.yaml"
            if not config_path.exists():
                self._config = {}
                self._loaded = True
                self._apply_env_overrides()
                return
        else:
            config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}
        self._loaded = True

        self._apply_env_overrides()

    def load_dict(self, data: dict):
        """直接使用字典作为配置（测试和嵌入调用使用）"""
        self._config = dict(data)
        self._loaded = True
        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """应用环境变量覆盖配置"""
        if 'DATASET_PATH' in os.environ:
            self._set_nested('dataset.path', os.environ['DATASET_PATH'])

        if 'SPL_REPO_PATH' in os.environ:
            self._set_nested('dataset.spl_repo', os.environ['SPL_REPO_PATH'])

        if 'VARIANTS_DIR' in os.environ:
            self._set_nested('output.variants', os.environ['VARIANTS_DIR'])

        if 'GENERATION_MAX_WORKERS' in os.environ:
            self._set_nested('generation.max_workers', int(os.environ['GENERATION_MAX_WORKERS']))

        # 日志级别覆盖
        if 'LOG_LEVEL' in os.environ:
            self._set_nested('logging.level', os.environ['LOG_LEVEL'])

    def _set_nested(self, key_path: str, value: Any):
        """
        设置嵌套字典的值

        Args:
            key_path: 点分隔的键路径，如 "dataset.path"
            value: 要设置的值
        """
        keys = key_path.split('.')
        d = self._config

        for key in keys[:-1]:
            if key not in d or not isinstance(d[key], dict):
                d[key] = {}
            d = d[key]

        d[keys[-1]] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        获取配置值

        Args:
            key_path: 点分隔的键路径，如 "generation.error_policy"
            default: 默认值

        Returns:
            配置值或默认值
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> dict:
        """
        获取配置的某个部分

        Args:
            section: 配置节名称，如 "generation"

        Returns:
            配置节字典
        """
        return self._config.get(section, {}) or {}

    @property
    def dataset_path(self) -> str:
        """变异性数据集目录"""
        return self.get('dataset.path', 'data/dataset')

    @property
    def spl_repo_path(self) -> str:
        """产品线仓库（检出目录）"""
        return self.get('dataset.spl_repo', 'data/spl')

    @property
    def max_workers(self) -> int:
        """同一 commit 内并行生成变体的线程数"""
        return self.get('generation.max_workers', 1)
