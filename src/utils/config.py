"""
Configuration Manager - YAML-based configuration management
Loads market maker settings from a YAML file and environment variables and
turns the ``market_maker`` section into a validated MarketMakerConfig.

File: config.py
"""

import os
import logging
import yaml
from typing import Dict, Any
from pathlib import Path

from .logger import setup_logger

logger = logging.getLogger(__name__)

# Environment variable -> (dotted key, type)
ENV_OVERRIDES = {
    'MM_ORDER_SIZE': ('market_maker.order_size', float),
    'MM_MAX_INVENTORY': ('market_maker.inventory.max_inventory', float),
    'MM_MIN_INVENTORY': ('market_maker.inventory.min_inventory', float),
    'MM_POOL_FEE': ('market_maker.pool_fee', float),
}


class Config:
    """Configuration management"""

    def __init__(self, config_path: str = "configs/config.yaml"):
        self.config_path = Path(config_path)
        self.config = self._load_config()
        self._load_env_vars()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file"""
        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                return yaml.safe_load(f) or {}
        else:
            # Default configuration
            return {
                'market_maker': {
                    'symbol': 'BASE-QUOTE',
                    'spread': {
                        'base_spread': 0.002,
                        'min_spread': 0.0005,
                        'max_spread': 0.02,
                        'volatility_multiplier': 2.0,
                        'inventory_skew_multiplier': 0.5
                    },
                    'inventory': {
                        'target_inventory': 0,
                        'max_inventory': 1000,
                        'min_inventory': -1000,
                        'rebalance_threshold': 0.3,
                        'skew_sensitivity': 1.5
                    },
                    'order_size': 100,
                    'max_order_size': 500,
                    'min_order_size': 10,
                    'price_tick_size': 0.0001,
                    'size_tick_size': 0.01,
                    'update_interval_ms': 1000,
                    'pool_fee': 0.003,
                    'fill_fee_rate': 0.001,
                    'trade_history_limit': 1000
                },
                'logging': {
                    'level': 'INFO',
                    'log_dir': None
                }
            }

    def _load_env_vars(self):
        """Load environment variables and override config"""
        for env_name, (key, cast) in ENV_OVERRIDES.items():
            if env_name in os.environ:
                self.set(key, cast(os.environ[env_name]))

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value"""
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """Set configuration value"""
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config or config[k] is None:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def save(self):
        """Save configuration to file"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, 'w') as f:
            yaml.dump(self.config, f, default_flow_style=False)

    def market_maker_config(self):
        """Build a MarketMakerConfig from the market_maker section, over the defaults"""
        from mm_core.market_maker.modules.config import MarketMakerConfig

        section = dict(self.get('market_maker', {}) or {})
        section.pop('symbol', None)
        return MarketMakerConfig.from_overrides(**section)

    def setup_logging(self, name: str) -> logging.Logger:
        """Configure the named logger from the logging section"""
        return setup_logger(
            name,
            level=self.get('logging.level', 'INFO'),
            log_dir=self.get('logging.log_dir')
        )

    def validate(self) -> bool:
        """Validate configuration"""
        try:
            self.market_maker_config()
        except (TypeError, ValueError) as e:
            logger.error(f"Invalid market maker configuration: {e}")
            return False

        return True
