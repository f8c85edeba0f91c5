# ledger_engine/config.py
import copy
import os

import yaml

DEFAULT_CONFIG = {
    'ledger_file': 'data/ledger.yaml',
    'output_dir': 'data',
    'categories': {},
    'loaders': {
        'csv': 'ledger_engine.loaders.csv_loader.CSVLoader',
    },
    'output_modules': {
        'csv': 'ledger_engine.outputs.csv_output.CSVOutput',
    },
}


def load_config(path=None):
    """
    Read config.yaml and fill in defaults for any missing keys.

    The LEDGER_FILE environment variable, when set, takes precedence over
    ``ledger_file``.
    """
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if path:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping.")
        for key, value in data.items():
            if isinstance(value, dict) and isinstance(cfg.get(key), dict):
                cfg[key].update(value)
            else:
                cfg[key] = value

    env_ledger = os.getenv('LEDGER_FILE')
    if env_ledger:
        cfg['ledger_file'] = env_ledger

    categories = {}
    for cat, keywords in (cfg.get('categories') or {}).items():
        if isinstance(keywords, str):
            keywords = [keywords]
        categories[str(cat)] = [str(kw) for kw in (keywords or [])]
    cfg['categories'] = categories
    return cfg
