# cutmetrics/config.py
import os
from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

CLOSURE_TOLERANCE = float(os.getenv('CLOSURE_TOLERANCE', 1e-4))
ASSEMBLY_STRATEGY = os.getenv('ASSEMBLY_STRATEGY', 'greedy')
ADD_ASSEMBLED_AREA = os.getenv('ADD_ASSEMBLED_AREA', '0') in ['1', 'true', 'True']
MAX_ENTITIES = int(os.getenv('MAX_ENTITIES', 10000))
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = os.getenv('LOG_FILE', '')  # e.g. error.log; empty disables the file handler
SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'cutmetrics-secret-key-here')

ANALYSIS_DEFAULTS = {
    "tolerance": CLOSURE_TOLERANCE,
    "strategy": ASSEMBLY_STRATEGY,
    "add_assembled_area": ADD_ASSEMBLED_AREA,
}
ALLOWED_STRATEGIES = ["greedy", "planar"]


def load_analysis_config(overrides=None):
    """Merge per-call overrides over the environment defaults and validate them."""
    config = dict(ANALYSIS_DEFAULTS)
    if overrides:
        unknown = set(overrides) - set(config)
        if unknown:
            raise ValueError(f"Unknown analysis options: {sorted(unknown)}. Allowed: {sorted(config)}")
        config.update(overrides)
    try:
        config["tolerance"] = float(config["tolerance"])
    except (TypeError, ValueError):
        raise ValueError(f"Invalid tolerance: {config['tolerance']!r}")
    if not config["tolerance"] > 0:
        raise ValueError(f"Invalid tolerance: {config['tolerance']}. Must be positive.")
    if config["strategy"] not in ALLOWED_STRATEGIES:
        raise ValueError(f"Invalid or missing strategy: {config['strategy']}. Allowed: {ALLOWED_STRATEGIES}")
    config["add_assembled_area"] = bool(config["add_assembled_area"])
    return config
