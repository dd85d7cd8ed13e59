"""
Configuration loading/saving.

Pure functions operating on dataclasses. TOML with [detection] and [board]
tables; missing keys fall back to the dataclass defaults.
"""

from __future__ import annotations

from dataclasses import asdict, fields
from pathlib import Path

import rtoml

from .types import BoardConfig, DetectionConfig


# ============================================================================
# Validation
# ============================================================================


def validate_detection_config(config: DetectionConfig) -> DetectionConfig:
    """
    Check value ranges.

    Raises:
        ValueError: On the first invalid value
    """
    if config.threshold_block_size < 3 or config.threshold_block_size % 2 == 0:
        raise ValueError(
            f"threshold_block_size must be odd and >= 3, got {config.threshold_block_size}"
        )
    for name in ("erode_iterations", "min_quads", "max_walk_steps", "max_numbered_quads"):
        if getattr(config, name) < 1:
            raise ValueError(f"{name} must be positive, got {getattr(config, name)}")
    for name in ("duplicate_radius_fraction", "link_search_factor", "approx_epsilon"):
        if getattr(config, name) <= 0:
            raise ValueError(f"{name} must be positive, got {getattr(config, name)}")
    if not 0 <= config.extreme_margin < 1:
        raise ValueError(f"extreme_margin must be in [0, 1), got {config.extreme_margin}")
    if config.orthogonality_tolerance < 0:
        raise ValueError(
            f"orthogonality_tolerance must be >= 0, got {config.orthogonality_tolerance}"
        )
    return config


def validate_board_config(board: BoardConfig) -> BoardConfig:
    """
    Raises:
        ValueError: If the board is too small or has a non-positive square size
    """
    if board.rows < 3 or board.columns < 3:
        raise ValueError(f"Board must be at least 3x3, got {board.rows}x{board.columns}")
    if board.square_size <= 0:
        raise ValueError(f"square_size must be positive, got {board.square_size}")
    return board


# ============================================================================
# TOML
# ============================================================================


def parse_detection_config(section_data: dict) -> DetectionConfig:
    """Build a DetectionConfig from a [detection] table."""
    known = {f.name for f in fields(DetectionConfig)}
    unknown = set(section_data) - known
    if unknown:
        raise ValueError(f"Unknown detection settings: {', '.join(sorted(unknown))}")
    return validate_detection_config(DetectionConfig(**section_data))


def parse_board_config(section_data: dict) -> BoardConfig:
    """Build a BoardConfig from a [board] table."""
    defaults = BoardConfig()
    return validate_board_config(
        BoardConfig(
            rows=section_data.get("rows", defaults.rows),
            columns=section_data.get("columns", defaults.columns),
            square_size=section_data.get("square_size", defaults.square_size),
            origin=tuple(section_data.get("origin", defaults.origin)),
        )
    )


def load_config(path: Path) -> tuple[DetectionConfig, BoardConfig]:
    """
    Load detection and board configuration from a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        (DetectionConfig, BoardConfig)
    """
    data = rtoml.load(path)
    detection = parse_detection_config(data.get("detection", {}))
    board = parse_board_config(data.get("board", {}))
    return detection, board


def save_config(
    path: Path,
    detection: DetectionConfig | None = None,
    board: BoardConfig | None = None,
) -> None:
    """
    Save detection and board configuration to a TOML file.

    Args:
        path: Path to save to
        detection: DetectionConfig (defaults if None)
        board: BoardConfig (defaults if None)
    """
    detection = detection or DetectionConfig()
    board = board or BoardConfig()

    data = {
        "detection": asdict(detection),
        "board": {
            "rows": board.rows,
            "columns": board.columns,
            "square_size": board.square_size,
            "origin": list(board.origin),
        },
    }

    # Ensure parent directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        rtoml.dump(data, f)
