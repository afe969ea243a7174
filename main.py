#!/usr/bin/env python3
"""
Vision Overlay Engine

Preview or render a vision-condition overlay on an image, a video,
a camera feed or a built-in calibration card.

Usage:
    python main.py --condition CONDITION_ID [--intensity 0.7] [--input PATH_OR_INDEX]

Keyboard Controls:
    ESC/Q - Quit

Examples:
    python main.py --list
    python main.py --condition visualAura --intensity 0.8
    python main.py --condition deuteranopia --input photo.jpg
    python main.py --condition neoMatrixCodeVision --input 0
    python main.py --condition hallucinations --duration 20 --output cbs.mp4
    python main.py --condition diplopiaBinocular --describe
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Iterator, Optional

import cv2
import numpy as np
import yaml
from loguru import logger

from src.color import ColorCondition, is_color_condition, matrix_for
from src.config import EngineConfig, load_config
from src.core.contracts import ConditionState, clamp_unit
from src.glyph_stream import GlyphStream
from src.overlays import GLYPH_STREAM_CONDITIONS, LayerCompositor, compose_frame, list_conditions
from src.render import RenderTargetAdapter
from src.timing import AnimationTicker


# ============================================================
# LOGGING CONFIGURATION
# ============================================================

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Configure logging."""
    logger.remove()  # Remove default handler

    # Console output with colors
    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>",
        colorize=True,
    )

    # File output
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {module}:{line} | {message}",
            rotation="10 MB",
            retention="7 days",
        )


# ============================================================
# FRAME SOURCES
# ============================================================

def calibration_card(width: int, height: int) -> np.ndarray:
    """Neutral BGR calibration card: colour ramps over a grey checkerboard."""
    y, x = np.mgrid[0:height, 0:width].astype(np.float32)
    checker = (((x // 40) + (y // 40)) % 2) * 40 + 90
    card = np.stack([
        checker + 80 * (y / max(1, height - 1)),
        checker + 80 * (1 - x / max(1, width - 1)),
        checker + 80 * (x / max(1, width - 1)),
    ], axis=-1)
    return np.clip(card, 0, 255).astype(np.uint8)


class FrameSource:
    """
    Yields BGR frames from an image, a video, a camera or the calibration card.

    Still images and the calibration card repeat forever; videos and cameras end
    when the capture does.
    """

    def __init__(self, source: Optional[str], width: int, height: int):
        self._still: Optional[np.ndarray] = None
        self._capture: Optional[cv2.VideoCapture] = None

        if source is None:
            self._still = calibration_card(width, height)
        elif source.isdigit():
            self._capture = cv2.VideoCapture(int(source))
        else:
            image = cv2.imread(source)
            if image is not None:
                self._still = image
            else:
                self._capture = cv2.VideoCapture(source)

        if self._capture is not None and not self._capture.isOpened():
            raise ValueError(f"Cannot open input: {source}")

    @property
    def is_still(self) -> bool:
        return self._still is not None

    def frames(self) -> Iterator[np.ndarray]:
        if self._still is not None:
            while True:
                yield self._still
        while True:
            ok, frame = self._capture.read()
            if not ok:
                return
            yield frame

    def close(self):
        if self._capture is not None:
            self._capture.release()


# ============================================================
# MAIN APPLICATION
# ============================================================

class VisionOverlayEngine:
    """
    Drives one condition over a frame source.

    Color conditions go through the linear-light matrix path, the
    glyph-stream condition through the glyph rain, everything else
    through the layer compositor.
    """

    def __init__(self, config: EngineConfig, condition_id: str, intensity: float, params: Optional[dict] = None):
        self.config = config
        self.state = ConditionState(condition_id, enabled=True, intensity=intensity, params=params or {})
        self.adapter = RenderTargetAdapter(field_scale=config.render.field_scale)
        self.compositor = LayerCompositor(skip=GLYPH_STREAM_CONDITIONS)
        self.glyphs: Optional[GlyphStream] = None

        if condition_id in GLYPH_STREAM_CONDITIONS:
            self.glyphs = GlyphStream(
                cell_size=config.glyph_stream.cell_size,
                seed=config.glyph_stream.seed,
                glitch_probability=config.glyph_stream.glitch_probability,
            )

    def render(self, image: np.ndarray, time_ms: float) -> np.ndarray:
        """Apply the condition to one BGR frame."""
        condition_id = self.state.condition_id
        if is_color_condition(condition_id):
            return self.adapter.apply_color(image, condition_id, self.state.intensity)

        frames = self.compositor.compose_active([self.state], time_ms)
        output = self.adapter.composite_all(image, frames)

        if self.glyphs is not None:
            h, w = image.shape[:2]
            if self.glyphs.size != (w, h):
                self.glyphs.resize(w, h)
            output = self.adapter.composite_glyphs(output, self.glyphs.tick(time_ms, self.state.intensity))
        return output

    def run(
        self,
        source: FrameSource,
        duration_s: Optional[float],
        fps: float,
        output_path: Optional[str] = None,
    ):
        """Run the render loop until the source ends, the duration elapses or Q/ESC."""
        ticker = AnimationTicker(interval_ms=1000.0 / fps)
        writer: Optional[cv2.VideoWriter] = None
        window = f"Vision Overlay Engine - {self.state.condition_id}"

        logger.info(f"Rendering '{self.state.condition_id}' at intensity {self.state.intensity:.2f}")
        if output_path is None:
            logger.info("Press Q or ESC to quit")
            cv2.namedWindow(window, cv2.WINDOW_NORMAL)

        max_ticks = int(duration_s * fps) if duration_s else None
        written = 0
        try:
            for frame_count, image in enumerate(source.frames()):
                if max_ticks is not None and frame_count >= max_ticks:
                    break

                output = self.render(image, ticker.at(frame_count))

                if output_path is not None:
                    if writer is None:
                        h, w = output.shape[:2]
                        writer = cv2.VideoWriter(output_path, cv2.VideoWriter_fourcc(*"mp4v"), fps, (w, h))
                    writer.write(output)
                    written += 1
                    if max_ticks is None and source.is_still:
                        logger.warning("No --duration for a still input; writing a single frame")
                        break
                    continue

                cv2.imshow(window, output)
                key = cv2.waitKey(max(1, int(ticker.interval_ms))) & 0xFF
                if key in (ord("q"), 27):
                    break
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            source.close()
            if writer is not None:
                writer.release()
                logger.info(f"Wrote {written} frames to {output_path}")
            if output_path is None:
                cv2.destroyAllWindows()
            logger.info("Engine stopped")


# ============================================================
# DESCRIBE
# ============================================================

def _plain(value: Any) -> Any:
    """Convert numpy scalars and tuples into YAML-safe builtins."""
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, np.generic):
        return value.item()
    return value


def describe_condition(condition_id: str, intensity: float, time_ms: float, params: dict) -> str:
    """Declarative layer description of one instant, as YAML."""
    if is_color_condition(condition_id):
        matrix = matrix_for(condition_id, intensity)
        data = {"condition_id": condition_id, "color_matrix": np.round(matrix, 6).tolist()}
    else:
        data = RenderTargetAdapter().describe(compose_frame(condition_id, intensity, time_ms, params))
    return yaml.safe_dump(_plain(data), sort_keys=False)


# ============================================================
# ENTRY POINT
# ============================================================

def _parse_params(pairs) -> dict:
    params = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected KEY=VALUE, got '{pair}'")
        try:
            params[key] = float(value)
        except ValueError:
            raise ValueError(f"Parameter '{key}' needs a number, got '{value}'") from None
    return params


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Vision Overlay Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("--condition", type=str, default=None, help="Condition id (see --list)")
    parser.add_argument("--intensity", type=float, default=None, help="Severity in [0, 1] (default: from config)")
    parser.add_argument("--param", action="append", metavar="KEY=VALUE", help="Condition parameter, repeatable")
    parser.add_argument("--duration", type=float, default=None, help="Seconds to render (default: until input ends)")
    parser.add_argument("--fps", type=float, default=None, help="Frames per second (default: from config interval)")
    parser.add_argument("--time", type=float, default=0.0, help="Timestamp in ms for --describe (default: 0)")
    parser.add_argument("--input", "-i", type=str, default=None, help="Image, video or camera index (default: calibration card)")
    parser.add_argument("--output", "-o", type=str, default=None, help="Write to a video file instead of a window")
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to configuration file")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config)",
    )
    parser.add_argument("--list", action="store_true", help="List condition ids and exit")
    parser.add_argument("--describe", action="store_true", help="Print the frame description as YAML and exit")

    args = parser.parse_args()
    try:
        params = _parse_params(args.param)
    except ValueError as e:
        parser.error(str(e))

    config = load_config(args.config)
    setup_logging(args.log_level or config.logging.level, config.logging.file)

    if args.list:
        print("\n".join(list_conditions() + [c.value for c in ColorCondition]))
        return

    if not args.condition:
        parser.error("--condition is required (see --list)")
    if args.condition not in list_conditions() and not is_color_condition(args.condition):
        parser.error(f"Unknown condition '{args.condition}' (see --list)")

    intensity = clamp_unit(args.intensity if args.intensity is not None else config.default_intensity)
    if args.describe:
        print(describe_condition(args.condition, intensity, args.time, params), end="")
        return

    fps = args.fps or 1000.0 / config.frame_interval_ms
    source = FrameSource(args.input, config.render.width, config.render.height)

    engine = VisionOverlayEngine(config, args.condition, intensity, params)
    engine.run(source, args.duration, fps, args.output)


if __name__ == "__main__":
    main()
