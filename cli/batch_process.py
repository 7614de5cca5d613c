import os
import logging
import argparse
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)
# ───────────────────────────────────────────

from pathlib import Path
from typing import Iterator, List, Optional

import cv2
from tqdm import tqdm

from models.color_category import TrackedColor
from models.frame_errors import FrameError
from models.pixel_buffer import PixelBuffer
from models.selection_state import SelectionState
from models.vision_mode import VisionMode
from pipeline.highlight_stream import highlight_frames
from repositories.pixel_buffer_repository import PixelBufferRepository
from services.frame_processor_service import FrameProcessorService
from services.selection_service import SelectionService

logger = logging.getLogger(__name__)

OUTPUT_DIR = os.getenv("OUTPUT_DIR_PATH", "data/highlighted")
OUTPUT_EXT = os.getenv("OUTPUT_IMG_EXT", ".png")
VIDEO_EXTS = {e.strip().lower() for e in os.getenv("VALID_VIDEO_EXTENSIONS", ".mp4,.mov,.avi,.mkv").split(",")}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="color-assist-batch",
        description="Highlight chosen colors in image and video files.")
    parser.add_argument("inputs", nargs="+", help="Image/video files or folders of images")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--color", action="append", default=[],
                       choices=[c.value for c in TrackedColor],
                       help="Tracked color to highlight (repeat for two; oldest is evicted beyond two)")
    group.add_argument("--mode", choices=[m.value for m in VisionMode],
                       help="Vision deficiency preset")
    parser.add_argument("--grayscale", action="store_true", help="Grayscale the background")
    parser.add_argument("--output", default=OUTPUT_DIR, help="Output folder")
    return parser


def selection_from_args(args: argparse.Namespace) -> SelectionState:
    state = SelectionState(grayscale_background=args.grayscale)
    if args.mode:
        return SelectionService.select_mode(state, VisionMode(args.mode))
    for color in args.color:
        state = SelectionService.toggle(state, TrackedColor(color))
    return state


def expand_inputs(inputs: List[str], repository: PixelBufferRepository) -> List[Path]:
    paths: List[Path] = []
    for raw in inputs:
        p = Path(raw)
        if p.is_dir():
            paths.extend(repository.iter_dir(p))
        elif p.is_file():
            paths.append(p)
        else:
            logger.warning(f"Skipping missing input: {p}")
    return paths


def video_frames(capture: cv2.VideoCapture, repository: PixelBufferRepository) -> Iterator[PixelBuffer]:
    while True:
        ok, frame = capture.read()
        if not ok or frame is None:
            return
        yield repository.from_bgr(frame)


def process_image(path: Path, out_dir: Path, state: SelectionState,
                  processor: FrameProcessorService, repository: PixelBufferRepository) -> Optional[Path]:
    try:
        buffer = repository.load(path)
    except (FileNotFoundError, FrameError) as err:
        logger.warning(f"Skipping {path.name}: {err}")
        return None

    result = processor.process_frame(buffer, state)
    if result is None:
        return None
    out_path = out_dir / f"{path.stem}_highlighted{OUTPUT_EXT}"
    repository.save(result.composited, out_path)
    logger.info(f"{path.name}: center {result.center_color.rgb_string()} -> {out_path}")
    return out_path


def process_video(path: Path, out_dir: Path, state: SelectionState,
                  processor: FrameProcessorService, repository: PixelBufferRepository) -> Optional[Path]:
    capture = cv2.VideoCapture(str(path))
    if not capture.isOpened():
        logger.warning(f"Skipping {path.name}: video could not be opened")
        return None

    fps = capture.get(cv2.CAP_PROP_FPS) or 30.0
    width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
    height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
    total = int(capture.get(cv2.CAP_PROP_FRAME_COUNT)) or None
    out_path = out_dir / f"{path.stem}_highlighted.mp4"
    writer = cv2.VideoWriter(str(out_path), cv2.VideoWriter_fourcc(*"mp4v"), fps, (width, height))

    try:
        with tqdm(total=total, desc=path.name, ncols=70) as progress:
            def sink(result):
                writer.write(repository.to_bgr(result.composited))
                progress.update(1)

            highlight_frames(video_frames(capture, repository), sink=sink,
                             frame_processor=processor, state_provider=lambda: state)
    finally:
        capture.release()
        writer.release()
    return out_path


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    state = selection_from_args(args)
    repository = PixelBufferRepository()
    processor = FrameProcessorService()

    out_dir = Path(args.output)
    out_dir.mkdir(parents=True, exist_ok=True)

    written = 0
    try:
        for path in expand_inputs(args.inputs, repository):
            handler = process_video if path.suffix.lower() in VIDEO_EXTS else process_image
            if handler(path, out_dir, state, processor, repository) is not None:
                written += 1
    finally:
        processor.close()

    logger.info(f"Done: {written} outputs written to {out_dir}")
    return 0 if written else 1


if __name__ == "__main__":
    raise SystemExit(main())
