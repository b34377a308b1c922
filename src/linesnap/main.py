import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .config import CONTOUR_CONFIG, LOGGING_CONFIG, DetectionConfig
from .config_validator import ConfigValidator, print_validation_report
from .exceptions import SnapEngineError
from .geometry import Point
from .image_utils import OpenCVContourDetector
from .models import Line
from .pdf_processor import PDFProcessor
from .pipeline import LinePipeline
from .session import LineDetectionService
from .view import View

logger = logging.getLogger("linesnap")


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, LOGGING_CONFIG["level"])
    logging.basicConfig(level=level, format=LOGGING_CONFIG["format"], stream=sys.stderr)


def build_service(processor: PDFProcessor, config: Optional[DetectionConfig] = None) -> LineDetectionService:
    """Wire a PyMuPDF renderer and the OpenCV contour detector into a session."""
    config = config or DetectionConfig.from_settings()
    pipeline = LinePipeline(processor, OpenCVContourDetector.from_config(CONTOUR_CONFIG), config)
    return LineDetectionService(pipeline, config)


def build_view(processor: PDFProcessor, page_index: int, zoom: float) -> View:
    bounds = processor.page_bounds(page_index)
    if bounds is None:
        raise SnapEngineError(f"page {page_index} does not exist (document has {processor.page_count} pages)")
    return View.single_page(bounds.width, bounds.height, zoom=zoom, page_index=page_index)


def pick_endpoint(line: Line, point: Sequence[float], threshold: float) -> Point:
    """Endpoint within threshold of point, else whichever end is closer."""
    return line.near_endpoint(point, threshold) or line.closest_endpoint(point)


def export_json(data: Dict[str, Any]) -> None:
    json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


async def _detect(args: argparse.Namespace) -> Dict[str, Any]:
    with PDFProcessor(Path(args.pdf)) as processor:
        view = build_view(processor, args.page, args.zoom)
        service = build_service(processor)
        result = await service.detect_lines_near((args.x, args.y), view, search_radius=args.radius)
        return result.to_dict()


async def _extend(args: argparse.Namespace) -> Dict[str, Any]:
    with PDFProcessor(Path(args.pdf)) as processor:
        view = build_view(processor, args.page, args.zoom)
        service = build_service(processor)
        result = await service.detect_lines_near((args.x, args.y), view, search_radius=args.radius)
        line = result.highlighted_line or (result.lines[0] if result.lines else None)
        if line is None:
            return {"source": None, "extended": None}
        endpoint = pick_endpoint(line, (args.from_x, args.from_y), service.config.endpoint_threshold)
        extended = await service.extend_line(line, endpoint, view, search_distance=args.distance)
        return {
            "source": line.to_dict(),
            "extended": extended.to_dict() if extended is not None else None,
        }


def _add_query_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("pdf", help="PDF file")
    p.add_argument("--page", type=int, default=0, help="zero-based page index")
    p.add_argument("--x", type=float, required=True, help="query x in screen units")
    p.add_argument("--y", type=float, required=True, help="query y in screen units")
    p.add_argument("--radius", type=float, default=None, help="search radius in page units")
    p.add_argument("--zoom", type=float, default=1.0, help="screen units per page unit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="linesnap", description="Snap to lines in rasterized drawings")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command")

    detect = sub.add_parser("detect", help="detect lines and corners near a point")
    _add_query_args(detect)

    extend = sub.add_parser("extend", help="detect near a point, then extend the snapped line")
    _add_query_args(extend)
    extend.add_argument("--from-x", type=float, required=True, help="x of the endpoint to extend from")
    extend.add_argument("--from-y", type=float, required=True, help="y of the endpoint to extend from")
    extend.add_argument("--distance", type=float, default=None, help="extension search size in page units")

    sub.add_parser("validate", help="check configuration and dependencies")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the line snap tool."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "validate":
        is_valid, errors, warnings = ConfigValidator.validate_all()
        print_validation_report(is_valid, errors, warnings)
        return 0 if is_valid else 1

    if args.command not in ("detect", "extend"):
        parser.print_help()
        return 2

    try:
        runner = _detect if args.command == "detect" else _extend
        export_json(asyncio.run(runner(args)))
    except SnapEngineError as e:
        logger.error(f"{e.error_code or 'ERROR'}: {e.message}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
