"""
Configuration validation utilities for the line snap engine.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .config import load_settings

logger = logging.getLogger(__name__)


class ConfigValidator:
    """Validates configuration settings and system requirements."""

    @staticmethod
    def validate_render_config(settings: Dict[str, Dict[str, Any]]) -> List[str]:
        """Validate rendering configuration.

        Returns:
            List of validation errors
        """
        errors = []
        render = settings["RENDER_CONFIG"]
        if not (0.5 <= render["render_scale"] <= 8.0):
            errors.append(f"Render scale out of range: {render['render_scale']} (0.5-8.0)")
        return errors

    @staticmethod
    def validate_contour_config(settings: Dict[str, Dict[str, Any]]) -> List[str]:
        """Validate contour detection configuration.

        Returns:
            List of validation errors
        """
        errors = []
        contour = settings["CONTOUR_CONFIG"]

        if contour["contrast"] <= 0:
            errors.append(f"Contrast must be positive: {contour['contrast']}")

        if contour["binarize"] not in ("otsu", "adaptive"):
            errors.append(f"Unknown binarization method: {contour['binarize']} (otsu, adaptive)")

        block = contour["adaptive_block_size"]
        if block < 3 or block % 2 == 0:
            errors.append(f"Adaptive block size must be odd and >= 3: {block}")

        if contour["simplify_epsilon"] <= 0:
            errors.append(f"Simplification epsilon must be positive: {contour['simplify_epsilon']}")

        return errors

    @staticmethod
    def validate_snap_config(settings: Dict[str, Dict[str, Any]]) -> List[str]:
        """Validate segment, snap and extension thresholds.

        Returns:
            List of validation errors
        """
        errors = []
        segment = settings["SEGMENT_CONFIG"]
        snap = settings["SNAP_CONFIG"]
        ext = settings["EXTENSION_CONFIG"]

        if segment["min_segment_length"] < 0 or segment["min_line_length"] < 0:
            errors.append(
                f"Minimum lengths must not be negative: segment={segment['min_segment_length']}, "
                f"line={segment['min_line_length']}"
            )

        for key, value in (
            ("SEGMENT_CONFIG.collinearity_threshold", segment["collinearity_threshold"]),
            ("EXTENSION_CONFIG.collinearity_threshold", ext["collinearity_threshold"]),
        ):
            if not (0 < value < 1):
                errors.append(f"{key} must lie in (0, 1): {value}")

        for key in (
            "search_radius",
            "corner_snap_distance",
            "line_snap_distance",
            "tap_proximity",
            "corner_proximity",
            "endpoint_threshold",
        ):
            if snap[key] <= 0:
                errors.append(f"SNAP_CONFIG.{key} must be positive: {snap[key]}")

        if not (1 <= snap["max_corner_lines"] <= 4):
            errors.append(f"Corner line cap out of range: {snap['max_corner_lines']} (1-4)")

        if ext["search_distance"] <= 0:
            errors.append(f"Extension search distance must be positive: {ext['search_distance']}")

        return errors

    @staticmethod
    def validate_performance_config(settings: Dict[str, Dict[str, Any]]) -> List[str]:
        """Validate performance configuration.

        Returns:
            List of validation errors
        """
        errors = []
        perf = settings["PERFORMANCE_CONFIG"]

        if perf["memory_limit_mb"] < 256:
            errors.append(f"Memory limit too low: {perf['memory_limit_mb']}MB (min 256MB)")

        if perf["max_image_dimension"] < 256:
            errors.append(f"Max image dimension too small: {perf['max_image_dimension']} (min 256)")

        return errors

    @staticmethod
    def validate_dependencies() -> List[str]:
        """Validate required dependencies.

        Returns:
            List of validation errors
        """
        errors = []

        required_packages = [
            ("numpy", "NumPy"),
            ("cv2", "OpenCV"),
            ("fitz", "PyMuPDF"),
            ("psutil", "psutil"),
        ]

        for module_name, package_name in required_packages:
            try:
                __import__(module_name)
            except ImportError:
                errors.append(f"Required package not installed: {package_name} ({module_name})")

        return errors

    @staticmethod
    def validate_system_resources() -> List[str]:
        """Validate system resources.

        Returns:
            List of validation warnings
        """
        warnings = []

        import psutil

        available_memory = psutil.virtual_memory().available / (1024 * 1024 * 1024)  # GB
        if available_memory < 1:
            warnings.append(f"Low available memory: {available_memory:.1f}GB")

        return warnings

    @classmethod
    def validate_all(cls, settings: Optional[Dict[str, Dict[str, Any]]] = None) -> Tuple[bool, List[str], List[str]]:
        """Run all validation checks.

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        if settings is None:
            settings = load_settings()
        errors = []
        warnings = []

        errors.extend(cls.validate_render_config(settings))
        errors.extend(cls.validate_contour_config(settings))
        errors.extend(cls.validate_snap_config(settings))
        errors.extend(cls.validate_performance_config(settings))

        dependency_errors = cls.validate_dependencies()
        errors.extend(dependency_errors)

        if not dependency_errors:
            warnings.extend(cls.validate_system_resources())

        is_valid = len(errors) == 0

        if is_valid:
            logger.info("Configuration validation passed")
        else:
            logger.error(f"Configuration validation failed: {len(errors)} errors")

        return is_valid, errors, warnings


def print_validation_report(is_valid: bool, errors: List[str], warnings: List[str]) -> None:
    """Print validation report.

    Args:
        is_valid: Whether validation passed
        errors: List of errors
        warnings: List of warnings
    """
    print("\n" + "=" * 50)
    print("linesnap - configuration report")
    print("=" * 50)

    if is_valid:
        print("All checks passed")
    else:
        print("Validation failed, fix the following:")

        for i, error in enumerate(errors, 1):
            print(f"  {i}. {error}")

    if warnings:
        print("\nWarnings:")
        for i, warning in enumerate(warnings, 1):
            print(f"  {i}. {warning}")

    print("=" * 50)
