"""Audit course geometry JSON documents before they are served.

Usage::

    python -m golfnav.tools.validate_course_geometry data/courses/ --strict
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from golfnav.config import get_settings
from golfnav.courses.backends import select_backend
from golfnav.courses.provider import CourseGeometryError, parse_course_geometry
from golfnav.courses.schemas import CourseGeometry
from golfnav.geo import (
    Coordinate,
    DistanceComputationError,
    GeoPolygon,
    contains,
    distance,
    distance_to_geometry,
)


def _check_polygon(
    label: str, polygon: GeoPolygon, reference: Coordinate, errors: List[str]
) -> bool:
    try:
        distance_to_geometry(reference, polygon)
    except DistanceComputationError as exc:
        errors.append(f"{label}: {exc}")
        return False
    return True


def audit_course(
    course: CourseGeometry, *, course_radius_m: float
) -> Tuple[List[str], List[str]]:
    """Return ``(errors, warnings)`` for an already parsed course."""

    errors: List[str] = []
    warnings: List[str] = []

    if not course.holes:
        warnings.append("course has no holes")

    boundary = course.boundary_polygon
    if boundary is not None and not _check_polygon(
        "boundaryPolygon", boundary, course.center_point, errors
    ):
        boundary = None

    for hole in course.holes:
        prefix = f"hole {hole.hole_number}"
        if hole.fairway_centerline is not None:
            try:
                distance_to_geometry(hole.tee_point, hole.fairway_centerline)
            except DistanceComputationError as exc:
                errors.append(f"{prefix} fairwayCenterline: {exc}")
        if hole.hole_boundary is not None:
            _check_polygon(
                f"{prefix} holeBoundary", hole.hole_boundary, hole.tee_point, errors
            )
        for hazard in hole.hazards:
            label = f"{prefix} hazard {hazard.id}"
            if hazard.polygon is None and hazard.center is None:
                warnings.append(f"{label}: neither polygon nor center given")
            elif hazard.polygon is not None:
                _check_polygon(label, hazard.polygon, hole.tee_point, errors)

        if distance(hole.tee_point, hole.pin_point) == 0.0:
            errors.append(f"{prefix}: tee and pin are the same point")
        for name, point in (("tee", hole.tee_point), ("pin", hole.pin_point)):
            if boundary is not None:
                if not contains(boundary, point):
                    warnings.append(f"{prefix}: {name} lies outside boundaryPolygon")
            elif distance(point, course.center_point) > course_radius_m:
                warnings.append(
                    f"{prefix}: {name} is more than {course_radius_m:.0f} m from centerPoint"
                )

    return errors, warnings


def validate_file(path: Path, *, course_radius_m: float) -> Tuple[str, List[str], List[str], str]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError) as exc:
        return "", [f"unreadable JSON: {exc}"], [], "-"
    try:
        course = parse_course_geometry(payload, source=str(path))
    except CourseGeometryError as exc:
        return "", [str(exc)], [], "-"
    errors, warnings = audit_course(course, course_radius_m=course_radius_m)
    if course.course_id != path.stem:
        errors.append(
            f"courseId {course.course_id!r} does not match file name {path.stem!r}"
        )
    return course.course_id, errors, warnings, select_backend(course).name


def iter_paths(targets: Sequence[str]) -> List[Path]:
    paths: List[Path] = []
    for target in targets:
        path = Path(target)
        if path.is_dir():
            paths.extend(p for p in path.glob("*.json") if p.is_file())
        elif path.is_file():
            paths.append(path)
    return sorted(set(paths))


def print_summary(rows: List[Dict[str, str]]) -> None:
    if not rows:
        return
    columns = [
        ("Status", "status"),
        ("Course", "course"),
        ("Backend", "backend"),
        ("Warnings", "warnings"),
        ("File", "file"),
    ]
    widths = {key: max([len(header)] + [len(row[key]) for row in rows]) for header, key in columns}
    print("\nSummary:")
    print("  ".join(header.ljust(widths[key]) for header, key in columns))
    print("  ".join("-" * widths[key] for _, key in columns))
    for row in rows:
        print("  ".join(row[key].ljust(widths[key]) for _, key in columns))


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate course geometry JSON files")
    parser.add_argument("paths", nargs="+", help="Geometry files or directories of *.json")
    parser.add_argument(
        "--strict", action="store_true", help="Treat warnings as errors"
    )
    parser.add_argument(
        "--course-radius-m",
        type=float,
        default=None,
        help="Radius used when a course has no boundary polygon",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    radius = args.course_radius_m or get_settings().course_radius_m
    paths = iter_paths(args.paths)
    if not paths:
        print("No geometry files matched", flush=True)
        return 0

    had_error = False
    rows: List[Dict[str, str]] = []
    for path in paths:
        course_id, errors, warnings, backend = validate_file(path, course_radius_m=radius)
        failed = bool(errors) or (args.strict and bool(warnings))
        had_error = had_error or failed
        print(f"{'✗' if failed else '✓'} {path}")
        for err in errors:
            print(f"  - error: {err}")
        for warning in warnings:
            print(f"  - warning: {warning}")
        rows.append(
            {
                "status": "✗" if failed else "✓",
                "course": course_id,
                "backend": backend,
                "warnings": str(len(warnings)),
                "file": str(path),
            }
        )
    print_summary(rows)
    return 1 if had_error else 0


if __name__ == "__main__":
    sys.exit(main())
