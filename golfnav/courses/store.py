from __future__ import annotations

from functools import lru_cache
from typing import Dict, List, Tuple

from golfnav.config import get_settings
from golfnav.geo import Coordinate, GeoPolygon, GeoPolyline

from .provider import (
    CourseGeometryProvider,
    FileCourseGeometryProvider,
    InMemoryCourseGeometryProvider,
)
from .schemas import CourseGeometry, Hazard, HoleGeometry


def _pt(lat: float, lon: float) -> Coordinate:
    return Coordinate(latitude=lat, longitude=lon)


def _box(south: float, west: float, north: float, east: float) -> GeoPolygon:
    return GeoPolygon(
        rings=[
            [
                _pt(south, west),
                _pt(south, east),
                _pt(north, east),
                _pt(north, west),
                _pt(south, west),
            ]
        ]
    )


def _corridor(tee: Coordinate, pin: Coordinate, pad_deg: float = 0.0004) -> GeoPolygon:
    return _box(
        min(tee.latitude, pin.latitude) - pad_deg,
        min(tee.longitude, pin.longitude) - pad_deg,
        max(tee.latitude, pin.latitude) + pad_deg,
        max(tee.longitude, pin.longitude) + pad_deg,
    )


def _seed_demo_courses() -> Dict[str, CourseGeometry]:
    courses: Dict[str, CourseGeometry] = {}

    links_holes: List[Tuple[int, int, Coordinate, Coordinate, List[Hazard]]] = [
        (
            1,
            4,
            _pt(37.4318, -122.1610),
            _pt(37.4332, -122.1583),
            [
                Hazard(
                    id="1-fairway-bunker",
                    type="bunker",
                    name="Left Fairway Bunker",
                    center=_pt(37.4321, -122.1602),
                )
            ],
        ),
        (
            2,
            3,
            _pt(37.4326, -122.1600),
            _pt(37.4337, -122.1576),
            [
                Hazard(
                    id="2-pond",
                    type="water",
                    name="Front Pond",
                    polygon=_box(37.43285, -122.15900, 37.43295, -122.15880),
                )
            ],
        ),
        (3, 5, _pt(37.4312, -122.1598), _pt(37.4344, -122.1555), []),
    ]

    demo_links = CourseGeometry(
        course_id="demo-links",
        name="Demo Links",
        center_point=_pt(37.4325, -122.1583),
        boundary_polygon=_box(37.4300, -122.1620, 37.4352, -122.1545),
        holes=[
            HoleGeometry(
                course_id="demo-links",
                hole_number=number,
                par=par,
                stroke_index=number,
                tee_point=tee,
                pin_point=pin,
                fairway_centerline=GeoPolyline(
                    points=[
                        tee,
                        _pt(
                            (tee.latitude + pin.latitude) / 2.0,
                            (tee.longitude + pin.longitude) / 2.0,
                        ),
                        pin,
                    ]
                ),
                hole_boundary=_corridor(tee, pin),
                hazards=hazards,
            )
            for number, par, tee, pin, hazards in links_holes
        ],
    )
    courses[demo_links.course_id] = demo_links

    # Tee and pin only: the course has not been digitized beyond that yet.
    parkland = CourseGeometry(
        course_id="demo-parkland",
        name="Demo Parkland",
        center_point=_pt(55.9496, -3.2016),
        holes=[
            HoleGeometry(
                course_id="demo-parkland",
                hole_number=1,
                par=4,
                stroke_index=5,
                tee_point=_pt(55.9489, -3.2039),
                pin_point=_pt(55.9499, -3.2009),
            ),
            HoleGeometry(
                course_id="demo-parkland",
                hole_number=2,
                par=4,
                stroke_index=1,
                tee_point=_pt(55.9493, -3.2035),
                pin_point=_pt(55.9504, -3.2002),
            ),
            HoleGeometry(
                course_id="demo-parkland",
                hole_number=3,
                par=3,
                stroke_index=9,
                tee_point=_pt(55.9497, -3.2028),
                pin_point=_pt(55.9507, -3.1994),
            ),
        ],
    )
    courses[parkland.course_id] = parkland

    return courses


def demo_courses() -> List[CourseGeometry]:
    return list(_seed_demo_courses().values())


@lru_cache(maxsize=1)
def get_course_geometry_provider() -> CourseGeometryProvider:
    """Return the configured geometry provider.

    ``GOLFNAV_COURSES_DIR`` switches from the seeded demo courses to JSON
    documents on disk.
    """

    courses_dir = get_settings().courses_dir
    if courses_dir:
        return FileCourseGeometryProvider(courses_dir)
    return InMemoryCourseGeometryProvider(demo_courses())


__all__ = ["demo_courses", "get_course_geometry_provider"]
