"""
Route shape assembly.

Turns shapes.txt points into ordered polylines tagged with the color and
label of the route that owns them, ready for a map layer to draw.
"""

from collections import OrderedDict
from typing import List, Mapping, Tuple

import pandas as pd

from .loader import iter_records
from .models import DEFAULT_ROUTE_COLOR, Route, RouteShape, parse_coordinate, route_label


def _parse_sequence(value):
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def group_shape_points(shapes: pd.DataFrame) -> "OrderedDict[str, List[Tuple[float, float]]]":
    """
    Group shape points by shape_id and order them by shape_pt_sequence.

    Shapes keep the order in which they first appear. Points with a bad
    sequence or coordinate are skipped; equal sequence numbers keep row order.
    """
    grouped: "OrderedDict[str, List[Tuple[int, float, float]]]" = OrderedDict()
    for row in iter_records(shapes):
        shape_id = row.get("shape_id", "")
        sequence = _parse_sequence(row.get("shape_pt_sequence"))
        lat = parse_coordinate(row.get("shape_pt_lat"))
        lon = parse_coordinate(row.get("shape_pt_lon"))
        if not shape_id or sequence is None or lat is None or lon is None:
            continue
        grouped.setdefault(shape_id, []).append((sequence, lat, lon))

    return OrderedDict(
        (shape_id, [(lat, lon) for _, lat, lon in sorted(points, key=lambda point: point[0])])
        for shape_id, points in grouped.items()
    )


def assemble_route_shapes(shapes: pd.DataFrame, shape_to_route: Mapping[str, str],
                          route_by_id: Mapping[str, Route],
                          default_color: str = DEFAULT_ROUTE_COLOR) -> List[RouteShape]:
    """
    Build drawable polylines for every shape with at least two points.

    Args:
        shapes: shapes.txt table
        shape_to_route: shape_id -> owning route_id
        route_by_id: route_id -> Route
        default_color: Color for shapes whose route cannot be resolved

    Returns:
        RouteShape list in shapes.txt order
    """
    assembled = []
    for shape_id, points in group_shape_points(shapes).items():
        if len(points) < 2:
            continue
        route_id = shape_to_route.get(shape_id)
        route = route_by_id.get(route_id) if route_id else None
        assembled.append(RouteShape(
            shape_id=shape_id,
            route_id=route_id,
            color=route.color if route else default_color,
            label=route_label(route) if route else "",
            points=tuple(points),
        ))
    return assembled
