"""
Restrict a feed to the routes of one transit mode.

Follows the feed's references one hop per relation:
routes -> trips -> stop_times -> stops, trips -> shapes, trips -> services.
"""

from typing import Dict

import pandas as pd

from .loader import table_column

BUS_ROUTE_TYPE = 3


def _keep(frame: pd.DataFrame, column: str, values) -> pd.DataFrame:
    """Rows whose column value is in values, in original order."""
    if frame.empty:
        return frame
    mask = table_column(frame, column).isin(values)
    return frame[mask].reset_index(drop=True)


def filter_to_route_type(tables: Dict[str, pd.DataFrame], route_type) -> Dict[str, pd.DataFrame]:
    """
    Keep only the part of the feed reachable from routes of one mode.

    Pure and order-preserving; applying it twice gives the same tables.
    Tables other than the seven feed tables are passed through untouched.

    Args:
        tables: Tables as returned by load_feed_tables()
        route_type: GTFS route_type to keep (3 = bus)

    Returns:
        New dict of filtered tables
    """
    empty = pd.DataFrame()
    routes = tables.get("routes", empty)
    trips = tables.get("trips", empty)
    stop_times = tables.get("stop_times", empty)

    target = str(route_type).strip()
    if routes.empty:
        kept_routes = routes
    else:
        kept_routes = routes[table_column(routes, "route_type") == target].reset_index(drop=True)
    route_ids = set(table_column(kept_routes, "route_id"))

    kept_trips = _keep(trips, "route_id", route_ids)
    trip_ids = set(table_column(kept_trips, "trip_id"))
    shape_ids = set(table_column(kept_trips, "shape_id")) - {""}
    service_ids = set(table_column(kept_trips, "service_id"))

    kept_stop_times = _keep(stop_times, "trip_id", trip_ids)
    stop_ids = set(table_column(kept_stop_times, "stop_id"))

    filtered = dict(tables)
    filtered.update({
        "routes": kept_routes,
        "trips": kept_trips,
        "stop_times": kept_stop_times,
        "stops": _keep(tables.get("stops", empty), "stop_id", stop_ids),
        "shapes": _keep(tables.get("shapes", empty), "shape_id", shape_ids),
        "calendar": _keep(tables.get("calendar", empty), "service_id", service_ids),
        "calendar_dates": _keep(tables.get("calendar_dates", empty), "service_id", service_ids),
    })

    print(f"[SubnetFilter] route_type={target}: {len(kept_routes)}/{len(routes)} routes, "
          f"{len(kept_trips)}/{len(trips)} trips, "
          f"{len(kept_stop_times)}/{len(stop_times)} stop times, "
          f"{len(filtered['stops'])}/{len(tables.get('stops', empty))} stops")
    return filtered
