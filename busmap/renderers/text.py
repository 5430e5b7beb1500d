"""
Plain-text renderer for terminal output.

Renders departure boards and nearby-stop lists as fixed-width text.
"""

from busmap.providers.base import DisplayData
from busmap.renderers.base import Renderer


class TextRenderer(Renderer):
    """
    Renders DisplayData as fixed-width text lines.

    Supported content types: "departures", "nearby_stops".
    """

    def __init__(self, width: int = 64):
        """
        Initialize text renderer.

        Args:
            width: Line width in characters (default: 64)
        """
        self.width = width

    def render(self, data: DisplayData) -> str:
        """
        Render DisplayData to a multi-line string.

        Raises:
            ValueError: If content type is not supported
        """
        content = data.content
        if content.get("error"):
            return self._render_error(content)

        content_type = content.get("type")
        if content_type == "departures":
            return self._render_departures(content)
        if content_type == "nearby_stops":
            return self._render_nearby_stops(content)
        raise ValueError(f"Unsupported content type: {content_type}")

    def _render_error(self, content: dict) -> str:
        lines = [content.get("error_message", "Error")]
        if content.get("error_details"):
            lines.append(self._truncate(content["error_details"]))
        return "\n".join(lines)

    def _render_departures(self, content: dict) -> str:
        if not content.get("known_stop", True):
            return f"Unknown stop: {content.get('stop_id')}"

        departures = content.get("departures", [])
        if not departures:
            if content.get("view") == "next":
                return "No more departures today"
            return f"No departures on {content.get('service_date')}"

        route_width = min(24, max(len(d["route"]) for d in departures))
        lines = []
        for departure in departures:
            route = departure["route"][:route_width].ljust(route_width)
            lines.append(self._truncate(f"{departure['time']:>5}  {route}  {departure['headsign']}"))
        return "\n".join(lines)

    def _render_nearby_stops(self, content: dict) -> str:
        stops = content.get("stops", [])
        if not stops:
            return "No stops in range"

        lines = []
        for stop in stops:
            distance = f"{stop['distance_meters']:>5} m"
            lines.append(self._truncate(f"{distance}  {stop['name'] or stop['stop_id']}  [{stop['stop_id']}]"))
        if content.get("total", len(stops)) > len(stops):
            lines.append(f"... and {content['total'] - len(stops)} more")
        return "\n".join(lines)

    def _truncate(self, line: str) -> str:
        if len(line) <= self.width:
            return line
        return line[:self.width - 3] + "..."

    def render_frame(self, data: DisplayData, title: str = None) -> str:
        """
        Render with optional title above the frame.

        Args:
            data: DisplayData to render
            title: Title to display above frame (default: metadata title)

        Returns:
            Rendered text with title
        """
        lines = []
        title = title or data.metadata.get("title")

        if title:
            lines.append("")
            lines.append(title.center(self.width))
            lines.append("=" * self.width)

        lines.append(self.render(data))

        return "\n".join(lines)
