"""
Base Component Class for DevNotes HTML responses

Server-rendered pages are tiny (the OAuth popup page), so they are built
with pure Python instead of a template engine.
"""

from typing import Any
import json


class Component:
    """Base class for all server-rendered components"""

    def render(self) -> str:
        """Render the component as an HTML string"""
        raise NotImplementedError("Subclasses must implement render()")

    @staticmethod
    def script_json(value: Any) -> str:
        """Serialize value as JSON that is safe inside an inline <script>

        Escapes characters that could close the script element or break the
        JavaScript parser (`<`, `>`, `&`, U+2028, U+2029).
        """
        text = json.dumps(value, ensure_ascii=False)
        return (
            text.replace("<", "\\u003c")
            .replace(">", "\\u003e")
            .replace("&", "\\u0026")
            .replace("\u2028", "\\u2028")
            .replace("\u2029", "\\u2029")
        )
