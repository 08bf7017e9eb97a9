"""
Authorization popup page

Rendered by the OAuth callback: hands the access token and the provider
profile to the window that opened the popup, then closes the popup.
"""

from typing import Any, Dict
from .base import Component


class AuthorizationPopup(Component):
    """Page that posts `{type: 'authorization', token, user}` to window.opener"""

    def __init__(self, token: str, user: Dict[str, Any], target_origin: str = "*"):
        """
        Args:
            token: Provider access token (embedded as a JSON string literal)
            user: Full provider profile JSON
            target_origin: postMessage target origin; "*" when the site is unknown
        """
        self.token = token
        self.user = user
        self.target_origin = target_origin or "*"

    def render(self) -> str:
        message = {"type": "authorization", "token": self.token, "user": self.user}
        return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>Authentication Successful</title>
  </head>
  <body>
    <script>
      (function () {{
        var message = {self.script_json(message)};
        if (window.opener) {{
          window.opener.postMessage(message, {self.script_json(self.target_origin)});
        }}
        window.close();
      }})();
    </script>
    <p>Authentication successful! You can close this window.</p>
  </body>
</html>
"""
