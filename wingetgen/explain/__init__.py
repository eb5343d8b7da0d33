"""
AI explanations of generated scripts for wingetgen.

Public API:

request_explanation : function
    Ask the Gemini API to explain a script in plain language (markdown).
render_explanation : function
    Render that markdown-lite text to an HTML fragment.

Example:
    from wingetgen.explain import render_explanation, request_explanation

    text = request_explanation(script)
    print(render_explanation(text))
"""

from .client import DEFAULT_MODEL, request_explanation
from .render import render_explanation

__all__ = ["DEFAULT_MODEL", "render_explanation", "request_explanation"]
