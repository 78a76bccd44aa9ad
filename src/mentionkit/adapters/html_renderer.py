import html

from ..core.ports import Renderer
from ..format.convert import to_display
from ..format.render import split_spans


class HtmlRenderer(Renderer):
    def __init__(self, css_class: str = "mention"):
        self.css_class = css_class

    def render(self, storage_text: str) -> str:
        out = []
        for span in split_spans(storage_text):
            if span.kind == "mention":
                out.append(
                    f'<span class="{html.escape(self.css_class)}" '
                    f'data-id="{html.escape(span.id or "")}">'
                    f"@{html.escape(span.label or '')}</span>"
                )
            else:
                # Newlines pass through; callers style with white-space: pre-wrap
                out.append(html.escape(span.text))
        return "".join(out)


class PlainRenderer(Renderer):
    def render(self, storage_text: str) -> str:
        return to_display(storage_text)
