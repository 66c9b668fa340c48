from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from Rollcard.metrics import inc_counter, observe_histogram

DEFAULT_IMG = "icons/svg/d20-grey.svg"


class Template(str, Enum):
    FULL_CARD = "rollcard-full.hbs"
    OPTIONS = "rollcard-options.hbs"
    HEADER = "fields/header.hbs"
    FOOTER = "fields/footer.hbs"
    DESCRIPTION = "fields/description.hbs"
    SAVE_BUTTON = "fields/save-button.hbs"
    MULTIROLL = "fields/multiroll.hbs"
    DAMAGE = "fields/damage.hbs"


class TemplateRenderer(Protocol):
    """Turns a template identifier plus plain props into markup."""

    async def render(self, template: Template, props: Mapping[str, Any]) -> Any: ...


@dataclass(frozen=True)
class RenderedTemplate:
    template: Template
    props: dict[str, Any] = field(default_factory=dict)


class DataRenderer:
    """In-process renderer that returns the template id and props untouched.

    Used by the CLI and tests; a host application supplies its own
    TemplateRenderer that produces markup.
    """

    async def render(self, template: Template, props: Mapping[str, Any]) -> RenderedTemplate:
        start = time.perf_counter()
        out = RenderedTemplate(template=template, props=dict(props))
        inc_counter("renderer.template.rendered")
        observe_histogram("renderer.render_ms", int((time.perf_counter() - start) * 1000))
        return out
